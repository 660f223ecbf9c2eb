from typing import List
from ddmanager.common.models.kinds import ObjectKey
from ddmanager.types.models import MonitorTemplate


class MonitorTags:
    """Tags attributing monitors to this operator and to the objects they watch.

    All tags derive from the owner tag, so several operators with distinct
    owners can share one monitoring account.
    """

    BOUND_OBJECT_SUFFIX = "bound_object"
    OBJECT_SUFFIX = "object"
    CLUSTER_SUFFIX = "cluster"

    def __init__(self, owner: str, cluster_name: str = None) -> None:
        self._owner = owner
        self._cluster_name = cluster_name or None

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def bound_object(self) -> str:
        """Marker of monitors inherited through a namespace binding."""
        return f"{self._owner}:{self.BOUND_OBJECT_SUFFIX}"

    @property
    def cluster(self) -> str:
        if self._cluster_name is None:
            return None
        return f"{self._owner}:{self.CLUSTER_SUFFIX}:{self._cluster_name}"

    def object(self, key: ObjectKey) -> str:
        return f"{self._owner}:{self.OBJECT_SUFFIX}:{key}"

    def ownership(self, key: ObjectKey) -> List[str]:
        tags = [self.owner, self.object(key)]
        if self.cluster:
            tags.append(self.cluster)
        return tags

    def claim(self, monitor: MonitorTemplate, key: ObjectKey) -> MonitorTemplate:
        """Return a copy of `monitor` tagged as owned by the object at `key`."""
        return monitor.with_tags(*self.ownership(key))
