"""Convergence of provisioned monitors towards the desired ones of an object."""
import asyncio
import logging
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Sequence

import aiohttp

from ddmanager.common.models.tags import MonitorTags
from ddmanager.monitors.compare import monitor_differences
from ddmanager.sensors import OperatorSensor
from ddmanager.types.models import MonitorTemplate, ProvisionedMonitor
from ddmanager.utils.errors import BackendWriteError
from ddmanager.web import DatadogClient
from ddmanager.web.error import BackendError, NotFoundError

logger = logging.getLogger(__name__)


class SyncAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    NOOP = "noop"
    DELETE = "delete"


class SyncOutcome(NamedTuple):
    """Result of one sync decision."""

    action: SyncAction
    monitor_name: str
    monitor_id: Optional[int] = None
    error: Optional[BackendWriteError] = None
    dry_run: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


class SyncResult:
    """Outcomes of converging the monitors of one object."""

    def __init__(self, key: str, outcomes: Sequence[SyncOutcome] = ()) -> None:
        self.key = key
        self.outcomes: List[SyncOutcome] = list(outcomes)

    def _names(self, action: SyncAction) -> List[str]:
        return [o.monitor_name for o in self.outcomes if o.action is action and o.ok]

    @property
    def created(self) -> List[str]:
        return self._names(SyncAction.CREATE)

    @property
    def updated(self) -> List[str]:
        return self._names(SyncAction.UPDATE)

    @property
    def unchanged(self) -> List[str]:
        return self._names(SyncAction.NOOP)

    @property
    def deleted(self) -> List[str]:
        return self._names(SyncAction.DELETE)

    @property
    def errors(self) -> List[BackendWriteError]:
        return [o.error for o in self.outcomes if not o.ok]

    @property
    def ok(self) -> bool:
        return not self.errors

    def __repr__(self) -> str:
        return (
            f"SyncResult<{self.key} created={len(self.created)} "
            f"updated={len(self.updated)} unchanged={len(self.unchanged)} "
            f"deleted={len(self.deleted)} failed={len(self.errors)}>"
        )


_WRITE_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, BackendError)


def _object_prefix(object_tag: str) -> str:
    """`<owner>:object:` part of an object tag."""
    separator = f":{MonitorTags.OBJECT_SUFFIX}:"
    owner, _, _ = object_tag.rpartition(separator)
    return f"{owner}{separator}"


def _claimed(monitor: ProvisionedMonitor, object_prefix: str) -> bool:
    """Whether some object tag of the owner is on `monitor`."""
    return any(tag.startswith(object_prefix) for tag in getattr(monitor, "tags", None) or [])


class SyncEngine:
    """Issues the minimal create, update and delete calls for one object.

    The engine holds no state between calls. It never retries, failed calls are
    reported as outcomes for the caller to act on.
    """

    def __init__(
        self,
        client: DatadogClient,
        dry_run: bool = False,
        sensor: Optional[OperatorSensor] = None,
    ) -> None:
        self._client = client
        self._dry_run = dry_run
        self._sensor = sensor

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    async def converge(
        self,
        key: str,
        desired: Sequence[MonitorTemplate],
        provisioned: Sequence[ProvisionedMonitor],
        object_tag: str,
    ) -> SyncResult:
        """Make the provisioned monitors match `desired`.

        Args:
            key: The object key, for logging.
            desired: The rendered monitors of the object.
            provisioned: Every monitor owned by this operator.
            object_tag: Tag of the monitors owned by the object. Only those can
                be deleted.
        """
        result = SyncResult(key)
        # Monitors of the object first, unclaimed ones can be adopted.
        # Monitors of other objects are never touched.
        own: Dict[str, ProvisionedMonitor] = {}
        unclaimed: Dict[str, ProvisionedMonitor] = {}
        object_prefix = _object_prefix(object_tag)
        for monitor in provisioned:
            if monitor.has_tag(object_tag):
                own.setdefault(monitor.name, monitor)
            elif not _claimed(monitor, object_prefix):
                unclaimed.setdefault(monitor.name, monitor)

        wanted = set()
        matched_ids = set()
        for monitor in desired:
            if monitor.name in wanted:
                logger.warning(
                    f"Monitor `{monitor.name}` is defined more than once for {key}, "
                    f"keeping the first definition.",
                    extra={"object_key": key, "monitor": monitor.name},
                )
                continue
            wanted.add(monitor.name)
            existing = own.get(monitor.name) or unclaimed.get(monitor.name)
            if existing is None:
                outcome = await self._create(key, monitor)
            else:
                matched_ids.add(existing.id)
                differences = monitor_differences(monitor, existing)
                if differences:
                    outcome = await self._update(key, monitor, existing, differences)
                else:
                    logger.info(
                        f"Monitor {existing.id} `{monitor.name}` of {key} is up to date.",
                        extra={"object_key": key, "monitor": monitor.name},
                    )
                    outcome = SyncOutcome(SyncAction.NOOP, monitor.name, existing.id)
            self._record(key, result, outcome)

        for monitor in provisioned:
            if monitor.id in matched_ids or not monitor.has_tag(object_tag):
                continue
            self._record(key, result, await self._delete(key, monitor))
        return result

    async def remove_all(
        self, key: str, provisioned: Sequence[ProvisionedMonitor], object_tag: str
    ) -> SyncResult:
        """Delete every provisioned monitor owned by the object."""
        result = SyncResult(key)
        for monitor in provisioned:
            if monitor.has_tag(object_tag):
                self._record(key, result, await self._delete(key, monitor))
        return result

    def _record(self, key: str, result: SyncResult, outcome: SyncOutcome) -> None:
        result.outcomes.append(outcome)
        if self._sensor:
            self._sensor.on_sync_operation(
                key, outcome.monitor_name, outcome.action.value, outcome.ok, outcome.dry_run
            )

    async def _create(self, key: str, monitor: MonitorTemplate) -> SyncOutcome:
        extra = {"object_key": key, "monitor": monitor.name, "action": "create"}
        if self._dry_run:
            logger.info(f"[dry run] Would create monitor `{monitor.name}` for {key}.", extra=extra)
            return SyncOutcome(SyncAction.CREATE, monitor.name, dry_run=True)
        try:
            created = await self._client.create_monitor(monitor.as_payload())
        except _WRITE_ERRORS as ex:
            logger.error(f"Error creating monitor `{monitor.name}` for {key}: {ex}", extra=extra)
            return SyncOutcome(
                SyncAction.CREATE,
                monitor.name,
                error=BackendWriteError("create", monitor.name, ex),
            )
        monitor_id = getattr(created, "id", None)
        logger.info(f"Created monitor {monitor_id} `{monitor.name}` for {key}.", extra=extra)
        return SyncOutcome(SyncAction.CREATE, monitor.name, monitor_id)

    async def _update(
        self,
        key: str,
        monitor: MonitorTemplate,
        existing: ProvisionedMonitor,
        differences: List[str],
    ) -> SyncOutcome:
        extra = {"object_key": key, "monitor": monitor.name, "action": "update"}
        changed = ", ".join(differences)
        if self._dry_run:
            logger.info(
                f"[dry run] Would update monitor {existing.id} `{monitor.name}` "
                f"for {key} ({changed}).",
                extra=extra,
            )
            return SyncOutcome(SyncAction.UPDATE, monitor.name, existing.id, dry_run=True)
        try:
            await self._client.update_monitor(existing.id, monitor.as_payload())
        except _WRITE_ERRORS as ex:
            logger.error(
                f"Could not update monitor {existing.id} `{monitor.name}` for {key}: {ex}",
                extra=extra,
            )
            return SyncOutcome(
                SyncAction.UPDATE,
                monitor.name,
                existing.id,
                error=BackendWriteError("update", monitor.name, ex, existing.id),
            )
        logger.info(
            f"Updated monitor {existing.id} `{monitor.name}` for {key} ({changed}).",
            extra=extra,
        )
        return SyncOutcome(SyncAction.UPDATE, monitor.name, existing.id)

    async def _delete(self, key: str, monitor: ProvisionedMonitor) -> SyncOutcome:
        extra = {"object_key": key, "monitor": monitor.name, "action": "delete"}
        if self._dry_run:
            logger.info(
                f"[dry run] Would delete monitor {monitor.id} `{monitor.name}` of {key}.",
                extra=extra,
            )
            return SyncOutcome(SyncAction.DELETE, monitor.name, monitor.id, dry_run=True)
        try:
            await self._client.delete_monitor(monitor.id)
        except NotFoundError:
            logger.info(
                f"Monitor {monitor.id} `{monitor.name}` of {key} is already gone.",
                extra=extra,
            )
            return SyncOutcome(SyncAction.DELETE, monitor.name, monitor.id)
        except _WRITE_ERRORS as ex:
            logger.error(
                f"Could not delete monitor {monitor.id} `{monitor.name}` of {key}: {ex}",
                extra=extra,
            )
            return SyncOutcome(
                SyncAction.DELETE,
                monitor.name,
                monitor.id,
                error=BackendWriteError("delete", monitor.name, ex, monitor.id),
            )
        logger.info(f"Deleted monitor {monitor.id} `{monitor.name}` of {key}.", extra=extra)
        return SyncOutcome(SyncAction.DELETE, monitor.name, monitor.id)
