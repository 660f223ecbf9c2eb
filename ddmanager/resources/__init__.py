from ddmanager.common.models.kinds import ObjectKind
from ddmanager.resources.base import BaseResource
from ddmanager.resources.workloads import Deployment, StatefulSet, DaemonSet
from ddmanager.resources.namespace import Namespace

RESOURCES = {
    ObjectKind.DEPLOYMENT: Deployment,
    ObjectKind.STATEFULSET: StatefulSet,
    ObjectKind.DAEMONSET: DaemonSet,
    ObjectKind.NAMESPACE: Namespace,
}


def resource_for(kind: ObjectKind, api_client=None) -> BaseResource:
    """Return the live object accessor of `kind`."""
    return RESOURCES[kind](api_client)


__all__ = [
    "BaseResource",
    "Deployment",
    "StatefulSet",
    "DaemonSet",
    "Namespace",
    "RESOURCES",
    "resource_for",
]
