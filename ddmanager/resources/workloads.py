from typing import Any, Optional
from ddmanager.common.models.kinds import ObjectKind
from ddmanager.resources.base import BaseResource


class Deployment(BaseResource):
    KIND = ObjectKind.DEPLOYMENT
    KIND_NAME = "Deployment"

    async def read(self, name: str, namespace: Optional[str]) -> Any:
        return await self.apps_v1_api.read_namespaced_deployment(
            name=name, namespace=namespace
        )

    async def list(self, namespace: Optional[str]) -> Any:
        if namespace:
            return await self.apps_v1_api.list_namespaced_deployment(namespace=namespace)
        return await self.apps_v1_api.list_deployment_for_all_namespaces()


class StatefulSet(BaseResource):
    KIND = ObjectKind.STATEFULSET
    KIND_NAME = "StatefulSet"

    async def read(self, name: str, namespace: Optional[str]) -> Any:
        return await self.apps_v1_api.read_namespaced_stateful_set(
            name=name, namespace=namespace
        )

    async def list(self, namespace: Optional[str]) -> Any:
        if namespace:
            return await self.apps_v1_api.list_namespaced_stateful_set(namespace=namespace)
        return await self.apps_v1_api.list_stateful_set_for_all_namespaces()


class DaemonSet(BaseResource):
    KIND = ObjectKind.DAEMONSET
    KIND_NAME = "DaemonSet"

    async def read(self, name: str, namespace: Optional[str]) -> Any:
        return await self.apps_v1_api.read_namespaced_daemon_set(
            name=name, namespace=namespace
        )

    async def list(self, namespace: Optional[str]) -> Any:
        if namespace:
            return await self.apps_v1_api.list_namespaced_daemon_set(namespace=namespace)
        return await self.apps_v1_api.list_daemon_set_for_all_namespaces()
