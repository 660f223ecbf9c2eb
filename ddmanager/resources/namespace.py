from typing import Any, Dict, Optional
from ddmanager.common.models.kinds import ObjectKind
from ddmanager.resources.base import BaseResource


class Namespace(BaseResource):
    """Namespaces are cluster scoped, the `namespace` argument is ignored."""

    KIND = ObjectKind.NAMESPACE
    KIND_NAME = "Namespace"

    async def read(self, name: str, namespace: Optional[str] = None) -> Any:
        return await self.core_v1_api.read_namespace(name=name)

    async def list(self, namespace: Optional[str] = None) -> Any:
        return await self.core_v1_api.list_namespace()

    async def annotations(self, name: str) -> Optional[Dict[str, str]]:
        """Annotations of a namespace, `None` if the namespace does not exist."""
        namespace = await self.fetch(name, None)
        if namespace is None:
            return None
        return dict((namespace.get("metadata") or {}).get("annotations") or {})
