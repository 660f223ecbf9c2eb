from functools import cached_property
from typing import Any, Dict, List, Optional

from kubernetes_asyncio.client import ApiException, AppsV1Api, CoreV1Api
from kubernetes_asyncio.client.api_client import ApiClient

from ddmanager.common.models.kinds import ObjectKind
from ddmanager.utils.errors import not_found_error

JSON = Dict[str, Any]


class BaseResource:
    """Read access to the live objects of one kind."""

    KIND: ObjectKind = None
    KIND_NAME: str = None

    # Set at operator startup, shared by every resource.
    shared_api_client: ApiClient = None

    def __init__(self, api_client: ApiClient = None) -> None:
        self._api_client = api_client

    @property
    def kind(self) -> ObjectKind:
        return self.KIND

    @property
    def api_client(self) -> ApiClient:
        client = self._api_client or self.shared_api_client
        if client is None:
            self._api_client = client = ApiClient()
        return client

    @cached_property
    def apps_v1_api(self) -> AppsV1Api:
        return AppsV1Api(self.api_client)

    @cached_property
    def core_v1_api(self) -> CoreV1Api:
        return CoreV1Api(self.api_client)

    def serialize(self, obj: Any) -> JSON:
        """Convert a client model to the object's JSON representation."""
        data = self.api_client.sanitize_for_serialization(obj)
        data.setdefault("kind", self.KIND_NAME)
        return data

    async def fetch(self, name: str, namespace: Optional[str]) -> Optional[JSON]:
        """Retrieve the latest state of an object, `None` if it does not exist."""
        try:
            obj = await self.read(name, namespace)
        except ApiException as ex:
            if not_found_error(ex):
                return None
            raise
        return self.serialize(obj)

    async def search(self, namespace: Optional[str] = None) -> List[JSON]:
        """List the objects of this kind, in `namespace` when given."""
        result = await self.list(namespace)
        return [self.serialize(item) for item in result.items or []]

    async def read(self, name: str, namespace: Optional[str]) -> Any:
        raise NotImplementedError()

    async def list(self, namespace: Optional[str]) -> Any:
        raise NotImplementedError()
