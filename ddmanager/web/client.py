"""Datadog monitors API client."""
from typing import Any, List, Mapping
from yarl import URL
from ddmanager.types.models import ProvisionedMonitor
from ddmanager.types.schemas import ProvisionedMonitorSchema
from .session import SessionManager, TIMEOUT

MONITOR_URL = "/api/v1/monitor"
PAGE_SIZE = 1000


class DatadogClient(SessionManager):
    """Client for the Datadog monitors API."""

    def __init__(
        self,
        api_key: str,
        app_key: str,
        base_url: str = "https://api.datadoghq.com",
        timeout: float = TIMEOUT,
        **kwargs: Any,
    ) -> None:
        headers = dict(kwargs.pop("headers", None) or {})
        headers["DD-API-KEY"] = api_key
        headers["DD-APPLICATION-KEY"] = app_key
        super().__init__(headers=headers, timeout=timeout, **kwargs)
        self.base_url = URL(base_url)
        self._schema = ProvisionedMonitorSchema()

    def monitor_url(self, monitor_id: int = None) -> URL:
        url = self.base_url.with_path(MONITOR_URL)
        return url / str(monitor_id) if monitor_id is not None else url

    async def list_monitors(self, tags: List[str]) -> List[ProvisionedMonitor]:
        """List monitors carrying all of `tags`, following pagination."""
        monitors: List[ProvisionedMonitor] = []
        page = 0
        while True:
            batch = await self.get(
                self.monitor_url(),
                params={
                    "monitor_tags": ",".join(tags),
                    "page": page,
                    "page_size": PAGE_SIZE,
                },
                schema=self._schema,
                many=True,
            )
            monitors.extend(batch or [])
            if not batch or len(batch) < PAGE_SIZE:
                return monitors
            page += 1

    async def create_monitor(self, definition: Mapping) -> ProvisionedMonitor:
        return await self.post(self.monitor_url(), data=dict(definition), schema=self._schema)

    async def update_monitor(self, monitor_id: int, definition: Mapping) -> ProvisionedMonitor:
        """Replace the definition of an existing monitor."""
        return await self.put(
            self.monitor_url(monitor_id), data=dict(definition), schema=self._schema
        )

    async def delete_monitor(self, monitor_id: int) -> None:
        await self.delete(self.monitor_url(monitor_id))
