import asyncio
import logging
from typing import List

import aiohttp
from marshmallow import ValidationError

from ddmanager.types.models import ProvisionedMonitor
from ddmanager.utils.errors import BackendReadError
from ddmanager.web import DatadogClient
from ddmanager.web.error import BackendError

logger = logging.getLogger(__name__)


class ProvisionedStateReader:
    """Reads the monitors this operator owns from the monitoring backend."""

    def __init__(self, client: DatadogClient) -> None:
        self._client = client

    async def list_owned(self, owner_tag: str) -> List[ProvisionedMonitor]:
        """List every monitor tagged with `owner_tag`.

        Raises:
            BackendReadError: If the monitors can't be listed. Creating monitors
                without knowing what exists would provision duplicates.
        """
        try:
            monitors = await self._client.list_monitors([owner_tag])
        except (
            aiohttp.ClientError,
            asyncio.TimeoutError,
            BackendError,
            ValidationError,
        ) as ex:
            logger.error(f"Error getting monitors tagged {owner_tag}: {ex}")
            raise BackendReadError(
                f"Could not list monitors tagged {owner_tag}: {ex}"
            ) from ex
        logger.debug(f"Found {len(monitors)} monitors tagged {owner_tag}")
        return monitors
