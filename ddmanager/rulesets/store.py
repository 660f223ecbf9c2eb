import asyncio
import logging
from typing import Dict, List, Optional, Sequence

import aiohttp

from ddmanager.rulesets.sources import load_source
from ddmanager.sensors import OperatorSensor
from ddmanager.types.models import Ruleset, RulesetDocument
from ddmanager.utils.errors import SourceError

logger = logging.getLogger(__name__)


class RulesetStore:
    """Holds the current ruleset and keeps it fresh.

    Readers call `current()`, which returns an immutable snapshot. A reload
    builds a complete new `Ruleset` and publishes it with a single assignment,
    so readers see either the old or the new snapshot, never a mix.

    Each source keeps its last successfully loaded document. A source that
    fails to load keeps contributing that document to the merged ruleset.
    """

    def __init__(
        self,
        sources: Sequence[str],
        interval: float = 60.0,
        sensor: Optional[OperatorSensor] = None,
    ) -> None:
        self._sources = list(sources)
        self._interval = interval
        self._sensor = sensor
        self._documents: Dict[str, RulesetDocument] = {}
        self._ruleset: Ruleset = Ruleset.empty()
        self._task: Optional[asyncio.Task] = None
        self._loaded = False

    @property
    def sources(self) -> List[str]:
        return list(self._sources)

    @property
    def loaded(self) -> bool:
        """Whether the first load has completed."""
        return self._loaded

    def current(self) -> Ruleset:
        return self._ruleset

    async def reload(self) -> List[SourceError]:
        """Load every source and publish the merged ruleset.

        Returns:
            The errors of the sources that could not be loaded.
        """
        errors: List[SourceError] = []
        async with aiohttp.ClientSession() as session:
            results = await asyncio.gather(
                *(load_source(source, session) for source in self._sources),
                return_exceptions=True,
            )
        documents = dict(self._documents)
        for source, result in zip(self._sources, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, Exception) and not isinstance(result, SourceError):
                logger.error(f"Unexpected error while loading rulesets from {source}: {result}")
                logger.exception(result)
                result = SourceError(source, result)
            if isinstance(result, SourceError):
                if source in documents:
                    logger.warning(f"{result}; keeping its last loaded rulesets.")
                else:
                    logger.warning(f"{result}; skipping it.")
                errors.append(result)
            elif isinstance(result, BaseException):
                raise result
            else:
                documents[source] = result

        ruleset = Ruleset.merge(
            documents[source] for source in self._sources if source in documents
        )
        self._documents = documents
        self._ruleset = ruleset
        self._loaded = True
        logger.info(
            f"Loaded {len(ruleset.rules)} rulesets from "
            f"{len(self._sources) - len(errors)}/{len(self._sources)} sources."
        )
        if self._sensor:
            self._sensor.on_ruleset_reload(
                len(self._sources), len(errors), len(ruleset.rules)
            )
        return errors

    async def start(self) -> None:
        """Load the rulesets once, then keep reloading them in the background."""
        await self.reload()
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(
                self._reload_periodically(), name="ruleset-reload"
            )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _reload_periodically(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self.reload()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Unexpected error while reloading rulesets: {e}")
                logger.exception(e)
