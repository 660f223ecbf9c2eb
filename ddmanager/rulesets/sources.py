"""Loading of ruleset documents from local paths and urls."""
import asyncio
import logging
import os
from typing import Optional

import aiohttp
import yaml
from marshmallow import ValidationError

from ddmanager.types.models import RulesetDocument
from ddmanager.types.schemas import RulesetDocumentSchema
from ddmanager.utils.errors import SourceError

logger = logging.getLogger(__name__)

URL_SCHEMES = ("http://", "https://")

"""Default timeout in seconds of a remote source fetch"""
FETCH_TIMEOUT: float = 30.0


def is_url(source: str) -> bool:
    return source.startswith(URL_SCHEMES)


def _read_file(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


async def fetch_source(
    source: str, session: Optional[aiohttp.ClientSession] = None
) -> str:
    """Return the raw text of a source."""
    if is_url(source):
        timeout = aiohttp.ClientTimeout(total=FETCH_TIMEOUT)
        if session is None:
            async with aiohttp.ClientSession(timeout=timeout) as _session:
                return await fetch_source(source, _session)
        async with session.get(source, timeout=timeout) as res:
            res.raise_for_status()
            return await res.text()
    if not os.path.isfile(source):
        raise FileNotFoundError(f"{source} is not a valid path or url")
    return await asyncio.to_thread(_read_file, source)


def parse_document(text: str) -> RulesetDocument:
    """Parse a YAML ruleset document."""
    data = yaml.safe_load(text)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError("A ruleset document must be a mapping.")
    return RulesetDocumentSchema().load(data)


async def load_source(
    source: str, session: Optional[aiohttp.ClientSession] = None
) -> RulesetDocument:
    """Fetch and parse a single ruleset source.

    Raises:
        SourceError: If the source can't be fetched or isn't a valid document.
    """
    logger.debug(f"Loading rulesets from {source}")
    try:
        text = await fetch_source(source, session)
        document = parse_document(text)
    except (
        OSError,
        aiohttp.ClientError,
        asyncio.TimeoutError,
        yaml.YAMLError,
        ValidationError,
        UnicodeDecodeError,
    ) as ex:
        raise SourceError(source, ex) from ex
    logger.debug(f"Loaded {len(document.rulesets)} rulesets from {source}")
    return document
