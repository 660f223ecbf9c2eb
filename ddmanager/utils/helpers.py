from datetime import datetime, timezone
from typing import Any, Mapping


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def snapshot(data: Any) -> Any:
    """Deep copy of a mapping, with nested mappings converted to plain dicts.

    Useful to detach event bodies from the framework's live views.
    """
    if isinstance(data, Mapping):
        return {key: snapshot(value) for key, value in data.items()}
    if isinstance(data, (list, tuple)):
        return [snapshot(item) for item in data]
    return data
