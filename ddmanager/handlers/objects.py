import kopf
import logging
from typing import Optional

from ddmanager.common.models.kinds import ObjectKind
from ddmanager.controllers import CREATE, UPDATE, DELETE
from ddmanager.types.settings import Settings

# Watch event types to controller event types. Kopf reports objects listed on
# the initial watch with a `None` type.
EVENT_TYPES = {
    None: CREATE,
    "ADDED": CREATE,
    "MODIFIED": UPDATE,
    "DELETED": DELETE,
}


def event_type_of(event) -> Optional[str]:
    return EVENT_TYPES.get((event or {}).get("type"))


def make_handler(kind: ObjectKind):
    async def on_object_event(event, body, memo: kopf.Memo, logger: logging.Logger, **kwargs):
        event_type = event_type_of(event)
        if event_type is None:
            logger.debug(f"Ignoring {event.get('type')} event for {kind.value}")
            return
        supervisor = getattr(memo, "supervisor", None)
        if supervisor is None:
            logger.warning(f"Operator not ready, dropping {event_type} event for {kind.value}")
            return
        supervisor.dispatch(kind, event_type, body)

    on_object_event.__name__ = on_object_event.__qualname__ = f"on_{kind.value}_event"
    return on_object_event


def register(kinds) -> None:
    """Watch every object of `kinds`."""
    for kind in kinds:
        if kind.group:
            decorator = kopf.on.event(kind.group, kind.version, kind.plural, id=f"{kind.value}-event")
        else:
            decorator = kopf.on.event(kind.version, kind.plural, id=f"{kind.value}-event")
        decorator(make_handler(kind))


def watched_kinds(conf: Settings = None):
    conf = conf or Settings()
    return [ObjectKind.parse(name) for name in conf.watched_kinds]


WATCHED_KINDS = watched_kinds()
register(WATCHED_KINDS)
