from .kinds import ObjectKind, ObjectKey
from .tags import MonitorTags

__all__ = ["ObjectKind", "ObjectKey", "MonitorTags"]
