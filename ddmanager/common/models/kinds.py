from enum import Enum
from typing import NamedTuple, Optional


class ObjectKind(str, Enum):
    """Object kinds whose monitors are managed."""

    DEPLOYMENT = "deployment"
    STATEFULSET = "statefulset"
    DAEMONSET = "daemonset"
    NAMESPACE = "namespace"

    @property
    def group(self) -> str:
        return "" if self is ObjectKind.NAMESPACE else "apps"

    @property
    def version(self) -> str:
        return "v1"

    @property
    def plural(self) -> str:
        return f"{self.value}s"

    @property
    def namespaced(self) -> bool:
        return self is not ObjectKind.NAMESPACE

    @classmethod
    def parse(cls, value: str) -> "ObjectKind":
        try:
            return cls(value.strip().lower())
        except ValueError:
            supported = ", ".join(k.value for k in cls)
            raise ValueError(
                f"Unsupported object kind `{value}`, expected one of: {supported}"
            ) from None


class ObjectKey(NamedTuple):
    """Identity of a watched object, `kind/namespace/name`."""

    kind: ObjectKind
    namespace: Optional[str]
    name: str

    def __str__(self) -> str:
        if self.namespace:
            return f"{self.kind.value}/{self.namespace}/{self.name}"
        return f"{self.kind.value}/{self.name}"

    @classmethod
    def from_body(cls, kind: ObjectKind, body) -> "ObjectKey":
        metadata = body.get("metadata") or {}
        namespace = metadata.get("namespace") if kind.namespaced else None
        return cls(kind, namespace, metadata["name"])
