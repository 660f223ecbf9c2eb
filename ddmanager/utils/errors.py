import json
from typing import Optional
import kubernetes_asyncio

_NOT_FOUND = "notfound"


def not_found_error(ex: Exception) -> bool:
    if not isinstance(ex, kubernetes_asyncio.client.ApiException):
        return False
    if ex.status == 404:
        return True
    try:
        err = json.loads(ex.body or "{}")
    except (json.JSONDecodeError, TypeError):
        return False
    return err.get("reason", "").lower() == _NOT_FOUND


class DDManagerError(Exception):
    """Base class of reconciliation errors."""


class SourceError(DDManagerError):
    """A ruleset source could not be fetched or parsed."""

    def __init__(self, source: str, cause: Exception):
        self.source = source
        self.cause = cause
        super().__init__(f"Could not load rulesets from {source}: {cause}")


class RenderError(DDManagerError):
    """A template field holds a malformed or unresolvable placeholder."""

    def __init__(self, field: str, template: str, cause: Exception):
        self.field = field
        self.template = template
        self.cause = cause
        super().__init__(f"Error templating {field} of monitor `{template}`: {cause}")


class BackendReadError(DDManagerError):
    """Provisioned monitors could not be listed."""


class BackendWriteError(DDManagerError):
    """A create, update or delete call to the monitoring backend failed."""

    def __init__(
        self,
        action: str,
        monitor_name: str,
        cause: Optional[Exception] = None,
        monitor_id: Optional[int] = None,
    ):
        self.action = action
        self.monitor_name = monitor_name
        self.monitor_id = monitor_id
        self.cause = cause
        super().__init__(f"Could not {action} monitor `{monitor_name}`: {cause}")


class ReconcileError(DDManagerError):
    """One or more backend writes of a reconcile failed."""

    def __init__(self, key: str, errors):
        self.key = key
        self.errors = list(errors)
        details = "; ".join(str(e) for e in self.errors)
        super().__init__(f"Reconcile of {key} failed: {details}")
