import os
from typing import Any, List

_TRUE, _FALSE = {"True", "true", "yes", "1"}, {"False", "false", "no", "0"}


def _getenv(name: str, *default: Any) -> Any:
    try:
        v = os.environ[name]
        if v in _TRUE:
            return True
        elif v in _FALSE:
            return False
        else:
            return v
    except KeyError:
        pass
    if default:
        return default[0]
    raise KeyError(name)


def _getenv_list(name: str, default: str, delimiter: str = ";") -> List[str]:
    """Split a delimited environment variable into its non-empty parts."""
    value = os.environ.get(name, default)
    return [part.strip() for part in value.split(delimiter) if part.strip()]


# ------------------------------------------------
# ---- Defaults and environment variables ----
# ------------------------------------------------

#: Datadog API key
DD_API_KEY = os.environ.get("DD_API_KEY", "")

#: Datadog application key
DD_APP_KEY = os.environ.get("DD_APP_KEY", "")

#: Datadog API base url
DD_API_URL = os.environ.get("DD_API_URL", "https://api.datadoghq.com")

#: A unique name for the cluster, exposed to monitor templates
CLUSTER_NAME = os.environ.get("CLUSTER_NAME", "")

#: Tag identifying monitors owned by this deployment of the operator
OWNER = os.environ.get("OWNER", "dd-manager")

#: Local paths or urls of ruleset documents, separated by `;`
DEFINITIONS_PATH = _getenv_list("DEFINITIONS_PATH", "conf.yml")

#: Log monitor changes instead of applying them
DRY_RUN = bool(_getenv("DRY_RUN", False))

#: Seconds between two reloads of the ruleset sources
RULESET_RELOAD_INTERVAL_SECONDS = float(_getenv("RULESET_RELOAD_INTERVAL_SECONDS", 60.0))

#: Object kinds to watch, separated by `;`
WATCHED_KINDS = _getenv_list("WATCHED_KINDS", "deployment;namespace")

#: Number of failed reconcile attempts of a key before it is dropped
RECONCILE_MAX_RETRIES = int(_getenv("RECONCILE_MAX_RETRIES", 5))

#: Delay in seconds before the first retry of a failed reconcile, doubled on each retry
RECONCILE_BACKOFF_BASE_SECONDS = float(_getenv("RECONCILE_BACKOFF_BASE_SECONDS", 1.0))

#: Upper bound of the retry delay in seconds
RECONCILE_BACKOFF_MAX_SECONDS = float(_getenv("RECONCILE_BACKOFF_MAX_SECONDS", 300.0))

#: Upper bound in seconds of a single reconcile
RECONCILE_TIMEOUT_SECONDS = float(_getenv("RECONCILE_TIMEOUT_SECONDS", 60.0))

#: Number of workers consuming each object kind's queue
RECONCILE_WORKERS = int(_getenv("RECONCILE_WORKERS", 1))

#: Timeout in seconds of each monitoring backend call
BACKEND_TIMEOUT_SECONDS = float(_getenv("BACKEND_TIMEOUT_SECONDS", 10.0))

#: Enqueue the bound objects of a namespace when the namespace changes
REEVALUATE_BOUND_ON_NAMESPACE_CHANGE = bool(
    _getenv("REEVALUATE_BOUND_ON_NAMESPACE_CHANGE", False)
)

#: Port of the Prometheus metrics endpoint
METRICS_PORT = int(os.environ.get("METRICS_PORT", 8000))


class Settings:
    """Operator settings"""

    dd_api_key: str = DD_API_KEY
    dd_app_key: str = DD_APP_KEY
    dd_api_url: str = DD_API_URL
    cluster_name: str = CLUSTER_NAME
    owner_tag: str = OWNER
    definitions_path: List[str] = DEFINITIONS_PATH
    dry_run: bool = DRY_RUN
    ruleset_reload_interval_seconds: float = RULESET_RELOAD_INTERVAL_SECONDS
    watched_kinds: List[str] = WATCHED_KINDS
    reconcile_max_retries: int = RECONCILE_MAX_RETRIES
    reconcile_backoff_base_seconds: float = RECONCILE_BACKOFF_BASE_SECONDS
    reconcile_backoff_max_seconds: float = RECONCILE_BACKOFF_MAX_SECONDS
    reconcile_timeout_seconds: float = RECONCILE_TIMEOUT_SECONDS
    reconcile_workers: int = RECONCILE_WORKERS
    backend_timeout_seconds: float = BACKEND_TIMEOUT_SECONDS
    reevaluate_bound_on_namespace_change: bool = REEVALUATE_BOUND_ON_NAMESPACE_CHANGE
    metrics_port: int = METRICS_PORT

    def __init__(self, *args, **kwargs):
        for key, value in kwargs.items():
            if not hasattr(type(self), key):
                raise TypeError(f"Unknown setting `{key}`")
            if value is not None:
                setattr(self, key, value)

    @property
    def has_credentials(self) -> bool:
        return bool(self.dd_api_key and self.dd_app_key)
