"""Field by field comparison of desired and provisioned monitor definitions."""
from collections import Counter
from typing import Any, List, Optional

from ddmanager.types.models import MonitorTemplate

#: Top level fields compared as-is
SCALAR_FIELDS = ("name", "type", "query", "message")

#: Option fields compared when the desired definition sets them
OPTION_FIELDS = (
    "notify_no_data",
    "no_data_timeframe",
    "renotify_interval",
    "new_host_delay",
    "evaluation_delay",
    "timeout_h",
    "escalation_message",
    "require_full_window",
    "locked",
    "notify_audit",
    "include_tags",
)

THRESHOLD_FIELDS = (
    "ok",
    "warning",
    "critical",
    "unknown",
    "warning_recovery",
    "critical_recovery",
)

#: Monitor types the backend treats as one, mapped to the type it reports
TYPE_ALIASES = {"metric alert": "query alert"}


def _values_equal(desired: Any, actual: Any) -> bool:
    if isinstance(desired, bool) or isinstance(actual, bool):
        return desired is actual
    if isinstance(desired, (int, float)) and isinstance(actual, (int, float)):
        return float(desired) == float(actual)
    return desired == actual


def _text(value: Optional[str]) -> str:
    return value or ""


def _monitor_type(value: Optional[str]) -> Optional[str]:
    return TYPE_ALIASES.get(value, value)


def tags_equal(desired: Optional[List[str]], actual: Optional[List[str]]) -> bool:
    """Tags compare as a multiset, their order is not significant."""
    return Counter(desired or ()) == Counter(actual or ())


def monitor_differences(desired: MonitorTemplate, actual: MonitorTemplate) -> List[str]:
    """Return the names of the fields where `actual` differs from `desired`.

    Options and thresholds left unset (`None`) in the desired definition are
    managed by the backend and not compared.
    """
    differences = []
    for field in SCALAR_FIELDS:
        d, a = getattr(desired, field, None), getattr(actual, field, None)
        if field == "message":
            d, a = _text(d), _text(a)
        elif field == "type":
            d, a = _monitor_type(d), _monitor_type(a)
        if not _values_equal(d, a):
            differences.append(field)

    if not tags_equal(getattr(desired, "tags", None), getattr(actual, "tags", None)):
        differences.append("tags")

    priority = getattr(desired, "priority", None)
    if priority is not None and not _values_equal(priority, getattr(actual, "priority", None)):
        differences.append("priority")

    desired_options = getattr(desired, "options", None)
    if desired_options is None:
        return differences
    actual_options = getattr(actual, "options", None)

    for field in OPTION_FIELDS:
        d = getattr(desired_options, field, None)
        if d is None:
            continue
        a = getattr(actual_options, field, None) if actual_options else None
        if not _values_equal(d, a):
            differences.append(f"options.{field}")

    desired_thresholds = getattr(desired_options, "thresholds", None)
    if desired_thresholds is None:
        return differences
    actual_thresholds = getattr(actual_options, "thresholds", None) if actual_options else None
    for field in THRESHOLD_FIELDS:
        d = getattr(desired_thresholds, field, None)
        if d is None:
            continue
        a = getattr(actual_thresholds, field, None) if actual_thresholds else None
        if not _values_equal(d, a):
            differences.append(f"options.thresholds.{field}")
    return differences


def monitors_equal(desired: MonitorTemplate, actual: MonitorTemplate) -> bool:
    return not monitor_differences(desired, actual)
