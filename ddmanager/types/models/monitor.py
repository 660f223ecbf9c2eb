from typing import List, Mapping, Optional, Union
from ddmanager.types.base import BaseModel

Number = Union[int, float]


class MonitorThresholds(BaseModel):
    """Alerting thresholds of a monitor."""

    ok: Optional[Number]
    warning: Optional[Number]
    critical: Optional[Number]
    unknown: Optional[Number]
    warning_recovery: Optional[Number]
    critical_recovery: Optional[Number]


class MonitorOptions(BaseModel):
    """Notification and evaluation options of a monitor."""

    thresholds: Optional[MonitorThresholds]
    notify_no_data: Optional[bool]
    no_data_timeframe: Optional[int]
    renotify_interval: Optional[int]
    new_host_delay: Optional[int]
    evaluation_delay: Optional[int]
    timeout_h: Optional[int]
    escalation_message: Optional[str]
    require_full_window: Optional[bool]
    locked: Optional[bool]
    notify_audit: Optional[bool]
    include_tags: Optional[bool]


class MonitorTemplate(BaseModel):
    """A monitor definition whose text fields may hold placeholders."""

    name: str
    type: str
    query: str
    message: Optional[str]
    tags: List[str]
    priority: Optional[int]
    options: Optional[MonitorOptions]

    @property
    def escalation_message(self) -> Optional[str]:
        options = getattr(self, "options", None)
        return getattr(options, "escalation_message", None) if options else None

    def with_tags(self, *tags: str) -> "MonitorTemplate":
        """Return a copy carrying `tags` in addition to its own, without duplicates."""
        current = list(getattr(self, "tags", None) or [])
        current.extend(tag for tag in tags if tag not in current)
        return self.replace(tags=current)

    def as_payload(self) -> Mapping:
        """Monitor definition as sent to the monitoring backend."""
        return self.as_dict(drop_none=True)


class ProvisionedMonitor(MonitorTemplate):
    """A monitor that exists in the monitoring backend."""

    id: int

    def has_tag(self, tag: str) -> bool:
        return tag in (getattr(self, "tags", None) or [])
