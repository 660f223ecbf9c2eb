from typing import Any
from marshmallow import fields, post_load
from ddmanager.types.base import BaseSchema, EXCLUDE, JSON
from ddmanager.types.models.monitor import (
    MonitorThresholds,
    MonitorOptions,
    MonitorTemplate,
    ProvisionedMonitor,
)


class MonitorThresholdsSchema(BaseSchema):
    __model__ = MonitorThresholds

    class Meta:
        unknown = EXCLUDE
        ordered = True

    ok = fields.Float(data_key="ok", allow_none=True, load_default=None)
    warning = fields.Float(data_key="warning", allow_none=True, load_default=None)
    critical = fields.Float(data_key="critical", allow_none=True, load_default=None)
    unknown = fields.Float(data_key="unknown", allow_none=True, load_default=None)
    warning_recovery = fields.Float(
        data_key="warning_recovery", allow_none=True, load_default=None
    )
    critical_recovery = fields.Float(
        data_key="critical_recovery", allow_none=True, load_default=None
    )


class MonitorOptionsSchema(BaseSchema):
    __model__ = MonitorOptions

    class Meta:
        unknown = EXCLUDE
        ordered = True

    thresholds = fields.Nested(
        MonitorThresholdsSchema(), data_key="thresholds", allow_none=True, load_default=None
    )
    notify_no_data = fields.Bool(data_key="notify_no_data", allow_none=True, load_default=None)
    no_data_timeframe = fields.Int(
        data_key="no_data_timeframe", allow_none=True, load_default=None
    )
    renotify_interval = fields.Int(
        data_key="renotify_interval", allow_none=True, load_default=None
    )
    new_host_delay = fields.Int(data_key="new_host_delay", allow_none=True, load_default=None)
    evaluation_delay = fields.Int(
        data_key="evaluation_delay", allow_none=True, load_default=None
    )
    timeout_h = fields.Int(data_key="timeout_h", allow_none=True, load_default=None)
    escalation_message = fields.Str(
        data_key="escalation_message", allow_none=True, load_default=None
    )
    require_full_window = fields.Bool(
        data_key="require_full_window", allow_none=True, load_default=None
    )
    locked = fields.Bool(data_key="locked", allow_none=True, load_default=None)
    notify_audit = fields.Bool(data_key="notify_audit", allow_none=True, load_default=None)
    include_tags = fields.Bool(data_key="include_tags", allow_none=True, load_default=None)


class MonitorTemplateSchema(BaseSchema):
    """Monitor templates as declared in a ruleset document."""

    __model__ = MonitorTemplate

    class Meta:
        unknown = EXCLUDE
        ordered = True

    name = fields.Str(data_key="name", required=True)
    type = fields.Str(data_key="type", required=True)
    query = fields.Str(data_key="query", required=True)
    message = fields.Str(data_key="message", allow_none=True, load_default="")
    tags = fields.List(fields.Str(), data_key="tags", allow_none=True, load_default=list)
    priority = fields.Int(data_key="priority", allow_none=True, load_default=None)
    options = fields.Nested(
        MonitorOptionsSchema(), data_key="options", allow_none=True, load_default=None
    )

    @post_load
    def make_object(self, data: JSON, **kwargs: Any) -> MonitorTemplate:
        data["tags"] = list(data.get("tags") or [])
        data["message"] = data.get("message") or ""
        return self.__model__(**data)


class ProvisionedMonitorSchema(MonitorTemplateSchema):
    """Monitors as returned by the monitoring backend."""

    __model__ = ProvisionedMonitor

    id = fields.Int(data_key="id", required=True)
