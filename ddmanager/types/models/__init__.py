from .monitor import (
    MonitorThresholds,
    MonitorOptions,
    MonitorTemplate,
    ProvisionedMonitor,
)
from .ruleset import (
    BINDING_TYPE,
    Annotation,
    MatchRule,
    RulesetDocument,
    Ruleset,
)

__all__ = [
    "MonitorThresholds",
    "MonitorOptions",
    "MonitorTemplate",
    "ProvisionedMonitor",
    "BINDING_TYPE",
    "Annotation",
    "MatchRule",
    "RulesetDocument",
    "Ruleset",
]
