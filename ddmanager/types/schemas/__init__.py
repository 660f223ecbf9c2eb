from .monitor import (
    MonitorThresholdsSchema,
    MonitorOptionsSchema,
    MonitorTemplateSchema,
    ProvisionedMonitorSchema,
)
from .ruleset import (
    AnnotationSchema,
    MatchRuleSchema,
    RulesetDocumentSchema,
)

__all__ = [
    "MonitorThresholdsSchema",
    "MonitorOptionsSchema",
    "MonitorTemplateSchema",
    "ProvisionedMonitorSchema",
    "AnnotationSchema",
    "MatchRuleSchema",
    "RulesetDocumentSchema",
]
