from types import MappingProxyType
from typing import FrozenSet, Mapping, NamedTuple, Tuple
from ddmanager.types.base import BaseModel
from ddmanager.types.models.monitor import MonitorTemplate

#: Reserved object type of rules that match namespaces and bind monitors
#: to the objects living in them.
BINDING_TYPE = "binding"


class Annotation(BaseModel):
    """An annotation an object must carry for a rule to match."""

    name: str
    value: str


class MatchRule(BaseModel):
    """Monitors that apply to objects of a type carrying given annotations."""

    object_type: str
    annotations: Tuple[Annotation, ...]
    bound_objects: FrozenSet[str]
    monitors: Tuple[MonitorTemplate, ...]

    @property
    def is_binding(self) -> bool:
        return self.object_type == BINDING_TYPE


class RulesetDocument(BaseModel):
    """The content of a single ruleset source."""

    cluster_variables: Mapping[str, str]
    rulesets: Tuple[MatchRule, ...]


class Ruleset(NamedTuple):
    """Immutable snapshot of all rules and cluster variables."""

    cluster_variables: Mapping[str, str]
    rules: Tuple[MatchRule, ...]

    @classmethod
    def empty(cls) -> "Ruleset":
        return cls(MappingProxyType({}), ())

    @classmethod
    def merge(cls, documents) -> "Ruleset":
        """Merge documents in order.

        Rules are concatenated, cluster variables of later documents win.
        """
        variables = {}
        rules = []
        for document in documents:
            variables.update(document.cluster_variables or {})
            rules.extend(document.rulesets or ())
        return cls(MappingProxyType(variables), tuple(rules))
