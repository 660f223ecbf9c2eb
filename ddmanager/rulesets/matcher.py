"""Selection of the rules that apply to an object."""
import logging
from typing import List, Mapping, Optional

from ddmanager.types.models import BINDING_TYPE, MatchRule, MonitorTemplate, Ruleset

logger = logging.getLogger(__name__)


def missing_annotation(rule: MatchRule, annotations: Mapping[str, str]) -> Optional[str]:
    """Return the first required annotation of `rule` that `annotations` lacks."""
    for annotation in rule.annotations:
        if annotations.get(annotation.name) != annotation.value:
            return f"{annotation.name}={annotation.value}"
    return None


def rule_matches(rule: MatchRule, annotations: Mapping[str, str]) -> bool:
    """Whether every required annotation is present with the exact value.

    A rule requiring no annotation never matches.
    """
    return bool(rule.annotations) and missing_annotation(rule, annotations) is None


def _matching_rules(
    ruleset: Ruleset, object_type: str, annotations: Mapping[str, str]
) -> List[MatchRule]:
    annotations = annotations or {}
    matches = []
    for index, rule in enumerate(ruleset.rules):
        if rule.object_type != object_type:
            continue
        if not rule.annotations:
            logger.debug(f"Ruleset {index} ({rule.object_type}) requires no annotation, skipping it")
            continue
        missing = missing_annotation(rule, annotations)
        if missing is None:
            matches.append(rule)
        else:
            logger.debug(
                f"Annotation {missing} does not exist, so ruleset {index} "
                f"({rule.object_type}) does not match"
            )
    return matches


def direct_matches(
    ruleset: Ruleset, object_type: str, annotations: Mapping[str, str]
) -> List[MatchRule]:
    """Rules of `object_type` whose annotations all match, in declaration order."""
    return _matching_rules(ruleset, object_type, annotations)


def bound_matches(
    ruleset: Ruleset,
    namespace_annotations: Mapping[str, str],
    object_type: str,
    marker: str,
) -> List[MatchRule]:
    """Binding rules matching a namespace that bind `object_type`.

    The returned rules are copies whose monitors carry the `marker` tag.
    """
    bound = []
    for rule in _matching_rules(ruleset, BINDING_TYPE, namespace_annotations):
        if object_type not in rule.bound_objects:
            continue
        bound.append(
            rule.replace(
                monitors=tuple(monitor.with_tags(marker) for monitor in rule.monitors)
            )
        )
    return bound


def matching_monitors(
    ruleset: Ruleset,
    object_type: str,
    annotations: Mapping[str, str],
    namespace_annotations: Optional[Mapping[str, str]],
    marker: str,
) -> List[MonitorTemplate]:
    """All monitor templates that apply to an object, direct ones first."""
    rules = direct_matches(ruleset, object_type, annotations)
    if namespace_annotations is not None:
        rules.extend(bound_matches(ruleset, namespace_annotations, object_type, marker))
    return [monitor for rule in rules for monitor in rule.monitors]
