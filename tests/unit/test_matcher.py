"""Unit tests for rule matching."""

from ddmanager.rulesets.matcher import (
    bound_matches,
    direct_matches,
    matching_monitors,
    rule_matches,
)
from ddmanager.types.models import Ruleset
from factories import make_ruleset

MARKER = "dd-manager:bound_object"


def monitor(name):
    return {"name": name, "type": "metric alert", "query": "avg(last_5m):sum:up{*} < 1"}


RULES = {
    "rulesets": [
        {
            "type": "deployment",
            "match_annotations": [
                {"name": "dd/monitor", "value": "true"},
                {"name": "dd/team", "value": "core"},
            ],
            "monitors": [monitor("availability"), monitor("restarts")],
        },
        {
            "type": "deployment",
            "match_annotations": [{"name": "dd/monitor", "value": "true"}],
            "monitors": [monitor("latency")],
        },
        {
            "type": "statefulset",
            "monitors": [monitor("volumes")],
        },
        {
            "type": "binding",
            "match_annotations": [{"name": "dd/bind", "value": "true"}],
            "bound_objects": ["deployment"],
            "monitors": [monitor("bound-availability")],
        },
    ]
}


class TestDirectMatches:
    def test_every_annotation_required(self):
        ruleset = make_ruleset(RULES)
        rules = direct_matches(ruleset, "deployment", {"dd/monitor": "true"})
        assert [m.name for r in rules for m in r.monitors] == ["latency"]

    def test_all_annotations_present(self):
        ruleset = make_ruleset(RULES)
        rules = direct_matches(
            ruleset, "deployment", {"dd/monitor": "true", "dd/team": "core", "extra": "x"}
        )
        assert [m.name for r in rules for m in r.monitors] == [
            "availability",
            "restarts",
            "latency",
        ]

    def test_value_must_be_exact(self):
        ruleset = make_ruleset(RULES)
        assert direct_matches(ruleset, "deployment", {"dd/monitor": "True"}) == []

    def test_rule_without_annotations_never_matches(self):
        ruleset = make_ruleset(RULES)
        assert direct_matches(ruleset, "statefulset", {}) == []
        assert direct_matches(ruleset, "statefulset", {"dd/monitor": "true"}) == []
        assert not rule_matches(ruleset.rules[2], {})

    def test_type_must_match(self):
        ruleset = make_ruleset(RULES)
        assert direct_matches(ruleset, "daemonset", {"dd/monitor": "true"}) == []

    def test_empty_ruleset(self):
        assert direct_matches(Ruleset.empty(), "deployment", {"dd/monitor": "true"}) == []

    def test_rule_matches(self):
        rule = make_ruleset(RULES).rules[1]
        assert rule_matches(rule, {"dd/monitor": "true"})
        assert not rule_matches(rule, {})


class TestBoundMatches:
    def test_namespace_binding(self):
        ruleset = make_ruleset(RULES)
        rules = bound_matches(ruleset, {"dd/bind": "true"}, "deployment", MARKER)
        assert len(rules) == 1
        assert rules[0].monitors[0].name == "bound-availability"
        assert MARKER in rules[0].monitors[0].tags

    def test_marker_does_not_leak_into_ruleset(self):
        ruleset = make_ruleset(RULES)
        bound_matches(ruleset, {"dd/bind": "true"}, "deployment", MARKER)
        assert MARKER not in ruleset.rules[3].monitors[0].tags

    def test_kind_not_bound(self):
        ruleset = make_ruleset(RULES)
        assert bound_matches(ruleset, {"dd/bind": "true"}, "statefulset", MARKER) == []

    def test_namespace_not_annotated(self):
        ruleset = make_ruleset(RULES)
        assert bound_matches(ruleset, {}, "deployment", MARKER) == []

    def test_binding_without_annotations_never_matches(self):
        ruleset = make_ruleset(
            {
                "rulesets": [
                    {
                        "type": "binding",
                        "bound_objects": ["deployment"],
                        "monitors": [monitor("bound-restarts")],
                    }
                ]
            }
        )
        assert bound_matches(ruleset, {}, "deployment", MARKER) == []
        assert bound_matches(ruleset, {"dd/bind": "true"}, "deployment", MARKER) == []


class TestMatchingMonitors:
    def test_direct_then_bound(self):
        ruleset = make_ruleset(RULES)
        monitors = matching_monitors(
            ruleset, "deployment", {"dd/monitor": "true"}, {"dd/bind": "true"}, MARKER
        )
        assert [m.name for m in monitors] == ["latency", "bound-availability"]
        assert MARKER not in monitors[0].tags
        assert MARKER in monitors[1].tags

    def test_without_namespace(self):
        ruleset = make_ruleset(RULES)
        monitors = matching_monitors(
            ruleset, "deployment", {"dd/monitor": "true"}, None, MARKER
        )
        assert [m.name for m in monitors] == ["latency"]

    def test_no_match(self):
        ruleset = make_ruleset(RULES)
        assert matching_monitors(ruleset, "deployment", {}, {}, MARKER) == []
