"""Unit tests for ruleset and monitor models and schemas."""

import pytest
from marshmallow import ValidationError
from ddmanager.types.models import (
    MatchRule,
    MonitorTemplate,
    ProvisionedMonitor,
    Ruleset,
    RulesetDocument,
)
from ddmanager.types.schemas import (
    MonitorTemplateSchema,
    ProvisionedMonitorSchema,
    RulesetDocumentSchema,
)
from factories import make_template


DOCUMENT = {
    "cluster_variables": {"env": "prod", "team": "core"},
    "rulesets": [
        {
            "type": "deployment",
            "match_annotations": [{"name": "dd/monitor", "value": "true"}],
            "monitors": [
                {
                    "name": "{{ name }} down",
                    "type": "metric alert",
                    "query": "avg(last_5m):sum:up{app:{{ name }}} < 1",
                    "tags": ["env:{{ cluster_variables.env }}"],
                    "options": {
                        "thresholds": {"critical": 1, "warning": 2},
                        "notify_no_data": True,
                    },
                    "unexpected": "dropped",
                }
            ],
        },
        {
            "type": "binding",
            "match_annotations": [{"name": "dd/bind", "value": "true"}],
            "bound_objects": ["deployment", "statefulset"],
            "monitors": [],
        },
    ],
}


class TestRulesetDocumentSchema:
    def test_load_document(self):
        document = RulesetDocumentSchema().load(DOCUMENT)
        assert isinstance(document, RulesetDocument)
        assert document.cluster_variables == {"env": "prod", "team": "core"}
        assert len(document.rulesets) == 2

        rule = document.rulesets[0]
        assert isinstance(rule, MatchRule)
        assert rule.object_type == "deployment"
        assert not rule.is_binding
        assert rule.annotations[0].name == "dd/monitor"
        assert rule.annotations[0].value == "true"
        assert rule.bound_objects == frozenset()

        monitor = rule.monitors[0]
        assert isinstance(monitor, MonitorTemplate)
        assert monitor.message == ""
        assert monitor.options.thresholds.critical == 1.0
        assert monitor.options.notify_no_data is True
        assert not hasattr(monitor, "unexpected")

    def test_binding_rule(self):
        document = RulesetDocumentSchema().load(DOCUMENT)
        binding = document.rulesets[1]
        assert binding.is_binding
        assert binding.bound_objects == frozenset({"deployment", "statefulset"})

    def test_rule_collections_are_frozen(self):
        rule = RulesetDocumentSchema().load(DOCUMENT).rulesets[0]
        assert isinstance(rule.annotations, tuple)
        assert isinstance(rule.monitors, tuple)

    def test_empty_document(self):
        document = RulesetDocumentSchema().load({})
        assert document.cluster_variables == {}
        assert document.rulesets == ()

    def test_rule_requires_type(self):
        with pytest.raises(ValidationError):
            RulesetDocumentSchema().load({"rulesets": [{"monitors": []}]})

    def test_monitor_requires_query(self):
        with pytest.raises(ValidationError):
            MonitorTemplateSchema().load({"name": "x", "type": "metric alert"})


class TestRulesetMerge:
    def test_rules_concatenated_in_order(self):
        schema = RulesetDocumentSchema()
        first = schema.load({"rulesets": [{"type": "deployment"}]})
        second = schema.load({"rulesets": [{"type": "namespace"}]})
        ruleset = Ruleset.merge([first, second])
        assert [r.object_type for r in ruleset.rules] == ["deployment", "namespace"]

    def test_later_cluster_variables_win(self):
        schema = RulesetDocumentSchema()
        first = schema.load({"cluster_variables": {"env": "dev", "region": "eu"}})
        second = schema.load({"cluster_variables": {"env": "prod"}})
        ruleset = Ruleset.merge([first, second])
        assert dict(ruleset.cluster_variables) == {"env": "prod", "region": "eu"}

    def test_ruleset_is_read_only(self):
        ruleset = Ruleset.merge([RulesetDocumentSchema().load({"cluster_variables": {"a": "b"}})])
        with pytest.raises(TypeError):
            ruleset.cluster_variables["a"] = "c"
        with pytest.raises(AttributeError):
            ruleset.rules = ()

    def test_empty(self):
        ruleset = Ruleset.empty()
        assert ruleset.rules == ()
        assert dict(ruleset.cluster_variables) == {}


class TestMonitorTemplate:
    def test_with_tags_returns_copy_without_duplicates(self):
        template = make_template(tags=["team:core"])
        tagged = template.with_tags("team:core", "owner")
        assert tagged.tags == ["team:core", "owner"]
        assert template.tags == ["team:core"]

    def test_payload_drops_unset_fields(self):
        template = make_template(options={"thresholds": {"critical": 2}})
        payload = template.as_payload()
        assert "priority" not in payload
        assert payload["options"] == {"thresholds": {"critical": 2.0}}

    def test_escalation_message(self):
        template = make_template(options={"escalation_message": "still down"})
        assert template.escalation_message == "still down"
        assert make_template().escalation_message is None


class TestProvisionedMonitorSchema:
    def test_load_backend_response(self):
        monitor = ProvisionedMonitorSchema().load(
            {
                "id": 42,
                "name": "web down",
                "type": "metric alert",
                "query": "avg(last_5m):sum:up{app:web} < 1",
                "message": None,
                "tags": ["dd-manager"],
                "created": "2024-01-01T00:00:00Z",
                "overall_state": "OK",
                "options": {"thresholds": {"critical": 1}, "silenced": {}},
            }
        )
        assert isinstance(monitor, ProvisionedMonitor)
        assert monitor.id == 42
        assert monitor.message == ""
        assert monitor.has_tag("dd-manager")
        assert not monitor.has_tag("other")
        assert not hasattr(monitor, "overall_state")

    def test_requires_id(self):
        with pytest.raises(ValidationError):
            ProvisionedMonitorSchema().load(
                {"name": "web down", "type": "metric alert", "query": "q"}
            )
