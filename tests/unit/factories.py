"""Builders of monitors, rulesets and object bodies for unit tests."""

from ddmanager.types.schemas import (
    MonitorTemplateSchema,
    ProvisionedMonitorSchema,
    RulesetDocumentSchema,
)
from ddmanager.types.models import Ruleset


def make_template(**overrides):
    data = {
        "name": "{{ name }} is unavailable",
        "type": "metric alert",
        "query": "avg(last_5m):avg:kubernetes_state.deployment.replicas_available{deployment:{{ name }}} < 1",
        "message": "Deployment {{ namespace }}/{{ name }} is down",
        "tags": ["team:core"],
    }
    data.update(overrides)
    return MonitorTemplateSchema().load(data)


def make_provisioned(**overrides):
    data = {
        "id": 1,
        "name": "web is unavailable",
        "type": "metric alert",
        "query": "avg(last_5m):avg:kubernetes_state.deployment.replicas_available{deployment:web} < 1",
        "message": "Deployment default/web is down",
        "tags": ["team:core"],
    }
    data.update(overrides)
    return ProvisionedMonitorSchema().load(data)


def make_ruleset(*documents):
    schema = RulesetDocumentSchema()
    return Ruleset.merge(schema.load(document) for document in documents)


def make_body(name="web", namespace="default", annotations=None, kind="Deployment", **spec):
    body = {
        "apiVersion": "apps/v1",
        "kind": kind,
        "metadata": {
            "name": name,
            "annotations": dict(annotations or {}),
            "labels": {"app": name},
        },
        "spec": dict(spec or {"replicas": 3}),
    }
    if namespace is not None:
        body["metadata"]["namespace"] = namespace
    return body


