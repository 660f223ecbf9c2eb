"""Unit tests for object kinds, keys and ownership tags."""

import pytest
from ddmanager.common.models import MonitorTags, ObjectKey, ObjectKind
from factories import make_body, make_template


class TestObjectKind:
    def test_parse(self):
        assert ObjectKind.parse(" Deployment ") is ObjectKind.DEPLOYMENT

    def test_parse_unsupported(self):
        with pytest.raises(ValueError) as exc:
            ObjectKind.parse("pod")
        assert "deployment" in str(exc.value)

    def test_api_coordinates(self):
        assert (ObjectKind.STATEFULSET.group, ObjectKind.STATEFULSET.plural) == (
            "apps",
            "statefulsets",
        )
        assert ObjectKind.NAMESPACE.group == ""
        assert not ObjectKind.NAMESPACE.namespaced


class TestObjectKey:
    def test_namespaced(self):
        key = ObjectKey.from_body(ObjectKind.DEPLOYMENT, make_body("web", "default"))
        assert str(key) == "deployment/default/web"

    def test_cluster_scoped(self):
        body = make_body("team-a", "ignored", kind="Namespace")
        key = ObjectKey.from_body(ObjectKind.NAMESPACE, body)
        assert key.namespace is None
        assert str(key) == "namespace/team-a"


class TestMonitorTags:
    def test_ownership(self):
        tags = MonitorTags("dd-manager", "prod-eu")
        key = ObjectKey(ObjectKind.DEPLOYMENT, "default", "web")
        assert tags.ownership(key) == [
            "dd-manager",
            "dd-manager:object:deployment/default/web",
            "dd-manager:cluster:prod-eu",
        ]
        assert tags.bound_object == "dd-manager:bound_object"

    def test_without_cluster_name(self):
        tags = MonitorTags("team-a", "")
        key = ObjectKey(ObjectKind.NAMESPACE, None, "team-a")
        assert tags.cluster is None
        assert tags.ownership(key) == ["team-a", "team-a:object:namespace/team-a"]

    def test_claim_returns_copy(self):
        tags = MonitorTags("dd-manager")
        template = make_template(tags=["team:core"])
        key = ObjectKey(ObjectKind.DEPLOYMENT, "default", "web")
        claimed = tags.claim(template, key)
        assert claimed.tags == ["team:core", "dd-manager", "dd-manager:object:deployment/default/web"]
        assert template.tags == ["team:core"]
