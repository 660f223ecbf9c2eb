"""Unit tests for RulesetStore reloads."""

import pytest
from unittest.mock import Mock, patch
from ddmanager.rulesets.store import RulesetStore
from ddmanager.types.schemas import RulesetDocumentSchema
from ddmanager.utils.errors import SourceError


def document(object_type, **variables):
    return RulesetDocumentSchema().load(
        {"cluster_variables": variables, "rulesets": [{"type": object_type}]}
    )


class FakeSources:
    """Stands in for `load_source`, answering from a dict of results."""

    def __init__(self, results):
        self.results = results
        self.calls = []

    async def __call__(self, source, session=None):
        self.calls.append(source)
        result = self.results[source]
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def sources():
    return FakeSources(
        {
            "a.yml": document("deployment", env="dev", region="eu"),
            "b.yml": document("namespace", env="prod"),
        }
    )


class TestRulesetStore:
    def test_empty_before_first_load(self):
        store = RulesetStore(["a.yml"])
        assert not store.loaded
        assert store.current().rules == ()

    @pytest.mark.asyncio
    async def test_reload_merges_in_source_order(self, sources):
        store = RulesetStore(["a.yml", "b.yml"])
        with patch("ddmanager.rulesets.store.load_source", sources):
            errors = await store.reload()
        assert errors == []
        assert store.loaded
        ruleset = store.current()
        assert [r.object_type for r in ruleset.rules] == ["deployment", "namespace"]
        assert dict(ruleset.cluster_variables) == {"env": "prod", "region": "eu"}

    @pytest.mark.asyncio
    async def test_failed_source_keeps_previous_contribution(self, sources):
        store = RulesetStore(["a.yml", "b.yml"])
        with patch("ddmanager.rulesets.store.load_source", sources):
            await store.reload()
            before = store.current()

            sources.results["b.yml"] = SourceError("b.yml", OSError("unreachable"))
            errors = await store.reload()

        assert len(errors) == 1
        assert errors[0].source == "b.yml"
        after = store.current()
        assert after is not before
        assert [r.object_type for r in after.rules] == ["deployment", "namespace"]

    @pytest.mark.asyncio
    async def test_failed_source_never_loaded_is_skipped(self, sources):
        sources.results["b.yml"] = SourceError("b.yml", OSError("unreachable"))
        store = RulesetStore(["a.yml", "b.yml"])
        with patch("ddmanager.rulesets.store.load_source", sources):
            errors = await store.reload()
        assert len(errors) == 1
        assert [r.object_type for r in store.current().rules] == ["deployment"]

    @pytest.mark.asyncio
    async def test_unexpected_source_error_skipped(self, sources):
        store = RulesetStore(["a.yml", "b.yml"])
        with patch("ddmanager.rulesets.store.load_source", sources):
            await store.reload()
            sources.results["b.yml"] = RuntimeError("boom")
            errors = await store.reload()
        assert [e.source for e in errors] == ["b.yml"]
        assert isinstance(errors[0].cause, RuntimeError)
        assert [r.object_type for r in store.current().rules] == ["deployment", "namespace"]

    @pytest.mark.asyncio
    async def test_start_survives_unexpected_source_error(self, sources):
        sources.results["a.yml"] = RuntimeError("boom")
        store = RulesetStore(["a.yml", "b.yml"], interval=3600)
        with patch("ddmanager.rulesets.store.load_source", sources):
            await store.start()
            await store.stop()
        assert store.loaded
        assert [r.object_type for r in store.current().rules] == ["namespace"]

    @pytest.mark.asyncio
    async def test_snapshot_unchanged_by_reload(self, sources):
        store = RulesetStore(["a.yml"])
        with patch("ddmanager.rulesets.store.load_source", sources):
            await store.reload()
            snapshot = store.current()
            sources.results["a.yml"] = document("statefulset")
            await store.reload()
        assert [r.object_type for r in snapshot.rules] == ["deployment"]
        assert [r.object_type for r in store.current().rules] == ["statefulset"]

    @pytest.mark.asyncio
    async def test_reports_to_sensor(self, sources):
        sensor = Mock()
        sources.results["b.yml"] = SourceError("b.yml", OSError("unreachable"))
        store = RulesetStore(["a.yml", "b.yml"], sensor=sensor)
        with patch("ddmanager.rulesets.store.load_source", sources):
            await store.reload()
        sensor.on_ruleset_reload.assert_called_once_with(2, 1, 1)

    @pytest.mark.asyncio
    async def test_start_and_stop(self, sources):
        store = RulesetStore(["a.yml"], interval=3600)
        with patch("ddmanager.rulesets.store.load_source", sources):
            await store.start()
            assert store.loaded
            await store.stop()
        assert sources.calls == ["a.yml"]
