"""Unit tests for loading ruleset sources."""

import pytest
from unittest.mock import AsyncMock, patch
from ddmanager.rulesets.sources import is_url, load_source, parse_document
from ddmanager.utils.errors import SourceError

VALID = """
cluster_variables:
  env: prod
rulesets:
  - type: deployment
    match_annotations:
      - name: dd/monitor
        value: "true"
    monitors:
      - name: "{{ name }} down"
        type: metric alert
        query: "avg(last_5m):sum:up{app:{{ name }}} < 1"
"""


class TestParseDocument:
    def test_valid_document(self):
        document = parse_document(VALID)
        assert document.cluster_variables == {"env": "prod"}
        assert document.rulesets[0].monitors[0].name == "{{ name }} down"

    def test_empty_document(self):
        document = parse_document("")
        assert document.rulesets == ()


class TestIsUrl:
    @pytest.mark.parametrize(
        "source,expected",
        [
            ("https://example.com/conf.yml", True),
            ("http://example.com/conf.yml", True),
            ("conf.yml", False),
            ("/etc/dd-manager/conf.yml", False),
        ],
    )
    def test_is_url(self, source, expected):
        assert is_url(source) is expected


class TestLoadSource:
    @pytest.mark.asyncio
    async def test_load_file(self, tmp_path):
        path = tmp_path / "conf.yml"
        path.write_text(VALID)
        document = await load_source(str(path))
        assert len(document.rulesets) == 1

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        with pytest.raises(SourceError) as exc:
            await load_source(str(tmp_path / "missing.yml"))
        assert "not a valid path or url" in str(exc.value)

    @pytest.mark.asyncio
    async def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "conf.yml"
        path.write_text("rulesets: [unclosed")
        with pytest.raises(SourceError):
            await load_source(str(path))

    @pytest.mark.asyncio
    async def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "conf.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(SourceError):
            await load_source(str(path))

    @pytest.mark.asyncio
    async def test_schema_violation(self, tmp_path):
        path = tmp_path / "conf.yml"
        path.write_text("rulesets:\n  - monitors: []\n")
        with pytest.raises(SourceError) as exc:
            await load_source(str(path))
        assert exc.value.source == str(path)

    @pytest.mark.asyncio
    async def test_load_url(self):
        with patch(
            "ddmanager.rulesets.sources.fetch_source", AsyncMock(return_value=VALID)
        ) as fetch:
            document = await load_source("https://example.com/conf.yml")
        fetch.assert_awaited_once()
        assert len(document.rulesets) == 1
