"""Tests for the natural-language query interpreter."""

import pytest

from venture_sourcer.query_interpreter import criteria_from_dict, interpret_query, keyword_fallback
from venture_sourcer.results import ProviderResult


class TestKeywordFallback:
    """Tests for keyword_fallback."""

    def test_keeps_tokens_longer_than_three(self):
        criteria = keyword_fallback("fintech nyc saas")
        assert criteria.keywords == ["fintech", "saas"]
        assert criteria.industries == []
        assert criteria.locations == []
        assert criteria.sizes == []
        assert criteria.funding_status is None

    def test_lowercases(self):
        assert keyword_fallback("Developer TOOLS").keywords == ["developer", "tools"]

    def test_empty_prompt(self):
        assert keyword_fallback("").is_empty()


class TestCriteriaFromDict:
    """Tests for criteria_from_dict."""

    def test_drops_unknown_sizes(self):
        criteria = criteria_from_dict({"sizes": ["11-50", "huge", "10000+"]})
        assert criteria.sizes == ["11-50", "10000+"]

    def test_normalizes_funding_stage(self):
        assert criteria_from_dict({"fundingStatus": "Series A"}).funding_status == "series_a"

    def test_unknown_funding_stage_dropped(self):
        assert criteria_from_dict({"fundingStatus": "ipo"}).funding_status is None

    def test_string_instead_of_list(self):
        assert criteria_from_dict({"industries": "fintech"}).industries == ["fintech"]


class TestInterpretQuery:
    """Tests for interpret_query."""

    @pytest.mark.asyncio
    async def test_unconfigured_uses_keyword_fallback(self, offline_client):
        criteria = await interpret_query("fintech nyc saas", client=offline_client)
        assert criteria.keywords == ["fintech", "saas"]
        offline_client.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_default_client_without_key_falls_back(self):
        criteria = await interpret_query("fintech nyc saas")
        assert criteria.keywords == ["fintech", "saas"]

    @pytest.mark.asyncio
    async def test_parses_model_json(self, fake_client):
        client = fake_client(
            'Sure:\n{"industries": ["fintech"], "locations": ["new york, ny"], '
            '"sizes": ["11-50"], "keywords": ["saas"], "fundingStatus": "series_a"}'
        )

        criteria = await interpret_query("series a fintech saas in nyc", client=client)

        assert criteria.industries == ["fintech"]
        assert criteria.locations == ["new york, ny"]
        assert criteria.sizes == ["11-50"]
        assert criteria.keywords == ["saas"]
        assert criteria.funding_status == "series_a"

    @pytest.mark.asyncio
    async def test_invalid_json_falls_back(self, fake_client):
        client = fake_client("I think you want fintech companies.")
        criteria = await interpret_query("fintech nyc saas", client=client)
        assert criteria.keywords == ["fintech", "saas"]

    @pytest.mark.asyncio
    async def test_call_failure_falls_back(self, fake_client):
        client = fake_client(ProviderResult.failed("", "timeout"))
        criteria = await interpret_query("fintech nyc saas", client=client)
        assert criteria.keywords == ["fintech", "saas"]
