"""End-to-end tests for the pipeline operations."""

from unittest.mock import AsyncMock, patch

import pytest

from venture_sourcer import pipeline
from venture_sourcer.errors import CompanyNotFoundError, InvalidRequestError
from venture_sourcer.models import Company, CompanyInfo, PeopleFilters, Person, SearchCriteria, Source
from venture_sourcer.results import ProviderResult


class TestSearchCompanies:
    """Tests for pipeline.search_companies."""

    @pytest.mark.asyncio
    async def test_all_providers_unconfigured(self):
        result = await pipeline.search_companies("B2B SaaS Series A developer tools")

        assert result.companies == []
        assert result.meta['total_unique'] == 0
        assert result.meta['research_count'] == 0
        assert result.meta['directory_count'] == 0
        assert result.meta['research_status'] == "unconfigured"
        assert result.meta['directory_status'] == "unconfigured"
        assert result.meta['criteria'].keywords == ["saas", "series", "developer", "tools"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("prompt", ["", "   ", None])
    async def test_empty_prompt_rejected(self, prompt):
        with pytest.raises(InvalidRequestError) as exc_info:
            await pipeline.search_companies(prompt)
        assert exc_info.value.missing_fields == ["prompt"]

    @pytest.mark.asyncio
    async def test_merges_research_first(self, research_company):
        directory = [
            Company(id="apollo_1", name="Stripe Inc", domain="www.stripe.com", source=Source.DIRECTORY),
            Company(id="apollo_2", name="Plaid", domain="plaid.com", source=Source.DIRECTORY),
        ]
        criteria = SearchCriteria(industries=["fintech"])

        with patch('venture_sourcer.research.search_companies',
                   new=AsyncMock(return_value=ProviderResult.success([research_company]))), \
             patch('venture_sourcer.apollo_client.search_companies',
                   return_value=ProviderResult.success(directory)) as mock_directory:
            result = await pipeline.search_companies("fintech", criteria=criteria, api_key="test_key")

        assert [c.id for c in result.companies] == ["perplexity_0", "apollo_2"]
        assert result.meta['research_count'] == 1
        assert result.meta['directory_count'] == 2
        assert result.meta['total_unique'] == 2
        mock_directory.assert_called_once_with(criteria, "test_key")

    @pytest.mark.asyncio
    async def test_one_provider_failing(self, research_company):
        with patch('venture_sourcer.research.search_companies',
                   new=AsyncMock(return_value=ProviderResult.success([research_company]))), \
             patch('venture_sourcer.apollo_client.search_companies',
                   return_value=ProviderResult.failed([], "HTTP 500")):
            result = await pipeline.search_companies("fintech", criteria=SearchCriteria())

        assert [c.name for c in result.companies] == ["Stripe"]
        assert result.meta['directory_status'] == "call_failed"


class TestSearchPeople:
    """Tests for pipeline.search_people."""

    def test_coerce_people_limit(self):
        assert pipeline.coerce_people_limit(25) == 25
        assert pipeline.coerce_people_limit(30) == 100
        assert pipeline.coerce_people_limit(None) == 100

    @pytest.mark.asyncio
    async def test_invalid_limit_becomes_default(self):
        with patch('venture_sourcer.apollo_client.search_people',
                   return_value=ProviderResult.empty([])) as mock_search:
            await pipeline.search_people("Stripe", limit=7)

        mock_search.assert_called_once_with("Stripe", 100, None, None, None, None)

    @pytest.mark.asyncio
    async def test_filters_passed_through(self):
        filters = PeopleFilters(seniorities=["vp"], title="engineering")
        with patch('venture_sourcer.apollo_client.search_people',
                   return_value=ProviderResult.empty([])) as mock_search:
            await pipeline.search_people("Stripe", 25, "stripe.com", filters, "test_key")

        mock_search.assert_called_once_with("Stripe", 25, "stripe.com", ["vp"], "engineering", "test_key")

    @pytest.mark.asyncio
    async def test_unconfigured_returns_empty(self):
        assert await pipeline.search_people("Stripe") == []


class TestFindCompanyDomain:
    """Tests for pipeline.find_company_domain."""

    @pytest.mark.asyncio
    async def test_passes_variants(self):
        info = CompanyInfo(name="Stripe", domain="stripe.com")
        with patch('venture_sourcer.pipeline.generate_variants',
                   new=AsyncMock(return_value=["Stripe", "Stripe Inc"])), \
             patch('venture_sourcer.apollo_client.find_company_domain', return_value=info) as mock_find:
            result = await pipeline.find_company_domain("Stripe", api_key="test_key")

        assert result is info
        mock_find.assert_called_once_with("Stripe", ["Stripe", "Stripe Inc"], "test_key")

    @pytest.mark.asyncio
    async def test_unconfigured_returns_none(self):
        assert await pipeline.find_company_domain("Stripe") is None


class TestLookupPeople:
    """Tests for pipeline.lookup_people."""

    @pytest.mark.asyncio
    async def test_unresolvable_company(self):
        with pytest.raises(CompanyNotFoundError) as exc_info:
            await pipeline.lookup_people("Nowhere Labs")
        assert "Nowhere Labs" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_no_people_found(self):
        info = CompanyInfo(name="Acme", domain="acme.com", domain_verified=False)
        with patch('venture_sourcer.pipeline.find_company_domain', new=AsyncMock(return_value=info)), \
             patch('venture_sourcer.apollo_client.search_people', return_value=ProviderResult.empty([])):
            with pytest.raises(CompanyNotFoundError) as exc_info:
                await pipeline.lookup_people("Acme")
        assert "No people found" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_people_are_locked(self):
        info = CompanyInfo(name="Acme", domain="acme.com")
        people = [Person(id="apollo_1", name="Jane Smith", company_name="Acme")]
        with patch('venture_sourcer.pipeline.find_company_domain', new=AsyncMock(return_value=info)), \
             patch('venture_sourcer.apollo_client.search_people',
                   return_value=ProviderResult.success(people)) as mock_search:
            result = await pipeline.lookup_people("Acme", limit=10)

        assert result.company is info
        assert [p.id for p in result.people] == ["apollo_1"]
        assert not result.people[0].is_unlocked
        assert result.meta['domain_verified'] is True
        assert mock_search.call_args.args[:3] == ("Acme", 10, "acme.com")
