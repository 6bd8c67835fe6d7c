"""Tests for company identity and cross-provider de-duplication."""

from venture_sourcer.merge import deduplicate_companies, deduplicate_people, merge_company_results
from venture_sourcer.models import Company, Person, Source, normalize_domain, normalize_name


def _company(id, name, domain=None, source=Source.DIRECTORY):
    return Company(id=id, name=name, domain=domain, source=source)


class TestNormalization:
    """Tests for identity key normalization."""

    def test_normalize_domain(self):
        assert normalize_domain("WWW.Stripe.com") == "stripe.com"
        assert normalize_domain(None) == ""

    def test_normalize_name(self):
        assert normalize_name("Acme, Inc.") == "acmeinc"
        assert normalize_name("ACME INC") == "acmeinc"

    def test_identity_key_prefers_domain(self):
        assert _company("1", "Stripe", "www.stripe.com").identity_key == "stripe.com"
        assert _company("2", "Acme, Inc.").identity_key == "acmeinc"


class TestMergeCompanyResults:
    """Tests for merge_company_results."""

    def test_same_domain_collapses_research_wins(self):
        research = [_company("perplexity_0", "Stripe", "Stripe.com", Source.RESEARCH)]
        directory = [_company("apollo_1", "Stripe Inc", "www.stripe.com")]

        merged = merge_company_results(research, directory)

        assert len(merged) == 1
        assert merged[0].id == "perplexity_0"
        assert merged[0].source == Source.RESEARCH

    def test_same_name_without_domain_collapses(self):
        merged = merge_company_results(
            [_company("perplexity_0", "Acme, Inc.", source=Source.RESEARCH)],
            [_company("apollo_1", "ACME INC")],
        )
        assert [c.id for c in merged] == ["perplexity_0"]

    def test_distinct_companies_kept_in_order(self):
        merged = merge_company_results(
            [_company("perplexity_0", "Stripe", "stripe.com", Source.RESEARCH)],
            [_company("apollo_1", "Plaid", "plaid.com"), _company("apollo_2", "Stripe", "stripe.com")],
        )
        assert [c.id for c in merged] == ["perplexity_0", "apollo_1"]

    def test_no_duplicate_identity_keys_in_output(self):
        companies = [
            _company("a", "Stripe", "stripe.com"),
            _company("b", "Stripe Payments", "www.STRIPE.com"),
            _company("c", "Stripe"),
            _company("d", "stripe"),
        ]
        keys = [c.identity_key for c in deduplicate_companies(companies)]
        assert len(keys) == len(set(keys))

    def test_empty_keys_fall_back_to_id(self):
        merged = deduplicate_companies([_company("a", "!!!"), _company("b", "???")])
        assert len(merged) == 2

    def test_empty_inputs(self):
        assert merge_company_results([], []) == []


class TestDeduplicatePeople:
    """Tests for deduplicate_people."""

    def test_dedupes_by_id_only(self):
        people = [
            Person(id="apollo_1", name="Jane Smith", company_name="Acme"),
            Person(id="apollo_1", name="Jane Smith", company_name="Acme"),
            Person(id="apollo_2", name="Jane Smith", company_name="Acme"),
        ]
        assert [p.id for p in deduplicate_people(people)] == ["apollo_1", "apollo_2"]
