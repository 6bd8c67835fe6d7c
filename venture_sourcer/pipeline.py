"""Venture Sourcer pipeline - the operations the application calls.

prompt -> interpret_query -> (directory + research, concurrently) -> merge
company name -> find_company_domain -> search_people
person -> unlock_person
template + mapping + person -> resolve_template

Provider failures never raise out of here. Only InvalidRequestError and
CompanyNotFoundError cross this boundary.

Usage:
    import asyncio
    from venture_sourcer import pipeline

    result = asyncio.run(pipeline.search_companies("B2B SaaS Series A developer tools"))
    for company in result.companies:
        print(company.name, company.domain)
"""

import asyncio
import logging
from typing import List, Optional

from . import apollo_client, config, research
from .errors import CompanyNotFoundError, InvalidRequestError
from .merge import deduplicate_people, merge_company_results
from .models import (
    CompanyInfo, CompanySearchResult, PeopleFilters, PeopleLookupResult, Person,
    SearchCriteria,
)
from .name_variants import generate_variants
from .query_interpreter import interpret_query
from .template_engine import resolve_template
from .unlock import unlock_people, unlock_person

logger = logging.getLogger(__name__)

__all__ = [
    'interpret_query',
    'search_companies',
    'find_company_domain',
    'search_people',
    'lookup_people',
    'unlock_person',
    'unlock_people',
    'resolve_template',
]


def _require_text(value, field: str) -> str:
    if not value or not isinstance(value, str) or not value.strip():
        raise InvalidRequestError(f"Invalid request: {field} is required", missing_fields=[field])
    return value.strip()


def coerce_people_limit(limit: Optional[int]) -> int:
    """Limits outside the supported set fall back to the default."""
    return limit if limit in config.VALID_PEOPLE_LIMITS else config.DEFAULT_PEOPLE_LIMIT


async def search_companies(
    prompt: str,
    criteria: Optional[SearchCriteria] = None,
    api_key: Optional[str] = None,
) -> CompanySearchResult:
    """Search both providers concurrently and merge the results.

    Raises:
        InvalidRequestError: empty prompt
    """
    prompt = _require_text(prompt, "prompt")
    if criteria is None:
        criteria = await interpret_query(prompt)

    research_result, directory_result = await asyncio.gather(
        research.search_companies(prompt),
        asyncio.to_thread(apollo_client.search_companies, criteria, api_key),
    )
    logger.info(f"Research returned {len(research_result.value)} results ({research_result.status.value})")
    logger.info(f"Directory returned {len(directory_result.value)} results ({directory_result.status.value})")

    companies = merge_company_results(research_result.value, directory_result.value)

    return CompanySearchResult(
        companies=companies,
        meta={
            'research_count': len(research_result.value),
            'directory_count': len(directory_result.value),
            'total_unique': len(companies),
            'criteria': criteria,
            'research_status': research_result.status.value,
            'directory_status': directory_result.status.value,
        },
    )


async def find_company_domain(company_name: str, api_key: Optional[str] = None) -> Optional[CompanyInfo]:
    """Resolve a company name to a domain, trying LLM-suggested variants.

    None means no directory is configured. A CompanyInfo with
    `domain_verified=False` carries a guessed domain.
    """
    company_name = _require_text(company_name, "companyName")
    variants = await generate_variants(company_name)
    return await asyncio.to_thread(apollo_client.find_company_domain, company_name, variants, api_key)


async def search_people(
    company_name: str,
    limit: int = config.DEFAULT_PEOPLE_LIMIT,
    domain: Optional[str] = None,
    filters: Optional[PeopleFilters] = None,
    api_key: Optional[str] = None,
) -> List[Person]:
    """People at a company, name pass then domain pass, capped at `limit`."""
    company_name = _require_text(company_name, "companyName")
    filters = filters or PeopleFilters()
    result = await asyncio.to_thread(
        apollo_client.search_people,
        company_name,
        coerce_people_limit(limit),
        domain,
        filters.seniorities or None,
        filters.title,
        api_key,
    )
    return deduplicate_people(result.value)


async def lookup_people(
    company_name: str,
    limit: int = config.DEFAULT_PEOPLE_LIMIT,
    filters: Optional[PeopleFilters] = None,
    api_key: Optional[str] = None,
) -> PeopleLookupResult:
    """Resolve the company, then list its people, all locked.

    Raises:
        InvalidRequestError: empty company name
        CompanyNotFoundError: no domain could be resolved, or nobody was found
    """
    company_name = _require_text(company_name, "companyName")
    logger.info(f"Looking up company: {company_name}")

    company = await find_company_domain(company_name, api_key=api_key)
    if not company or not company.domain:
        logger.info("Company not found after trying variations")
        raise CompanyNotFoundError(company_name)

    logger.info(f"Using domain: {company.domain}{'' if company.domain_verified else ' (unverified)'}")
    people = await search_people(company_name, limit, company.domain, filters, api_key)
    if not people:
        raise CompanyNotFoundError(
            company_name,
            f'No people found at "{company_name}". The company may not be in our database '
            f'or the name might be spelled differently.',
        )

    return PeopleLookupResult(
        people=people,
        company=company,
        meta={
            'directory_count': len(people),
            'total_unique': len(people),
            'enriched_count': 0,
            'domain_verified': company.domain_verified,
        },
    )
