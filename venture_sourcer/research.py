"""Web research adapter - Perplexity-grounded company and person research.

Two kinds of output:
- a structured company list, pulled from the first JSON array in the answer
- a free-text summary, discarded when the provider says it found nothing

Provider absence or any error yields an empty result.
"""

import logging
from typing import Any, Dict, List, Optional

from . import config
from .json_extract import extract_json_array
from .llm_client import LLMClient, get_research_client
from .models import Company, Source, normalize_domain
from .results import ProviderResult

logger = logging.getLogger(__name__)

COMPANY_SEARCH_PROMPT = f"""You are a startup and company research assistant. When given a search query about companies or startups, search the web and return a JSON array of companies that match.

For each company found, include:
- name: company name
- domain: website domain (e.g., "stripe.com")
- industry: primary industry
- location: headquarters location
- description: brief description of what they do
- fundingStatus: if known (seed, series_a, series_b, etc.)

Return ONLY a valid JSON array like:
[{{"name": "...", "domain": "...", "industry": "...", "location": "...", "description": "...", "fundingStatus": "..."}}]

Find up to {config.RESEARCH_MAX_COMPANIES} relevant companies. Focus on startups and growth-stage companies."""

PERSON_RESEARCH_PROMPT = """You are researching a professional for business outreach. Search the web and provide a brief 2-3 sentence summary about this person's background, achievements, or recent work that would be relevant for a business introduction. Focus on their professional accomplishments, any public speaking, articles they've written, or notable projects.

If you can't find specific information about this person, just say "No additional information found" - do NOT make up information."""


def is_declined(text: str) -> bool:
    """True when the answer states that no information was found."""
    lowered = (text or "").lower()
    return any(phrase in lowered for phrase in config.RESEARCH_DECLINE_PHRASES)


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


def normalize_research_company(item: Dict[str, Any], index: int) -> Company:
    """Map one research result onto Company, tolerating missing fields."""
    domain = normalize_domain(_text(item.get("domain"))) or None
    return Company(
        id=f"perplexity_{index}",
        name=_text(item.get("name")) or "Unknown",
        domain=domain,
        website=f"https://{domain}" if domain else None,
        industry=_text(item.get("industry")),
        location=_text(item.get("location")),
        employee_count=_as_int(item.get("employeeCount")),
        funding_status=_text(item.get("fundingStatus")),
        founded_year=_as_int(item.get("foundedYear")),
        description=_text(item.get("description")),
        social_url=None,
        source=Source.RESEARCH,
    )


async def search_companies(prompt: str, client: Optional[LLMClient] = None) -> ProviderResult[List[Company]]:
    """Ask the research provider for companies matching a free-text prompt."""
    client = client or get_research_client()
    if not client.configured:
        logger.warning("[Research] PERPLEXITY_API_KEY not set")
        return ProviderResult.unconfigured([], "PERPLEXITY_API_KEY not set")

    try:
        result = await client.complete(
            COMPANY_SEARCH_PROMPT,
            f"Find companies matching: {prompt}",
            temperature=0.2,
            max_tokens=2000,
        )
        if not result.ok:
            return ProviderResult(value=[], status=result.status, detail=result.detail)

        items = extract_json_array(result.value)
        if items is None:
            logger.warning("[Research] No JSON array found in research response")
            return ProviderResult.unparsable([], "no JSON array in response")

        companies = [
            normalize_research_company(item, i)
            for i, item in enumerate(x for x in items if isinstance(x, dict))
        ][:config.RESEARCH_MAX_COMPANIES]
    except Exception as e:
        logger.error(f"[Research] Company search error: {e}")
        return ProviderResult.failed([], str(e))

    logger.info(f"[Research] Company search returned {len(companies)} companies")
    if not companies:
        return ProviderResult.empty([])
    return ProviderResult.success(companies)


async def research(
    query: str,
    system_prompt: str,
    client: Optional[LLMClient] = None,
    max_tokens: int = 300,
) -> ProviderResult[str]:
    """Free-text research summary; '' when nothing useful was found."""
    client = client or get_research_client()
    if not client.configured:
        return ProviderResult.unconfigured("", "PERPLEXITY_API_KEY not set")

    try:
        result = await client.complete(system_prompt, query, temperature=0.3, max_tokens=max_tokens)
    except Exception as e:
        logger.error(f"[Research] Research error: {e}")
        return ProviderResult.failed("", str(e))

    if not result.ok:
        return result
    if is_declined(result.value):
        logger.debug(f"[Research] Provider found nothing for: {query[:60]}")
        return ProviderResult.empty("", "provider found no information")
    return ProviderResult.success(result.value.strip())


async def research_person(
    name: str,
    title: Optional[str],
    company_name: str,
    client: Optional[LLMClient] = None,
) -> ProviderResult[str]:
    """Background summary on a person for an outreach introduction."""
    query = " ".join(p for p in (name, title or "", company_name) if p)
    return await research(f"Research: {query}", PERSON_RESEARCH_PROMPT, client=client, max_tokens=200)
