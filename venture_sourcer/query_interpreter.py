"""Query interpreter - natural-language prompt to SearchCriteria.

One LLM call extracts industries, locations, size bands, keywords and
funding stage. When no model is configured, or anything about the call or
its output goes wrong, falls back to plain keyword extraction.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from . import config
from .json_extract import extract_json_object
from .llm_client import LLMClient, get_llm_client
from .models import SearchCriteria

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = f"""You are a search criteria extractor. Given a natural language query about finding companies/startups, extract structured search criteria.

Return ONLY valid JSON with this structure:
{{
  "industries": ["software", "fintech", etc] - industry keywords,
  "locations": ["san francisco, ca", "new york, ny"] - city/state/country,
  "sizes": {json.dumps(config.SIZE_BUCKETS)} - employee counts,
  "keywords": ["ai", "saas", "developer tools"] - other relevant keywords,
  "fundingStatus": {" | ".join(f'"{s}"' for s in config.FUNDING_STAGES)} | null
}}

Be liberal with keywords to maximize search results."""


def keyword_fallback(prompt: str) -> SearchCriteria:
    """Deterministic criteria: lowercase whitespace tokens longer than 3 chars."""
    keywords = [w for w in (prompt or "").lower().split() if len(w) > 3]
    return SearchCriteria(keywords=keywords)


def _string_list(value: Any) -> List[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


def criteria_from_dict(data: Dict[str, Any]) -> SearchCriteria:
    """Build SearchCriteria from the model's JSON, dropping out-of-range values."""
    sizes = [s for s in _string_list(data.get('sizes')) if s in config.SIZE_BUCKETS]

    funding: Optional[str] = data.get('fundingStatus', data.get('funding_status'))
    if isinstance(funding, str):
        funding = funding.strip().lower().replace(' ', '_') or None
    else:
        funding = None
    if funding and funding not in config.FUNDING_STAGES:
        logger.debug(f"[Interpreter] Ignoring unknown funding stage: {funding}")
        funding = None

    return SearchCriteria(
        industries=_string_list(data.get('industries')),
        locations=_string_list(data.get('locations')),
        sizes=sizes,
        keywords=_string_list(data.get('keywords')),
        funding_status=funding,
    )


async def interpret_query(prompt: str, client: Optional[LLMClient] = None) -> SearchCriteria:
    """Turn a free-text prompt into SearchCriteria. Never raises."""
    client = client or get_llm_client()

    if not client.configured:
        logger.warning("[Interpreter] No LLM configured, using basic keyword extraction")
        return keyword_fallback(prompt)

    try:
        result = await client.complete(SYSTEM_PROMPT, prompt, temperature=0.1, max_tokens=500)
        if not result.ok:
            logger.warning(f"[Interpreter] LLM call {result.status.value}, using keyword fallback")
            return keyword_fallback(prompt)

        data = extract_json_object(result.value)
        if data is None:
            logger.warning("[Interpreter] No valid JSON in LLM response, using keyword fallback")
            return keyword_fallback(prompt)

        criteria = criteria_from_dict(data)
        logger.info(f"[Interpreter] Extracted criteria: {criteria.model_dump()}")
        return criteria
    except Exception as e:
        logger.error(f"[Interpreter] Parsing error: {e}")
        return keyword_fallback(prompt)
