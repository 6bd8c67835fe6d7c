"""Company name variants for directory lookups.

Asks the LLM for alternate forms of a company name (legal suffixes,
abbreviations, domain style). Variants only steer directory queries;
they are never written into returned records.
"""

import logging
from typing import List, Optional

from .json_extract import extract_json_array
from .llm_client import LLMClient, get_llm_client

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You help find variations of company names. Given a company name, return 3-5 possible variations that might help find the company in a database. Include the original name, common abbreviations, full legal name, and domain-style variations.

Return ONLY a JSON array of strings, like:
["Stripe", "Stripe Inc", "stripe.com", "Stripe, Inc."]"""


def merge_variants(original: str, variants: List[object]) -> List[str]:
    """Original first, then unique non-empty variants in the order given."""
    seen = {original}
    merged = [original]
    for v in variants:
        if not isinstance(v, str):
            continue
        v = v.strip()
        if v and v not in seen:
            seen.add(v)
            merged.append(v)
    return merged


async def generate_variants(company_name: str, client: Optional[LLMClient] = None) -> List[str]:
    """Return [company_name, *llm_variants]; just [company_name] on any failure."""
    client = client or get_llm_client()
    if not client.configured:
        return [company_name]

    try:
        result = await client.complete(SYSTEM_PROMPT, company_name, temperature=0.3, max_tokens=100)
        if not result.ok:
            logger.error(f"[Variants] Variation call {result.status.value}: {result.detail}")
            return [company_name]

        variants = extract_json_array(result.value)
        if variants is None:
            return [company_name]
        return merge_variants(company_name, variants)
    except Exception as e:
        logger.error(f"[Variants] Company variation error: {e}")
        return [company_name]
