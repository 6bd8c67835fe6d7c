"""Merge and de-duplicate search results across providers.

Precedence is decided by input order: the first record seen for an
identity key wins. `merge_company_results` lists research results ahead
of directory results.
"""

import logging
from typing import Iterable, List

from .models import Company, Person

logger = logging.getLogger(__name__)


def deduplicate_companies(companies: Iterable[Company]) -> List[Company]:
    """Keep the first company per identity key, preserving input order."""
    seen = {}
    for company in companies:
        key = company.identity_key
        if not key:
            # No domain and no alphanumeric name: nothing to match on
            key = company.id
        if key not in seen:
            seen[key] = company
    return list(seen.values())


def merge_company_results(research: List[Company], directory: List[Company]) -> List[Company]:
    """Union research-first then directory results and de-duplicate."""
    merged = deduplicate_companies([*research, *directory])
    logger.info(
        f"[Merge] {len(research)} research + {len(directory)} directory "
        f"-> {len(merged)} unique companies"
    )
    return merged


def deduplicate_people(people: Iterable[Person]) -> List[Person]:
    """Keep the first person per source-provided id.

    No cross-provider matching by name or email is attempted.
    """
    seen = set()
    unique = []
    for person in people:
        if person.id in seen:
            continue
        seen.add(person.id)
        unique.append(person)
    return unique
