"""Unlock orchestrator - reveal, research and personalize one person.

A person is `locked` until a user explicitly unlocks them. Unlocking:
1. reveals email/phone through the directory (costs a credit)
2. researches the person on the web
3. generates interest paragraphs from company, person and research

Steps 1 and 2 are independent and run concurrently; step 3 waits for the
research. A reveal failure marks the unlock unsuccessful but research and
paragraphs are still recorded. Re-unlocking re-issues every call and may
overwrite paragraphs with newer content.
"""

import asyncio
import logging
from typing import Iterable, List, Optional

from . import apollo_client
from .errors import InvalidRequestError
from .interest import DEFAULT_TYPES, CompanyLike, generate_paragraphs
from .llm_client import LLMClient
from .models import BatchUnlockResult, CompanyInfo, InterestType, Person, UnlockResult
from .research import research_person
from .results import ResultStatus

logger = logging.getLogger(__name__)

# Reveal outcomes that count as "did not complete"
_REVEAL_FAILURES = (ResultStatus.CALL_FAILED, ResultStatus.UNCONFIGURED, ResultStatus.PARSE_FAILED)


def validate_unlock_request(person: Person, company: Optional[CompanyLike]) -> None:
    """Raise InvalidRequestError unless first name, last name and company are present."""
    missing = []
    if not person.first_name:
        missing.append("first_name")
    if not person.last_name:
        missing.append("last_name")
    if not (person.company_name or (company and company.name)):
        missing.append("company_name")
    if missing:
        raise InvalidRequestError(
            f"Cannot unlock {person.name or person.id}: missing {', '.join(missing)}",
            missing_fields=missing,
        )


def _reveal_domain(company: Optional[CompanyLike]) -> Optional[str]:
    """Only pass directory-backed domains to the match call."""
    if company is None:
        return None
    if isinstance(company, CompanyInfo) and not company.domain_verified:
        return None
    return company.domain


async def unlock_person(
    person: Person,
    company: CompanyLike,
    api_key: Optional[str] = None,
    types: Iterable[InterestType] = DEFAULT_TYPES,
    llm: Optional[LLMClient] = None,
    researcher: Optional[LLMClient] = None,
) -> UnlockResult:
    """Unlock one person, updating the record in place.

    Raises:
        InvalidRequestError: first name, last name or company name missing
    """
    types = list(types)
    validate_unlock_request(person, company)
    company_name = person.company_name or company.name
    logger.info(f"[Unlock] Unlocking {person.name} at {company_name}...")

    reveal, found = await asyncio.gather(
        asyncio.to_thread(
            apollo_client.reveal_contact,
            person.first_name,
            person.last_name,
            company_name,
            _reveal_domain(company),
            api_key,
        ),
        research_person(person.name, person.title, company_name, client=researcher),
    )
    research_summary = found.value

    paragraphs = await generate_paragraphs(person, company, research_summary, types=types, client=llm)

    # Record everything that was learned, even if the reveal failed
    if reveal.value.email:
        person.email = reveal.value.email
    if reveal.value.phone:
        person.phone = reveal.value.phone
    person.research_summary = research_summary or None
    for t in types:
        text = paragraphs.for_type(t)
        if text:
            person.set_paragraph(t, text)

    success = reveal.status not in _REVEAL_FAILURES
    if success:
        person.is_unlocked = True
        logger.info(f"[Unlock] Unlocked {person.name}: email={person.email}")
    else:
        logger.warning(f"[Unlock] Reveal failed for {person.name}: {reveal.status.value} {reveal.detail or ''}")

    return UnlockResult(
        person_id=person.id,
        success=success,
        email=reveal.value.email,
        phone=reveal.value.phone,
        research=research_summary,
        paragraphs=paragraphs,
        error=None if success else (reveal.detail or reveal.status.value),
    )


async def unlock_people(
    people: List[Person],
    company: CompanyLike,
    api_key: Optional[str] = None,
    types: Iterable[InterestType] = DEFAULT_TYPES,
    llm: Optional[LLMClient] = None,
    researcher: Optional[LLMClient] = None,
) -> BatchUnlockResult:
    """Unlock several people concurrently; one failure never affects another."""
    types = list(types)
    outcomes = await asyncio.gather(
        *[
            unlock_person(p, company, api_key=api_key, types=types, llm=llm, researcher=researcher)
            for p in people
        ],
        return_exceptions=True,
    )

    results = []
    for person, outcome in zip(people, outcomes):
        if isinstance(outcome, BaseException):
            logger.error(f"[Unlock] Error unlocking {person.name}: {outcome}")
            results.append(UnlockResult(person_id=person.id, success=False, error=str(outcome)))
        else:
            results.append(outcome)

    batch = BatchUnlockResult(results=results)
    logger.info(f"[Unlock] Batch unlock: {batch.success_count}/{len(people)} succeeded")
    return batch
