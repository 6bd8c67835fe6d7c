"""Interest paragraph generation for personalized outreach.

Two entry points:
- generate_paragraphs: one LLM call returning several paragraphs as JSON,
  used when a person is unlocked
- generate_interest: targeted research plus a short generation for a
  single paragraph type, used when a template needs one on demand

Parsing precedence for generate_paragraphs:
1. strict JSON from the first balanced {...}
2. labeled-field extraction for partial recovery
3. deterministic fallback sentences built from known fields
"""

import logging
from typing import Dict, Iterable, Optional, Tuple, Union

from . import config
from .json_extract import extract_json_object, extract_labeled_fields
from .llm_client import LLMClient, get_llm_client
from .models import Company, CompanyInfo, InterestParagraphs, InterestType, Person
from .research import research

logger = logging.getLogger(__name__)

CompanyLike = Union[Company, CompanyInfo]

DEFAULT_TYPES = (InterestType.COMPANY, InterestType.PERSON)

_TYPE_INSTRUCTIONS = {
    InterestType.COMPANY: '"companyInterest": Express genuine interest in what the target company does',
    InterestType.PERSON: (
        '"personInterest": Express specific interest in what this person does at the company. '
        'If additional research is provided, reference specific achievements or work.'
    ),
    InterestType.COMBINED: (
        '"combinedInterest": Connect the person to the company\'s mission or recent success'
    ),
}


def fallback_paragraph(interest_type: InterestType, person: Person, company: CompanyLike) -> str:
    """Deterministic paragraph built only from known fields."""
    industry = company.industry or "the technology sector"
    title = person.title or "a key team member"
    if interest_type == InterestType.COMPANY:
        return (
            f"We at {config.SENDER_ORG_NAME} are excited about {company.name}'s work in {industry}. "
            f"We'd love to explore how we can support your growth."
        )
    if interest_type == InterestType.PERSON:
        return (
            f"We're particularly interested in connecting with {person.name} given their expertise "
            f"as {title}. Your insights would be invaluable as we discuss potential collaboration opportunities."
        )
    return (
        f"We're excited about {company.name}'s work in {industry}, and as {title}, "
        f"{person.name} would be a great person to talk to about it."
    )


def build_system_prompt(types: Iterable[InterestType]) -> str:
    types = list(types)
    numbered = "\n".join(f"{i}. {_TYPE_INSTRUCTIONS[t]}" for i, t in enumerate(types, 1))
    shape = ", ".join(f'"{t.value}": "..."' for t in types)
    count = {1: "one", 2: "two", 3: "three"}.get(len(types), str(len(types)))
    return f"""You are writing personalized outreach paragraphs for {config.SENDER_ORG_NAME}.

{config.SENDER_ORG_CONTEXT}

Write {count} SHORT paragraph{'s' if len(types) != 1 else ''} (2-3 sentences each):
{numbered}

Be professional, enthusiastic, and specific. Make it personal - reference their actual role and any research findings.

Return ONLY valid JSON:
{{{shape}}}"""


def build_user_prompt(person: Person, company: CompanyLike, research_summary: str) -> str:
    prompt = (
        f"Company: {company.name}\n"
        f"Industry: {company.industry or 'Technology'}\n"
        f"Description: {company.description or 'A technology company'}\n"
        f"\n"
        f"Person: {person.name}\n"
        f"Role: {person.title or 'Team member'}\n"
        f"Seniority: {person.seniority or 'Unknown'}"
    )
    if research_summary:
        prompt += f"\n\nAdditional research about this person:\n{research_summary}"
    return prompt


def parse_paragraphs(content: str, types: Iterable[InterestType]) -> Dict[InterestType, str]:
    """Recover whichever requested paragraphs the response contains."""
    types = list(types)
    keys = [t.value for t in types]

    data = extract_json_object(content)
    if data is not None:
        found = {
            t: str(data[t.value]).strip()
            for t in types
            if isinstance(data.get(t.value), str) and data[t.value].strip()
        }
        if len(found) == len(types):
            return found
        logger.debug(f"[Interest] JSON missing keys: {set(keys) - {t.value for t in found}}")
    else:
        logger.debug("[Interest] JSON parse failed, trying labeled-field extraction")
        found = {}

    labeled = extract_labeled_fields(content, keys)
    for t in types:
        if t not in found and labeled.get(t.value):
            found[t] = labeled[t.value]
    return found


async def generate_paragraphs(
    person: Person,
    company: CompanyLike,
    research_summary: str = "",
    types: Iterable[InterestType] = DEFAULT_TYPES,
    client: Optional[LLMClient] = None,
) -> InterestParagraphs:
    """Generate the requested paragraphs; never blocks an unlock on failure."""
    types = list(types)
    client = client or get_llm_client()
    parsed: Dict[InterestType, str] = {}

    if client.configured:
        try:
            result = await client.complete(
                build_system_prompt(types),
                build_user_prompt(person, company, research_summary),
                temperature=0.7,
                max_tokens=400,
            )
            if result.ok:
                parsed = parse_paragraphs(result.value, types)
            else:
                logger.error(f"[Interest] Generation {result.status.value}: {result.detail}")
        except Exception as e:
            logger.error(f"[Interest] Interest paragraph generation error: {e}")

    paragraphs = InterestParagraphs()
    for t in types:
        text = parsed.get(t)
        if not text:
            text = fallback_paragraph(t, person, company)
            paragraphs.used_fallback = True
        paragraphs.set_for_type(t, text)
    return paragraphs


# ============================================================================
# Single paragraph on demand
# ============================================================================

def _on_demand_prompts(
    interest_type: InterestType,
    company_name: str,
    company_industry: str,
    person_name: str,
    person_title: str,
) -> Tuple[str, str, str, str]:
    """(research query, research instruction, generation instruction, generation input)."""
    header = (
        f"You are writing a personalized email introduction for {config.SENDER_ORG_NAME}.\n"
        f"{config.SENDER_ORG_CONTEXT}\n\n"
    )
    if interest_type == InterestType.COMPANY:
        return (
            f"Research recent news, specific products, or engineering blog posts for {company_name}. "
            f"Focus on technical details or company culture.",
            "You are a researcher. Find specific, recent, and interesting details about the company "
            "that a consultant could genuinely be excited about (e.g., specific API, open source tool, "
            "culture, recent funding, new product).",
            header + 'Write a 1-2 sentence "Company Interest" paragraph.\n'
            "- It MUST be specific to the company using the provided research.\n"
            "- Express genuine excitement.\n"
            "- Do NOT be generic. Mention specific products, features, or initiatives.\n"
            "- If research is sparse, focus on their known industry reputation but keep it high energy.",
            f"Company: {company_name}\nIndustry: {company_industry}",
        )
    if interest_type == InterestType.PERSON:
        return (
            f"Research {person_name} ({person_title}) at {company_name}. "
            f"Look for interviews, articles, GitHub activity, talks, or specific projects.",
            "You are a researcher. Find specific details about this person's professional work, "
            "such as packages they maintain, talks they've given, or articles they've written.",
            header + 'Write a 1-2 sentence "Person Interest" paragraph.\n'
            "- It MUST be specific to the person using the provided research.\n"
            "- If no specific research is found, compliment their role/tenure/impact at the company "
            "generally but warmly.",
            f"Person: {person_name}\nRole: {person_title}\nCompany: {company_name}",
        )
    return (
        f"Research {person_name} at {company_name} and recent company news.",
        "Find a connection between the person and the company's recent work.",
        header + 'Write a 1-2 sentence "Combined Interest" paragraph.\n'
        "- Connect the person to the company's mission or recent success.\n"
        "- Keep it natural and enthusiastic.",
        f"Person: {person_name}\nRole: {person_title}\nCompany: {company_name}",
    )


async def generate_interest(
    interest_type: InterestType,
    company_name: str,
    company_industry: Optional[str] = None,
    person_name: Optional[str] = None,
    person_title: Optional[str] = None,
    llm: Optional[LLMClient] = None,
    researcher: Optional[LLMClient] = None,
) -> Tuple[str, str]:
    """Research then write one paragraph.

    Returns:
        (content, research_used); content is '' when generation failed.
    """
    interest_type = InterestType(interest_type)
    query, research_prompt, system_prompt, user_prompt = _on_demand_prompts(
        interest_type,
        company_name,
        company_industry or "",
        person_name or "",
        person_title or "",
    )

    found = await research(query, research_prompt, client=researcher, max_tokens=300)
    research_used = found.value

    llm = llm or get_llm_client()
    result = await llm.complete(
        system_prompt,
        f"{user_prompt}\nResearch: {research_used}",
        temperature=0.7,
        max_tokens=250,
    )
    if not result.ok:
        logger.warning(f"[Interest] {interest_type.value} generation {result.status.value}")
        return "", research_used
    return result.value.strip(), research_used
