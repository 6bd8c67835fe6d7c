"""Template resolution - user placeholders to generated outreach content.

Templates contain free-form placeholders like {{First Name}} or
{{Why We Care}}. A mapping assigns each placeholder (by its full
bracketed text) to a generator from GENERATORS, or leaves it unmapped.
Unmapped placeholders render as a visible "[{{Name}}]" marker so the author
notices them.
"""

import json
import logging
import re
from typing import Dict, List, Optional

from .interest import CompanyLike, fallback_paragraph, generate_interest
from .json_extract import extract_json_object
from .llm_client import LLMClient, get_llm_client
from .models import InterestType, Person

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r'\{\{[^{}]+?\}\}')

GENERATORS = [
    {'value': 'firstName', 'label': 'First Name', 'description': 'The first name of the person (e.g. John)'},
    {'value': 'lastName', 'label': 'Last Name', 'description': 'The last name of the person (e.g. Doe)'},
    {'value': 'fullName', 'label': 'Full Name', 'description': 'The full name of the person (e.g. John Doe)'},
    {'value': 'companyName', 'label': 'Company Name', 'description': 'The name of the company (e.g. Acme Corp)'},
    {'value': 'companyDomain', 'label': 'Company Domain', 'description': 'The website domain of the company (e.g. acme.com)'},
    {'value': 'companyIndustry', 'label': 'Company Industry', 'description': 'The industry of the company (e.g. Software)'},
    {'value': 'companyDescription', 'label': 'Company Description', 'description': 'A brief description of what the company does.'},
    {'value': 'companyInterest', 'label': 'Company Interest', 'description': 'A personalized 1-2 sentence paragraph about why we are interested in the company, based on research.'},
    {'value': 'personInterest', 'label': 'Person Interest', 'description': 'A personalized 1-2 sentence paragraph about why we are interested in the person, based on their background/work.'},
    {'value': 'combinedInterest', 'label': 'Combined Interest', 'description': 'A personalized 1-2 sentence paragraph connecting the person to the company.'},
]

GENERATOR_IDS = frozenset(g['value'] for g in GENERATORS)
PARAGRAPH_GENERATORS = frozenset(t.value for t in InterestType)

# Stand-in values for test emails and previews
SAMPLE_DATA = {
    'firstName': 'John',
    'lastName': 'Doe',
    'fullName': 'John Doe',
    'companyName': 'Acme Corp',
    'companyDomain': 'acme.com',
    'companyIndustry': 'Technology',
    'companyDescription': 'Leading innovator in widget technology.',
    'companyInterest': "We are impressed by Acme Corp's recent Series B funding and expansion into AI widgets.",
    'personInterest': 'Your background in Widget Engineering at WidgetCo makes you a perfect fit.',
    'combinedInterest': "We are impressed by Acme Corp's recent work. Your background makes you a perfect fit.",
}

AUTO_MAP_SYSTEM_PROMPT = "You are a precise JSON generator. Output only valid JSON."


def extract_placeholders(template: str) -> List[str]:
    """All {{...}} spans, de-duplicated in first-occurrence order."""
    if not template:
        return []
    return list(dict.fromkeys(PLACEHOLDER_PATTERN.findall(template)))


def placeholder_name(placeholder: str) -> str:
    """'{{First Name}}' -> 'First Name'."""
    if placeholder.startswith('{{') and placeholder.endswith('}}'):
        return placeholder[2:-2]
    return placeholder


def unmapped_marker(placeholder: str) -> str:
    return f"[{placeholder}]"


def normalize_generator(value: object) -> Optional[str]:
    """A catalogue generator id, or None for anything else."""
    if isinstance(value, str) and value in GENERATOR_IDS:
        return value
    return None


def prune_mappings(template: str, mappings: Dict[str, Optional[str]]) -> Dict[str, str]:
    """Keep only mappings whose key is a placeholder in `template`.

    Run before saving so a stale mapping cannot silently apply to a
    placeholder reintroduced later.
    """
    current = set(extract_placeholders(template))
    pruned = {}
    for key, generator in (mappings or {}).items():
        generator = normalize_generator(generator)
        if key in current and generator:
            pruned[key] = generator
    dropped = set(mappings or {}) - set(pruned)
    if dropped:
        logger.debug(f"[Template] Dropped stale or empty mappings: {sorted(dropped)}")
    return pruned


def build_auto_map_prompt(names: List[str]) -> str:
    return f"""You are an intelligent assistant that maps email template variables to system data generators.

Available Generators:
{json.dumps(GENERATORS, indent=2)}

User's Template Variables:
{json.dumps(names)}

Task:
For each user variable, predict the best matching "value" from the Available Generators.
If a variable seems to be a custom placeholder that doesn't match any generator (e.g., "Meeting Time", "My Name"), return null for that variable.

Return JSON format only:
{{
    "Variable Name": "generator_value",
    "Another Variable": "another_value_or_null"
}}"""


async def auto_map(
    placeholders: List[str],
    mappings: Optional[Dict[str, Optional[str]]] = None,
    client: Optional[LLMClient] = None,
) -> Dict[str, Optional[str]]:
    """Fill in mappings for placeholders that have none.

    One batched LLM call covers every unmapped placeholder. Explicit
    mappings are never overridden. Placeholders the model cannot place,
    or maps to a non-catalogue value, come back as None (unmapped).
    """
    result: Dict[str, Optional[str]] = {
        p: normalize_generator((mappings or {}).get(p)) for p in placeholders
    }
    unmapped = [p for p in placeholders if not result[p]]
    if not unmapped:
        return result

    client = client or get_llm_client()
    if not client.configured:
        logger.warning("[Template] No LLM configured, leaving placeholders unmapped")
        return result

    names = [placeholder_name(p) for p in unmapped]
    try:
        response = await client.complete(AUTO_MAP_SYSTEM_PROMPT, build_auto_map_prompt(names),
                                         temperature=0.1, max_tokens=500)
        data = extract_json_object(response.value) if response.ok else None
    except Exception as e:
        logger.error(f"[Template] Auto-map error: {e}")
        data = None

    if not data:
        logger.warning("[Template] Auto-map returned no usable mappings")
        return result

    for placeholder, name in zip(unmapped, names):
        # Accept keys echoed back with or without braces
        value = data.get(name, data.get(placeholder, data.get(name.strip())))
        result[placeholder] = normalize_generator(value)

    mapped = sum(1 for p in unmapped if result[p])
    logger.info(f"[Template] Auto-mapped {mapped}/{len(unmapped)} placeholders")
    return result


def substitute(template: str, values: Dict[str, str]) -> str:
    """Replace every occurrence of every placeholder in a single pass.

    Substituted text is never rescanned, so generated content that happens
    to contain "{{...}}" stays as written.
    """
    return PLACEHOLDER_PATTERN.sub(lambda m: values.get(m.group(0), m.group(0)), template)


def system_field_value(generator: str, person: Person, company: Optional[CompanyLike]) -> str:
    """Value of a non-generated field; '' when unknown ("there" for a first name)."""
    if generator == 'firstName':
        first = person.first_name or (person.name.split()[0] if person.name and person.name.split() else None)
        return first or "there"
    if generator == 'lastName':
        last = person.last_name
        if not last and person.name and len(person.name.split()) > 1:
            last = person.name.split()[-1]
        return last or ""
    if generator == 'fullName':
        return person.name or " ".join(p for p in (person.first_name, person.last_name) if p)
    if generator == 'companyName':
        return (company.name if company else None) or person.company_name or ""
    if generator == 'companyDomain':
        return (company.domain if company else None) or ""
    if generator == 'companyIndustry':
        return (company.industry if company else None) or ""
    if generator == 'companyDescription':
        return (company.description if company else None) or ""
    raise ValueError(f"Not a system field: {generator}")


async def paragraph_value(
    interest_type: InterestType,
    person: Person,
    company: CompanyLike,
    llm: Optional[LLMClient] = None,
    researcher: Optional[LLMClient] = None,
) -> str:
    """Stored paragraph, else a freshly generated one memoized on the person."""
    stored = person.paragraph(interest_type)
    if stored:
        return stored

    content, _ = await generate_interest(
        interest_type,
        company.name if company else person.company_name,
        company_industry=company.industry if company else None,
        person_name=person.name,
        person_title=person.title,
        llm=llm,
        researcher=researcher,
    )
    if content:
        person.set_paragraph(interest_type, content)
        return content

    # Fallback text is not memoized so a later draft can still generate
    logger.info(f"[Template] Using fallback {interest_type.value} for {person.name}")
    return fallback_paragraph(interest_type, person, company)


async def resolve_values(
    placeholders: List[str],
    mapping: Dict[str, Optional[str]],
    person: Person,
    company: CompanyLike,
    llm: Optional[LLMClient] = None,
    researcher: Optional[LLMClient] = None,
) -> Dict[str, str]:
    values = {}
    for placeholder in placeholders:
        generator = normalize_generator(mapping.get(placeholder))
        if generator is None:
            values[placeholder] = unmapped_marker(placeholder)
        elif generator in PARAGRAPH_GENERATORS:
            values[placeholder] = await paragraph_value(
                InterestType(generator), person, company, llm=llm, researcher=researcher
            )
        else:
            values[placeholder] = system_field_value(generator, person, company)
    return values


async def resolve_template(
    template: str,
    mapping: Optional[Dict[str, Optional[str]]],
    person: Person,
    company: CompanyLike,
    auto_map_missing: bool = True,
    llm: Optional[LLMClient] = None,
    researcher: Optional[LLMClient] = None,
) -> str:
    """Render a template for one person.

    Placeholders missing from `mapping` are auto-mapped first when
    `auto_map_missing` is set; whatever stays unmapped renders as a marker.
    """
    placeholders = extract_placeholders(template)
    if not placeholders:
        return template or ""

    active = prune_mappings(template, mapping or {})
    if auto_map_missing and any(p not in active for p in placeholders):
        active = await auto_map(placeholders, active, client=llm)

    values = await resolve_values(placeholders, active, person, company, llm=llm, researcher=researcher)
    return substitute(template, values)


def render_preview(template: str, mapping: Optional[Dict[str, Optional[str]]]) -> str:
    """Render with SAMPLE_DATA; unmapped placeholders show as "[{{Name}}]"."""
    values = {}
    for placeholder in extract_placeholders(template):
        generator = normalize_generator((mapping or {}).get(placeholder))
        values[placeholder] = SAMPLE_DATA[generator] if generator else unmapped_marker(placeholder)
    return substitute(template or "", values)
