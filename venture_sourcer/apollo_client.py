"""Apollo directory adapter - structured company and people search.

Operations:
1. search_companies - organizations matching SearchCriteria
2. find_company_domain - resolve a name (tried across variants) to a domain
3. search_people - people at a company, by name then by domain
4. reveal_contact - people/match to reveal one person's email and phone (costs a credit)
5. check_api_usage - key validity and rate-limit headers

All calls are synchronous `requests` calls; async callers run them in a
worker thread. Apollo field names are translated here and nowhere else.

Usage:
    from venture_sourcer.apollo_client import search_people

    result = search_people("Stripe", limit=25, domain="stripe.com")
    people = result.value
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Optional

import requests

from . import config
from .models import (
    CompanyInfo, Company, ContactDetails, Person, SearchCriteria, Source,
    normalize_domain,
)
from .results import ProviderResult

logger = logging.getLogger(__name__)


def _headers(api_key: str) -> Dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Cache-Control": "no-cache",
        "x-api-key": api_key,
    }


def _resolve_key(api_key: Optional[str]) -> Optional[str]:
    return api_key or config.APOLLO_API_KEY


def _post(url: str, api_key: str, payload: Dict[str, Any], label: str) -> ProviderResult[Dict[str, Any]]:
    """POST to Apollo; failures are logged and returned as a status."""
    try:
        response = requests.post(
            url,
            headers=_headers(api_key),
            json=payload,
            timeout=config.REQUEST_TIMEOUT,
        )
    except requests.exceptions.Timeout:
        logger.error(f"[Apollo] Timeout during {label}")
        return ProviderResult.failed({}, "timeout")
    except requests.exceptions.RequestException as e:
        logger.error(f"[Apollo] Request error during {label}: {e}")
        return ProviderResult.failed({}, str(e))

    if not response.ok:
        if response.status_code in config.APOLLO_QUOTA_STATUS_CODES:
            logger.error(
                f"[Apollo] Authorization/quota failure during {label}: "
                f"{response.status_code} {response.text[:200]}"
            )
        else:
            logger.error(f"[Apollo] API error during {label}: {response.status_code}")
        return ProviderResult.failed({}, f"HTTP {response.status_code}")

    try:
        data = response.json()
    except ValueError as e:
        logger.warning(f"[Apollo] Invalid JSON during {label}: {e}")
        return ProviderResult.unparsable({}, str(e))

    if not isinstance(data, dict):
        return ProviderResult.unparsable({}, "response is not an object")
    return ProviderResult.success(data)


# ============================================================================
# Normalization
# ============================================================================

def clean_email(email: Optional[str]) -> Optional[str]:
    """Return the email, or None for empty values and the locked sentinel."""
    if not email or not isinstance(email, str):
        return None
    email = email.strip()
    if not email or config.EMAIL_LOCKED_SENTINEL in email.lower():
        return None
    return email


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


def _organizations(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    # Older plans answer with "accounts" instead of "organizations"
    orgs = data.get("organizations") or data.get("accounts") or []
    return [o for o in orgs if isinstance(o, dict)]


def normalize_organization(org: Dict[str, Any]) -> Company:
    """Map an Apollo organization record onto Company."""
    domain = normalize_domain(org.get("primary_domain") or org.get("domain")) or None

    location = None
    if org.get("city"):
        region = org.get("state") or org.get("country")
        location = f"{org['city']}, {region}" if region else org["city"]

    return Company(
        id=f"apollo_{org.get('id')}",
        name=org.get("name") or "Unknown",
        domain=domain,
        website=org.get("website_url") or (f"https://{domain}" if domain else None),
        industry=org.get("industry"),
        location=location,
        employee_count=_as_int(org.get("estimated_num_employees") or org.get("employee_count")),
        funding_status=org.get("latest_funding_stage") or org.get("funding_status"),
        founded_year=_as_int(org.get("founded_year")),
        description=org.get("short_description"),
        social_url=org.get("linkedin_url"),
        source=Source.DIRECTORY,
    )


def normalize_person(person: Dict[str, Any], company_name: str) -> Person:
    """Map an Apollo person record onto Person."""
    first = person.get("first_name") or None
    last = person.get("last_name") or None
    name = person.get("name") or " ".join(p for p in (first, last) if p) or "Unknown"
    organization = person.get("organization") or {}

    return Person(
        id=f"apollo_{person.get('id')}",
        name=name,
        first_name=first,
        last_name=last,
        email=clean_email(person.get("email")),
        phone=person.get("phone_number") or person.get("sanitized_phone"),
        title=person.get("title"),
        seniority=person.get("seniority"),
        social_url=person.get("linkedin_url"),
        company_name=person.get("organization_name") or organization.get("name") or company_name,
        source=Source.DIRECTORY,
    )


# ============================================================================
# Company search
# ============================================================================

def _apollo_size_range(bucket: str) -> str:
    """Apollo expects "1,10" rather than "1-10"; open buckets get an upper bound."""
    if bucket.endswith('+'):
        return f"{bucket[:-1]},1000000"
    return bucket.replace('-', ',')


def build_company_query(criteria: SearchCriteria, per_page: int = None) -> Dict[str, Any]:
    """Translate criteria into an Apollo organization search body.

    Only non-empty criteria are sent; an omitted field means "any".
    """
    body: Dict[str, Any] = {"per_page": per_page or config.COMPANY_SEARCH_PAGE_SIZE}

    if criteria.industries:
        body["q_organization_keyword_tags"] = list(criteria.industries)
    if criteria.locations:
        body["organization_locations"] = list(criteria.locations)
    if criteria.sizes:
        body["organization_num_employees_ranges"] = [_apollo_size_range(s) for s in criteria.sizes]
    if criteria.keywords:
        body["q_organization_name"] = " ".join(criteria.keywords)

    return body


def search_companies(criteria: SearchCriteria, api_key: Optional[str] = None) -> ProviderResult[List[Company]]:
    """Search Apollo organizations matching the criteria."""
    key = _resolve_key(api_key)
    if not key:
        logger.warning("[Apollo] APOLLO_API_KEY not set")
        return ProviderResult.unconfigured([], "APOLLO_API_KEY not set")

    result = _post(config.APOLLO_ORG_SEARCH_URL, key, build_company_query(criteria), "company search")
    if not result.ok:
        return ProviderResult(value=[], status=result.status, detail=result.detail)

    companies = [normalize_organization(org) for org in _organizations(result.value)]
    logger.info(f"[Apollo] Company search returned {len(companies)} organizations")
    if not companies:
        return ProviderResult.empty([])
    return ProviderResult.success(companies)


# ============================================================================
# Company domain resolution
# ============================================================================

def fallback_domain(company_name: str) -> str:
    """Heuristic domain: name stripped to [a-z0-9] plus ".com". Unverified."""
    return re.sub(r'[^a-z0-9]', '', company_name.lower()) + ".com"


def lookup_company(name: str, api_key: str) -> Optional[CompanyInfo]:
    """Look up one name variant; CompanyInfo only if Apollo returns a domain."""
    result = _post(
        config.APOLLO_COMPANY_LOOKUP_URL,
        api_key,
        {"q_organization_name": name, "per_page": 1},
        f'domain lookup for "{name}"',
    )
    if not result.ok:
        return None

    orgs = _organizations(result.value)
    if not orgs:
        return None
    org = orgs[0]
    domain = normalize_domain(org.get("primary_domain") or org.get("domain"))
    if not domain:
        return None

    return CompanyInfo(
        name=org.get("name") or name,
        domain=domain,
        industry=org.get("industry"),
        description=org.get("short_description"),
        domain_verified=True,
    )


def find_company_domain(
    company_name: str,
    variants: Optional[Iterable[str]] = None,
    api_key: Optional[str] = None,
) -> Optional[CompanyInfo]:
    """Resolve a company to a domain, trying each variant in order.

    Returns None only when no directory key is configured. When no variant
    yields a domain, returns the heuristic `fallback_domain` with
    `domain_verified=False`; callers must not treat that as ground truth.
    """
    key = _resolve_key(api_key)
    if not key:
        logger.warning("[Apollo] APOLLO_API_KEY not set")
        return None

    variants = list(variants) if variants else [company_name]
    logger.info(f"[Apollo] Trying company variations: {variants}")

    for name in variants:
        info = lookup_company(name, key)
        if info:
            logger.info(f'[Apollo] Found company "{info.name}" with domain "{info.domain}" using variation "{name}"')
            return info

    domain = fallback_domain(company_name)
    logger.warning(f"[Apollo] No domain found via API, using unverified fallback domain: {domain}")
    return CompanyInfo(name=company_name, domain=domain, domain_verified=False)


# ============================================================================
# People search
# ============================================================================

def build_people_query(
    limit: int,
    seniorities: Optional[List[str]] = None,
    title: Optional[str] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "per_page": limit,
        "person_seniorities": list(seniorities) if seniorities else list(config.DEFAULT_SENIORITIES),
    }
    if title and title.strip():
        body["person_titles"] = [title.strip()]
    return body


def _collect_people(
    data: Dict[str, Any],
    company_name: str,
    collected: List[Person],
    seen_ids: set,
    limit: int,
) -> int:
    """Append unseen people until the ceiling; returns how many were added."""
    added = 0
    for raw in data.get("people") or []:
        if len(collected) >= limit:
            break
        if not isinstance(raw, dict) or not raw.get("id"):
            continue
        if raw["id"] in seen_ids:
            continue
        seen_ids.add(raw["id"])
        collected.append(normalize_person(raw, company_name))
        added += 1
    return added


def search_people(
    company_name: str,
    limit: int = None,
    domain: Optional[str] = None,
    seniorities: Optional[List[str]] = None,
    title: Optional[str] = None,
    api_key: Optional[str] = None,
) -> ProviderResult[List[Person]]:
    """Find people at a company, by name first and then by domain.

    Name-only queries under-match ambiguous names and domain-only queries
    miss companies without a resolved domain, so the domain pass runs only
    when the name pass leaves room under `limit`. People are de-duplicated
    by Apollo id within this call only.
    """
    limit = limit or config.DEFAULT_PEOPLE_LIMIT
    key = _resolve_key(api_key)
    if not key:
        logger.warning("[Apollo] APOLLO_API_KEY not set")
        return ProviderResult.unconfigured([], "APOLLO_API_KEY not set")

    people: List[Person] = []
    seen_ids: set = set()
    failures = []

    logger.info(f'[Apollo] Searching by company name: "{company_name}"')
    body = build_people_query(limit, seniorities, title)
    body["q_organization_name"] = company_name
    by_name = _post(config.APOLLO_PEOPLE_SEARCH_URL, key, body, "people search by name")
    if by_name.ok:
        added = _collect_people(by_name.value, company_name, people, seen_ids, limit)
        logger.info(f"[Apollo] Name search found {added} people")
    else:
        failures.append(by_name)

    if domain and len(people) < limit:
        logger.info(f'[Apollo] Searching by domain: "{domain}"')
        body = build_people_query(limit, seniorities, title)
        body["q_organization_domains"] = domain
        by_domain = _post(config.APOLLO_PEOPLE_SEARCH_URL, key, body, "people search by domain")
        if by_domain.ok:
            added = _collect_people(by_domain.value, company_name, people, seen_ids, limit)
            logger.info(f"[Apollo] Domain search added {added} people")
        else:
            failures.append(by_domain)

    logger.info(f"[Apollo] Total unique people found: {len(people)}")
    if people:
        return ProviderResult.success(people[:limit])
    if failures:
        return ProviderResult(value=[], status=failures[0].status, detail=failures[0].detail)
    return ProviderResult.empty([])


# ============================================================================
# Contact reveal
# ============================================================================

def reveal_contact(
    first_name: Optional[str],
    last_name: Optional[str],
    company_name: Optional[str],
    domain: Optional[str] = None,
    api_key: Optional[str] = None,
) -> ProviderResult[ContactDetails]:
    """Reveal one person's email and phone via people/match (1 credit).

    Without a first name, last name and company no call is made.
    """
    if not first_name or not last_name or not company_name:
        return ProviderResult.empty(ContactDetails(), "first name, last name and company are required")

    key = _resolve_key(api_key)
    if not key:
        logger.warning("[Apollo] APOLLO_API_KEY not set")
        return ProviderResult.unconfigured(ContactDetails(), "APOLLO_API_KEY not set")

    payload = {
        "first_name": first_name,
        "last_name": last_name,
        "organization_name": company_name,
        "reveal_personal_emails": True,
    }
    if domain:
        payload["domain"] = domain

    result = _post(config.APOLLO_MATCH_URL, key, payload, f"match for {first_name} {last_name}")
    if not result.ok:
        return ProviderResult(value=ContactDetails(), status=result.status, detail=result.detail)

    matched = result.value.get("person")
    if matched is None:
        logger.debug(f"[Apollo] No match for {first_name} {last_name}")
        return ProviderResult.empty(ContactDetails())
    if not isinstance(matched, dict):
        logger.warning(f"[Apollo] Unexpected match response for {first_name} {last_name}")
        return ProviderResult.unparsable(ContactDetails(), "person is not an object")
    email = clean_email(matched.get("email") or matched.get("email_display"))
    phone = matched.get("phone_number") or matched.get("sanitized_phone")
    if not email:
        logger.debug(f"[Apollo] No unlocked email for {first_name} {last_name}")
        return ProviderResult.empty(ContactDetails(phone=phone) if phone else ContactDetails())

    logger.info(f"[Apollo] Enriched {first_name} {last_name}: {email}")
    return ProviderResult.success(ContactDetails(email=email, phone=phone))


# ============================================================================
# Usage / key health
# ============================================================================

RATE_LIMIT_HEADERS = {
    "minute_requests_left": "x-minute-requests-left",
    "minute_usage": "x-minute-usage",
    "hourly_requests_left": "x-hourly-requests-left",
    "hourly_usage": "x-hourly-usage",
    "daily_requests_left": "x-daily-requests-left",
    "daily_usage": "x-daily-usage",
    "rate_limit_minute": "x-rate-limit-minute",
    "rate_limit_hourly": "x-rate-limit-hourly",
    "rate_limit_daily": "x-rate-limit-daily",
}


def check_api_usage(api_key: Optional[str] = None) -> Dict[str, Any]:
    """Validate the Apollo key and report its rate-limit headers.

    Returns:
        dict with 'has_key', 'is_valid', 'rate_limits' and optional 'error'
    """
    key = _resolve_key(api_key)
    if not key:
        return {"has_key": False, "is_valid": False, "rate_limits": {},
                "error": "No Apollo API key configured"}

    try:
        response = requests.get(config.APOLLO_HEALTH_URL, headers=_headers(key),
                                timeout=config.REQUEST_TIMEOUT)
    except requests.exceptions.RequestException as e:
        logger.error(f"[Apollo] Usage check error: {e}")
        return {"has_key": True, "is_valid": False, "rate_limits": {},
                "error": "Failed to check Apollo usage"}

    rate_limits = {name: response.headers.get(header) for name, header in RATE_LIMIT_HEADERS.items()}

    if not response.ok:
        return {"has_key": True, "is_valid": False, "rate_limits": rate_limits,
                "error": "Apollo API key is invalid or expired"}

    try:
        data = response.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}
    return {
        "has_key": True,
        "is_valid": data.get("is_logged_in") is True,
        "rate_limits": rate_limits,
    }
