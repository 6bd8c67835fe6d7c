"""Data models for the Venture Sourcer pipeline.

Pydantic models for the canonical records every provider adapter
normalizes into: companies, people, search criteria and enrichment
results. Provider-specific field names never leave the adapters.
"""

import re
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class Source(str, Enum):
    """Which provider produced a record."""
    DIRECTORY = "directory"
    RESEARCH = "research"


class InterestType(str, Enum):
    """Generated paragraph variants."""
    COMPANY = "companyInterest"
    PERSON = "personInterest"
    COMBINED = "combinedInterest"


def normalize_domain(domain: Optional[str]) -> str:
    """Lowercase a domain and strip a leading "www."; '' when absent."""
    if not domain:
        return ""
    domain = domain.strip().lower()
    if domain.startswith('www.'):
        domain = domain[4:]
    return domain


def normalize_name(name: Optional[str]) -> str:
    """Lowercase a name and drop every non-alphanumeric character."""
    if not name:
        return ""
    return re.sub(r'[^a-z0-9]', '', name.lower())


class SearchCriteria(BaseModel):
    """Structured search criteria produced by the query interpreter."""
    industries: List[str] = Field(default_factory=list)
    locations: List[str] = Field(default_factory=list)
    sizes: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    funding_status: Optional[str] = None

    model_config = {"frozen": True}

    def is_empty(self) -> bool:
        return not (self.industries or self.locations or self.sizes
                    or self.keywords or self.funding_status)


class Company(BaseModel):
    """Represents a company returned by a search."""
    id: str
    name: str
    domain: Optional[str] = None
    website: Optional[str] = None
    industry: Optional[str] = None
    location: Optional[str] = None
    employee_count: Optional[int] = None
    funding_status: Optional[str] = None
    founded_year: Optional[int] = None
    description: Optional[str] = None
    social_url: Optional[str] = None
    source: Source

    @property
    def identity_key(self) -> str:
        """Normalized domain, else normalized name.

        Two companies denote the same real entity iff their keys match.
        """
        return normalize_domain(self.domain) or normalize_name(self.name)


class CompanyInfo(BaseModel):
    """Resolved company used to scope a people lookup."""
    name: str
    domain: Optional[str] = None
    industry: Optional[str] = None
    description: Optional[str] = None
    # False when the domain is the name + ".com" heuristic, not a directory match
    domain_verified: bool = True


class Person(BaseModel):
    """Represents a person at a company.

    Enrichment fields start empty and are filled by an unlock.
    """
    id: str
    name: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    title: Optional[str] = None
    seniority: Optional[str] = None
    social_url: Optional[str] = None
    company_name: str
    source: Source = Source.DIRECTORY

    research_summary: Optional[str] = None
    company_interest_paragraph: Optional[str] = None
    person_interest_paragraph: Optional[str] = None
    combined_interest_paragraph: Optional[str] = None
    is_unlocked: bool = False

    def paragraph(self, interest_type: InterestType) -> Optional[str]:
        """Return the stored paragraph for an interest type, if any."""
        return {
            InterestType.COMPANY: self.company_interest_paragraph,
            InterestType.PERSON: self.person_interest_paragraph,
            InterestType.COMBINED: self.combined_interest_paragraph,
        }[interest_type]

    def set_paragraph(self, interest_type: InterestType, text: str) -> None:
        if interest_type == InterestType.COMPANY:
            self.company_interest_paragraph = text
        elif interest_type == InterestType.PERSON:
            self.person_interest_paragraph = text
        else:
            self.combined_interest_paragraph = text


class ContactDetails(BaseModel):
    """Revealed contact channels; both None when nothing was revealed."""
    email: Optional[str] = None
    phone: Optional[str] = None


_PARAGRAPH_FIELDS = {
    InterestType.COMPANY: "company_interest",
    InterestType.PERSON: "person_interest",
    InterestType.COMBINED: "combined_interest",
}


class InterestParagraphs(BaseModel):
    """Paragraphs produced by one generation call."""
    company_interest: Optional[str] = None
    person_interest: Optional[str] = None
    combined_interest: Optional[str] = None
    # True when any paragraph came from the deterministic fallback
    used_fallback: bool = False

    def for_type(self, interest_type: InterestType) -> Optional[str]:
        return getattr(self, _PARAGRAPH_FIELDS[interest_type])

    def set_for_type(self, interest_type: InterestType, text: str) -> None:
        setattr(self, _PARAGRAPH_FIELDS[interest_type], text)


class UnlockResult(BaseModel):
    """Outcome of unlocking one person."""
    person_id: str
    success: bool
    email: Optional[str] = None
    phone: Optional[str] = None
    research: str = ""
    paragraphs: InterestParagraphs = Field(default_factory=InterestParagraphs)
    error: Optional[str] = None


class BatchUnlockResult(BaseModel):
    """Outcome of unlocking several people concurrently."""
    results: List[UnlockResult] = Field(default_factory=list)

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results if r.success)


class CompanySearchResult(BaseModel):
    """Merged company search results with provenance counts."""
    companies: List[Company] = Field(default_factory=list)
    meta: Dict[str, Any] = Field(default_factory=dict)


class PeopleLookupResult(BaseModel):
    """People found at a resolved company."""
    people: List[Person] = Field(default_factory=list)
    company: Optional[CompanyInfo] = None
    meta: Dict[str, Any] = Field(default_factory=dict)


class PeopleFilters(BaseModel):
    """Optional narrowing for a people search."""
    seniorities: List[str] = Field(default_factory=list)
    title: Optional[str] = None
