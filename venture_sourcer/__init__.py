"""Venture Sourcer - lead discovery, enrichment and personalized outreach.

Components:
- query_interpreter.py: prompt -> SearchCriteria
- name_variants.py: alternate company names for directory lookups
- apollo_client.py: directory search, domain resolution, contact reveal
- research.py: web research (companies and person summaries)
- merge.py: cross-provider de-duplication
- unlock.py: reveal + research + paragraph generation per person
- template_engine.py: placeholder mapping and substitution
- pipeline.py: the operations the application calls
"""

from .errors import CompanyNotFoundError, InvalidRequestError, SourcerError
from .pipeline import (
    find_company_domain,
    interpret_query,
    lookup_people,
    resolve_template,
    search_companies,
    search_people,
    unlock_people,
    unlock_person,
)

__all__ = [
    'interpret_query',
    'search_companies',
    'find_company_domain',
    'search_people',
    'lookup_people',
    'unlock_person',
    'unlock_people',
    'resolve_template',
    'SourcerError',
    'InvalidRequestError',
    'CompanyNotFoundError',
]
