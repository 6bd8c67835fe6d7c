"""Errors that cross the pipeline boundary.

Provider and parse failures never surface here; they are converted to
fallback values where they happen. Only caller mistakes and unresolvable
companies are raised.
"""

from typing import List, Optional


class SourcerError(Exception):
    """Base class for Venture Sourcer errors."""


class InvalidRequestError(SourcerError):
    """Caller-supplied input is missing required fields."""

    def __init__(self, message: str, missing_fields: Optional[List[str]] = None):
        super().__init__(message)
        self.missing_fields = missing_fields or []


class CompanyNotFoundError(SourcerError):
    """A company could not be resolved after trying every name variant."""

    def __init__(self, company_name: str, message: Optional[str] = None):
        self.company_name = company_name
        self.message = message or (
            f'Company "{company_name}" was not found. Please check the spelling '
            f'or try a different company name.'
        )
        super().__init__(self.message)


class EmailDeliveryError(SourcerError):
    """The outbound transport refused or failed to deliver a message."""
