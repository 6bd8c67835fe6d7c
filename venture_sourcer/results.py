"""Typed provider results.

Adapters return a ProviderResult instead of a bare empty value so callers
can tell "no data" apart from "call failed", even though both degrade to
the same empty output.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar('T')


class ResultStatus(str, Enum):
    OK = "ok"
    EMPTY = "empty"
    UNCONFIGURED = "unconfigured"
    CALL_FAILED = "call_failed"
    PARSE_FAILED = "parse_failed"


@dataclass
class ProviderResult(Generic[T]):
    """A value plus the reason it looks the way it does."""
    value: T
    status: ResultStatus = ResultStatus.OK
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == ResultStatus.OK

    @classmethod
    def success(cls, value: T) -> "ProviderResult[T]":
        return cls(value=value, status=ResultStatus.OK)

    @classmethod
    def empty(cls, value: T, detail: Optional[str] = None) -> "ProviderResult[T]":
        return cls(value=value, status=ResultStatus.EMPTY, detail=detail)

    @classmethod
    def unconfigured(cls, value: T, detail: Optional[str] = None) -> "ProviderResult[T]":
        return cls(value=value, status=ResultStatus.UNCONFIGURED, detail=detail)

    @classmethod
    def failed(cls, value: T, detail: Optional[str] = None) -> "ProviderResult[T]":
        return cls(value=value, status=ResultStatus.CALL_FAILED, detail=detail)

    @classmethod
    def unparsable(cls, value: T, detail: Optional[str] = None) -> "ProviderResult[T]":
        return cls(value=value, status=ResultStatus.PARSE_FAILED, detail=detail)
