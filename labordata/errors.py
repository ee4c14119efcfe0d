"""
labordata/errors.py

Failure values shared by the fetcher and the composite assemblers.

Once a request has passed through BlsFetcher, failures travel as values:
every public call returns a Result that is either successful (data plus
optional warnings) or failed (a FetchError). Callers branch on
FetchError.code, never on exception types.

Two exceptions remain:
- TransportError: raised by transports, converted to NETWORK_ERROR
- BLSError: raised only by Result.unwrap() for callers (like the CLI) that
  prefer exception semantics
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorCode(str, Enum):
    INVALID_SERIES_ID = "INVALID_SERIES_ID"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    RATE_LIMITED = "RATE_LIMITED"
    API_ERROR = "API_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    NO_DATA_AVAILABLE = "NO_DATA_AVAILABLE"
    PARSE_ERROR = "PARSE_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class BLSError(RuntimeError):
    """Raised when a failed Result is unwrapped."""

    def __init__(self, error: "FetchError"):
        super().__init__(f"{error.code.value}: {error.message}")
        self.error = error


class TransportError(Exception):
    """Raised by a transport when the request never produced an HTTP response."""
    pass


@dataclass(frozen=True)
class FetchError:
    code: ErrorCode
    message: str
    api_messages: list[str] = field(default_factory=list)
    failed_series: list[str] = field(default_factory=list)
    status: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "apiMessages": list(self.api_messages),
            "failedSeries": list(self.failed_series),
            "status": self.status,
        }


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Discriminated success/failure value.

    Build with Result.ok(...) or Result.fail(...) rather than the constructor.
    """

    success: bool
    data: Optional[T] = None
    error: Optional[FetchError] = None
    warnings: list[str] = field(default_factory=list)

    @classmethod
    def ok(cls, data: T, warnings: Optional[list[str]] = None) -> "Result[T]":
        return cls(success=True, data=data, warnings=list(warnings or []))

    @classmethod
    def fail(
        cls,
        code: ErrorCode,
        message: str,
        *,
        api_messages: Optional[list[str]] = None,
        failed_series: Optional[list[str]] = None,
        status: Optional[int] = None,
    ) -> "Result[Any]":
        error = FetchError(
            code=code,
            message=message,
            api_messages=list(api_messages or []),
            failed_series=list(failed_series or []),
            status=status,
        )
        return cls(success=False, error=error)

    @classmethod
    def from_error(cls, error: FetchError) -> "Result[Any]":
        return cls(success=False, error=error)

    def unwrap(self) -> T:
        if not self.success:
            raise BLSError(self.error)
        return self.data
