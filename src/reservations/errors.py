"""
Error taxonomy for the reservation translation layer.

Every failure a tool call can hit maps onto one ErrorKind. Tool handlers
never let these escape; they are turned into error envelopes.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional


class ErrorKind(str, Enum):
    """Failure categories reported in tool envelopes."""

    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    TRANSPORT = "transport"
    BACKEND_REJECTION = "backend_rejection"
    EMPTY_RESULT = "empty_result"
    UNEXPECTED = "unexpected"


class ReservationError(Exception):
    """Base class for reservation errors."""

    kind: ErrorKind = ErrorKind.UNEXPECTED

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ConfigurationError(ReservationError):
    """Required backend connection settings are missing."""

    kind = ErrorKind.CONFIGURATION


@dataclass(frozen=True)
class ValidationIssue:
    """A single violated input constraint."""

    field: Optional[str]
    message: str

    def __str__(self) -> str:
        if self.field:
            return f"{self.field}: {self.message}"
        return self.message


class ValidationError(ReservationError):
    """Input failed schema or cross-field rules. Carries every issue found."""

    kind = ErrorKind.VALIDATION

    def __init__(self, issues: List[ValidationIssue]):
        self.issues = list(issues)
        super().__init__(
            "; ".join(str(issue) for issue in self.issues) or "Invalid input",
            details={"issues": [{"field": i.field, "message": i.message} for i in self.issues]},
        )


class TransportError(ReservationError):
    """Network, DNS or timeout failure talking to the backend."""

    kind = ErrorKind.TRANSPORT


class BackendRejection(ReservationError):
    """The backend answered with a non-success HTTP status."""

    kind = ErrorKind.BACKEND_REJECTION

    def __init__(self, message: str, status_code: Optional[int] = None, details: Any = None):
        super().__init__(message, details=details)
        self.status_code = status_code


class EmptyResult(ReservationError):
    """The call succeeded but no reservation matched the locating pair."""

    kind = ErrorKind.EMPTY_RESULT
