"""
Result normalizer for backend responses.

Turns a raw HTTP response (or a transport failure) into a uniform
OperationResult. Never raises while normalizing.
"""

import json
from dataclasses import dataclass
from typing import Any, List, Optional

from .errors import BackendRejection, ErrorKind, TransportError


@dataclass
class OperationResult:
    """Uniform success/failure result of one backend round trip."""

    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    duration_ms: Optional[float] = None
    status_code: Optional[int] = None
    error_kind: Optional[ErrorKind] = None

    def rows(self) -> List[Any]:
        """Returned rows as a list; a single object counts as one row."""
        if self.data is None:
            return []
        if isinstance(self.data, list):
            return self.data
        return [self.data]

    def raise_for_error(self) -> "OperationResult":
        """
        Raise the matching exception if this result is a failure.

        Returns:
            self, when successful

        Raises:
            TransportError: For network level failures
            BackendRejection: For non-success HTTP statuses
        """
        if self.success:
            return self

        message = self.error or "Unknown error"
        if self.error_kind == ErrorKind.TRANSPORT:
            raise TransportError(message)

        raise BackendRejection(message, status_code=self.status_code, details=self.data)


def parse_body(text: str) -> Optional[Any]:
    """Parse a response body as JSON, falling back to the raw text."""
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text


def normalize_response(
    status_code: int,
    text: str,
    reason_phrase: str = "",
    duration_ms: Optional[float] = None,
) -> OperationResult:
    """
    Interpret a completed HTTP round trip.

    Args:
        status_code: HTTP status
        text: Response body text
        reason_phrase: Status reason phrase, used when the body has no message
        duration_ms: Dispatch-to-body time

    Returns:
        Normalized result
    """
    data = parse_body(text)

    if 200 <= status_code < 300:
        return OperationResult(
            success=True, data=data, duration_ms=duration_ms, status_code=status_code
        )

    error = None
    if isinstance(data, dict) and data.get("message") is not None:
        error = str(data["message"])

    return OperationResult(
        success=False,
        error=error or reason_phrase or f"HTTP {status_code}",
        # Keep structured detail (e.g. constraint violations) for auditing
        data=data if isinstance(data, dict) else None,
        duration_ms=duration_ms,
        status_code=status_code,
        error_kind=ErrorKind.BACKEND_REJECTION,
    )


def transport_failure(error: BaseException) -> OperationResult:
    """Result for a round trip that never completed. No duration is recorded."""
    return OperationResult(
        success=False,
        error=str(error) or type(error).__name__,
        error_kind=ErrorKind.TRANSPORT,
    )
