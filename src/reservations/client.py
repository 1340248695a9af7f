"""
HTTP client for the reservations REST backend.

Executes request descriptors with httpx. Exactly one outbound call per
request; no retries.
- Async I/O for all operations
- Structured logging with elapsed_ms
- Never log secrets or guest details
"""

import time
from typing import Optional

import httpx

from common.logging import get_logger
from .requests import BackendRequest, query_predicates
from .results import OperationResult, normalize_response, transport_failure
from .settings import BackendSettings

logger = get_logger(__name__)


class ReservationsClient:
    """Sends translated requests to the backend and normalizes the responses."""

    def __init__(
        self,
        settings: BackendSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            settings: Backend connection settings
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.settings = settings

        client_kwargs = {}
        if settings.request_timeout is not None:
            client_kwargs["timeout"] = settings.request_timeout
        if transport is not None:
            client_kwargs["transport"] = transport

        self._http = httpx.AsyncClient(**client_kwargs)

    async def send(self, request: BackendRequest) -> OperationResult:
        """
        Execute a request and normalize the outcome.

        Args:
            request: Request descriptor from the translator

        Returns:
            OperationResult; transport failures are reported, never raised
        """
        filters = [column for column, _ in query_predicates(request.url)]
        start_time = time.perf_counter()

        try:
            response = await self._http.request(
                request.method,
                request.url,
                headers=request.headers,
                content=request.content(),
            )
            text = response.text
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(
                event="backend_request_failed",
                method=request.method,
                filters=filters,
                error=str(e),
                error_type=type(e).__name__,
            )
            return transport_failure(e)

        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
        result = normalize_response(
            response.status_code,
            text,
            reason_phrase=response.reason_phrase,
            duration_ms=duration_ms,
        )

        logger.info(
            event="backend_request",
            method=request.method,
            filters=filters,
            status_code=response.status_code,
            success=result.success,
            elapsed_ms=duration_ms,
        )

        return result

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._http.aclose()
