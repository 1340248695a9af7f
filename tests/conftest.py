"""
Shared fixtures: a scripted reservations backend behind httpx.MockTransport.
"""

import json
from typing import Any, List, Optional

import httpx
import pytest

from reservations.client import ReservationsClient
from reservations.service import ReservationService
from reservations.settings import BackendSettings

BACKEND_URL = "https://example.supabase.co"
API_KEY = "service-role-key"

ADA = {
    "mobile": "+1234567890",
    "name": "Ada Lovelace",
    "nb_people": 4,
    "date": "2025-05-01",
    "time": "19:00",
}


class StubBackend:
    """Answers each request with the next queued response and records what it got."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._responses: List[Any] = []

    def reply(self, status_code: int = 200, body: Optional[Any] = None, text: str = "") -> None:
        if body is not None:
            text = json.dumps(body)
        self._responses.append(httpx.Response(status_code, text=text))

    def fail(self, error: Exception) -> None:
        self._responses.append(error)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def body(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            return httpx.Response(500, text="no scripted response")

        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def settings() -> BackendSettings:
    return BackendSettings(url=BACKEND_URL, api_key=API_KEY)


@pytest.fixture
def backend() -> StubBackend:
    return StubBackend()


@pytest.fixture
def service(settings: BackendSettings, backend: StubBackend) -> ReservationService:
    return ReservationService(ReservationsClient(settings, transport=backend.transport()))
