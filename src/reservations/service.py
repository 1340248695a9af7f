"""
Reservation operations: validation, translation and one backend round trip.
"""

from typing import Any, Callable, Type

from .client import ReservationsClient
from .requests import (
    BackendRequest,
    build_create_request,
    build_delete_request,
    build_lookup_request,
    build_update_request,
)
from .results import OperationResult
from .schemas import (
    CreateReservationInput,
    DeleteReservationInput,
    InputModel,
    LookupReservationInput,
    UpdateReservationInput,
    parse_input,
)
from .settings import BackendSettings


class ReservationService:
    """
    Stateless facade over the translator and client.

    Each method accepts raw arguments or an already validated input model.
    It validates raw input (raising ValidationError before any network
    call), builds the request (raising ConfigurationError when
    settings are incomplete) and returns the normalized backend result.
    """

    def __init__(self, client: ReservationsClient):
        self.client = client

    @property
    def settings(self) -> BackendSettings:
        return self.client.settings

    async def _run(
        self,
        model: Type[InputModel],
        build: Callable[[BackendSettings, Any], BackendRequest],
        raw: Any,
    ) -> OperationResult:
        payload = raw if isinstance(raw, model) else parse_input(model, raw)
        request = build(self.settings, payload)
        return await self.client.send(request)

    async def create(self, raw: Any) -> OperationResult:
        return await self._run(CreateReservationInput, build_create_request, raw)

    async def update(self, raw: Any) -> OperationResult:
        return await self._run(UpdateReservationInput, build_update_request, raw)

    async def delete(self, raw: Any) -> OperationResult:
        return await self._run(DeleteReservationInput, build_delete_request, raw)

    async def lookup(self, raw: Any) -> OperationResult:
        return await self._run(LookupReservationInput, build_lookup_request, raw)

    async def aclose(self) -> None:
        await self.client.aclose()
