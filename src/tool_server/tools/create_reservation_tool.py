"""
Create Reservation Tool

Standard MCP Tool: createReservation
- Inserts one reservation row and returns it as created by the backend
"""

from typing import Any, Dict

from reservations.errors import EmptyResult
from reservations.schemas import CreateReservationInput, parse_input
from .base import ReservationToolHandler, record_field, success_response


class CreateReservationTool(ReservationToolHandler):
    """Creates a reservation from the guest's contact and booking details."""

    tool_name = "createReservation"
    verb = "create"
    description = (
        "Create a reservation using the guest's mobile number, name, number of people, "
        "date, time, and optional details."
    )
    input_model = CreateReservationInput
    examples = [
        "createReservation(mobile='+1234567890', name='Ada Lovelace', nb_people=4, "
        "date='2025-05-01', time='19:00')",
        "createReservation(mobile='+1234567890', name='Ada Lovelace', nb_people=2, "
        "date='2025-05-01', time='20:30', email='ada@example.com', notes='Window seat')",
    ]

    async def run(self, arguments: Dict[str, Any], guest: str) -> Dict[str, Any]:
        payload = parse_input(CreateReservationInput, arguments)
        result = (await self.service.create(payload)).raise_for_error()

        rows = result.rows()
        created = rows[0] if rows else None
        if not isinstance(created, dict):
            raise EmptyResult(
                f"The backend returned no data after creating the reservation for {guest}."
            )

        name = record_field(created, "name") or payload.name
        date = record_field(created, "date") or "unknown date"
        time = record_field(created, "time") or "unknown time"

        return success_response(
            self.tool_name, f"Created reservation for {name} on {date} at {time}.", created
        )
