"""
Update Reservation Tool

Standard MCP Tool: updateReservation
- Locates the reservation by its current name and mobile number
- Changes only the supplied fields, including renaming the locating pair
- Reports how many fields the caller asked to change
"""

from typing import Any, Dict

from reservations.errors import EmptyResult
from reservations.schemas import UpdateReservationInput, parse_input
from .base import ReservationToolHandler, record_field, success_response


class UpdateReservationTool(ReservationToolHandler):
    """Updates an existing reservation matched by name and mobile number."""

    tool_name = "updateReservation"
    verb = "update"
    description = (
        "Update a reservation by matching the current guest name and mobile number, "
        "then setting new details such as time, party size, or notes."
    )
    input_model = UpdateReservationInput
    examples = [
        "updateReservation(mobile='+1234567890', name='Ada Lovelace', nb_people=6)",
        "updateReservation(mobile='+1234567890', name='Ada Lovelace', "
        "new_mobile='+1987654321', time='20:00')",
    ]

    async def run(self, arguments: Dict[str, Any], guest: str) -> Dict[str, Any]:
        payload = parse_input(UpdateReservationInput, arguments)
        result = (await self.service.update(payload)).raise_for_error()

        rows = result.rows()
        if not rows:
            raise EmptyResult(
                f"No reservation for {guest} was updated. It may not exist.", details=result.data
            )

        updated = rows[0]
        name = record_field(updated, "name") or payload.name
        mobile = record_field(updated, "mobile") or payload.mobile
        changed = len(payload.changed_fields())

        return success_response(
            self.tool_name,
            f"Updated reservation for {name} ({mobile}). "
            f"{changed} field{'' if changed == 1 else 's'} changed.",
            updated,
        )
