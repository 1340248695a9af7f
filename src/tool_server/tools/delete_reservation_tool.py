"""
Delete Reservation Tool

Standard MCP Tool: deleteReservation
- Removes the reservation matching the guest's name and mobile number
"""

from typing import Any, Dict

from reservations.errors import EmptyResult
from reservations.schemas import DeleteReservationInput, parse_input
from .base import ReservationToolHandler, record_field, success_response


class DeleteReservationTool(ReservationToolHandler):
    """Deletes a reservation matched by name and mobile number."""

    tool_name = "deleteReservation"
    verb = "delete"
    description = "Delete a reservation by providing the guest's name and mobile number."
    input_model = DeleteReservationInput
    examples = ["deleteReservation(mobile='+1234567890', name='Ada Lovelace')"]

    async def run(self, arguments: Dict[str, Any], guest: str) -> Dict[str, Any]:
        payload = parse_input(DeleteReservationInput, arguments)
        result = (await self.service.delete(payload)).raise_for_error()

        rows = result.rows()
        if not rows:
            raise EmptyResult(
                f"No reservation for {guest} was deleted. It may not exist.", details=result.data
            )

        deleted = rows[0]
        name = record_field(deleted, "name") or payload.name
        mobile = record_field(deleted, "mobile") or payload.mobile

        return success_response(self.tool_name, f"Deleted reservation for {name} ({mobile}).", deleted)
