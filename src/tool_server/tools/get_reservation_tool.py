"""
Get Reservation Tool

Standard MCP Tool: getReservation
- Looks up reservations by guest name and mobile number
- Optional date and time narrow the match
- Returns one record, or every match with a count when several match
"""

from typing import Any, Dict

from reservations.errors import EmptyResult
from reservations.schemas import LookupReservationInput, parse_input
from .base import ReservationToolHandler, record_field, success_response


class GetReservationTool(ReservationToolHandler):
    """Finds reservations by name and mobile number."""

    tool_name = "getReservation"
    verb = "look up"
    description = (
        "Look up a reservation by the guest's name and mobile number, optionally "
        "narrowed to a specific date and time."
    )
    input_model = LookupReservationInput
    examples = [
        "getReservation(mobile='+1234567890', name='Ada Lovelace')",
        "getReservation(mobile='+1234567890', name='Ada Lovelace', date='2025-05-01', time='19:00')",
    ]

    async def run(self, arguments: Dict[str, Any], guest: str) -> Dict[str, Any]:
        payload = parse_input(LookupReservationInput, arguments)
        result = (await self.service.lookup(payload)).raise_for_error()

        qualifier = ""
        if payload.date is not None:
            qualifier += f" on {payload.date}"
        if payload.time is not None:
            qualifier += f" at {payload.time}"

        rows = result.rows()
        if not rows:
            raise EmptyResult(f"No reservation for {guest}{qualifier} was found.")

        if len(rows) > 1:
            return success_response(
                self.tool_name, f"Found {len(rows)} reservations for {guest}{qualifier}.", rows
            )

        found = rows[0]
        name = record_field(found, "name") or payload.name
        mobile = record_field(found, "mobile") or payload.mobile
        date = record_field(found, "date") or "unknown date"
        time = record_field(found, "time") or "unknown time"

        return success_response(
            self.tool_name, f"Found reservation for {name} ({mobile}) on {date} at {time}.", found
        )
