"""
MCP Tools Package

Reservation tools exposed by the MCP server.
"""

from .create_reservation_tool import CreateReservationTool
from .get_reservation_tool import GetReservationTool
from .update_reservation_tool import UpdateReservationTool
from .delete_reservation_tool import DeleteReservationTool

__all__ = [
    "CreateReservationTool",
    "GetReservationTool",
    "UpdateReservationTool",
    "DeleteReservationTool",
]
