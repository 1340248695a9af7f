"""
Wires the reservation tools into a tool registry under their fixed names.
"""

from typing import List

from reservations.service import ReservationService
from .tool_registry import Tool, ToolRegistry
from .tools import (
    CreateReservationTool,
    DeleteReservationTool,
    GetReservationTool,
    UpdateReservationTool,
)

RESERVATION_TOOLS = (
    CreateReservationTool,
    GetReservationTool,
    UpdateReservationTool,
    DeleteReservationTool,
)


def register_reservation_tools(registry: ToolRegistry, service: ReservationService) -> List[Tool]:
    """Register createReservation, getReservation, updateReservation and deleteReservation."""
    return [registry.register_tool_handler(tool_class(service)) for tool_class in RESERVATION_TOOLS]
