"""
Shared pipeline for the reservation tools.

Every reservation tool is a single-shot pipeline: validate, send one
backend request, interpret the rows. ReservationToolHandler runs that
pipeline inside the call context's span and turns every failure into an
error envelope, so nothing escapes the handler boundary.
"""

from abc import abstractmethod
from typing import Any, Dict, List, Optional, Type

from common.logging import get_logger
from reservations.errors import EmptyResult, ErrorKind, ReservationError
from reservations.schemas import ReservationInput, input_json_schema
from reservations.service import ReservationService
from ..context import ToolCallContext
from ..tool_registry import Tool, ToolHandler

logger = get_logger(__name__)

UNKNOWN_GUEST = "unknown guest"
UNKNOWN_MOBILE = "unknown mobile"


def success_response(tool: str, message: str, data: Optional[Any] = None) -> Dict[str, Any]:
    """Envelope for a successful tool call."""
    response = {"status": "success", "message": message, "tool": tool}
    if data is not None:
        response["data"] = data
    return response


def error_response(
    tool: str,
    message: str,
    details: Optional[Any] = None,
    kind: Optional[ErrorKind] = None,
) -> Dict[str, Any]:
    """Envelope for a failed tool call."""
    response = {"status": "error", "message": message, "tool": tool}
    if details is not None:
        response["details"] = details
    if kind is not None:
        response["error_kind"] = kind.value
    return response


def _text_argument(arguments: Any, key: str) -> Optional[str]:
    if isinstance(arguments, dict):
        value = arguments.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def describe_guest(arguments: Any) -> str:
    """'<name> (<mobile>)' from raw input, with placeholders for missing parts."""
    name = _text_argument(arguments, "name") or UNKNOWN_GUEST
    mobile = _text_argument(arguments, "mobile") or UNKNOWN_MOBILE
    return f"{name} ({mobile})"


def record_field(record: Any, key: str) -> Optional[Any]:
    """Column value from a returned row, tolerating non-object rows."""
    if isinstance(record, dict):
        return record.get(key)
    return None


class ReservationToolHandler(ToolHandler):
    """Base class for the four reservation tools."""

    tool_name: str = ""
    description: str = ""
    verb: str = ""
    input_model: Type[ReservationInput] = ReservationInput
    examples: List[str] = []

    def __init__(self, service: ReservationService):
        self.service = service

    def get_tool_definition(self) -> Tool:
        return Tool(
            name=self.tool_name,
            description=self.description,
            input_schema=input_json_schema(self.input_model),
            examples=self.examples,
            category="reservations",
        )

    @abstractmethod
    async def run(self, arguments: Dict[str, Any], guest: str) -> Dict[str, Any]:
        """
        Run the tool pipeline.

        Args:
            arguments: Raw tool arguments
            guest: Human-readable guest description for messages

        Returns:
            Success envelope

        Raises:
            ReservationError: For validation, configuration, transport,
                backend or empty-result failures
        """
        pass

    async def execute(self, arguments: Dict[str, Any], context: ToolCallContext) -> Dict[str, Any]:
        guest = describe_guest(arguments)

        async with context.span(self.tool_name) as span:
            try:
                response = await self.run(arguments, guest)
            except EmptyResult as e:
                response = error_response(self.tool_name, e.message, e.details, e.kind)
            except ReservationError as e:
                response = error_response(
                    self.tool_name,
                    f"Failed to {self.verb} the reservation for {guest}: {e.message}",
                    e.details,
                    e.kind,
                )
            except Exception as e:
                logger.exception(
                    event="reservation_tool_unexpected_error",
                    tool_name=self.tool_name,
                    error_type=type(e).__name__,
                )
                response = error_response(
                    self.tool_name,
                    f"Unexpected error while trying to {self.verb} the reservation for {guest}: {e}",
                    kind=ErrorKind.UNEXPECTED,
                )

            if span.trace_id and response["status"] == "error":
                response["trace_id"] = span.trace_id

        return response
