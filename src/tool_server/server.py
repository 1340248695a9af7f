"""
MCP 2025 Compliant Server Implementation

This module implements the MCP server for the reservation tools:
- JSON-RPC 2.0 protocol wrapper (single and batch messages)
- Initialize/capabilities handshake
- Cursor-based pagination for tools/list
- Tool results as markdown text plus structured content

Transports (HTTP gateway, stdio) hand decoded JSON to handle_payload()
together with the call context for the caller.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from common.logging import get_logger
from reservations.service import ReservationService
from .context import NullCallContext, ToolCallContext
from .jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    MCP_TOOL_EXECUTION_ERROR,
    MCP_TOOL_NOT_FOUND,
    JSONRPCErrorResponse,
    JSONRPCHandler,
    JSONRPCNotification,
    JSONRPCRequest,
    JSONRPCResponse,
    MCPCapabilities,
    MCPClientCapabilities,
    MCPImplementation,
    MCPInitializeParams,
    MCPInitializeResult,
    MCPMethods,
    MCPToolsCallParams,
    MCPToolsCallResult,
    MCPToolsListParams,
    MCPToolsListResult,
)
from .registration import register_reservation_tools
from .tool_registry import ToolExecution, ToolRegistry

logger = get_logger(__name__)

# MCP Protocol version
MCP_PROTOCOL_VERSION = "2025-06-18"

SERVER_NAME = "Supabase Reservations MCP Server"
SERVER_VERSION = "1.0.0"

# Pagination constants
DEFAULT_PAGE_SIZE = 50

SERVER_INSTRUCTIONS = (
    "This MCP server manages restaurant reservations. Reservations are identified by the "
    "guest's name together with their mobile number. Use createReservation to book, "
    "getReservation to look a booking up, updateReservation to change it and "
    "deleteReservation to cancel it."
)

JSONRPCReply = Union[JSONRPCResponse, JSONRPCErrorResponse]


def format_success_text(message: str, data: Optional[Any] = None) -> str:
    """Markdown text for a successful tool call."""
    text = f"**Success**\n\n{message}"
    if data is not None:
        text += f"\n\n**Result:**\n```json\n{json.dumps(data, indent=2, default=str)}\n```"
    return text


def format_error_text(
    message: str, details: Optional[Any] = None, trace_id: Optional[str] = None
) -> str:
    """Markdown text for a failed tool call."""
    text = f"**Error**\n\n{message}"
    if trace_id:
        text += f"\n\n**Trace ID:** {trace_id}"
    if details is not None:
        text += f"\n\n**Details:**\n```json\n{json.dumps(details, indent=2, default=str)}\n```"
    return text


class ReservationsMCPServer:
    """
    MCP 2025 Compliant Server for the reservation tools.

    Stateless across calls: each tools/call runs one reservation pipeline
    with the call context supplied by the transport.
    """

    def __init__(self, service: ReservationService, server_name: str = SERVER_NAME):
        """
        Initialize the MCP server.

        Args:
            service: Reservation service the tools delegate to
            server_name: Name reported in serverInfo
        """
        self.service = service
        self.tool_registry = ToolRegistry()
        register_reservation_tools(self.tool_registry, service)

        self.capabilities = MCPCapabilities(tools={"listChanged": False}, logging={})
        self.server_info = MCPImplementation(name=server_name, version=SERVER_VERSION)

        logger.info(
            event="mcp_server_initialized",
            protocol_version=MCP_PROTOCOL_VERSION,
            tools=list(self.tool_registry.tools.keys()),
        )

    async def handle_payload(
        self, body: Any, context: Optional[ToolCallContext] = None
    ) -> Optional[Union[Dict[str, Any], List[Dict[str, Any]]]]:
        """
        Handle a decoded JSON-RPC payload (single message or batch).

        Args:
            body: Decoded JSON body
            context: Tracing/identity context for tool calls

        Returns:
            Response object, list of responses for a batch, or None when
            only notifications were received
        """
        context = context or NullCallContext()

        if JSONRPCHandler.is_batch(body):
            try:
                batch = JSONRPCHandler.validate_batch(body)
            except ValueError as e:
                return JSONRPCHandler.create_error_response(
                    None, INVALID_REQUEST, f"Invalid request: {str(e)}"
                ).model_dump()

            responses = []
            for message in batch:
                if isinstance(message, JSONRPCRequest):
                    responses.append((await self.handle_request(message, context)).model_dump())
                else:
                    await self.handle_notification(message)
            return responses or None

        try:
            message = JSONRPCHandler.parse_message(body)
        except ValueError as e:
            return JSONRPCHandler.create_error_response(
                None, INVALID_REQUEST, f"Invalid request: {str(e)}"
            ).model_dump()

        if isinstance(message, JSONRPCRequest):
            return (await self.handle_request(message, context)).model_dump()

        await self.handle_notification(message)
        return None

    async def handle_request(
        self, request: JSONRPCRequest, context: Optional[ToolCallContext] = None
    ) -> JSONRPCReply:
        """Handle a JSON-RPC request."""
        try:
            logger.debug(event="jsonrpc_request", method=request.method, id=request.id)

            if request.method == MCPMethods.INITIALIZE:
                return await self._handle_initialize(request)
            elif request.method == MCPMethods.PING:
                return await self._handle_ping(request)
            elif request.method == MCPMethods.TOOLS_LIST:
                return await self._handle_tools_list(request)
            elif request.method == MCPMethods.TOOLS_CALL:
                return await self._handle_tools_call(request, context or NullCallContext())
            else:
                return JSONRPCHandler.create_error_response(
                    request.id, METHOD_NOT_FOUND, f"Method '{request.method}' not found"
                )

        except Exception as e:
            logger.error(event="request_handler_error", method=request.method, error=str(e))
            return JSONRPCHandler.create_error_response(
                request.id, INTERNAL_ERROR, f"Internal error: {str(e)}"
            )

    async def handle_notification(self, notification: JSONRPCNotification) -> None:
        """Handle a JSON-RPC notification."""
        if notification.method == MCPMethods.INITIALIZED:
            logger.info(event="client_ready", message="Client has completed initialization")
        elif notification.method == MCPMethods.CANCEL:
            # Backend calls are single atomic requests; nothing to abort locally
            request_id = (notification.params or {}).get("requestId")
            logger.info(event="request_cancelled", request_id=request_id)
        else:
            logger.warning(event="unknown_notification", method=notification.method)

    async def _handle_initialize(self, request: JSONRPCRequest) -> JSONRPCReply:
        """Handle initialize request - capability negotiation."""
        if not request.params:
            return JSONRPCHandler.create_error_response(
                request.id, INVALID_PARAMS, "Initialize requires params"
            )

        try:
            params = MCPInitializeParams.model_validate(request.params)
        except ValueError:
            # Be lenient with clients that omit parts of the handshake
            params = MCPInitializeParams(
                protocolVersion=str(request.params.get("protocolVersion", MCP_PROTOCOL_VERSION)),
                capabilities=MCPClientCapabilities.model_validate(
                    request.params.get("capabilities") or {}
                ),
                clientInfo=MCPImplementation(name="unknown", version="unknown"),
            )

        if params.protocolVersion != MCP_PROTOCOL_VERSION:
            logger.warning(
                event="protocol_version_mismatch",
                client_version=params.protocolVersion,
                server_version=MCP_PROTOCOL_VERSION,
            )

        result = MCPInitializeResult(
            protocolVersion=MCP_PROTOCOL_VERSION,
            capabilities=self.capabilities,
            serverInfo=self.server_info,
            instructions=SERVER_INSTRUCTIONS,
        )

        logger.info(
            event="client_initialized",
            client_info=params.clientInfo.model_dump(),
            protocol_version=params.protocolVersion,
        )

        return JSONRPCHandler.create_response(request.id, result.model_dump(exclude_none=True))

    async def _handle_ping(self, request: JSONRPCRequest) -> JSONRPCResponse:
        """Handle ping request."""
        return JSONRPCHandler.create_response(
            request.id,
            {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "server": self.server_info.model_dump(),
            },
        )

    async def _handle_tools_list(self, request: JSONRPCRequest) -> JSONRPCReply:
        """Handle tools/list request with cursor-based pagination."""
        try:
            params = MCPToolsListParams.model_validate(request.params or {})
        except ValueError as e:
            return JSONRPCHandler.create_error_response(
                request.id, INVALID_PARAMS, f"Invalid tools/list params: {str(e)}"
            )

        mcp_tools = [tool.to_mcp() for tool in self.tool_registry.list_tools()]

        cursor_index = 0
        if params.cursor:
            try:
                cursor_index = int(params.cursor)
            except ValueError:
                return JSONRPCHandler.create_error_response(
                    request.id, INVALID_PARAMS, "Invalid cursor format"
                )

        end_index = cursor_index + DEFAULT_PAGE_SIZE
        page = mcp_tools[cursor_index:end_index]
        next_cursor = str(end_index) if end_index < len(mcp_tools) else None

        logger.debug(
            event="tools_listed",
            total_tools=len(mcp_tools),
            returned_tools=len(page),
            cursor=params.cursor,
        )

        result = MCPToolsListResult(tools=page, nextCursor=next_cursor)
        return JSONRPCHandler.create_response(request.id, result.model_dump(exclude_none=True))

    async def _handle_tools_call(
        self, request: JSONRPCRequest, context: ToolCallContext
    ) -> JSONRPCReply:
        """Handle tools/call request."""
        if not request.params:
            return JSONRPCHandler.create_error_response(
                request.id, INVALID_PARAMS, "Tool call requires params"
            )

        try:
            params = MCPToolsCallParams.model_validate(request.params)
        except ValueError as e:
            return JSONRPCHandler.create_error_response(
                request.id, INVALID_PARAMS, f"Invalid tools/call params: {str(e)}"
            )

        if self.tool_registry.get_tool(params.name) is None:
            return JSONRPCHandler.create_error_response(
                request.id,
                MCP_TOOL_NOT_FOUND,
                f"Tool '{params.name}' not found",
                data={"available_tools": list(self.tool_registry.tools.keys())},
            )

        try:
            execution = await self.tool_registry.execute_tool(
                tool_name=params.name, arguments=params.arguments or {}, context=context
            )
        except Exception as e:
            logger.error(event="tool_call_error", tool_name=params.name, error=str(e))
            return JSONRPCHandler.create_error_response(
                request.id, MCP_TOOL_EXECUTION_ERROR, f"Tool execution error: {str(e)}"
            )

        result = self._build_call_result(execution)
        return JSONRPCHandler.create_response(request.id, result.model_dump(exclude_none=True))

    def _build_call_result(self, execution: ToolExecution) -> MCPToolsCallResult:
        """Convert a tool execution into the MCP tools/call result."""
        envelope = execution.result

        if execution.success:
            data = envelope.get("data")
            structured_content = None
            if isinstance(data, dict):
                structured_content = data
            elif isinstance(data, list):
                structured_content = {"reservations": data}

            text = format_success_text(envelope.get("message", "Tool executed successfully"), data)
            return MCPToolsCallResult(
                content=[{"type": "text", "text": text}],
                isError=False,
                structuredContent=structured_content,
            )

        logger.warning(
            event="tool_execution_failed",
            tool_name=envelope.get("tool"),
            error_kind=envelope.get("error_kind"),
        )

        text = format_error_text(
            execution.error or envelope.get("message") or "Tool execution failed",
            envelope.get("details"),
            envelope.get("trace_id"),
        )
        return MCPToolsCallResult(content=[{"type": "text", "text": text}], isError=True)

    def health_check(self) -> Dict[str, Any]:
        """Health check for the MCP server."""
        return {
            "status": "healthy",
            "protocol_version": MCP_PROTOCOL_VERSION,
            "server": self.server_info.model_dump(),
            "tools": [tool.name for tool in self.tool_registry.list_tools()],
        }

    async def aclose(self) -> None:
        """Release the backend connection pool."""
        await self.service.aclose()
