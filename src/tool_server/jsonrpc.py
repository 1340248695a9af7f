"""
JSON-RPC 2.0 framing and MCP message models.

Clients send requests and notifications; the server answers requests with
a result or an error object. Only the MCP methods this server handles are
modelled here.

Reference: https://www.jsonrpc.org/specification
MCP: https://modelcontextprotocol.io/specification/2025-06-18/basic
"""

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel

JSONRPC_VERSION = "2.0"

# Standard error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# Server-defined error codes
MCP_TOOL_NOT_FOUND = -32001
MCP_TOOL_EXECUTION_ERROR = -32002

RequestId = Union[str, int]


class JSONRPCError(BaseModel):
    """Error object carried by an error response."""

    code: int
    message: str
    data: Optional[Any] = None


class JSONRPCRequest(BaseModel):
    """Client call expecting a response."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: RequestId
    method: str
    params: Optional[Dict[str, Any]] = None


class JSONRPCNotification(BaseModel):
    """Client message without an id; never answered."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    method: str
    params: Optional[Dict[str, Any]] = None


class JSONRPCResponse(BaseModel):
    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: RequestId
    result: Any


class JSONRPCErrorResponse(BaseModel):
    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: Optional[RequestId]
    error: JSONRPCError


IncomingMessage = Union[JSONRPCRequest, JSONRPCNotification]


class MCPMethods:
    """MCP method names handled by the server."""

    INITIALIZE = "initialize"
    INITIALIZED = "notifications/initialized"
    CANCEL = "notifications/cancelled"
    PING = "ping"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"


class MCPImplementation(BaseModel):
    """Name and version of a client or server."""

    name: str
    version: str


class MCPCapabilities(BaseModel):
    """Capabilities advertised by the server."""

    logging: Optional[Dict[str, Any]] = None
    tools: Optional[Dict[str, Any]] = None


class MCPClientCapabilities(BaseModel):
    """Capabilities a client may declare. Recorded, not acted on."""

    roots: Optional[Dict[str, Any]] = None
    sampling: Optional[Dict[str, Any]] = None
    elicitation: Optional[Dict[str, Any]] = None
    experimental: Optional[Dict[str, Any]] = None


class MCPInitializeParams(BaseModel):
    protocolVersion: str
    capabilities: MCPClientCapabilities
    clientInfo: MCPImplementation


class MCPInitializeResult(BaseModel):
    protocolVersion: str
    capabilities: MCPCapabilities
    serverInfo: MCPImplementation
    instructions: Optional[str] = None


class MCPToolsListParams(BaseModel):
    cursor: Optional[str] = None


class MCPToolsListResult(BaseModel):
    tools: List[Dict[str, Any]]
    nextCursor: Optional[str] = None


class MCPToolsCallParams(BaseModel):
    name: str
    arguments: Optional[Dict[str, Any]] = None


class MCPToolsCallResult(BaseModel):
    """Tool output: markdown text blocks plus the record(s) on success."""

    content: List[Dict[str, Any]]
    isError: bool = False
    structuredContent: Optional[Dict[str, Any]] = None


class JSONRPCHandler:
    """Builds responses and parses incoming messages."""

    @staticmethod
    def create_response(id: RequestId, result: Any) -> JSONRPCResponse:
        return JSONRPCResponse(id=id, result=result)

    @staticmethod
    def create_error_response(
        id: Optional[RequestId], code: int, message: str, data: Optional[Any] = None
    ) -> JSONRPCErrorResponse:
        return JSONRPCErrorResponse(id=id, error=JSONRPCError(code=code, message=message, data=data))

    @staticmethod
    def parse_message(data: Any) -> IncomingMessage:
        """
        Parse one decoded message sent by a client.

        Raises:
            ValueError: If the message is not a request or a notification
        """
        if not isinstance(data, dict) or "method" not in data:
            raise ValueError(f"Invalid JSON-RPC message: {data}")

        if "id" in data:
            return JSONRPCRequest.model_validate(data)
        return JSONRPCNotification.model_validate(data)

    @staticmethod
    def is_batch(data: Any) -> bool:
        return isinstance(data, list)

    @staticmethod
    def validate_batch(data: List[Any]) -> List[IncomingMessage]:
        """Parse every message of a batch; an empty batch is invalid."""
        if not data:
            raise ValueError("Empty JSON-RPC batch")
        return [JSONRPCHandler.parse_message(item) for item in data]
