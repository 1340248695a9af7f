"""
HTTP gateway using FastAPI.

Exposes the MCP JSON-RPC endpoint and a health check. The authenticated
variant verifies a bearer token with the identity provider on every MCP
request and binds the resulting user to the call context; the no-auth
variant serves the same tools without the gate.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, Response

from common.config import Config
from common.logging import TimedLogger, get_logger
from gateway.auth import AuthenticationError, IdentityProvider
from tool_server.context import NullCallContext, ToolCallContext, TracingCallContext
from tool_server.jsonrpc import PARSE_ERROR, JSONRPCHandler
from tool_server.server import SERVER_VERSION, ReservationsMCPServer

logger = get_logger(__name__)

_BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


class ReservationsGateway:
    """FastAPI gateway in front of the reservations MCP server."""

    def __init__(
        self,
        config: Config,
        mcp_server: ReservationsMCPServer,
        identity_provider: Optional[IdentityProvider] = None,
    ):
        """
        Initialize the gateway.

        Args:
            config: Application configuration
            mcp_server: MCP server handling JSON-RPC payloads
            identity_provider: Token verifier; None serves the no-auth variant
        """
        self.config = config
        self.mcp_server = mcp_server
        self.identity_provider = identity_provider

        self.app = FastAPI(
            title="Reservations MCP Gateway", version=SERVER_VERSION, lifespan=self._lifespan
        )
        self._setup_routes()

    @property
    def requires_auth(self) -> bool:
        return self.identity_provider is not None

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        logger.info(event="gateway_started", requires_auth=self.requires_auth)
        yield
        await self.mcp_server.aclose()
        if self.identity_provider is not None:
            await self.identity_provider.aclose()
        logger.info(event="gateway_stopped")

    async def resolve_context(self, request: Request) -> ToolCallContext:
        """Build the call context for a request, enforcing the auth gate when enabled."""
        if self.identity_provider is None:
            if self.config.observability.tracing:
                return TracingCallContext()
            return NullCallContext()

        scheme, _, token = request.headers.get("Authorization", "").partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise HTTPException(
                status_code=401, detail="Missing bearer token", headers=_BEARER_CHALLENGE
            )

        try:
            user = await self.identity_provider.resolve_user(token.strip())
        except AuthenticationError as e:
            raise HTTPException(status_code=401, detail=str(e), headers=_BEARER_CHALLENGE)

        return TracingCallContext(user)

    def _setup_routes(self) -> None:
        """Setup FastAPI routes."""

        @self.app.get("/health")
        async def health_check():
            """Health check endpoint."""
            health = self.mcp_server.health_check()
            health["requires_auth"] = self.requires_auth
            return JSONResponse(health)

        @self.app.post("/mcp")
        async def handle_jsonrpc(
            request: Request, context: ToolCallContext = Depends(self.resolve_context)
        ):
            """
            Main JSON-RPC endpoint for the MCP protocol.

            Handles both single requests and batches. Notification-only
            payloads get 202 Accepted with no body.
            """
            try:
                body = await request.json()
            except ValueError as e:
                error_response = JSONRPCHandler.create_error_response(
                    None, PARSE_ERROR, f"Parse error: {str(e)}"
                )
                return JSONResponse(content=error_response.model_dump(), status_code=400)

            with TimedLogger(logger, "mcp_request_processed"):
                response = await self.mcp_server.handle_payload(body, context)

            if response is None:
                return Response(status_code=202)
            return JSONResponse(content=response)


def create_gateway_app(
    config: Config,
    mcp_server: ReservationsMCPServer,
    identity_provider: Optional[IdentityProvider] = None,
) -> FastAPI:
    """Create and configure the FastAPI gateway application."""
    gateway = ReservationsGateway(config, mcp_server, identity_provider)
    return gateway.app
