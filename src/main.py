"""
Main application entry point for the reservations MCP server.

Serves the reservation tools over HTTP (FastAPI gateway, optionally behind
the identity provider gate) or over stdio for local MCP clients.
"""

# Standard library imports
import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

import uvicorn

# Third-party imports
from dotenv import load_dotenv

# Local imports
from common.config import Config, load_config
from common.logging import get_logger, log_startup_message, setup_logging
from gateway.app import create_gateway_app
from gateway.auth import GitHubIdentityProvider, IdentityProvider
from reservations.client import ReservationsClient
from reservations.errors import ConfigurationError
from reservations.service import ReservationService
from reservations.settings import BackendSettings, load_backend_settings
from tool_server.context import NullCallContext, TracingCallContext
from tool_server.server import ReservationsMCPServer
from tool_server.transports.stdio import StdioTransport

# Load environment variables from .env file at module level
load_dotenv()

logger = get_logger(__name__)


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Supabase Reservations MCP Server")
    parser.add_argument("--port", type=int, help="Override the port to run on")
    parser.add_argument("--host", type=str, help="Override the host to run on")
    parser.add_argument("--config", type=Path, help="Path to config.yaml")
    parser.add_argument(
        "--stdio", action="store_true", help="Serve MCP over stdin/stdout instead of HTTP"
    )
    parser.add_argument(
        "--no-auth", action="store_true", help="Serve HTTP without the identity provider gate"
    )
    return parser.parse_args(argv)


def resolve_backend_settings(config: Config) -> BackendSettings:
    """
    Resolve backend settings, failing fast when they are incomplete.

    Raises:
        ConfigurationError: If the backend URL or service key is missing
    """
    settings = load_backend_settings(
        url=config.backend.url or None, request_timeout=config.backend.request_timeout
    )
    return settings.require()


def build_mcp_server(settings: BackendSettings) -> ReservationsMCPServer:
    """Wire the backend client, service and MCP server together."""
    client = ReservationsClient(settings)
    return ReservationsMCPServer(ReservationService(client))


def build_identity_provider(config: Config, no_auth: bool) -> Optional[IdentityProvider]:
    if no_auth or not config.auth.enabled:
        return None
    return GitHubIdentityProvider(
        user_api_url=config.auth.user_api_url, allowed_logins=config.auth.allowed_logins
    )


async def run_stdio(mcp_server: ReservationsMCPServer, config: Config) -> None:
    """Serve MCP over stdio until the client closes stdin."""
    context = TracingCallContext() if config.observability.tracing else NullCallContext()
    transport = StdioTransport(mcp_server, context=context)
    try:
        await transport.run()
    finally:
        await mcp_server.aclose()


def main(argv=None) -> None:
    """Main entry point."""
    try:
        args = parse_args(argv)

        # Load configuration
        config = load_config(args.config)

        # Setup logging
        setup_logging(config)

        try:
            settings = resolve_backend_settings(config)
        except ConfigurationError as e:
            logger.critical(event="startup_failed", reason="configuration", error=e.message)
            sys.exit(1)

        mcp_server = build_mcp_server(settings)

        if args.stdio:
            log_startup_message("server_starting", transport="stdio", backend=settings.url)
            asyncio.run(run_stdio(mcp_server, config))
            return

        identity_provider = build_identity_provider(config, args.no_auth)
        app = create_gateway_app(config, mcp_server, identity_provider)

        # Run with uvicorn (use command-line args if provided)
        host = args.host or config.gateway.host
        port = args.port or config.gateway.port

        log_startup_message(
            "server_starting",
            transport="http",
            host=host,
            port=port,
            backend=settings.url,
            requires_auth=identity_provider is not None,
        )

        # Run uvicorn synchronously (it creates its own event loop)
        uvicorn.run(
            app,
            host=host,
            port=port,
            log_config=None,  # Use our custom logging setup
            access_log=False,  # Disable default access logs
        )

    except KeyboardInterrupt:
        logger.info(event="application_shutdown", reason="Keyboard interrupt")
    except SystemExit as e:
        if e.code == 1:
            logger.critical(event="application_failed", reason="Startup checks failed")
        raise
    except Exception as e:
        logger.critical(event="application_crashed", error=str(e), error_type=type(e).__name__)
        sys.exit(1)


if __name__ == "__main__":
    main()
