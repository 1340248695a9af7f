"""
Standard I/O Transport for MCP

Implements stdio transport for local tool execution: MCP clients spawn the
server as a subprocess and exchange newline-delimited JSON-RPC messages over
stdin/stdout. Logs go to stderr. This transport is always the no-auth
variant (local, trusted).

Reference: https://modelcontextprotocol.io/specification/2025-06-18/basic/transports
"""

import asyncio
import json
import sys
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional

from common.logging import get_logger
from ..context import ToolCallContext
from ..jsonrpc import PARSE_ERROR, JSONRPCHandler
from ..server import ReservationsMCPServer

logger = get_logger(__name__)


class StdioTransport:
    """
    Standard I/O transport for MCP communication.

    Reads one JSON-RPC message (or batch) per line from stdin and writes
    each response as one line on stdout.
    """

    def __init__(
        self,
        mcp_server: ReservationsMCPServer,
        context: Optional[ToolCallContext] = None,
        stdin: Any = None,
        stdout: Any = None,
    ):
        """Initialize stdio transport."""
        self.mcp_server = mcp_server
        self.context = context
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="stdio")

    async def run(self) -> None:
        """Serve messages until EOF."""
        loop = asyncio.get_running_loop()
        logger.info(event="stdio_transport_started")

        try:
            while True:
                line = await loop.run_in_executor(self.executor, self.stdin.readline)

                if not line:  # EOF
                    logger.info(event="stdio_transport_eof")
                    break

                line = line.strip()
                if not line:
                    continue

                await self.handle_line(line)
        finally:
            self.executor.shutdown(wait=False)
            logger.info(event="stdio_transport_stopped")

    async def handle_line(self, line: str) -> None:
        """Handle a single line of input."""
        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            error_response = JSONRPCHandler.create_error_response(
                None, PARSE_ERROR, f"Parse error: {str(e)}"
            )
            self._write(error_response.model_dump())
            return

        response = await self.mcp_server.handle_payload(data, self.context)
        if response is not None:
            self._write(response)

    def _write(self, data: Any) -> None:
        """Write one JSON-RPC message line to stdout."""
        self.stdout.write(json.dumps(data, separators=(",", ":"), default=str) + "\n")
        self.stdout.flush()
