"""
Tool Registry for the MCP Server

Registers tool handlers under fixed names and dispatches tool calls to them.

Key Features:
- Tool registration and discovery
- Vendor-agnostic tool interface
- Execution timing and structured logging
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from common.logging import get_logger
from .context import NullCallContext, ToolCallContext

logger = get_logger(__name__)


class Tool(BaseModel):
    """Standard MCP tool definition."""

    name: str
    description: str
    input_schema: Dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}, "required": []}
    )
    examples: List[str] = Field(default_factory=list)
    category: str = "general"
    version: str = "1.0.0"

    def to_mcp(self) -> Dict[str, Any]:
        """Tool entry as listed by tools/list."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


@dataclass
class ToolExecution:
    """Result of tool execution."""

    success: bool
    result: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    execution_time_ms: Optional[float] = None


class ToolHandler(ABC):
    """Abstract base class for tool handlers."""

    @abstractmethod
    async def execute(self, arguments: Dict[str, Any], context: ToolCallContext) -> Dict[str, Any]:
        """Execute the tool with given arguments."""
        pass

    @abstractmethod
    def get_tool_definition(self) -> Tool:
        """Get the tool definition for this handler."""
        pass


class ToolRegistry:
    """
    Registry for managing MCP tools.

    Provides tool registration, discovery, and execution.
    """

    def __init__(self):
        """Initialize the tool registry."""
        self.tools: Dict[str, Tool] = {}
        self.handlers: Dict[str, ToolHandler] = {}

    def register_tool_handler(self, handler: ToolHandler) -> Tool:
        """Register a tool with its handler."""
        tool = handler.get_tool_definition()
        if tool.name in self.tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")

        self.tools[tool.name] = tool
        self.handlers[tool.name] = handler

        logger.info(
            event="tool_handler_registered",
            tool_name=tool.name,
            handler_type=type(handler).__name__,
            category=tool.category,
        )
        return tool

    def list_tools(self) -> List[Tool]:
        """List all registered tools in registration order."""
        return list(self.tools.values())

    def get_tool(self, tool_name: str) -> Optional[Tool]:
        """Get a specific tool definition."""
        return self.tools.get(tool_name)

    async def execute_tool(
        self,
        tool_name: str,
        arguments: Dict[str, Any],
        context: Optional[ToolCallContext] = None,
    ) -> ToolExecution:
        """
        Execute a tool with given arguments.

        Args:
            tool_name: Name of the tool to execute
            arguments: Arguments to pass to the tool
            context: Tracing/identity context for the call

        Returns:
            ToolExecution result with success status and results
        """
        start_time = time.perf_counter()

        handler = self.handlers.get(tool_name)
        if handler is None:
            return ToolExecution(
                success=False,
                error=f"Tool '{tool_name}' not found. Available tools: {list(self.tools.keys())}",
            )

        try:
            result = await handler.execute(arguments, context or NullCallContext())
        except Exception as e:
            execution_time = (time.perf_counter() - start_time) * 1000

            logger.error(
                event="tool_execution_error",
                tool_name=tool_name,
                error=str(e),
                error_type=type(e).__name__,
                execution_time_ms=round(execution_time, 2),
            )

            return ToolExecution(success=False, error=str(e), execution_time_ms=execution_time)

        execution_time = (time.perf_counter() - start_time) * 1000
        success = result.get("status") != "error"

        logger.info(
            event="tool_executed",
            tool_name=tool_name,
            execution_time_ms=round(execution_time, 2),
            success=success,
            error_kind=result.get("error_kind"),
        )

        return ToolExecution(
            success=success,
            result=result,
            error=None if success else result.get("message"),
            execution_time_ms=execution_time,
        )
