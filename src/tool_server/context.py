"""
Per-call tracing and identity context for tool handlers.

Handlers are written once against ToolCallContext. The plain variant uses
NullCallContext; the authenticated and instrumented variants use
TracingCallContext, which opens a span per call and binds the caller's
identity into the structlog context.
"""

import uuid
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

import structlog

from common.logging import TimedLogger, get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class UserIdentity:
    """Caller identity resolved by the identity provider."""

    login: str
    name: Optional[str] = None
    email: Optional[str] = None


@dataclass
class CallSpan:
    """Handle for one tool call."""

    tool_name: str
    trace_id: Optional[str] = None
    user: Optional[UserIdentity] = None


class ToolCallContext(ABC):
    """Capability handed to every tool call."""

    @abstractmethod
    def span(self, tool_name: str) -> "AsyncIterator[CallSpan]":
        """Async context manager wrapping a single tool call."""
        pass


class NullCallContext(ToolCallContext):
    """No tracing, no identity."""

    @asynccontextmanager
    async def span(self, tool_name: str) -> AsyncIterator[CallSpan]:
        yield CallSpan(tool_name=tool_name)


class TracingCallContext(ToolCallContext):
    """Traced span per call, optionally bound to a verified user."""

    def __init__(self, user: Optional[UserIdentity] = None):
        self.user = user

    @asynccontextmanager
    async def span(self, tool_name: str) -> AsyncIterator[CallSpan]:
        call_span = CallSpan(tool_name=tool_name, trace_id=uuid.uuid4().hex, user=self.user)

        bound = {"trace_id": call_span.trace_id, "tool_name": tool_name}
        if self.user is not None:
            bound["user_login"] = self.user.login
            if self.user.email:
                bound["user_email"] = self.user.email

        with structlog.contextvars.bound_contextvars(**bound):
            logger.debug(event="tool_span_started")
            with TimedLogger(logger, "tool_span_finished"):
                yield call_span
