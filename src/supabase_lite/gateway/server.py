"""Supabase Lite MCP server - exposes the capability registry over MCP."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

import anyio
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.tools import Tool
from fastmcp.tools.tool import ToolResult
from mcp.types import TextContent
from pydantic import Field

from ..backend.base import Backend
from ..backend.sql import EXEC_SQL_FUNCTION
from ..capabilities import build_registry
from ..logger import get_logger
from .command import CommandGateway

SERVER_NAME = "supabase-lite-mcp"

_log = get_logger("supabase_lite.gateway.server")


@dataclass
class ServerContext:
    """Lifespan context holding initialized resources."""

    gateway: CommandGateway
    backend: Backend


class CapabilityTool(Tool):
    """MCP tool that forwards every call to the command gateway.

    Arguments are passed through untouched; validation and coercion happen in
    the gateway so every caller sees the same envelope semantics.
    """

    gateway: Any = Field(exclude=True)

    async def run(self, arguments: dict[str, Any]) -> ToolResult:
        envelope = await self.gateway.handle(self.name, arguments)
        if not envelope.is_success:
            raise ToolError(envelope.to_text())
        return ToolResult(content=[TextContent(type="text", text=envelope.payload)])


def create_server(
    backend: Backend,
    *,
    timeout: float | None = None,
    check_connection: Callable[[], bool] | None = None,
) -> FastMCP[ServerContext]:
    """Create the Supabase Lite MCP server.

    Args:
        backend: Platform collaborator every capability handler is bound to
        timeout: Per-invocation deadline in seconds (None for no deadline)
        check_connection: Optional blocking probe run at startup; a failed
            probe is logged as a warning and the server still starts

    Returns:
        Configured FastMCP server ready to run
    """
    registry = build_registry(backend)
    gateway = CommandGateway(registry, timeout=timeout)

    @asynccontextmanager
    async def server_lifespan(_server: FastMCP) -> AsyncIterator[ServerContext]:
        if check_connection is not None:
            connected = await anyio.to_thread.run_sync(check_connection)
            if not connected:
                _log.warning("Unable to validate Supabase connection. Some commands may fail.")
        _log.info(f"Supabase Lite MCP server running with {len(registry)} commands")
        yield ServerContext(gateway=gateway, backend=backend)

    mcp: FastMCP[ServerContext] = FastMCP(SERVER_NAME, lifespan=server_lifespan)

    for capability in registry.list():
        mcp.add_tool(
            CapabilityTool(
                name=capability.name,
                description=capability.description,
                parameters=capability.input_schema(),
                gateway=gateway,
            )
        )

    @mcp.resource("supabase-lite://capabilities", mime_type="application/json")
    def capabilities_resource() -> str:
        """Names, descriptions and input schemas of every exposed command."""
        return json.dumps(gateway.list_capabilities(), indent=2)

    @mcp.resource("supabase-lite://setup/exec-sql", mime_type="text/plain")
    def exec_sql_setup_resource() -> str:
        """SQL that creates the exec_sql helper function the server relies on."""
        return EXEC_SQL_FUNCTION

    return mcp
