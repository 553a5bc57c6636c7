"""Tests for the MCP surface, driven through an in-memory fastmcp Client."""

from __future__ import annotations

import json

import pytest
from fastmcp import Client

from supabase_lite.backend.sql import EXEC_SQL_FUNCTION
from supabase_lite.gateway.errors import CapabilityError, TransportError
from supabase_lite.gateway.server import SERVER_NAME, create_server

CAPABILITY_NAMES = [
    "list_tables",
    "list_extensions",
    "list_migrations",
    "apply_migration",
    "execute_sql",
    "get_logs",
    "get_advisors",
    "generate_typescript_types",
]


def _text(result) -> str:
    return "\n".join(block.text for block in result.content)


@pytest.mark.anyio
async def test_lists_every_capability_in_order(make_backend) -> None:
    mcp = create_server(make_backend())
    assert mcp.name == SERVER_NAME

    async with Client(mcp) as client:
        tools = await client.list_tools()

    assert [tool.name for tool in tools] == CAPABILITY_NAMES
    execute_sql = next(tool for tool in tools if tool.name == "execute_sql")
    assert execute_sql.inputSchema["required"] == ["query"]


@pytest.mark.anyio
async def test_successful_call_returns_payload_text(make_backend) -> None:
    backend = make_backend([{"schema": "public", "name": "users"}])
    mcp = create_server(backend)

    async with Client(mcp) as client:
        result = await client.call_tool("list_tables", {}, raise_on_error=False)

    assert not result.is_error
    assert "public.users" in _text(result)
    assert len(backend.calls) == 1


@pytest.mark.anyio
async def test_validation_failure_is_error_result(make_backend) -> None:
    backend = make_backend()
    mcp = create_server(backend)

    async with Client(mcp) as client:
        result = await client.call_tool("execute_sql", {}, raise_on_error=False)

    assert result.is_error
    assert "ValidationError" in _text(result)
    assert "query" in _text(result)
    assert backend.calls == []


@pytest.mark.anyio
@pytest.mark.parametrize(
    ("error", "category"),
    [
        (CapabilityError("relation \"missing\" does not exist", code="42P01"), "CapabilityError"),
        (TransportError("Could not connect: connection refused"), "TransportError"),
    ],
)
async def test_backend_failures_name_their_category(make_backend, error: Exception, category: str) -> None:
    mcp = create_server(make_backend(error))

    async with Client(mcp) as client:
        result = await client.call_tool("execute_sql", {"query": "SELECT 1"}, raise_on_error=False)

    assert result.is_error
    assert category in _text(result)


@pytest.mark.anyio
async def test_capabilities_resource(make_backend) -> None:
    mcp = create_server(make_backend())

    async with Client(mcp) as client:
        contents = await client.read_resource("supabase-lite://capabilities")

    listed = json.loads(contents[0].text)
    assert [entry["name"] for entry in listed] == CAPABILITY_NAMES
    assert all("inputSchema" in entry for entry in listed)


@pytest.mark.anyio
async def test_exec_sql_setup_resource(make_backend) -> None:
    mcp = create_server(make_backend())

    async with Client(mcp) as client:
        contents = await client.read_resource("supabase-lite://setup/exec-sql")

    assert contents[0].text == EXEC_SQL_FUNCTION


@pytest.mark.anyio
async def test_failed_connection_check_does_not_block_startup(make_backend) -> None:
    checked = []

    def check() -> bool:
        checked.append(True)
        return False

    mcp = create_server(make_backend([]), check_connection=check)

    async with Client(mcp) as client:
        result = await client.call_tool("list_extensions", {}, raise_on_error=False)

    assert checked == [True]
    assert _text(result) == "No extensions found"
