"""The eight exposed capabilities and their argument shapes."""

from __future__ import annotations

import functools
from collections.abc import Awaitable, Callable
from typing import Any

from ..backend.base import Backend
from ..gateway.registry import Capability, CapabilityRegistry, Handler, Param, ParamKind
from . import handlers, render

LOG_SERVICES = ("api", "postgres", "auth", "storage", "realtime")
ADVISOR_TYPES = ("all", "security", "performance")

# One week of logs.
MAX_LOG_MINUTES = 7 * 24 * 60


def build_registry(backend: Backend) -> CapabilityRegistry:
    """Bind every capability handler to ``backend`` and return the sealed registry."""

    def bind(handler: Callable[..., Awaitable[Any]]) -> Handler:
        return functools.partial(handler, backend)

    registry = CapabilityRegistry(
        [
            Capability(
                name="list_tables",
                description="List all tables in the specified schemas (default: public)",
                handler=bind(handlers.list_tables),
                render=render.table_listing,
                params=(
                    Param(
                        "schemas",
                        ParamKind.STRING_ARRAY,
                        description="Schema names to list tables from",
                        default=("public",),
                    ),
                ),
            ),
            Capability(
                name="list_extensions",
                description="List all installed PostgreSQL extensions",
                handler=bind(handlers.list_extensions),
                render=render.extensions,
            ),
            Capability(
                name="list_migrations",
                description="List migration history from the supabase_migrations schema",
                handler=bind(handlers.list_migrations),
                render=render.migrations,
            ),
            Capability(
                name="apply_migration",
                description="Apply a database migration (DDL changes like CREATE TABLE)",
                handler=bind(handlers.apply_migration),
                render=render.migration_result,
                params=(
                    Param("sql", ParamKind.STRING, description="SQL DDL statements to execute", required=True),
                    Param("name", ParamKind.STRING, description="Migration name for tracking, in snake_case"),
                ),
            ),
            Capability(
                name="execute_sql",
                description="Execute a SQL query and return the results. Use for data queries, not DDL",
                handler=bind(handlers.execute_sql),
                render=render.sql_result,
                params=(Param("query", ParamKind.STRING, description="SQL query to execute", required=True),),
            ),
            Capability(
                name="get_logs",
                description="Get recent service logs (last minute by default)",
                handler=bind(handlers.get_logs),
                render=render.logs,
                params=(
                    Param(
                        "service",
                        ParamKind.ENUM,
                        description="Service to fetch logs for",
                        choices=LOG_SERVICES,
                        default="postgres",
                    ),
                    Param(
                        "minutes",
                        ParamKind.NUMBER,
                        description="Number of minutes of logs to retrieve",
                        default=1,
                        minimum=1,
                        maximum=MAX_LOG_MINUTES,
                    ),
                ),
            ),
            Capability(
                name="get_advisors",
                description="Get database advisors for security and performance recommendations",
                handler=bind(handlers.get_advisors),
                render=render.advisors,
                params=(
                    Param(
                        "type",
                        ParamKind.ENUM,
                        description="Type of advisors to retrieve",
                        choices=ADVISOR_TYPES,
                        default="all",
                    ),
                ),
            ),
            Capability(
                name="generate_typescript_types",
                description="Generate TypeScript type definitions from the database schema",
                handler=bind(handlers.generate_typescript_types),
                render=render.typescript,
                params=(
                    Param(
                        "schemas",
                        ParamKind.STRING_ARRAY,
                        description="Schema names to generate types for",
                        default=("public",),
                    ),
                    Param(
                        "tables",
                        ParamKind.STRING_ARRAY,
                        description="Specific tables to generate types for (optional)",
                    ),
                ),
            ),
        ]
    )
    registry.seal()
    return registry
