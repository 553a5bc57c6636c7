"""Capability handlers - one backend conversation per capability.

Each handler takes the backend and the normalized arguments and returns the
raw structured result; presentation lives in ``render``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from ..backend.base import LOGS, SQL, TABLE_PROBE, Backend
from ..gateway.errors import CapabilityError, TransportError
from ..logger import get_logger
from . import queries

_log = get_logger("supabase_lite.capabilities.handlers")

# undefined_table, invalid_schema_name
_MISSING_LEDGER_CODES = frozenset({"42P01", "3F000"})


@dataclass(frozen=True)
class TableListing:
    schemas: list[str]
    tables: list[dict[str, Any]]
    probed: bool = False
    note: str | None = None


@dataclass
class MigrationResult:
    name: str | None
    version: str | None = None
    record_error: str | None = None


@dataclass(frozen=True)
class LogBatch:
    service: str
    minutes: float
    entries: list[dict[str, Any]]


@dataclass(frozen=True)
class AdvisorReport:
    type: str
    findings: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class TypeScriptSource:
    schemas: list[str]
    columns: list[dict[str, Any]]


def as_rows(result: Any) -> list[dict[str, Any]]:
    """Interpret an ``exec_sql`` result as a list of rows."""
    if result is None:
        return []
    if isinstance(result, list) and all(isinstance(row, dict) for row in result):
        return result
    raise TransportError(f"expected a list of rows from the backend, got {type(result).__name__}")


async def list_tables(backend: Backend, args: dict[str, Any]) -> TableListing:
    schemas = args["schemas"]
    try:
        result = await backend.execute(SQL, {"query": queries.list_tables(schemas)})
    except CapabilityError as exc:
        if not backend.supports(TABLE_PROBE):
            raise
        _log.warning(
            f"Table listing failed, probing common table names: {exc}",
            extra={"event": "table_probe_fallback", "schemas": schemas},
        )
        probed = await backend.execute(TABLE_PROBE, {"schemas": schemas})
        return TableListing(schemas=schemas, tables=as_rows(probed), probed=True, note=str(exc))
    return TableListing(schemas=schemas, tables=as_rows(result))


async def list_extensions(backend: Backend, args: dict[str, Any]) -> list[dict[str, Any]]:
    return as_rows(await backend.execute(SQL, {"query": queries.LIST_EXTENSIONS}))


async def list_migrations(backend: Backend, args: dict[str, Any]) -> list[dict[str, Any]] | None:
    """Return applied migrations, or None when the migrations ledger does not exist."""
    try:
        result = await backend.execute(SQL, {"query": queries.LIST_MIGRATIONS})
    except CapabilityError as exc:
        if exc.code in _MISSING_LEDGER_CODES:
            return None
        raise
    return as_rows(result)


async def apply_migration(backend: Backend, args: dict[str, Any]) -> MigrationResult:
    await backend.execute(SQL, {"query": args["sql"]})

    result = MigrationResult(name=args.get("name"))
    if result.name:
        version = datetime.now(UTC).strftime("%Y%m%d%H%M%S")
        try:
            await backend.execute(SQL, {"query": queries.record_migration(version, result.name)})
        except CapabilityError as exc:
            # The migration itself has already run; report the ledger failure in the payload.
            _log.warning(
                f"Migration '{result.name}' applied but not recorded: {exc}",
                extra={"event": "migration_record_failed", "migration": result.name},
            )
            result.record_error = str(exc)
        else:
            result.version = version
    return result


async def execute_sql(backend: Backend, args: dict[str, Any]) -> Any:
    return await backend.execute(SQL, {"query": args["query"]})


async def get_logs(backend: Backend, args: dict[str, Any]) -> LogBatch:
    if not backend.supports(LOGS):
        raise CapabilityError(
            "Log retrieval requires Supabase Management API access. Set SUPABASE_ACCESS_TOKEN "
            "(a personal access token) and SUPABASE_PROJECT_REF, or view logs in the Supabase "
            "Dashboard under Logs."
        )
    entries = await backend.execute(LOGS, {"service": args["service"], "minutes": args["minutes"]})
    return LogBatch(service=args["service"], minutes=args["minutes"], entries=as_rows(entries))


async def get_advisors(backend: Backend, args: dict[str, Any]) -> AdvisorReport:
    advisor_type = args["type"]
    checks: list[str] = []
    if advisor_type in ("all", "security"):
        checks.extend(queries.SECURITY_CHECKS)
    if advisor_type in ("all", "performance"):
        checks.extend(queries.PERFORMANCE_CHECKS)

    report = AdvisorReport(type=advisor_type)
    for query in checks:
        report.findings.extend(as_rows(await backend.execute(SQL, {"query": query})))
    return report


async def generate_typescript_types(backend: Backend, args: dict[str, Any]) -> TypeScriptSource:
    query = queries.table_columns(args["schemas"], args.get("tables"))
    columns = as_rows(await backend.execute(SQL, {"query": query}))
    return TypeScriptSource(schemas=args["schemas"], columns=columns)
