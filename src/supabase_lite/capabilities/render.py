"""Per-capability formatting rules. Presentation only; no content is dropped."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

from .handlers import AdvisorReport, LogBatch, MigrationResult, TableListing, TypeScriptSource
from .typescript import render_types


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, default=str)


def _plural(count: float, word: str) -> str:
    return f"{count:g} {word}" if count == 1 else f"{count:g} {word}s"


def table_listing(listing: TableListing) -> str:
    schemas = ", ".join(listing.schemas)
    if not listing.tables:
        text = f"No tables found in schema(s): {schemas}"
    elif listing.probed:
        text = "Found tables via common-name probe (degraded mode, list may be incomplete):"
    else:
        text = f"Tables in schema(s) {schemas}:"
    lines = [text, *(f"- {t['schema']}.{t['name']}" for t in listing.tables)]
    if listing.note:
        lines.extend(["", f"Note: {listing.note}"])
    return "\n".join(lines)


def extensions(rows: list[dict[str, Any]]) -> str:
    if not rows:
        return "No extensions found"
    lines = ["Installed extensions:"]
    lines.extend(f"- {e['name']} v{e['version']} (schema: {e['schema']})" for e in rows)
    return "\n".join(lines)


def migrations(rows: list[dict[str, Any]] | None) -> str:
    if rows is None:
        return "No migration history found. The supabase_migrations schema may not be set up."
    if not rows:
        return "No migrations found"
    lines = ["Recent migrations:"]
    lines.extend(f"- {m['version']}: {m.get('name') or '(unnamed)'}" for m in rows)
    return "\n".join(lines)


def migration_result(result: MigrationResult) -> str:
    if not result.name:
        return "Migration applied successfully"
    text = f"Migration applied successfully: {result.name}"
    if result.version:
        text += f" (version {result.version})"
    if result.record_error:
        text += f"\nWarning: not recorded in supabase_migrations.schema_migrations: {result.record_error}"
    return text


def sql_result(result: Any) -> str:
    if result is None:
        return "Query executed successfully"
    if isinstance(result, list):
        if not result:
            return "Query returned no rows"
        if all(isinstance(row, dict) for row in result):
            columns = list(result[0])
            lines = [f"Columns: {', '.join(columns)}", ""]
            lines.extend(", ".join(f"{col}: {row.get(col)}" for col in columns) for row in result)
            return "\n".join(lines)
    return _dump(result)


def _log_timestamp(value: Any) -> str:
    # The analytics endpoint reports microseconds since the epoch.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1_000_000, UTC).isoformat()
    return str(value)


def logs(batch: LogBatch) -> str:
    window = _plural(batch.minutes, "minute")
    if not batch.entries:
        return f"No {batch.service} logs in the last {window}"
    lines = [f"Logs for {batch.service} (last {window}, {len(batch.entries)} entries):"]
    for entry in batch.entries:
        timestamp = _log_timestamp(entry.get("timestamp"))
        lines.append(f"[{timestamp}] {entry.get('event_message', '')}")
    return "\n".join(lines)


def advisors(report: AdvisorReport) -> str:
    if not report.findings:
        return f"No issues found ({report.type} advisors)."
    blocks = [f"Database advisors ({report.type}): {len(report.findings)} issue(s)"]
    blocks.extend(f"[{f['category']}] {f['issue']}\n   Location: {f['location']}" for f in report.findings)
    return "\n\n".join(blocks)


def typescript(source: TypeScriptSource) -> str:
    if not source.columns:
        return f"No tables found in schema(s): {', '.join(source.schemas)}"
    return render_types(source.columns)
