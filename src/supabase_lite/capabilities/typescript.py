"""TypeScript interface generation from information_schema column rows."""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping
from typing import Any

HEADER = "// Generated TypeScript definitions for Supabase database"

# Keys are information_schema data_type values and udt_name aliases.
PG_TO_TS: dict[str, str] = {
    "smallint": "number",
    "integer": "number",
    "bigint": "number",
    "decimal": "number",
    "numeric": "number",
    "real": "number",
    "double precision": "number",
    "int2": "number",
    "int4": "number",
    "int8": "number",
    "float4": "number",
    "float8": "number",
    "text": "string",
    "character varying": "string",
    "character": "string",
    "varchar": "string",
    "bpchar": "string",
    "uuid": "string",
    "bytea": "string",
    "boolean": "boolean",
    "bool": "boolean",
    "date": "string",
    "time without time zone": "string",
    "time with time zone": "string",
    "timestamp without time zone": "string",
    "timestamp with time zone": "string",
    "timestamp": "string",
    "timestamptz": "string",
    "json": "any",
    "jsonb": "any",
}

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def ts_type(data_type: str, udt_name: str | None = None) -> str:
    kind = data_type.lower()
    if kind == "array" and udt_name:
        return f"{ts_type(udt_name.lstrip('_'))}[]"
    if kind == "user-defined":
        # Enums and domains arrive as strings over REST.
        return "string"
    return PG_TO_TS.get(kind, "any")


def interface_name(schema: str, table: str) -> str:
    parts = table.split("_") if schema == "public" else [*schema.split("_"), *table.split("_")]
    return "".join(part[:1].upper() + part[1:] for part in parts if part)


def property_name(column: str) -> str:
    return column if _IDENTIFIER_RE.match(column) else json.dumps(column)


def render_types(columns: Iterable[Mapping[str, Any]]) -> str:
    """Render one ``export interface`` per table, columns in ordinal order."""
    tables: dict[tuple[str, str], list[Mapping[str, Any]]] = {}
    for column in columns:
        key = (column["table_schema"], column["table_name"])
        tables.setdefault(key, []).append(column)

    blocks = [HEADER, ""]
    for (schema, table), table_columns in tables.items():
        lines = [f"export interface {interface_name(schema, table)} {{"]
        for column in table_columns:
            nullable = " | null" if column.get("is_nullable") == "YES" else ""
            tstype = ts_type(column["data_type"], column.get("udt_name"))
            lines.append(f"  {property_name(column['column_name'])}: {tstype}{nullable};")
        lines.append("}")
        blocks.append("\n".join(lines))
        blocks.append("")
    return "\n".join(blocks)
