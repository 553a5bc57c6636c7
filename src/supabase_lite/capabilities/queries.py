"""Catalog queries issued by the capability handlers."""

from __future__ import annotations

from collections.abc import Sequence

from ..backend.sql import quote_literal, text_array

LIST_EXTENSIONS = """
SELECT
  extname AS name,
  extversion AS version,
  extnamespace::regnamespace::text AS schema
FROM pg_extension
ORDER BY extname
""".strip()

LIST_MIGRATIONS = """
SELECT version, name
FROM supabase_migrations.schema_migrations
ORDER BY version DESC
LIMIT 20
""".strip()

SECURITY_CHECKS = (
    """
SELECT
  'Security' AS category,
  'Row level security is disabled' AS issue,
  schemaname || '.' || tablename AS location
FROM pg_tables
WHERE schemaname = 'public'
  AND NOT rowsecurity
ORDER BY tablename
""".strip(),
    """
SELECT
  'Security' AS category,
  'Unencrypted column with a sensitive name' AS issue,
  table_schema || '.' || table_name || '.' || column_name AS location
FROM information_schema.columns
WHERE table_schema = 'public'
  AND column_name ~* '(password|secret|token|key|ssn|credit_card)'
  AND data_type NOT IN ('bytea')
ORDER BY table_name, column_name
""".strip(),
)

PERFORMANCE_CHECKS = (
    """
SELECT
  'Performance' AS category,
  'Table has no primary key' AS issue,
  t.schemaname || '.' || t.tablename AS location
FROM pg_tables t
WHERE t.schemaname = 'public'
  AND NOT EXISTS (
    SELECT 1
    FROM pg_constraint c
    WHERE c.conrelid = format('%I.%I', t.schemaname, t.tablename)::regclass
      AND c.contype = 'p'
  )
ORDER BY t.tablename
""".strip(),
)


def list_tables(schemas: Sequence[str]) -> str:
    return f"""
SELECT
  table_schema AS schema,
  table_name AS name
FROM information_schema.tables
WHERE table_schema = ANY({text_array(schemas)})
  AND table_type = 'BASE TABLE'
ORDER BY table_schema, table_name
""".strip()


def record_migration(version: str, name: str) -> str:
    return (
        "INSERT INTO supabase_migrations.schema_migrations (version, name) "
        f"VALUES ({quote_literal(version)}, {quote_literal(name)}) "
        "ON CONFLICT (version) DO NOTHING"
    )


def table_columns(schemas: Sequence[str], tables: Sequence[str] | None = None) -> str:
    query = f"""
SELECT
  c.table_schema,
  c.table_name,
  c.column_name,
  c.data_type,
  c.udt_name,
  c.is_nullable
FROM information_schema.columns c
JOIN information_schema.tables t
  ON t.table_schema = c.table_schema AND t.table_name = c.table_name
WHERE c.table_schema = ANY({text_array(schemas)})
  AND t.table_type IN ('BASE TABLE', 'VIEW')
""".strip()
    if tables:
        query += f"\n  AND c.table_name = ANY({text_array(tables)})"
    return query + "\nORDER BY c.table_schema, c.table_name, c.ordinal_position"
