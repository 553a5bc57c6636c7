"""SQL snippets the backend depends on, and literal quoting helpers."""

from __future__ import annotations

from collections.abc import Iterable

EXEC_SQL_FUNCTION = """
CREATE OR REPLACE FUNCTION public.exec_sql(query text)
RETURNS json
LANGUAGE plpgsql
SECURITY DEFINER
SET search_path = public
AS $$
DECLARE
  result json;
BEGIN
  IF query ~* '^\\s*(select|with|values|table)\\y' THEN
    EXECUTE format('SELECT json_agg(row_to_json(t)) FROM (%s) t', query) INTO result;
    RETURN coalesce(result, '[]'::json);
  END IF;
  EXECUTE query;
  RETURN NULL;
END;
$$;

REVOKE ALL ON FUNCTION public.exec_sql(text) FROM public, anon, authenticated;
""".strip()

# Analytics queries per service for the Management API logs endpoint.
LOG_QUERIES: dict[str, str] = {
    "api": (
        "select id, identifier, timestamp, event_message, request.method, request.path, response.status_code "
        "from edge_logs cross join unnest(metadata) as m "
        "cross join unnest(m.request) as request cross join unnest(m.response) as response "
        "order by timestamp desc limit 100"
    ),
    "postgres": (
        "select identifier, postgres_logs.timestamp, id, event_message, parsed.error_severity "
        "from postgres_logs cross join unnest(metadata) as m cross join unnest(m.parsed) as parsed "
        "order by timestamp desc limit 100"
    ),
    "auth": (
        "select id, auth_logs.timestamp, event_message, metadata.level, metadata.status, "
        "metadata.path, metadata.msg as msg, metadata.error "
        "from auth_logs cross join unnest(metadata) as metadata "
        "order by timestamp desc limit 100"
    ),
    "storage": (
        "select id, storage_logs.timestamp, event_message from storage_logs "
        "order by timestamp desc limit 100"
    ),
    "realtime": (
        "select id, realtime_logs.timestamp, event_message from realtime_logs "
        "order by timestamp desc limit 100"
    ),
}

# Table names probed in degraded-mode discovery.
COMMON_TABLE_NAMES = ("users", "profiles", "posts", "comments", "products", "orders")


def quote_literal(value: str) -> str:
    """Quote ``value`` as a Postgres string literal."""
    if "\x00" in value:
        raise ValueError("string literals cannot contain NUL bytes")
    return "'" + value.replace("'", "''") + "'"


def text_array(values: Iterable[str]) -> str:
    """Render ``values`` as a ``text[]`` literal expression."""
    return "ARRAY[" + ", ".join(quote_literal(v) for v in values) + "]::text[]"


def strip_statement(query: str) -> str:
    """Drop surrounding whitespace and trailing semicolons so the query can be wrapped."""
    return query.strip().rstrip(";").rstrip()
