"""
Supabase backend - PostgREST RPC and Management API over HTTP
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Mapping
from datetime import UTC, datetime, timedelta
from typing import Any

import anyio
import requests

from ..config import SupabaseConfig
from ..gateway.errors import CapabilityError, TransportError
from ..logger import get_logger
from .base import LOGS, SQL, TABLE_PROBE
from .sql import COMMON_TABLE_NAMES, EXEC_SQL_FUNCTION, LOG_QUERIES, strip_statement

_log = get_logger("supabase_lite.backend.supabase")

# Gateway-level HTTP failures: the request never reached a working upstream.
_TRANSPORT_STATUS_CODES = frozenset({502, 503, 504})
_FUNCTION_NOT_FOUND = "PGRST202"


class SupabaseBackend:
    """Executes gateway operations against one Supabase project.

    Each call is an independent HTTP request with per-call headers, so a
    single instance is safe to share between concurrent invocations.
    """

    def __init__(self, config: SupabaseConfig):
        """
        Initialize the backend.

        Args:
            config: Project URL, service key and optional Management API credentials.
        """
        self.config = config
        self._operations: dict[str, Callable[[Mapping[str, Any]], Any]] = {SQL: self.run_sql}
        if config.management_enabled:
            self._operations[LOGS] = self.fetch_logs
        if config.table_probe_fallback:
            self._operations[TABLE_PROBE] = self.probe_tables

    # --- Backend protocol ---

    def supports(self, operation: str) -> bool:
        return operation in self._operations

    async def execute(self, operation: str, arguments: Mapping[str, Any]) -> Any:
        """Run one operation in a worker thread; cancellation abandons the wait."""
        if operation not in self._operations:
            raise CapabilityError(f"Operation '{operation}' is not available with the current configuration")
        call = functools.partial(self._operations[operation], arguments)
        return await anyio.to_thread.run_sync(call, abandon_on_cancel=True)

    # --- Operations ---

    def run_sql(self, arguments: Mapping[str, Any]) -> Any:
        """
        Execute SQL through the ``exec_sql`` RPC function.

        Returns:
            A list of row dicts for queries, or None for statements without results.
        """
        url = f"{self.config.url}/rest/v1/rpc/exec_sql"
        payload = {"query": strip_statement(arguments["query"])}
        return self._request("POST", url, headers=self._rest_headers(), json=payload)

    def fetch_logs(self, arguments: Mapping[str, Any]) -> list[dict[str, Any]]:
        """
        Fetch recent service logs from the Management API analytics endpoint.

        Args:
            arguments: ``service`` (a LOG_QUERIES key) and ``minutes``.

        Returns:
            List of log entries, newest first.
        """
        service = arguments["service"]
        if service not in LOG_QUERIES:
            raise CapabilityError(f"No log source for service '{service}'")

        end = datetime.now(UTC)
        start = end - timedelta(minutes=float(arguments["minutes"]))
        url = f"{self.config.management_api_url}/v1/projects/{self.config.project_ref}/analytics/endpoints/logs.all"
        params = {
            "sql": LOG_QUERIES[service],
            "iso_timestamp_start": start.isoformat(),
            "iso_timestamp_end": end.isoformat(),
        }

        data = self._request("GET", url, headers=self._management_headers(), params=params)
        if not isinstance(data, dict):
            raise TransportError(f"Unexpected logs response shape: {type(data).__name__}")
        if data.get("error"):
            raise CapabilityError(_error_text(data["error"]))
        return data.get("result") or []

    def probe_tables(self, arguments: Mapping[str, Any]) -> list[dict[str, str]]:
        """
        Degraded-mode table discovery: probe a fixed list of common table names.

        Only tables that answer an empty select are reported, so the result can
        be incomplete. Used when ``exec_sql`` is unavailable.
        """
        found: list[dict[str, str]] = []
        for schema in arguments["schemas"]:
            headers = self._rest_headers()
            headers["Accept-Profile"] = schema
            for table in COMMON_TABLE_NAMES:
                url = f"{self.config.url}/rest/v1/{table}"
                try:
                    self._request("GET", url, headers=headers, params={"select": "*", "limit": "0"})
                except CapabilityError:
                    continue
                found.append({"schema": schema, "name": table})
        _log.info(f"Table probe found {len(found)} tables", extra={"event": "table_probe", "found": found})
        return found

    def validate_connection(self) -> bool:
        """Check that the REST endpoint answers with the configured key."""
        try:
            self._request("GET", f"{self.config.url}/rest/v1/", headers=self._rest_headers())
        except (CapabilityError, TransportError) as e:
            _log.warning(f"Connection check failed: {e}")
            return False
        return True

    # --- HTTP ---

    def _rest_headers(self) -> dict[str, str]:
        return {
            "apikey": self.config.service_key,
            "Authorization": f"Bearer {self.config.service_key}",
            "Content-Type": "application/json",
        }

    def _management_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.access_token}",
            "Content-Type": "application/json",
        }

    def _request(self, method: str, url: str, *, headers: dict[str, str], **kwargs: Any) -> Any:
        try:
            response = requests.request(method, url, headers=headers, timeout=self.config.timeout, **kwargs)
        except requests.Timeout as e:
            raise TransportError(f"{method} {url} timed out after {self.config.timeout:g}s") from e
        except requests.ConnectionError as e:
            raise TransportError(f"Could not connect to {url}: {e}") from e
        except requests.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        if response.status_code in _TRANSPORT_STATUS_CODES:
            raise TransportError(f"{method} {url} returned HTTP {response.status_code}")
        if not response.ok:
            raise _capability_error(response)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"{method} {url} returned a response that is not JSON") from e


def _capability_error(response: requests.Response) -> CapabilityError:
    """Build a CapabilityError from a PostgREST / Management API error body."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        code = body.get("code")
        message = _error_text(body)
        hint = body.get("hint")
        if hint:
            message = f"{message} (hint: {hint})"
    else:
        code = None
        message = response.text.strip() or response.reason or "request rejected"

    code = str(code) if code is not None else None
    if code == _FUNCTION_NOT_FOUND:
        message = (
            f"exec_sql function not found ({message}). Create it first by running this in the "
            f"Supabase SQL Editor:\n\n{EXEC_SQL_FUNCTION}"
        )
    return CapabilityError(f"HTTP {response.status_code}: {message}", code=code)


def _error_text(error: Any) -> str:
    if isinstance(error, dict):
        for key in ("message", "msg", "error", "details"):
            if error.get(key):
                return str(error[key])
        return str(error)
    return str(error)
