"""Supabase Lite MCP server CLI."""

import argparse
import logging
import sys
from dataclasses import replace

from .backend.supabase import SupabaseBackend
from .config import SupabaseConfig
from .gateway.errors import ConfigError
from .gateway.server import create_server
from .logger import LoggingConfig, configure_logging


def _check(backend: SupabaseBackend) -> int:
    config = backend.config
    print("Testing Supabase connection...")
    print(f"URL: {config.url}")
    print(f"Project ref: {config.project_ref or 'unknown'}")
    print(f"Management API: {'enabled' if config.management_enabled else 'disabled (get_logs unavailable)'}")

    if backend.validate_connection():
        print("REST API: reachable")
        return 0
    print("REST API: NOT reachable, see the log output above")
    return 1


def main() -> None:
    parser = argparse.ArgumentParser(description="Supabase Lite MCP server")
    parser.add_argument("--transport", default="stdio", choices=["stdio", "sse", "streamable-http"])
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--timeout", type=float, help="Per-request timeout in seconds (overrides SUPABASE_TIMEOUT)")
    parser.add_argument(
        "--table-probe-fallback",
        action="store_true",
        help="Probe common table names when list_tables cannot query the catalog (degraded mode)",
    )
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--log-dir", default="logs")
    parser.add_argument("--no-log-file", action="store_true", help="Log to stderr only")
    parser.add_argument("--check", action="store_true", help="Validate the Supabase connection and exit")
    args = parser.parse_args()

    configure_logging(
        LoggingConfig(
            level=getattr(logging, args.log_level),
            log_dir=None if args.no_log_file else args.log_dir,
        )
    )

    try:
        config = SupabaseConfig.from_env()
        if args.timeout is not None:
            config = replace(config, timeout=args.timeout)
        if args.table_probe_fallback:
            config = replace(config, table_probe_fallback=True)
    except ConfigError as e:
        parser.error(str(e))

    backend = SupabaseBackend(config)
    if args.check:
        sys.exit(_check(backend))

    mcp = create_server(backend, check_connection=backend.validate_connection)

    if args.transport == "stdio":
        mcp.run(transport="stdio")
    else:
        mcp.run(transport=args.transport, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
