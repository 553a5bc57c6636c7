from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass

from .gateway.errors import ConfigError

DEFAULT_MANAGEMENT_API_URL = "https://api.supabase.com"
DEFAULT_TIMEOUT_SECONDS = 30.0

_PROJECT_URL_RE = re.compile(r"^https://(?P<ref>[a-zA-Z0-9-]+)\.supabase\.co/?$")
_TRUTHY = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True)
class SupabaseConfig:
    """Connection settings for one Supabase project."""

    url: str
    service_key: str
    project_ref: str | None = None
    access_token: str | None = None
    management_api_url: str = DEFAULT_MANAGEMENT_API_URL
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    table_probe_fallback: bool = False

    def __post_init__(self) -> None:
        if not self.url:
            raise ConfigError("Supabase URL is required (SUPABASE_URL)")
        if not self.url.startswith(("http://", "https://")):
            raise ConfigError(f"Supabase URL must start with http:// or https://, got {self.url!r}")
        if not self.service_key:
            raise ConfigError("Supabase service role key is required (SUPABASE_SERVICE_KEY)")
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")
        object.__setattr__(self, "url", self.url.rstrip("/"))
        object.__setattr__(self, "management_api_url", self.management_api_url.rstrip("/"))
        if self.project_ref is None:
            object.__setattr__(self, "project_ref", project_ref_from_url(self.url))

    @property
    def management_enabled(self) -> bool:
        """Management API calls need both a personal access token and the project ref."""
        return bool(self.access_token and self.project_ref)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> SupabaseConfig:
        """Build a config from ``SUPABASE_*`` environment variables.

        Expects:
            SUPABASE_URL                    https://<ref>.supabase.co
            SUPABASE_SERVICE_KEY            service role key
            SUPABASE_PROJECT_REF            optional, derived from the URL when absent
            SUPABASE_ACCESS_TOKEN           optional, enables get_logs
            SUPABASE_MANAGEMENT_API_URL     optional
            SUPABASE_TIMEOUT                optional, seconds
            SUPABASE_TABLE_PROBE_FALLBACK   optional, "1"/"true" enables degraded table discovery
        """
        env = os.environ if environ is None else environ

        missing = [name for name in ("SUPABASE_URL", "SUPABASE_SERVICE_KEY") if not env.get(name)]
        if missing:
            raise ConfigError(
                f"Missing required environment variables: {' and '.join(missing)}. "
                "Find these values in your Supabase project settings under API."
            )

        timeout_text = env.get("SUPABASE_TIMEOUT")
        try:
            timeout = float(timeout_text) if timeout_text else DEFAULT_TIMEOUT_SECONDS
        except ValueError as e:
            raise ConfigError(f"SUPABASE_TIMEOUT must be a number, got {timeout_text!r}") from e

        return cls(
            url=env["SUPABASE_URL"],
            service_key=env["SUPABASE_SERVICE_KEY"],
            project_ref=env.get("SUPABASE_PROJECT_REF") or None,
            access_token=env.get("SUPABASE_ACCESS_TOKEN") or None,
            management_api_url=env.get("SUPABASE_MANAGEMENT_API_URL") or DEFAULT_MANAGEMENT_API_URL,
            timeout=timeout,
            table_probe_fallback=env.get("SUPABASE_TABLE_PROBE_FALLBACK", "").strip().lower() in _TRUTHY,
        )


def project_ref_from_url(url: str) -> str | None:
    """Extract the project ref from a hosted project URL, or None for custom domains."""
    match = _PROJECT_URL_RE.match(url)
    return match.group("ref") if match else None
