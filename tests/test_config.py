"""Tests for SupabaseConfig."""

from __future__ import annotations

import pytest

from supabase_lite.config import DEFAULT_TIMEOUT_SECONDS, SupabaseConfig, project_ref_from_url
from supabase_lite.gateway.errors import ConfigError

BASE_ENV = {
    "SUPABASE_URL": "https://abcdefgh.supabase.co/",
    "SUPABASE_SERVICE_KEY": "service-key",
}


class TestFromEnv:
    def test_minimal(self) -> None:
        config = SupabaseConfig.from_env(BASE_ENV)

        assert config.url == "https://abcdefgh.supabase.co"
        assert config.service_key == "service-key"
        assert config.project_ref == "abcdefgh"
        assert config.timeout == DEFAULT_TIMEOUT_SECONDS
        assert not config.management_enabled
        assert not config.table_probe_fallback

    @pytest.mark.parametrize("missing", ["SUPABASE_URL", "SUPABASE_SERVICE_KEY"])
    def test_missing_required(self, missing: str) -> None:
        env = {k: v for k, v in BASE_ENV.items() if k != missing}
        with pytest.raises(ConfigError, match=missing):
            SupabaseConfig.from_env(env)

    def test_both_missing_named_together(self) -> None:
        with pytest.raises(ConfigError, match="SUPABASE_URL and SUPABASE_SERVICE_KEY"):
            SupabaseConfig.from_env({})

    def test_management_settings(self) -> None:
        env = {
            **BASE_ENV,
            "SUPABASE_ACCESS_TOKEN": "pat",
            "SUPABASE_PROJECT_REF": "override",
            "SUPABASE_MANAGEMENT_API_URL": "https://api.example.com/",
        }
        config = SupabaseConfig.from_env(env)

        assert config.project_ref == "override"
        assert config.management_api_url == "https://api.example.com"
        assert config.management_enabled

    def test_timeout(self) -> None:
        assert SupabaseConfig.from_env({**BASE_ENV, "SUPABASE_TIMEOUT": "5"}).timeout == 5.0

    @pytest.mark.parametrize("value", ["soon", "0", "-1"])
    def test_bad_timeout(self, value: str) -> None:
        with pytest.raises(ConfigError):
            SupabaseConfig.from_env({**BASE_ENV, "SUPABASE_TIMEOUT": value})

    @pytest.mark.parametrize(("value", "expected"), [("1", True), ("true", True), ("ON", True), ("0", False)])
    def test_table_probe_flag(self, value: str, expected: bool) -> None:
        config = SupabaseConfig.from_env({**BASE_ENV, "SUPABASE_TABLE_PROBE_FALLBACK": value})
        assert config.table_probe_fallback is expected


class TestValidation:
    def test_url_scheme_required(self) -> None:
        with pytest.raises(ConfigError, match="http"):
            SupabaseConfig(url="abcdefgh.supabase.co", service_key="k")

    def test_custom_domain_has_no_ref(self) -> None:
        assert SupabaseConfig(url="http://localhost:54321", service_key="k").project_ref is None


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://abcdefgh.supabase.co", "abcdefgh"),
        ("https://abcdefgh.supabase.co/", "abcdefgh"),
        ("https://db.example.com", None),
        ("http://abcdefgh.supabase.co", None),
    ],
)
def test_project_ref_from_url(url: str, expected: str | None) -> None:
    assert project_ref_from_url(url) == expected
