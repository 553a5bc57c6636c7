"""Tests for CapabilityRegistry, Capability and Param."""

from __future__ import annotations

from typing import Any

import pytest

from supabase_lite.capabilities import build_registry
from supabase_lite.gateway.errors import DuplicateNameError, RegistrySealedError
from supabase_lite.gateway.registry import Capability, CapabilityRegistry, Param, ParamKind


async def _noop(args: dict[str, Any]) -> Any:
    return None


def make_capability(name: str, *params: Param) -> Capability:
    return Capability(name=name, description=f"{name} description", handler=_noop, params=params)


# =============================================================================
# Registration and sealing
# =============================================================================


class TestRegistration:
    def test_register_and_lookup(self) -> None:
        registry = CapabilityRegistry()
        capability = make_capability("alpha")
        registry.register(capability)

        assert registry.lookup("alpha") is capability
        assert "alpha" in registry
        assert len(registry) == 1

    def test_lookup_unknown_returns_none(self) -> None:
        registry = CapabilityRegistry([make_capability("alpha")])
        assert registry.lookup("beta") is None

    def test_duplicate_name_rejected(self) -> None:
        registry = CapabilityRegistry([make_capability("alpha")])
        with pytest.raises(DuplicateNameError, match="alpha"):
            registry.register(make_capability("alpha"))

    def test_duplicate_in_constructor_rejected(self) -> None:
        with pytest.raises(DuplicateNameError):
            CapabilityRegistry([make_capability("alpha"), make_capability("alpha")])

    def test_register_after_seal_rejected(self) -> None:
        registry = CapabilityRegistry([make_capability("alpha")])
        registry.seal()

        with pytest.raises(RegistrySealedError, match="beta"):
            registry.register(make_capability("beta"))
        assert registry.names() == frozenset({"alpha"})

    def test_seal_is_idempotent(self) -> None:
        registry = CapabilityRegistry()
        registry.seal()
        registry.seal()
        assert registry.sealed


class TestListing:
    def test_list_preserves_registration_order(self) -> None:
        names = ["zeta", "alpha", "mu"]
        registry = CapabilityRegistry([make_capability(n) for n in names])
        assert [c.name for c in registry.list()] == names

    def test_list_is_idempotent(self) -> None:
        registry = CapabilityRegistry([make_capability("a"), make_capability("b")])
        registry.seal()
        assert registry.list() == registry.list()
        assert list(registry) == list(registry)


# =============================================================================
# Input schema
# =============================================================================


class TestInputSchema:
    def test_schema_kinds(self) -> None:
        capability = make_capability(
            "shape",
            Param("s", ParamKind.STRING, required=True, description="a string"),
            Param("n", ParamKind.NUMBER, default=1, minimum=1),
            Param("b", ParamKind.BOOLEAN),
            Param("arr", ParamKind.STRING_ARRAY, default=("public",)),
            Param("e", ParamKind.ENUM, choices=("x", "y"), default="x"),
        )
        schema = capability.input_schema()

        assert schema["type"] == "object"
        assert schema["required"] == ["s"]
        props = schema["properties"]
        assert props["s"] == {"type": "string", "description": "a string"}
        assert props["n"] == {"type": "number", "default": 1, "minimum": 1}
        assert props["b"] == {"type": "boolean"}
        assert props["arr"] == {"type": "array", "items": {"type": "string"}, "default": ["public"]}
        assert props["e"] == {"type": "string", "enum": ["x", "y"], "default": "x"}

    def test_no_required_key_when_nothing_required(self) -> None:
        assert "required" not in make_capability("empty").input_schema()

    def test_to_dict(self) -> None:
        result = make_capability("alpha").to_dict()
        assert set(result) == {"name", "description", "inputSchema"}

    def test_default_value_is_fresh_copy(self) -> None:
        param = Param("arr", ParamKind.STRING_ARRAY, default=("public",))
        first = param.default_value()
        first.append("auth")
        assert param.default_value() == ["public"]


class TestParamValidation:
    def test_enum_requires_choices(self) -> None:
        with pytest.raises(ValueError, match="choices"):
            Param("e", ParamKind.ENUM)

    def test_enum_default_must_be_a_choice(self) -> None:
        with pytest.raises(ValueError, match="default"):
            Param("e", ParamKind.ENUM, choices=("a",), default="b")

    def test_required_param_cannot_have_default(self) -> None:
        with pytest.raises(ValueError, match="required"):
            Param("s", ParamKind.STRING, required=True, default="x")

    def test_duplicate_param_names_rejected(self) -> None:
        with pytest.raises(ValueError, match="twice"):
            make_capability("dup", Param("a", ParamKind.STRING), Param("a", ParamKind.NUMBER))


# =============================================================================
# Declared surface
# =============================================================================


class TestDeclaredSurface:
    def test_eight_capabilities_in_order(self, make_backend) -> None:
        registry = build_registry(make_backend())
        assert [c.name for c in registry.list()] == [
            "list_tables",
            "list_extensions",
            "list_migrations",
            "apply_migration",
            "execute_sql",
            "get_logs",
            "get_advisors",
            "generate_typescript_types",
        ]

    def test_registry_is_sealed(self, make_backend) -> None:
        registry = build_registry(make_backend())
        with pytest.raises(RegistrySealedError):
            registry.register(make_capability("drop_database"))

    def test_apply_migration_shape(self, make_backend) -> None:
        schema = build_registry(make_backend()).lookup("apply_migration").input_schema()
        assert schema["required"] == ["sql"]
        assert set(schema["properties"]) == {"sql", "name"}

    def test_get_logs_shape(self, make_backend) -> None:
        props = build_registry(make_backend()).lookup("get_logs").input_schema()["properties"]
        assert props["service"]["enum"] == ["api", "postgres", "auth", "storage", "realtime"]
        assert props["service"]["default"] == "postgres"
        assert props["minutes"]["default"] == 1
        assert props["minutes"]["maximum"] == 7 * 24 * 60

    def test_get_advisors_shape(self, make_backend) -> None:
        props = build_registry(make_backend()).lookup("get_advisors").input_schema()["properties"]
        assert props["type"]["enum"] == ["all", "security", "performance"]
        assert props["type"]["default"] == "all"
