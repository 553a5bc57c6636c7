"""Tests for TypeScript interface generation."""

import pytest

from supabase_lite.capabilities.typescript import HEADER, interface_name, property_name, render_types, ts_type


@pytest.mark.parametrize(
    ("data_type", "udt_name", "expected"),
    [
        ("integer", "int4", "number"),
        ("bigint", "int8", "number"),
        ("numeric", "numeric", "number"),
        ("text", "text", "string"),
        ("uuid", "uuid", "string"),
        ("boolean", "bool", "boolean"),
        ("timestamp with time zone", "timestamptz", "string"),
        ("jsonb", "jsonb", "any"),
        ("ARRAY", "_text", "string[]"),
        ("ARRAY", "_int4", "number[]"),
        ("USER-DEFINED", "mood", "string"),
        ("tsvector", "tsvector", "any"),
    ],
)
def test_ts_type(data_type: str, udt_name: str, expected: str) -> None:
    assert ts_type(data_type, udt_name) == expected


def test_interface_name() -> None:
    assert interface_name("public", "user_profiles") == "UserProfiles"
    assert interface_name("auth", "users") == "AuthUsers"


def test_property_name_quotes_non_identifiers() -> None:
    assert property_name("created_at") == "created_at"
    assert property_name("first name") == '"first name"'


def test_render_types() -> None:
    columns = [
        {"table_schema": "public", "table_name": "users", "column_name": "id", "data_type": "uuid", "is_nullable": "NO"},
        {
            "table_schema": "public",
            "table_name": "users",
            "column_name": "email",
            "data_type": "text",
            "is_nullable": "YES",
        },
        {
            "table_schema": "public",
            "table_name": "posts",
            "column_name": "tags",
            "data_type": "ARRAY",
            "udt_name": "_text",
            "is_nullable": "NO",
        },
    ]

    output = render_types(columns)

    assert output.startswith(HEADER)
    assert "export interface Users {\n  id: string;\n  email: string | null;\n}" in output
    assert "export interface Posts {\n  tags: string[];\n}" in output
    assert output.index("interface Users") < output.index("interface Posts")
