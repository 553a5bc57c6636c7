"""Validate and normalize raw invocation arguments against a declared input shape."""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from .errors import ValidationError
from .registry import Capability, Param, ParamKind

_TRUE_STRINGS = frozenset({"true", "1", "yes"})
_FALSE_STRINGS = frozenset({"false", "0", "no"})


def normalize_arguments(capability: Capability, raw: Mapping[str, Any] | None) -> dict[str, Any]:
    """Return the normalized argument dict for ``capability``.

    Defaults are applied for absent optional parameters, values are coerced to
    their declared kind, and keys the capability does not declare are dropped.

    Raises:
        ValidationError: If a required argument is missing or a value cannot
            be coerced to its declared kind.
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise ValidationError(
            f"{capability.name}: arguments must be an object, got {type(raw).__name__}"
        )

    normalized: dict[str, Any] = {}
    for param in capability.params:
        value = raw.get(param.name)
        if _is_missing(value):
            if param.required:
                raise ValidationError(f"{capability.name}: missing required argument '{param.name}'")
            if param.has_default:
                normalized[param.name] = param.default_value()
            continue
        normalized[param.name] = _coerce(capability.name, param, value)
    return normalized


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def _coerce(capability_name: str, param: Param, value: Any) -> Any:
    where = f"{capability_name}: argument '{param.name}'"

    if param.kind is ParamKind.STRING:
        if not isinstance(value, str):
            raise ValidationError(f"{where} must be a string, got {type(value).__name__}")
        return _check_text(where, value)

    if param.kind is ParamKind.ENUM:
        if not isinstance(value, str) or value not in param.choices:
            choices = ", ".join(param.choices)
            raise ValidationError(f"{where} must be one of [{choices}], got {value!r}")
        return value

    if param.kind is ParamKind.NUMBER:
        number = _coerce_number(where, value)
        if param.minimum is not None and number < param.minimum:
            raise ValidationError(f"{where} must be >= {param.minimum:g}, got {value!r}")
        if param.maximum is not None and number > param.maximum:
            raise ValidationError(f"{where} must be <= {param.maximum:g}, got {value!r}")
        return number

    if param.kind is ParamKind.BOOLEAN:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in _TRUE_STRINGS:
            return True
        if isinstance(value, str) and value.strip().lower() in _FALSE_STRINGS:
            return False
        raise ValidationError(f"{where} must be a boolean, got {value!r}")

    if param.kind is ParamKind.STRING_ARRAY:
        # A bare string is accepted as a one-element list.
        if isinstance(value, str):
            return [_check_text(where, value)]
        if not isinstance(value, (list, tuple)):
            raise ValidationError(f"{where} must be an array of strings, got {type(value).__name__}")
        if not all(isinstance(item, str) for item in value):
            raise ValidationError(f"{where} must contain only strings")
        return [_check_text(where, item) for item in value]

    raise ValidationError(f"{where} has unsupported kind {param.kind.value}")


def _check_text(where: str, value: str) -> str:
    # Postgres text cannot hold NUL.
    if "\x00" in value:
        raise ValidationError(f"{where} must not contain NUL bytes")
    return value


def _coerce_number(where: str, value: Any) -> int | float:
    # bool is an int subclass; true/false are not numbers here.
    if isinstance(value, bool):
        raise ValidationError(f"{where} must be a number, got {value!r}")
    number: int | float | None = None
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        try:
            number = int(text)
        except ValueError:
            try:
                number = float(text)
            except ValueError:
                pass
    if number is None:
        raise ValidationError(f"{where} must be a number, got {value!r}")
    if isinstance(number, float) and not math.isfinite(number):
        raise ValidationError(f"{where} must be a finite number, got {value!r}")
    return number
