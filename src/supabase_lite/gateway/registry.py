"""Capability registry - the fixed, sealed operation surface.

This module consolidates capability infrastructure:
- ParamKind / Param: declared input shape of one argument
- Capability: one exposed operation with its handler and renderer
- CapabilityRegistry: storage, lookup and sealing
"""

from __future__ import annotations

import copy
from collections.abc import Awaitable, Callable, Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .errors import DuplicateNameError, RegistrySealedError

Handler = Callable[[dict[str, Any]], Awaitable[Any]]
Renderer = Callable[[Any], str]


# =============================================================================
# Data Models
# =============================================================================


class ParamKind(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    STRING_ARRAY = "array<string>"
    ENUM = "enum<string>"


@dataclass(frozen=True)
class Param:
    """One declared argument of a capability."""

    name: str
    kind: ParamKind
    description: str = ""
    required: bool = False
    default: Any = None
    choices: tuple[str, ...] = ()
    minimum: float | None = None
    maximum: float | None = None

    def __post_init__(self) -> None:
        if self.kind is ParamKind.ENUM and not self.choices:
            raise ValueError(f"enum parameter '{self.name}' declares no choices")
        if self.kind is not ParamKind.ENUM and self.choices:
            raise ValueError(f"parameter '{self.name}' declares choices but is not an enum")
        if self.required and self.default is not None:
            raise ValueError(f"required parameter '{self.name}' cannot have a default")
        if self.kind is ParamKind.ENUM and self.default is not None and self.default not in self.choices:
            raise ValueError(f"default for '{self.name}' is not one of its choices")

    @property
    def has_default(self) -> bool:
        return self.default is not None

    def default_value(self) -> Any:
        """Return a fresh copy of the default so callers never share mutable state."""
        if isinstance(self.default, tuple):
            return list(self.default)
        return copy.deepcopy(self.default)

    def schema(self) -> dict[str, Any]:
        if self.kind is ParamKind.STRING_ARRAY:
            result: dict[str, Any] = {"type": "array", "items": {"type": "string"}}
        elif self.kind is ParamKind.ENUM:
            result = {"type": "string", "enum": list(self.choices)}
        else:
            result = {"type": self.kind.value}

        if self.description:
            result["description"] = self.description
        if self.has_default:
            result["default"] = self.default_value()
        if self.minimum is not None:
            result["minimum"] = self.minimum
        if self.maximum is not None:
            result["maximum"] = self.maximum
        return result


def _render_repr(result: Any) -> str:
    return repr(result)


@dataclass(frozen=True)
class Capability:
    """One named operation the gateway is willing to forward."""

    name: str
    description: str
    handler: Handler
    params: tuple[Param, ...] = ()
    render: Renderer = field(default=_render_repr)

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for param in self.params:
            if param.name in seen:
                raise ValueError(f"capability '{self.name}' declares parameter '{param.name}' twice")
            seen.add(param.name)

    def input_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {
            "type": "object",
            "properties": {p.name: p.schema() for p in self.params},
        }
        required = [p.name for p in self.params if p.required]
        if required:
            schema["required"] = required
        return schema

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema(),
        }


# =============================================================================
# Registry
# =============================================================================


class CapabilityRegistry:
    """Ordered, sealable collection of capabilities keyed by name."""

    def __init__(self, capabilities: Iterable[Capability] = ()) -> None:
        self._capabilities: dict[str, Capability] = {}
        self._sealed = False
        for capability in capabilities:
            self.register(capability)

    # --- Initialization ---

    def register(self, capability: Capability) -> None:
        """Add a capability. Only allowed before the registry is sealed."""
        if self._sealed:
            raise RegistrySealedError(capability.name)
        if capability.name in self._capabilities:
            raise DuplicateNameError(capability.name)
        self._capabilities[capability.name] = capability

    def seal(self) -> None:
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    # --- Lookup ---

    def lookup(self, name: str) -> Capability | None:
        return self._capabilities.get(name)

    def list(self) -> tuple[Capability, ...]:
        """Return every capability in registration order."""
        return tuple(self._capabilities.values())

    def names(self) -> frozenset[str]:
        return frozenset(self._capabilities)

    def __len__(self) -> int:
        return len(self._capabilities)

    def __contains__(self, name: object) -> bool:
        return name in self._capabilities

    def __iter__(self) -> Iterator[Capability]:
        return iter(self.list())
