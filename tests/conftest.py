"""Shared fixtures: an in-memory backend double and gateway builders."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

import pytest

from supabase_lite.backend.base import SQL
from supabase_lite.capabilities import build_registry
from supabase_lite.gateway.command import CommandGateway


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class FakeBackend:
    """Backend double that replays queued results and records every call.

    Each queued item is returned as-is, raised if it is an exception, or
    called with ``(operation, arguments)`` if it is callable. An exhausted
    queue answers None.
    """

    def __init__(self, *results: Any, operations: Iterable[str] = (SQL,)) -> None:
        self._results = list(results)
        self._operations = set(operations)
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def supports(self, operation: str) -> bool:
        return operation in self._operations

    async def execute(self, operation: str, arguments: Mapping[str, Any]) -> Any:
        self.calls.append((operation, dict(arguments)))
        if not self._results:
            return None
        result = self._results.pop(0)
        if isinstance(result, BaseException):
            raise result
        if callable(result):
            return result(operation, arguments)
        return result

    @property
    def queries(self) -> list[str]:
        return [args["query"] for op, args in self.calls if op == SQL]


@pytest.fixture
def make_backend() -> type[FakeBackend]:
    return FakeBackend


@pytest.fixture
def make_gateway() -> Callable[..., CommandGateway]:
    def build(backend: Any, **kwargs: Any) -> CommandGateway:
        return CommandGateway(build_registry(backend), **kwargs)

    return build
