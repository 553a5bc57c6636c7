"""Command gateway - validate, dispatch and normalize one invocation."""

from __future__ import annotations

import time
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import anyio

from ..logger import get_logger
from .arguments import normalize_arguments
from .envelope import Outcome, ResponseEnvelope
from .errors import CapabilityError, GatewayError, TransportError, ValidationError
from .registry import Capability, CapabilityRegistry

_log = get_logger("supabase_lite.gateway.command")


class InvocationState(str, Enum):
    RECEIVED = "received"
    VALIDATED = "validated"
    DISPATCHED = "dispatched"
    COMPLETED = "completed"


_TRANSITIONS: dict[InvocationState, frozenset[InvocationState]] = {
    InvocationState.RECEIVED: frozenset({InvocationState.VALIDATED, InvocationState.COMPLETED}),
    InvocationState.VALIDATED: frozenset({InvocationState.DISPATCHED, InvocationState.COMPLETED}),
    InvocationState.DISPATCHED: frozenset({InvocationState.COMPLETED}),
    InvocationState.COMPLETED: frozenset(),
}


@dataclass
class Invocation:
    """One call attempt. Lives only for the duration of ``CommandGateway.handle``."""

    capability_name: str
    arguments: Any
    invocation_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    state: InvocationState = InvocationState.RECEIVED
    started_at: float = field(default_factory=time.perf_counter)

    def advance(self, state: InvocationState) -> None:
        if state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"invalid invocation transition {self.state.value} -> {state.value}")
        self.state = state

    @property
    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self.started_at) * 1000


class CommandGateway:
    """Routes named invocations to registered capabilities.

    Every call to :meth:`handle` yields exactly one :class:`ResponseEnvelope`.
    Nothing is retried here; retries are new invocations made by the caller.
    """

    def __init__(self, registry: CapabilityRegistry, *, timeout: float | None = None) -> None:
        registry.seal()
        self._registry = registry
        self._timeout = timeout

    @property
    def registry(self) -> CapabilityRegistry:
        return self._registry

    def list_capabilities(self) -> list[dict[str, Any]]:
        return [capability.to_dict() for capability in self._registry.list()]

    async def handle(
        self,
        capability_name: str,
        raw_arguments: Mapping[str, Any] | None = None,
        *,
        cancel_event: anyio.Event | None = None,
    ) -> ResponseEnvelope:
        """Run one invocation through Received -> Validated -> Dispatched -> Completed.

        Args:
            capability_name: Name of the capability to invoke
            raw_arguments: Caller-supplied arguments, validated against the capability's params
            cancel_event: Optional event; setting it while the backend call is in flight
                abandons the call and yields a TransportError envelope

        Returns:
            The terminal response envelope
        """
        invocation = Invocation(capability_name=capability_name, arguments=raw_arguments)
        _log.info(
            f"Capability: {capability_name}",
            extra={
                "event": "invocation_received",
                "invocation_id": invocation.invocation_id,
                "capability": capability_name,
                "input_args": raw_arguments,
            },
        )

        try:
            capability, arguments = self._validate(invocation)
            payload = await self._dispatch(invocation, capability, arguments, cancel_event)
            envelope = ResponseEnvelope.success(payload)
        except GatewayError as exc:
            envelope = ResponseEnvelope.from_error(exc)
        except anyio.get_cancelled_exc_class():
            envelope = ResponseEnvelope.failure(Outcome.TRANSPORT_ERROR, "invocation cancelled by the host")
            self._complete(invocation, envelope)
            raise

        return self._complete(invocation, envelope)

    # --- Steps ---

    def _validate(self, invocation: Invocation) -> tuple[Capability, dict[str, Any]]:
        capability = self._registry.lookup(invocation.capability_name)
        if capability is None:
            raise ValidationError(f"Unknown capability: '{invocation.capability_name}'")

        arguments = normalize_arguments(capability, invocation.arguments)
        invocation.advance(InvocationState.VALIDATED)
        _log.debug(
            f"Capability: {capability.name} validated",
            extra={
                "event": "invocation_validated",
                "invocation_id": invocation.invocation_id,
                "capability": capability.name,
                "normalized_args": arguments,
            },
        )
        return capability, arguments

    async def _dispatch(
        self,
        invocation: Invocation,
        capability: Capability,
        arguments: dict[str, Any],
        cancel_event: anyio.Event | None,
    ) -> str:
        invocation.advance(InvocationState.DISPATCHED)
        _log.debug(
            f"Capability: {capability.name} dispatched",
            extra={
                "event": "invocation_dispatched",
                "invocation_id": invocation.invocation_id,
                "capability": capability.name,
            },
        )

        try:
            with anyio.fail_after(self._timeout):
                if cancel_event is None:
                    result = await capability.handler(arguments)
                else:
                    result = await _call_unless_cancelled(capability, arguments, cancel_event)
        except TimeoutError as exc:
            if self._timeout is None:
                raise TransportError(f"{capability.name}: backend call timed out") from exc
            raise TransportError(f"{capability.name}: backend did not respond within {self._timeout:g}s") from exc
        except GatewayError:
            raise
        except Exception as exc:
            _log.error(
                f"Capability: {capability.name} handler raised unexpectedly",
                extra={
                    "event": "invocation_handler_error",
                    "invocation_id": invocation.invocation_id,
                    "capability": capability.name,
                    "error_type": type(exc).__name__,
                },
                exc_info=True,
            )
            raise CapabilityError(f"{capability.name}: {type(exc).__name__}: {exc}") from exc

        try:
            return capability.render(result)
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise TransportError(
                f"{capability.name}: malformed backend response: {type(exc).__name__}: {exc}"
            ) from exc

    def _complete(self, invocation: Invocation, envelope: ResponseEnvelope) -> ResponseEnvelope:
        invocation.advance(InvocationState.COMPLETED)
        duration_ms = invocation.elapsed_ms
        extra = {
            "event": "invocation_completed",
            "invocation_id": invocation.invocation_id,
            "capability": invocation.capability_name,
            "outcome": envelope.outcome.value,
            "duration_ms": duration_ms,
        }
        if envelope.is_success:
            _log.info(f"Capability: {invocation.capability_name} [Duration: {duration_ms:.2f}ms]", extra=extra)
        else:
            _log.warning(
                f"Capability: {invocation.capability_name} {envelope.outcome.value} [Duration: {duration_ms:.2f}ms]",
                extra={**extra, "error_message": envelope.message},
            )
        return envelope


async def _call_unless_cancelled(
    capability: Capability,
    arguments: dict[str, Any],
    cancel_event: anyio.Event,
) -> Any:
    """Await the handler, giving up as soon as ``cancel_event`` is set."""
    results: list[Any] = []
    errors: list[BaseException] = []

    async with anyio.create_task_group() as tg:

        async def run_handler() -> None:
            try:
                results.append(await capability.handler(arguments))
            except Exception as exc:
                errors.append(exc)
            finally:
                tg.cancel_scope.cancel()

        async def watch_cancel() -> None:
            await cancel_event.wait()
            tg.cancel_scope.cancel()

        tg.start_soon(run_handler)
        tg.start_soon(watch_cancel)

    if errors:
        raise errors[0]
    if not results:
        raise TransportError(f"{capability.name}: invocation cancelled before the backend responded")
    return results[0]
