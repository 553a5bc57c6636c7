"""Uniform response envelope returned for every invocation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .errors import CapabilityError, GatewayError, TransportError, ValidationError


class Outcome(str, Enum):
    SUCCESS = "Success"
    CAPABILITY_ERROR = "CapabilityError"
    VALIDATION_ERROR = "ValidationError"
    TRANSPORT_ERROR = "TransportError"


@dataclass(frozen=True)
class ResponseEnvelope:
    """Exactly one of ``payload`` (on success) or ``message`` (on failure) is set."""

    outcome: Outcome
    payload: str | None = None
    message: str | None = None

    def __post_init__(self) -> None:
        if self.outcome is Outcome.SUCCESS:
            if self.payload is None or self.message is not None:
                raise ValueError("Success envelope requires a payload and no message")
        elif self.message is None or self.payload is not None:
            raise ValueError(f"{self.outcome.value} envelope requires a message and no payload")

    @classmethod
    def success(cls, payload: str) -> ResponseEnvelope:
        return cls(outcome=Outcome.SUCCESS, payload=payload)

    @classmethod
    def failure(cls, outcome: Outcome, message: str) -> ResponseEnvelope:
        return cls(outcome=outcome, message=message)

    @classmethod
    def from_error(cls, error: GatewayError) -> ResponseEnvelope:
        if isinstance(error, ValidationError):
            outcome = Outcome.VALIDATION_ERROR
        elif isinstance(error, TransportError):
            outcome = Outcome.TRANSPORT_ERROR
        elif isinstance(error, CapabilityError):
            outcome = Outcome.CAPABILITY_ERROR
        else:
            raise TypeError(f"no outcome for {type(error).__name__}")
        return cls.failure(outcome, str(error) or type(error).__name__)

    @property
    def is_success(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    def to_text(self) -> str:
        """Render for display: the payload, or the outcome category and message."""
        if self.is_success:
            return self.payload  # type: ignore[return-value]
        return f"{self.outcome.value}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"outcome": self.outcome.value}
        if self.is_success:
            result["payload"] = self.payload
        else:
            result["message"] = self.message
        return result
