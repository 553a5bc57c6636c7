"""Gateway errors."""

from __future__ import annotations


class GatewayError(Exception):
    """Base for every runtime failure that ends up inside a response envelope."""


class ValidationError(GatewayError):
    """Unknown capability name or bad arguments. Raised before any backend contact."""


class CapabilityError(GatewayError):
    """The backend was reached but rejected the operation."""

    def __init__(self, message: str, *, code: str | None = None) -> None:
        self.code = code
        super().__init__(message)


class TransportError(GatewayError):
    """The backend could not be reached, timed out, or answered with something unparsable."""


class DuplicateNameError(ValueError):
    """Raised when registering a capability whose name is already taken."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Capability already registered: {name}")


class RegistrySealedError(RuntimeError):
    """Raised when registering into a registry that has been sealed."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Registry is sealed; cannot register capability: {name}")


class ConfigError(ValueError):
    pass
