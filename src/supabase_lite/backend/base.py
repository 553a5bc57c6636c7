"""Backend protocol - the generic "execute remote operation" boundary."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

# Operation identifiers understood by backends.
SQL = "sql"
LOGS = "logs"
TABLE_PROBE = "table_probe"


class Backend(Protocol):
    """Protocol for the platform collaborator the gateway forwards to.

    Implementations must provide:
    - supports(): whether an operation is available with the current configuration
    - execute(): run one operation and return its structured result

    ``execute`` raises CapabilityError when the platform rejects the operation
    and TransportError when the platform could not be reached or answered with
    something unparsable.
    """

    def supports(self, operation: str) -> bool: ...

    async def execute(self, operation: str, arguments: Mapping[str, Any]) -> Any: ...
