"""
supabase_lite - Lightweight MCP gateway for Supabase database management

Exposes eight essential database commands instead of the full Supabase
toolset, keeping the tool surface (and its token cost) small.
"""

from .gateway.command import CommandGateway
from .gateway.envelope import Outcome, ResponseEnvelope
from .gateway.registry import Capability, CapabilityRegistry, Param, ParamKind

__all__ = [
    "Capability",
    "CapabilityRegistry",
    "CommandGateway",
    "Outcome",
    "Param",
    "ParamKind",
    "ResponseEnvelope",
]
__version__ = "0.1.0"
