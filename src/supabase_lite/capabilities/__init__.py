from .catalog import ADVISOR_TYPES, LOG_SERVICES, build_registry

__all__ = ["ADVISOR_TYPES", "LOG_SERVICES", "build_registry"]
