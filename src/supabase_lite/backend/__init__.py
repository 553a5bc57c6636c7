from .base import LOGS, SQL, TABLE_PROBE, Backend
from .supabase import SupabaseBackend

__all__ = ["LOGS", "SQL", "TABLE_PROBE", "Backend", "SupabaseBackend"]
