"""Relational ranking adapter (PostgREST / Supabase)."""

from eatsift.adapters.relational.adapter import RelationalAdapter
from eatsift.adapters.relational.records import PostgrestRecordStore

__all__ = ["PostgrestRecordStore", "RelationalAdapter"]
