"""Search adapter layer — Pluggable connectors for search backends.

Built-in adapters:
  - relational: ranking function exposed as a PostgREST / Supabase RPC
  - typesense: Typesense collection with grouping and native highlighting

Implement ``SearchAdapter`` to connect your own search backend.
"""
