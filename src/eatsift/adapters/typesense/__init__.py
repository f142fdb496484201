"""Typesense external index adapter."""

from eatsift.adapters.typesense.adapter import TypesenseAdapter

__all__ = ["TypesenseAdapter"]
