"""Adapter-specific exceptions."""


class AdapterError(Exception):
    """Base exception for adapter errors."""


class ConnectionError(AdapterError):
    """Raised when the adapter cannot connect to the search backend."""


class SearchUnavailableError(AdapterError):
    """Raised when a search or suggestion call fails (transport, timeout, backend error)."""


class ConfigurationError(AdapterError):
    """Raised when adapter configuration is invalid."""
