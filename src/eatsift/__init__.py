"""EatSift — Restaurant search, highlighting and autocomplete over pluggable backends."""

__version__ = "0.1.0"
