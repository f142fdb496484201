"""Base adapter interface — Abstract classes for search backend connectors."""

from eatsift.adapters.base.adapter import AdapterHealth, SearchAdapter
from eatsift.adapters.base.records import RecordStore, RestaurantTags
from eatsift.adapters.base.registry import AdapterRegistry

__all__ = ["AdapterHealth", "AdapterRegistry", "RecordStore", "RestaurantTags", "SearchAdapter"]
