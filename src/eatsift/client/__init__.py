"""EatSift Python SDK — Client library for the EatSift API.

Provides async and sync clients plus a controller for interactive search
boxes.

Quick start::

    from eatsift.client import EatSiftClient

    client = EatSiftClient("http://localhost:8080")
    response = client.search("brunch", city="Lisbon")

    for suggestion in client.suggestions("piz")["suggestions"]:
        print(suggestion["kind"], suggestion["term"])
"""

from eatsift.client.client import AsyncEatSiftClient, EatSiftClient
from eatsift.client.controller import SearchController

__all__ = ["AsyncEatSiftClient", "EatSiftClient", "SearchController"]
