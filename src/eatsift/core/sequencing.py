"""Request sequencing — Debounce plus "latest call wins" for racing requests.

Keystroke-driven suggestion requests and repeated search submissions can be
in flight at the same time and resolve out of order. ``RequestSequencer``
gives every call a monotonically increasing token. A call:

1. takes the next token,
2. waits the debounce delay (if any) and gives up if a newer call was
   issued meanwhile; the newer call restarted the delay,
3. runs the request,
4. applies the response only if its token is still the latest.

Superseded calls are not cancelled; they run to completion and their
results are discarded.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

_T = TypeVar("_T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Outcome(Generic[_T]):
    """What happened to one sequenced call."""

    token: int
    applied: bool
    value: _T | None = None


class RequestSequencer(Generic[_T]):
    """Sequence-number guard for one stream of requests.

    Args:
        delay: Debounce delay in seconds before a request is issued.
        name: Label used in log messages.
    """

    def __init__(self, delay: float = 0.0, name: str = "requests") -> None:
        self._delay = delay
        self._name = name
        self._latest = 0

    @property
    def latest(self) -> int:
        """Token of the most recently issued call."""
        return self._latest

    def next_token(self) -> int:
        """Issue a new token, making every earlier call stale."""
        self._latest += 1
        return self._latest

    def is_current(self, token: int) -> bool:
        return token == self._latest

    async def run(
        self,
        request: Callable[[], Awaitable[_T]],
        apply: Callable[[_T], None],
    ) -> Outcome[_T]:
        """Debounce, run ``request`` and hand its result to ``apply`` if still current."""
        token = self.next_token()

        if self._delay > 0:
            await asyncio.sleep(self._delay)
            if not self.is_current(token):
                logger.debug("%s #%d superseded during debounce", self._name, token)
                return Outcome(token=token, applied=False)

        value = await request()
        if not self.is_current(token):
            logger.debug("%s #%d resolved after #%d; discarding", self._name, token, self._latest)
            return Outcome(token=token, applied=False, value=value)

        apply(value)
        return Outcome(token=token, applied=True, value=value)
