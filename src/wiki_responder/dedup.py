"""Bounded in-memory cache of recently seen Slack delivery identifiers.

Holds at most ``capacity`` event ids in insertion order. Admitting an id past
capacity evicts the single oldest id (FIFO, lookups do not refresh position).
State lives for the lifetime of the process only: it is empty after a restart
and is not shared between instances. The thread-history check in
``slack.history`` covers the gaps this leaves.
"""

import logging
from collections import deque

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 100


class RecentEventCache:
    """FIFO-bounded set of delivery identifiers."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._order: deque[str] = deque()
        self._members: set[str] = set()

    def seen(self, event_id: str) -> bool:
        """Return True if ``event_id`` was already recorded, otherwise record it and return False."""
        if event_id in self._members:
            logger.info("Duplicate delivery detected", extra={"event_id": event_id})
            return True

        self._members.add(event_id)
        self._order.append(event_id)

        if len(self._order) > self.capacity:
            oldest = self._order.popleft()
            self._members.discard(oldest)

        return False

    def forget(self, event_id: str) -> None:
        """Drop ``event_id`` so a redelivery of it is processed again. Unknown ids are ignored."""
        if event_id in self._members:
            self._members.discard(event_id)
            self._order.remove(event_id)

    def __contains__(self, event_id: object) -> bool:
        return event_id in self._members

    def __len__(self) -> int:
        return len(self._order)
