"""
In-memory event cache.

The whole cache is one immutable snapshot that is replaced wholesale at the
end of each refresh, so readers always see a complete previous or next
state and never a partially written one.
"""

import logging
import time
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple

from pulse.schemas.event import CanonicalEvent

logger = logging.getLogger(__name__)

class CacheSnapshot(NamedTuple):
    """Events plus the wall-clock time (epoch seconds) they were stored."""
    events: Tuple[CanonicalEvent, ...]
    timestamp: Optional[float]

class EventStore:
    """Holds the most recently completed refresh."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._snapshot = CacheSnapshot(events=(), timestamp=None)

    def replace(self, events: Sequence[CanonicalEvent]) -> CacheSnapshot:
        """Atomically swap in a new event list."""
        snapshot = CacheSnapshot(events=tuple(events), timestamp=self._clock())
        self._snapshot = snapshot
        logger.info(f"Event cache replaced with {len(snapshot.events)} events")
        return snapshot

    def snapshot(self) -> CacheSnapshot:
        return self._snapshot

    @property
    def size(self) -> int:
        return len(self._snapshot.events)

    def is_empty(self) -> bool:
        return not self._snapshot.events

    def age_minutes(self) -> Optional[int]:
        timestamp = self._snapshot.timestamp
        if timestamp is None:
            return None
        return round((self._clock() - timestamp) / 60)

    def raw(self) -> Dict[str, Any]:
        """Copy of the cached events and their timestamp."""
        snapshot = self._snapshot
        events: List[CanonicalEvent] = list(snapshot.events)
        return {'events': events, 'timestamp': snapshot.timestamp}
