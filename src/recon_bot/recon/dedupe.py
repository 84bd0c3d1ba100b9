"""Suppress repeat notes for the same message within a trailing window.

Entries live in a bounded TTLCache: expired entries are evicted on access
and the least recently used ones are dropped when the cache is full, so
memory stays bounded no matter how many messages are noted. State is
in-process only and is lost on restart.
"""

import time
from collections.abc import Callable, Hashable

from cachetools import TTLCache

from recon_bot.config import get_settings

DedupeKey = tuple[str, str]  # (channel_id, message_ts)


class DedupeStore:
    """Tracks which (channel, message) pairs already produced a note.

    ``claim`` and ``release`` guard the window between the dedupe check and
    the note submission. They are synchronous, so under a single event loop
    a claim cannot interleave with another event's check.
    """

    def __init__(
        self,
        window_seconds: float = 300,
        max_entries: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.window_seconds = window_seconds
        self._noted: TTLCache = TTLCache(maxsize=max_entries, ttl=window_seconds, timer=clock)
        self._in_flight: set[Hashable] = set()

    def was_recently_noted(self, key: DedupeKey) -> bool:
        return key in self._noted

    def mark_noted(self, key: DedupeKey) -> None:
        self._noted[key] = True

    def claim(self, key: DedupeKey) -> bool:
        """Reserve the key for one pipeline run.

        Returns False if the key was noted within the window or another run
        already holds it.
        """
        if key in self._in_flight or self.was_recently_noted(key):
            return False
        self._in_flight.add(key)
        return True

    def release(self, key: DedupeKey) -> None:
        self._in_flight.discard(key)

    def __len__(self) -> int:
        return len(self._noted)


_store: DedupeStore | None = None


def get_dedupe_store() -> DedupeStore:
    """Return the process-wide store, sized from settings on first use."""
    global _store
    if _store is None:
        settings = get_settings()
        _store = DedupeStore(
            window_seconds=settings.note_dedupe_window_seconds,
            max_entries=settings.note_dedupe_max_entries,
        )
    return _store


def reset_dedupe_store() -> None:
    """Drop the process-wide store. Used for testing."""
    global _store
    _store = None
