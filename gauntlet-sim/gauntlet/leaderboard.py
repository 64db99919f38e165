"""Leaderboard ranking: a bounded list of RunResults in domain order.

Ordering: clean runs before degraded ("wet") runs regardless of time, then
ascending elapsed time. Equal keys keep insertion order, so a newcomer that
ties an existing entry ranks below it.
"""

from typing import Optional

from gauntlet.errors import ConfigurationError
from gauntlet.store import LeaderboardStore, MemoryStore
from gauntlet.types import RunResult
from gauntlet import arena


def _sort_key(entry: RunResult) -> tuple:
    return (entry.degraded, entry.elapsed_ms)


class LeaderboardRankingService:
    """Top-N leaderboard backed by a persistence store."""

    def __init__(self, store: Optional[LeaderboardStore] = None, capacity: int = arena.LEADERBOARD_CAPACITY):
        if capacity < 1:
            raise ConfigurationError("capacity must be >= 1", {"capacity": capacity})
        self.store = store if store is not None else MemoryStore()
        self.capacity = capacity
        self._entries: list[RunResult] = sorted(self.store.load_entries(), key=_sort_key)[:capacity]

    def insert(self, entry: RunResult) -> int:
        """Add an entry and return its 1-indexed rank.

        A rank greater than capacity means the entry was not kept: the stored
        list is unchanged in membership. Inserting an entry that is already on
        the board returns its current rank and stores nothing.
        """
        for i, existing in enumerate(self._entries):
            if existing is entry:
                return i + 1
        ranked = sorted(self._entries + [entry], key=_sort_key)
        rank = next(i for i, e in enumerate(ranked) if e is entry) + 1
        # Single assignment: readers see the old list or the new one, never a partial sort
        self._entries = ranked[: self.capacity]
        self.store.save_entries(self._entries)
        return rank

    def is_top_score(self, elapsed_ms: int, degraded: bool) -> bool:
        """Whether a run with this time would make the list if inserted now."""
        if len(self._entries) < self.capacity:
            return True
        return (degraded, elapsed_ms) < _sort_key(self._entries[-1])

    def rank_for(self, elapsed_ms: int, degraded: bool) -> int:
        """Hypothetical rank of a run without inserting it."""
        key = (degraded, elapsed_ms)
        return 1 + sum(1 for e in self._entries if _sort_key(e) <= key)

    def entries(self) -> list[RunResult]:
        return list(self._entries)

    def top(self, count: int = arena.LEADERBOARD_CAPACITY) -> list[RunResult]:
        return self._entries[:count]

    def clear(self) -> None:
        self._entries = []
        self.store.save_entries(self._entries)
