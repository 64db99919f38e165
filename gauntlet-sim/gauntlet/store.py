"""Leaderboard persistence: a plain get/put list of RunResults.

Stores never raise: read or write failures are logged and the caller gets an
empty (or partially recovered) list.
"""

import json
import logging
import os
from pathlib import Path

from gauntlet.types import RunResult

logger = logging.getLogger(__name__)

DEFAULT_LEADERBOARD_PATH = Path(__file__).resolve().parent.parent / "output" / "leaderboard.json"


class LeaderboardStore:
    """Interface for leaderboard persistence."""

    def load_entries(self) -> list[RunResult]:
        raise NotImplementedError

    def save_entries(self, entries: list[RunResult]) -> None:
        raise NotImplementedError


class MemoryStore(LeaderboardStore):
    """In-process store, used by tests and one-off runs."""

    def __init__(self, entries: list = None):
        self._entries = list(entries or [])
        self.save_count = 0

    def load_entries(self) -> list[RunResult]:
        return list(self._entries)

    def save_entries(self, entries: list[RunResult]) -> None:
        self._entries = list(entries)
        self.save_count += 1


class JsonFileStore(LeaderboardStore):
    """Stores records as a JSON array in a local file."""

    def __init__(self, path=None):
        if path is None:
            path = os.environ.get("GAUNTLET_LEADERBOARD", DEFAULT_LEADERBOARD_PATH)
        self.path = Path(path)

    def load_entries(self) -> list[RunResult]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, encoding="utf-8") as f:
                records = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Failed to load leaderboard from %s: %s", self.path, e)
            return []

        if not isinstance(records, list):
            logger.warning("Leaderboard file %s is not a list, ignoring it", self.path)
            return []

        entries = []
        for i, record in enumerate(records):
            try:
                entries.append(RunResult.from_record(record))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed leaderboard record %d: %s", i, e)
        return entries

    def save_entries(self, entries: list[RunResult]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump([e.to_record() for e in entries], f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.warning("Failed to save leaderboard to %s: %s", self.path, e)
