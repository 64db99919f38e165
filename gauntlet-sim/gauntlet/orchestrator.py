"""Run orchestration: sequences stations, keeps time and misses, finalizes the run.

Rules:
- The timer starts on the first committed launch of the run, not at start_run().
- Success advances to the next station. A miss retries the station until it
  has already used miss_cap retries; the next miss force-advances it, so a
  run always finishes in a bounded number of attempts.
- Finalizing computes the degraded ("wet") flag and snapshots a RunResult.
- Calls after finalization, or before start_run(), are no-ops.
"""

import logging
import time
import uuid
from typing import Callable, Optional

from gauntlet.opponents import select_opponent
from gauntlet.session import StationSession
from gauntlet.stations import STATION_ORDER, get_station
from gauntlet.types import (
    Outcome,
    OutcomeRecorded,
    RunFinalized,
    RunResult,
    RunState,
    StationActivated,
    Vec2,
)
from gauntlet import arena

logger = logging.getLogger(__name__)


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


def _new_run_id() -> str:
    return str(uuid.uuid4())


class RunOrchestrator:
    """Owns one RunState and the single active StationSession."""

    def __init__(
        self,
        station_order: Optional[list] = None,
        miss_cap: int = arena.MISS_CAP,
        client_tag: str = f"desktop/{arena.CLIENT_VERSION}",
        clock: Callable[[], int] = _wall_clock_ms,
        id_factory: Callable[[], str] = _new_run_id,
    ):
        """Create an orchestrator.

        Args:
            station_order: Station preset keys in play order (default: all six).
            miss_cap: Retries allowed per station before a miss force-advances.
            client_tag: Stored with the result (device/version).
            clock: Wall-clock source in ms, used for timestamps only.
            id_factory: Run id generator; the run id also picks the opponent.
        """
        self.station_order = list(station_order or STATION_ORDER)
        self.miss_cap = max(0, miss_cap)
        self.client_tag = client_tag
        self._clock = clock
        self._id_factory = id_factory
        self._listeners: list = []

        self.run_state: Optional[RunState] = None
        self.session: Optional[StationSession] = None
        self.result: Optional[RunResult] = None
        self._stations: list = []

    # --- Presentation hooks ----------------------------------------------------

    def subscribe(self, listener: Callable) -> None:
        """Register a callback for StationActivated / OutcomeRecorded / RunFinalized."""
        self._listeners.append(listener)

    def _emit(self, event) -> None:
        for listener in self._listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Listener failed on %s", type(event).__name__)

    # --- Lifecycle ------------------------------------------------------------------

    def start_run(self) -> RunState:
        """Reset everything and activate the first station. The timer is not started."""
        run_id = self._id_factory()
        opponent_id = select_opponent(run_id)
        self.run_state = RunState(
            run_id=run_id,
            miss_count_by_station={sid: 0 for sid in self.station_order},
            opponent_id=opponent_id,
        )
        self._stations = [get_station(sid, opponent_id) for sid in self.station_order]
        self.result = None
        logger.info("Run %s started against %s", run_id, opponent_id)
        self._activate(0)
        return self.run_state

    def abandon(self) -> None:
        """Drop the run. Nothing is finalized or persisted."""
        if self.run_state is not None:
            logger.info("Run %s abandoned", self.run_state.run_id)
        self.run_state = None
        self.session = None
        self.result = None
        self._stations = []

    @property
    def is_active(self) -> bool:
        return self.run_state is not None and not self.run_state.finalized

    @property
    def current_station_id(self) -> Optional[str]:
        if not self.is_active:
            return None
        return self.station_order[self.run_state.current_station_index]

    @property
    def elapsed_ms(self) -> float:
        return self.run_state.elapsed_ms if self.run_state else 0.0

    def _activate(self, index: int) -> None:
        self.run_state.current_station_index = index
        self.session = StationSession(self._stations[index])
        logger.debug("Station %s activated", self.session.station_id)
        self._emit(StationActivated(station_id=self.session.station_id, index=index, attempt=0))

    # --- Input (delegated to the active session) ------------------------------------

    def begin_aim(self, point: Vec2) -> bool:
        if not self.is_active:
            return False
        return self.session.begin_aim(point)

    def update_aim(self, point: Vec2) -> Optional[Vec2]:
        if not self.is_active:
            return None
        return self.session.update_aim(point)

    def release_aim(self, point: Vec2) -> bool:
        if not self.is_active:
            return False
        launched = self.session.release_aim(point)
        if launched and not self.run_state.timer_running:
            self.run_state.timer_running = True
            self.run_state.start_time = self._clock()
            logger.debug("Timer started")
        return launched

    # --- Simulation ---------------------------------------------------------------

    def tick(self, dt_ms: float) -> Optional[Outcome]:
        """Advance the run by one frame. Returns the Outcome if an attempt resolved."""
        if not self.is_active:
            return None
        if self.run_state.timer_running:
            self.run_state.elapsed_ms += dt_ms

        outcome = self.session.tick(dt_ms)
        if outcome is not None:
            self._record(outcome)
        return outcome

    def _record(self, outcome: Outcome) -> None:
        session = self.session
        station_id = session.station_id
        attempt = session.attempts_used

        if outcome.is_success:
            self._emit(OutcomeRecorded(station_id, outcome, attempt, action="advance"))
            self.advance()
            return

        self.run_state.miss_count_by_station[station_id] += 1
        if attempt >= self.miss_cap:
            logger.info("Station %s failed out after %d misses", station_id, attempt + 1)
            self._emit(OutcomeRecorded(station_id, outcome, attempt, action="force_advance"))
            self.advance()
            return

        session.reset()
        self._emit(OutcomeRecorded(station_id, outcome, attempt, action="retry"))

    def advance(self) -> Optional[str]:
        """Move to the next station; finalizes after the last one.

        Returns the newly active station id, or None when the run finalized
        (or was already finalized).
        """
        if not self.is_active:
            return None
        next_index = self.run_state.current_station_index + 1
        if next_index >= len(self.station_order):
            self._finalize()
            return None
        self._activate(next_index)
        return self.station_order[next_index]

    def _finalize(self) -> None:
        state = self.run_state
        elapsed_ms = int(round(state.elapsed_ms))
        state.timer_running = False
        state.degraded = elapsed_ms > arena.DEGRADED_THRESHOLD_MS
        state.finalized = True
        self.session = None

        self.result = RunResult(
            player_label="",
            elapsed_ms=elapsed_ms,
            degraded=state.degraded,
            timestamp=self._clock(),
            opponent_id=state.opponent_id,
            client_tag=self.client_tag,
        )
        logger.info("Run %s finished in %d ms (degraded=%s)", state.run_id, self.result.elapsed_ms, state.degraded)
        self._emit(RunFinalized(result=self.result, miss_count_by_station=dict(state.miss_count_by_station)))
