"""Autoplay: drive a RunOrchestrator with an AIPlayer at a fixed frame rate.

Used by the CLI and the analysis charts. Every attempt is played through the
same public calls a host game would make: begin/update/release aim, then
tick() once per frame.
"""

from dataclasses import dataclass, field
from typing import Optional

from gauntlet.ai_player import AIPlayer
from gauntlet.leaderboard import LeaderboardRankingService
from gauntlet.orchestrator import RunOrchestrator
from gauntlet.types import Outcome, RunResult
from gauntlet import arena


@dataclass
class AttemptRecord:
    """One aim -> launch -> resolve cycle."""
    station_id: str
    attempt: int
    outcome: Outcome
    frames: int  # frames in flight


@dataclass
class RunReport:
    """Everything that happened in one autoplayed run."""
    result: Optional[RunResult]
    attempts: list  # list[AttemptRecord]
    miss_count_by_station: dict
    rank: Optional[int] = None
    stats: dict = field(default_factory=dict)


def _idle(orchestrator: RunOrchestrator, duration_ms: float) -> None:
    frames = int(duration_ms / arena.FRAME_MS)
    for _ in range(frames):
        orchestrator.tick(arena.FRAME_MS)


def simulate_attempt(orchestrator: RunOrchestrator, player: AIPlayer) -> Optional[AttemptRecord]:
    """Play a single attempt at the active station.

    Returns None if the run is not active or the attempt never resolved.
    """
    session = orchestrator.session
    if not orchestrator.is_active or session is None:
        return None

    station = session.station
    attempt = session.attempts_used
    anchor, release = player.aim(station, attempt, orchestrator.run_state.opponent_id)

    _idle(orchestrator, player.think_time_ms())

    orchestrator.begin_aim(anchor)
    orchestrator.update_aim((anchor + release) * 0.5)
    orchestrator.update_aim(release)
    if not orchestrator.release_aim(release):
        return None

    max_frames = int(station.rules.max_attempt_ms / arena.FRAME_MS) + 2
    for frame in range(1, max_frames + 1):
        outcome = orchestrator.tick(arena.FRAME_MS)
        if outcome is not None:
            return AttemptRecord(station_id=station.id, attempt=attempt, outcome=outcome, frames=frame)
    return None


def simulate_run(
    player: AIPlayer,
    orchestrator: Optional[RunOrchestrator] = None,
    leaderboard: Optional[LeaderboardRankingService] = None,
) -> RunReport:
    """Play a full run start to finish.

    The miss cap bounds the number of attempts, so this always finishes. If a
    leaderboard is given the labelled result is inserted and its rank reported.
    """
    orchestrator = orchestrator or RunOrchestrator()
    orchestrator.start_run()
    attempts: list[AttemptRecord] = []

    # Hard stop well past what the miss cap allows
    max_attempts = len(orchestrator.station_order) * (orchestrator.miss_cap + 1) + 1

    for _ in range(max_attempts):
        if not orchestrator.is_active:
            break
        record = simulate_attempt(orchestrator, player)
        if record is None:
            break
        attempts.append(record)

    result = orchestrator.result
    rank = None
    if result is not None:
        result = result.with_label(player.initials)
        if leaderboard is not None:
            rank = leaderboard.insert(result)

    misses = dict(orchestrator.run_state.miss_count_by_station) if orchestrator.run_state else {}
    return RunReport(
        result=result,
        attempts=attempts,
        miss_count_by_station=misses,
        rank=rank,
        stats=compute_run_stats(attempts, result),
    )


def compute_run_stats(attempts: list, result: Optional[RunResult]) -> dict:
    """Summary counts for a run."""
    successes = [a for a in attempts if a.outcome.is_success]
    misses = [a for a in attempts if not a.outcome.is_success]

    causes = {}
    for a in misses:
        causes[a.outcome.cause] = causes.get(a.outcome.cause, 0) + 1

    tiers = {}
    for a in successes:
        tiers[a.outcome.quality_tier] = tiers.get(a.outcome.quality_tier, 0) + 1

    cleared = {a.station_id for a in successes}
    station_ids = []
    for a in attempts:
        if a.station_id not in station_ids:
            station_ids.append(a.station_id)
    failed_out = [s for s in station_ids if s not in cleared]

    return {
        "total_attempts": len(attempts),
        "successes": len(successes),
        "misses": len(misses),
        "miss_causes": causes,
        "quality_tiers": tiers,
        "rim_outs": causes.get("rim-out", 0),
        "boundary_misses": sum(1 for a in misses if a.outcome.result == "boundary_miss"),
        "stations_failed_out": failed_out,
        "avg_flight_frames": round(sum(a.frames for a in attempts) / max(len(attempts), 1), 1),
        "elapsed_ms": result.elapsed_ms if result else None,
        "degraded": result.degraded if result else None,
    }
