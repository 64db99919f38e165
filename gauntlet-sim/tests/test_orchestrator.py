"""Tests for the run orchestrator."""

import pytest

from gauntlet.opponents import select_opponent
from gauntlet.orchestrator import RunOrchestrator
from gauntlet.types import OutcomeRecorded, RunFinalized, StationActivated, Vec2
from gauntlet import arena

SPAWN = Vec2(200, 680)
HIT = Vec2(200, 830)  # 150 px pull: apex settles in the cornhole pocket
WEAK = Vec2(200, 710)  # 30 px pull: falls short and drops off the bottom


def _orchestrator(order=("cornhole",), **kwargs):
    kwargs.setdefault("clock", lambda: 1_700_000_000_000)
    kwargs.setdefault("id_factory", lambda: "run-1")
    return RunOrchestrator(station_order=list(order), **kwargs)


def _throw(orch, release, max_frames=1000):
    orch.begin_aim(SPAWN)
    assert orch.release_aim(release)
    for _ in range(max_frames):
        outcome = orch.tick(arena.FRAME_MS)
        if outcome is not None:
            return outcome
    return None


def test_start_run_activates_first_station():
    orch = _orchestrator(order=("cornhole", "wiffle"))
    state = orch.start_run()
    assert orch.is_active
    assert orch.current_station_id == "cornhole"
    assert state.miss_count_by_station == {"cornhole": 0, "wiffle": 0}
    assert state.timer_running is False
    assert orch.session.state == "idle"


def test_opponent_is_selected_from_run_id():
    orch = _orchestrator(id_factory=lambda: "abc-123")
    state = orch.start_run()
    assert state.opponent_id == select_opponent("abc-123")


def test_idle_time_before_first_launch_is_not_counted():
    orch = _orchestrator()
    orch.start_run()
    for _ in range(300):
        orch.tick(arena.FRAME_MS)
    assert orch.elapsed_ms == 0.0

    orch.begin_aim(SPAWN)
    orch.release_aim(HIT)
    assert orch.run_state.timer_running
    assert orch.run_state.start_time == 1_700_000_000_000
    orch.tick(arena.FRAME_MS)
    assert orch.elapsed_ms == pytest.approx(arena.FRAME_MS)


def test_short_release_does_not_start_timer():
    orch = _orchestrator()
    orch.start_run()
    orch.begin_aim(SPAWN)
    assert orch.release_aim(Vec2(200, 685)) is False
    assert orch.run_state.timer_running is False


def test_success_advances_to_next_station():
    orch = _orchestrator(order=("cornhole", "wiffle"))
    orch.start_run()
    outcome = _throw(orch, HIT)
    assert outcome.is_success
    assert orch.current_station_id == "wiffle"
    assert orch.session.attempts_used == 0
    assert orch.run_state.miss_count_by_station["cornhole"] == 0


def test_miss_retries_same_station():
    orch = _orchestrator(order=("cornhole", "wiffle"))
    orch.start_run()
    outcome = _throw(orch, WEAK)
    assert not outcome.is_success
    assert orch.current_station_id == "cornhole"
    assert orch.run_state.miss_count_by_station["cornhole"] == 1
    assert orch.session.state == "idle"
    assert orch.session.attempts_used == 1


def test_last_success_finalizes_run():
    orch = _orchestrator()
    orch.start_run()
    _throw(orch, WEAK)
    _throw(orch, HIT)

    assert not orch.is_active
    assert orch.run_state.finalized
    assert orch.current_station_id is None
    result = orch.result
    assert result.player_label == ""
    assert isinstance(result.elapsed_ms, int)
    assert result.elapsed_ms == round(orch.run_state.elapsed_ms)
    assert result.degraded is False
    assert result.opponent_id == orch.run_state.opponent_id
    assert result.timestamp == 1_700_000_000_000


@pytest.mark.parametrize("cap", [0, 1, 2, 3])
def test_no_soft_lock(cap):
    """A station with `cap` misses force-advances on the next miss."""
    orch = _orchestrator(miss_cap=cap)
    orch.start_run()
    for i in range(cap + 1):
        assert orch.is_active, f"run ended early after {i} misses"
        outcome = _throw(orch, WEAK)
        assert not outcome.is_success

    assert not orch.is_active
    assert orch.result is not None
    assert orch.run_state.miss_count_by_station["cornhole"] == cap + 1


def test_slow_run_is_degraded():
    orch = _orchestrator()
    orch.start_run()
    _throw(orch, WEAK)  # starts the timer
    for _ in range(int(arena.DEGRADED_THRESHOLD_MS / arena.MAX_TICK_MS) + 1):
        orch.tick(arena.MAX_TICK_MS)
    _throw(orch, HIT)

    assert orch.result.elapsed_ms > arena.DEGRADED_THRESHOLD_MS
    assert orch.result.degraded is True


def test_calls_after_finalize_are_noops():
    orch = _orchestrator()
    orch.start_run()
    _throw(orch, HIT)
    result = orch.result
    elapsed = orch.elapsed_ms

    assert orch.advance() is None
    assert orch.begin_aim(SPAWN) is False
    assert orch.update_aim(HIT) is None
    assert orch.release_aim(HIT) is False
    assert orch.tick(arena.FRAME_MS) is None
    assert orch.result is result
    assert orch.elapsed_ms == elapsed


def test_calls_before_start_are_noops():
    orch = _orchestrator()
    assert orch.begin_aim(SPAWN) is False
    assert orch.tick(arena.FRAME_MS) is None
    assert orch.advance() is None
    assert orch.elapsed_ms == 0.0


def test_manual_advance_skips_station():
    orch = _orchestrator(order=("cornhole", "wiffle"))
    orch.start_run()
    assert orch.advance() == "wiffle"
    assert orch.advance() is None
    assert orch.run_state.finalized


def test_abandon_never_produces_result():
    orch = _orchestrator()
    orch.start_run()
    _throw(orch, WEAK)
    orch.abandon()
    assert not orch.is_active
    assert orch.result is None
    assert orch.tick(arena.FRAME_MS) is None


def test_events_are_emitted_in_order():
    orch = _orchestrator(order=("cornhole", "wiffle"), miss_cap=0)
    seen = []
    orch.subscribe(seen.append)
    orch.start_run()
    _throw(orch, HIT)
    orch.begin_aim(Vec2(200, 650))
    orch.release_aim(Vec2(220, 650))  # drifts sideways and stops short of the bleachers
    for _ in range(1000):
        if orch.tick(arena.FRAME_MS) is not None:
            break

    kinds = [type(e) for e in seen]
    assert kinds == [StationActivated, OutcomeRecorded, StationActivated, OutcomeRecorded, RunFinalized]
    assert seen[1].action == "advance"
    assert seen[3].action == "force_advance"
    assert seen[4].miss_count_by_station == {"cornhole": 0, "wiffle": 1}


def test_failing_listener_does_not_break_run():
    orch = _orchestrator()

    def broken(event):
        raise RuntimeError("presentation layer crashed")

    seen = []
    orch.subscribe(broken)
    orch.subscribe(seen.append)
    orch.start_run()
    _throw(orch, HIT)
    assert orch.result is not None
    assert isinstance(seen[-1], RunFinalized)


def test_restart_resets_state():
    orch = _orchestrator()
    orch.start_run()
    _throw(orch, WEAK)
    state = orch.start_run()
    assert state.miss_count_by_station == {"cornhole": 0}
    assert state.elapsed_ms == 0.0
    assert orch.result is None
