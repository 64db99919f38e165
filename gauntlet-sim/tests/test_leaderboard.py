"""Tests for leaderboard ranking."""

import pytest

from gauntlet.errors import ConfigurationError
from gauntlet.leaderboard import LeaderboardRankingService
from gauntlet.store import MemoryStore
from gauntlet.types import RunResult


def _entry(elapsed_ms, degraded=False, label="AAA", timestamp=0):
    return RunResult(
        player_label=label,
        elapsed_ms=elapsed_ms,
        degraded=degraded,
        timestamp=timestamp,
        opponent_id="veteran",
        client_tag="desktop/1.0.0",
    )


def test_clean_run_beats_faster_degraded_run():
    """50000/clean inserted after 40000/degraded still ranks first."""
    board = LeaderboardRankingService(MemoryStore(), capacity=10)
    board.insert(_entry(40000, degraded=True))
    rank = board.insert(_entry(50000, degraded=False))

    assert rank == 1
    assert [(e.elapsed_ms, e.degraded) for e in board.entries()] == [(50000, False), (40000, True)]


def test_degraded_ordering_regardless_of_time():
    board = LeaderboardRankingService(MemoryStore())
    board.insert(_entry(10000, degraded=True))
    board.insert(_entry(90000, degraded=False))
    board.insert(_entry(5000, degraded=False))
    board.insert(_entry(80000, degraded=True))

    entries = board.entries()
    assert [e.elapsed_ms for e in entries] == [5000, 90000, 10000, 80000]
    seen_degraded = False
    for e in entries:
        if e.degraded:
            seen_degraded = True
        else:
            assert not seen_degraded, "clean entry sorted after a degraded one"


def test_insert_returns_one_indexed_rank():
    board = LeaderboardRankingService(MemoryStore())
    assert board.insert(_entry(30000)) == 1
    assert board.insert(_entry(20000)) == 1
    assert board.insert(_entry(40000)) == 3
    assert board.insert(_entry(25000)) == 2


def test_tie_ranks_newcomer_below_existing():
    board = LeaderboardRankingService(MemoryStore())
    first = _entry(30000, label="OLD", timestamp=1)
    board.insert(first)
    rank = board.insert(_entry(30000, label="NEW", timestamp=2))
    assert rank == 2
    assert board.entries()[0] is first


def test_rank_truncation_full_list():
    """An entry sorting after position N gets rank > N and is not kept."""
    board = LeaderboardRankingService(MemoryStore(), capacity=3)
    for t in (10000, 20000, 30000):
        board.insert(_entry(t))
    before = board.entries()

    late = _entry(40000)
    rank = board.insert(late)

    assert rank == 4
    after = board.entries()
    assert len(after) == 3
    assert late not in after
    assert after == before


def test_full_list_drops_last_when_better_entry_arrives():
    board = LeaderboardRankingService(MemoryStore(), capacity=3)
    for t in (10000, 20000, 30000):
        board.insert(_entry(t))
    assert board.insert(_entry(15000)) == 2
    assert [e.elapsed_ms for e in board.entries()] == [10000, 15000, 20000]


def test_is_top_score_below_capacity():
    board = LeaderboardRankingService(MemoryStore(), capacity=3)
    board.insert(_entry(10000))
    assert board.is_top_score(999999, True)


def test_is_top_score_against_last_place():
    board = LeaderboardRankingService(MemoryStore(), capacity=2)
    board.insert(_entry(10000))
    board.insert(_entry(20000))

    assert board.is_top_score(15000, False)
    assert not board.is_top_score(20000, False)  # a tie would land below
    assert not board.is_top_score(5000, True)  # degraded never beats clean


def test_is_top_score_is_read_only():
    store = MemoryStore()
    board = LeaderboardRankingService(store, capacity=2)
    board.insert(_entry(10000))
    saves = store.save_count
    board.is_top_score(5000, False)
    board.rank_for(5000, False)
    assert store.save_count == saves
    assert len(board.entries()) == 1


def test_rank_for_matches_insert():
    board = LeaderboardRankingService(MemoryStore())
    for t in (10000, 20000, 30000):
        board.insert(_entry(t))
    assert board.rank_for(15000, False) == 2
    assert board.rank_for(20000, False) == 3  # ties go below
    assert board.rank_for(1000, True) == 4
    assert board.insert(_entry(15000)) == 2


def test_loads_and_sorts_from_store():
    store = MemoryStore([_entry(30000), _entry(5000, degraded=True), _entry(10000)])
    board = LeaderboardRankingService(store, capacity=2)
    assert [e.elapsed_ms for e in board.entries()] == [10000, 30000]


def test_saves_after_insert_and_clear():
    store = MemoryStore()
    board = LeaderboardRankingService(store)
    board.insert(_entry(10000))
    assert [e.elapsed_ms for e in store.load_entries()] == [10000]

    board.clear()
    assert board.entries() == []
    assert store.load_entries() == []
    assert store.save_count == 2


def test_top_and_entries_are_copies():
    board = LeaderboardRankingService(MemoryStore())
    for t in (10000, 20000, 30000):
        board.insert(_entry(t))
    top = board.top(2)
    assert [e.elapsed_ms for e in top] == [10000, 20000]
    top.clear()
    board.entries().clear()
    assert len(board.entries()) == 3


@pytest.mark.parametrize("capacity", [0, -1])
def test_capacity_must_be_positive(capacity):
    with pytest.raises(ConfigurationError):
        LeaderboardRankingService(MemoryStore(), capacity=capacity)


def test_capacity_of_one_keeps_the_best_run():
    board = LeaderboardRankingService(MemoryStore(), capacity=1)
    assert board.insert(_entry(30000)) == 1
    assert board.is_top_score(20000, False)
    assert board.insert(_entry(20000)) == 1
    assert board.insert(_entry(25000)) == 2
    assert [e.elapsed_ms for e in board.entries()] == [20000]


def test_reinserting_same_entry_is_not_duplicated():
    store = MemoryStore()
    board = LeaderboardRankingService(store)
    run = _entry(15000)
    board.insert(_entry(10000))
    assert board.insert(run) == 2
    assert board.insert(run) == 2
    assert len(board.entries()) == 2
    assert store.save_count == 2


def test_equal_but_distinct_entries_are_both_kept():
    board = LeaderboardRankingService(MemoryStore())
    assert board.insert(_entry(15000)) == 1
    assert board.insert(_entry(15000)) == 2
    assert len(board.entries()) == 2
