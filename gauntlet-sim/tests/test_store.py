"""Tests for leaderboard persistence."""

import json

import pytest

from gauntlet.leaderboard import LeaderboardRankingService
from gauntlet.store import JsonFileStore
from gauntlet.types import RunResult


def _entry(elapsed_ms, degraded=False, label="ABC"):
    return RunResult(
        player_label=label,
        elapsed_ms=elapsed_ms,
        degraded=degraded,
        timestamp=1_700_000_000_000,
        opponent_id="giant",
        client_tag="desktop/1.0.0",
    )


def test_record_shape():
    record = _entry(61234, degraded=True).to_record()
    assert record == {
        "playerLabel": "ABC",
        "elapsedMs": 61234,
        "degraded": True,
        "timestamp": 1_700_000_000_000,
        "opponentId": "giant",
        "clientTag": "desktop/1.0.0",
    }


def test_label_is_uppercased_and_truncated():
    assert _entry(1000).with_label("  zoey ").player_label == "ZOE"
    assert RunResult.from_record({**_entry(1000).to_record(), "playerLabel": "abcdef"}).player_label == "ABC"


def test_missing_file_loads_empty(tmp_path):
    store = JsonFileStore(tmp_path / "nope.json")
    assert store.load_entries() == []


def test_save_then_load(tmp_path):
    path = tmp_path / "board" / "leaderboard.json"
    store = JsonFileStore(path)
    entries = [_entry(10000), _entry(20000, degraded=True)]
    store.save_entries(entries)

    assert path.exists()
    assert not (path.parent / "leaderboard.json.tmp").exists()
    assert JsonFileStore(path).load_entries() == entries


def test_corrupt_file_loads_empty(tmp_path):
    path = tmp_path / "leaderboard.json"
    path.write_text("{not json", encoding="utf-8")
    assert JsonFileStore(path).load_entries() == []


def test_non_list_file_loads_empty(tmp_path):
    path = tmp_path / "leaderboard.json"
    path.write_text(json.dumps({"playerLabel": "ABC"}), encoding="utf-8")
    assert JsonFileStore(path).load_entries() == []


def test_malformed_records_are_skipped(tmp_path):
    path = tmp_path / "leaderboard.json"
    good = _entry(10000).to_record()
    path.write_text(json.dumps([good, {"playerLabel": "X"}, "junk", good]), encoding="utf-8")
    entries = JsonFileStore(path).load_entries()
    assert len(entries) == 2
    assert all(e.elapsed_ms == 10000 for e in entries)


def test_string_degraded_flag_is_skipped(tmp_path):
    path = tmp_path / "leaderboard.json"
    good = _entry(10000).to_record()
    wet = dict(good, elapsedMs=5000, degraded="false")
    path.write_text(json.dumps([good, wet]), encoding="utf-8")
    entries = JsonFileStore(path).load_entries()
    assert [e.elapsed_ms for e in entries] == [10000]


@pytest.mark.parametrize("flag", ["false", "true", 0, 1, None])
def test_from_record_requires_boolean_degraded(flag):
    record = dict(_entry(10000).to_record(), degraded=flag)
    with pytest.raises(ValueError):
        RunResult.from_record(record)


def test_unwritable_path_does_not_raise(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    store = JsonFileStore(blocker / "sub" / "leaderboard.json")
    store.save_entries([_entry(10000)])  # parent is a file: logged, not raised
    assert store.load_entries() == []


def test_env_var_overrides_default_path(tmp_path, monkeypatch):
    path = tmp_path / "custom.json"
    monkeypatch.setenv("GAUNTLET_LEADERBOARD", str(path))
    assert JsonFileStore().path == path


def test_service_survives_restart(tmp_path):
    path = tmp_path / "leaderboard.json"
    board = LeaderboardRankingService(JsonFileStore(path))
    board.insert(_entry(30000, label="BBB"))
    board.insert(_entry(20000, label="AAA"))

    reloaded = LeaderboardRankingService(JsonFileStore(path))
    assert [e.player_label for e in reloaded.entries()] == ["AAA", "BBB"]
