#!/usr/bin/env python3
"""CLI entry point for the Gauntlet simulation.

Usage:
    python main.py run [skill] [label]   Autoplay one full run and record it
    python main.py leaderboard           Print the stored leaderboard
    python main.py stations              List station presets
    python main.py analyze               Generate analysis charts
    python main.py test                  Run all tests

Add -v anywhere for debug logging.
"""

import logging
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

OUTPUT_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "output")


def _args():
    return [a for a in sys.argv[2:] if a != "-v"]


def cmd_run():
    """Autoplay one full run and add it to the leaderboard."""
    from gauntlet.ai_player import AIPlayer, SKILL_PRESETS
    from gauntlet.autoplay import simulate_run
    from gauntlet.leaderboard import LeaderboardRankingService
    from gauntlet.opponents import OPPONENTS
    from gauntlet.orchestrator import RunOrchestrator
    from gauntlet.stations import STATION_PRESETS
    from gauntlet.store import JsonFileStore
    from gauntlet import arena

    args = _args()
    skills = list(SKILL_PRESETS.keys())
    skill = args[0] if len(args) > 0 and args[0] in skills else "casual"
    label = args[1] if len(args) > 1 else "BOT"

    print("=" * 60)
    print("  GAUNTLET RUN")
    print("=" * 60)

    player = AIPlayer(label, skill)
    leaderboard = LeaderboardRankingService(JsonFileStore())
    orchestrator = RunOrchestrator()

    print(f"\n  Player: {player.initials} ({player.label})")
    print("  Planning shots...")
    report = simulate_run(player, orchestrator=orchestrator, leaderboard=leaderboard)
    opponent = OPPONENTS[orchestrator.run_state.opponent_id]["label"]
    print(f"  Opponent: {opponent}")
    print()

    for a in report.attempts:
        name = STATION_PRESETS[a.station_id]["label"]
        tier = f" [{a.outcome.quality_tier}]" if a.outcome.quality_tier else ""
        print(f"  {name:22s} try {a.attempt + 1}: {a.outcome.result:13s} "
              f"({a.outcome.cause}){tier}  {a.frames} frames")

    result = report.result
    s = report.stats
    print()
    if result is None:
        print("  Run did not finish.")
    else:
        wet = "  (WET)" if result.degraded else ""
        print(f"  FINAL TIME: {result.elapsed_ms / 1000:.2f} s{wet}")
        kept = "" if report.rank <= arena.LEADERBOARD_CAPACITY else "  (not kept)"
        print(f"  RANK: #{report.rank}{kept}")
    print()
    print(f"  Attempts: {s['total_attempts']}  |  Successes: {s['successes']}  |  Misses: {s['misses']}")
    print(f"  Quality tiers: {s['quality_tiers']}")
    print(f"  Miss causes: {dict(sorted(s['miss_causes'].items(), key=lambda x: -x[1]))}")
    if s["stations_failed_out"]:
        print(f"  Failed out: {', '.join(s['stations_failed_out'])}")
    print()
    print("  Available skills: " + ", ".join(skills))
    print("  Usage: python main.py run [skill] [label]")
    print("=" * 60)


def cmd_leaderboard():
    """Print the stored leaderboard."""
    from gauntlet.leaderboard import LeaderboardRankingService
    from gauntlet.store import JsonFileStore

    store = JsonFileStore()
    board = LeaderboardRankingService(store)
    print(f"Leaderboard ({store.path})")
    print("-" * 60)
    entries = board.entries()
    if not entries:
        print("  (empty)")
        return
    for rank, e in enumerate(entries, start=1):
        wet = "WET" if e.degraded else "   "
        print(f"  {rank:2d}. {e.player_label:3s}  {e.elapsed_ms / 1000:7.2f} s  {wet}  "
              f"vs {e.opponent_id:10s} {e.client_tag}")


def cmd_stations():
    """List station presets."""
    from gauntlet.stations import STATION_PRESETS, get_station, list_stations
    from gauntlet.types import shape_kind

    print("Stations (run order)")
    print("-" * 60)
    for i, key in enumerate(list_stations(), start=1):
        station = get_station(key)
        shapes = ", ".join(f"{s.id}:{shape_kind(s)}" for s in station.shapes)
        print(f"  {i}. {STATION_PRESETS[key]['label']:22s} {station.rules.capture_mode:7s} "
              f"g={station.profile.gravity:<5} {shapes}")


def cmd_analyze():
    """Generate all analysis charts."""
    print("Generating analysis charts...")
    print("-" * 60)
    from sim.analysis import generate_all_charts
    paths = generate_all_charts(output_dir=OUTPUT_DIR)
    print(f"\nDone! {len(paths)} charts saved to {OUTPUT_DIR}/")


def cmd_test():
    """Run all tests."""
    import subprocess
    print("Running tests...")
    print("-" * 60)
    result = subprocess.run(
        [sys.executable, "-m", "pytest", "tests/", "-v"],
        cwd=os.path.dirname(os.path.abspath(__file__)),
    )
    sys.exit(result.returncode)


COMMANDS = {
    "run": cmd_run,
    "leaderboard": cmd_leaderboard,
    "stations": cmd_stations,
    "analyze": cmd_analyze,
    "test": cmd_test,
}


def main():
    logging.basicConfig(
        level=logging.DEBUG if "-v" in sys.argv else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if len(sys.argv) < 2 or sys.argv[1] not in COMMANDS:
        print(__doc__)
        print("Available commands:")
        for name, func in COMMANDS.items():
            print(f"  {name:12s} {func.__doc__}")
        sys.exit(1)

    COMMANDS[sys.argv[1]]()


if __name__ == "__main__":
    main()
