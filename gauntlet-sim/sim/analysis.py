"""Matplotlib analysis charts: planned trajectories, misses per station, run times, miss causes."""

import os
import random

import matplotlib
matplotlib.use("Agg")  # Non-interactive backend
import matplotlib.pyplot as plt
from matplotlib.patches import Circle, Rectangle
import numpy as np

from gauntlet.ai_player import AIPlayer, SKILL_PRESETS, plan_shot
from gauntlet.autoplay import simulate_run
from gauntlet.orchestrator import RunOrchestrator
from gauntlet.physics import simulate
from gauntlet.session import launch_velocity
from gauntlet.stations import STATION_PRESETS, get_station, list_stations
from gauntlet.types import Backboard, CircularPocket, ProjectileState, RimPair, SensorRegion, Vec2
from gauntlet import arena

SKILL_COLORS = {
    "beginner": "#dc3545",
    "casual": "#ffc107",
    "sharp": "#4ecdc4",
    "pro": "#28a745",
}


def _style_chart(ax, title):
    """Apply dark theme styling to chart."""
    ax.set_facecolor("#0f0f1a")
    ax.set_title(title, color="#e0e0e0", fontsize=13, fontweight="bold", pad=12)
    ax.tick_params(colors="#888888", labelsize=9)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    ax.spines["bottom"].set_color("#333333")
    ax.spines["left"].set_color("#333333")
    ax.xaxis.label.set_color("#aaaaaa")
    ax.yaxis.label.set_color("#aaaaaa")


def _draw_shapes(ax, shapes):
    for shape in shapes:
        if isinstance(shape, CircularPocket):
            ax.add_patch(Circle((shape.center.x, shape.center.y), shape.capture_radius,
                                fill=False, edgecolor="#28a745", linewidth=1.5))
        elif isinstance(shape, RimPair):
            for post in shape.posts():
                ax.add_patch(Circle((post.x, post.y), shape.collision_radius,
                                    color="#fb923c", alpha=0.9))
        elif isinstance(shape, Backboard):
            b = shape.bounds
            ax.plot([shape.origin.x, shape.origin.x], [b.top, b.bottom], color="#e0e0e0", linewidth=3)
        elif isinstance(shape, SensorRegion):
            b = shape.bounds
            color = "#e94560" if shape.role == "blocker" else "#28a745"
            ax.add_patch(Rectangle((b.left, b.top), b.right - b.left, b.bottom - b.top,
                                   fill=True, facecolor=color, alpha=0.25, edgecolor=color))


def _planned_path(station):
    """Positions of the autopilot's planned shot, or None if it has no plan."""
    plan = plan_shot(station.id)
    if plan is None:
        return None
    angle, distance = plan
    drag = Vec2(np.cos(angle) * distance, np.sin(angle) * distance)
    velocity = launch_velocity(drag, station.launch)
    state = ProjectileState(
        position=station.spawn.copy(),
        velocity=velocity,
        spin=velocity.x * station.launch.spin_factor,
    )
    max_frames = int(station.rules.max_attempt_ms / arena.FRAME_MS)
    positions, _ = simulate(state, station.profile, list(station.shapes), max_frames=max_frames)
    return positions


def _autoplay_runs(skill, n_runs, seed_base=0, station_order=None):
    reports = []
    for seed in range(n_runs):
        random.seed(seed_base + seed)
        orchestrator = RunOrchestrator(
            station_order=station_order,
            id_factory=lambda s=seed: f"{skill}-{seed_base + s}",
        )
        reports.append(simulate_run(AIPlayer("Bot", skill), orchestrator=orchestrator))
    return reports


def chart_station_trajectories(save_path=None):
    """Chart 1: Planned Shot per Station.

    One panel per station with its target shapes and the autopilot's planned path.
    """
    keys = list_stations()
    cols = 3
    rows = int(np.ceil(len(keys) / cols))
    fig, axes = plt.subplots(rows, cols, figsize=(12, 8 * rows / 2))
    fig.set_facecolor("#0f0f1a")
    fig.suptitle("Planned Shot per Station", color="#e0e0e0", fontsize=14, fontweight="bold")

    for ax, key in zip(np.ravel(axes), keys):
        station = get_station(key)
        _style_chart(ax, STATION_PRESETS[key]["label"])
        _draw_shapes(ax, station.shapes)

        path = _planned_path(station)
        if path is not None:
            xs = [p.position.x for p in path]
            ys = [p.position.y for p in path]
            ax.plot(xs, ys, color="#4ecdc4", linewidth=1.5)
        else:
            ax.text(arena.ARENA_WIDTH / 2, arena.ARENA_HEIGHT / 2, "no plan found",
                    color="#e94560", ha="center")
        ax.scatter([station.spawn.x], [station.spawn.y], c="#ffc107", s=30, zorder=5)

        ax.set_xlim(-arena.OFFSCREEN_MARGIN, arena.ARENA_WIDTH + arena.OFFSCREEN_MARGIN)
        ax.set_ylim(arena.ARENA_HEIGHT + arena.OFFSCREEN_MARGIN, -arena.OFFSCREEN_MARGIN)  # +y down
        ax.set_aspect("equal")

    for ax in np.ravel(axes)[len(keys):]:
        ax.set_visible(False)

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, facecolor=fig.get_facecolor())
    return fig


def chart_misses_by_station(n_runs=5, save_path=None):
    """Chart 2: Average Misses per Station.

    Grouped bar chart: each station x each skill level.
    """
    keys = list_stations()
    skills = list(SKILL_PRESETS.keys())

    fig, ax = plt.subplots(figsize=(10, 5))
    fig.set_facecolor("#0f0f1a")
    _style_chart(ax, "Average Misses per Station")

    x = np.arange(len(keys))
    width = 0.8 / len(skills)

    for i, skill in enumerate(skills):
        reports = _autoplay_runs(skill, n_runs, seed_base=i * 1000)
        misses = np.array([[r.miss_count_by_station.get(k, 0) for k in keys] for r in reports])
        ax.bar(x + i * width, misses.mean(axis=0), width,
               color=SKILL_COLORS[skill], label=SKILL_PRESETS[skill]["label"], alpha=0.85)

    # Reference line at the miss cap
    ax.axhline(y=arena.MISS_CAP + 1, color="#e94560", linestyle="--", linewidth=1.5, alpha=0.7)
    ax.text(len(keys) - 0.5, arena.MISS_CAP + 1.1, "Failed out", color="#e94560", fontsize=9, ha="right")

    ax.set_xticks(x + width * (len(skills) - 1) / 2)
    ax.set_xticklabels([STATION_PRESETS[k]["label"] for k in keys], rotation=20, ha="right")
    ax.set_ylabel("Misses per run")
    ax.legend(facecolor="#1a1a2e", edgecolor="#333", labelcolor="#e0e0e0", fontsize=9)
    ax.grid(True, alpha=0.15, axis="y")

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, facecolor=fig.get_facecolor())
    return fig


def chart_elapsed_distribution(n_runs=5, save_path=None):
    """Chart 3: Run Time Distribution by skill, with the degraded threshold."""
    fig, ax = plt.subplots(figsize=(8, 5))
    fig.set_facecolor("#0f0f1a")
    _style_chart(ax, "Run Time Distribution")

    all_times = []
    for i, skill in enumerate(SKILL_PRESETS):
        reports = _autoplay_runs(skill, n_runs, seed_base=i * 1000)
        times = [r.result.elapsed_ms / 1000 for r in reports if r.result is not None]
        all_times.extend(times)
        ax.hist(times, bins=10, alpha=0.6, color=SKILL_COLORS[skill],
                label=SKILL_PRESETS[skill]["label"], edgecolor=SKILL_COLORS[skill])

    threshold_s = arena.DEGRADED_THRESHOLD_MS / 1000
    ax.axvline(x=threshold_s, color="#e94560", linestyle="--", linewidth=1.5, alpha=0.7)
    ax.text(threshold_s, ax.get_ylim()[1] * 0.95, "  Degraded", color="#e94560", fontsize=9)

    if all_times:
        ax.set_xlim(0, max(max(all_times), threshold_s) * 1.1)
    ax.set_xlabel("Elapsed (s)")
    ax.set_ylabel("Runs")
    ax.legend(facecolor="#1a1a2e", edgecolor="#333", labelcolor="#e0e0e0", fontsize=9)
    ax.grid(True, alpha=0.15, axis="y")

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, facecolor=fig.get_facecolor())
    return fig


def chart_miss_causes(n_runs=5, skill="casual", save_path=None):
    """Chart 4: Why attempts miss: breakdown by cause."""
    causes = {}
    for report in _autoplay_runs(skill, n_runs, seed_base=77):
        for cause, count in report.stats["miss_causes"].items():
            causes[cause] = causes.get(cause, 0) + count

    fig, ax = plt.subplots(figsize=(7, 5))
    fig.set_facecolor("#0f0f1a")
    _style_chart(ax, f"Miss Causes ({SKILL_PRESETS[skill]['label']})")

    ranked = sorted(causes.items(), key=lambda x: -x[1])
    labels = [c[0] for c in ranked]
    counts = [c[1] for c in ranked]
    colors = ["#e94560", "#28a745", "#ffc107", "#4ecdc4", "#a855f7", "#64748b", "#fb923c"]

    bars = ax.barh(labels, counts, color=colors[:len(labels)], edgecolor="#333", alpha=0.85)
    for bar, count in zip(bars, counts):
        ax.text(bar.get_width() + 0.3, bar.get_y() + bar.get_height() / 2,
                str(count), va="center", fontsize=10, color="#e0e0e0")

    ax.set_xlabel("Count")
    ax.invert_yaxis()
    ax.grid(True, alpha=0.15, axis="x")

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, facecolor=fig.get_facecolor())
    return fig


def generate_all_charts(output_dir=".", n_runs=5):
    """Generate all analysis charts and save to output directory."""
    os.makedirs(output_dir, exist_ok=True)

    paths = []

    path = os.path.join(output_dir, "chart_station_trajectories.png")
    print("  Planning shots for every station...")
    chart_station_trajectories(save_path=path)
    paths.append(path)
    print(f"  Saved: {path}")

    path = os.path.join(output_dir, "chart_misses_by_station.png")
    print("  Generating misses per station (running autopilot)...")
    chart_misses_by_station(n_runs=n_runs, save_path=path)
    paths.append(path)
    print(f"  Saved: {path}")

    path = os.path.join(output_dir, "chart_elapsed_distribution.png")
    print("  Generating run time distribution...")
    chart_elapsed_distribution(n_runs=n_runs, save_path=path)
    paths.append(path)
    print(f"  Saved: {path}")

    path = os.path.join(output_dir, "chart_miss_causes.png")
    print("  Generating miss causes chart...")
    chart_miss_causes(n_runs=n_runs, save_path=path)
    paths.append(path)
    print(f"  Saved: {path}")

    plt.close("all")
    return paths
