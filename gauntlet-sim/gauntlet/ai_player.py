"""Autopilot player: plans a drag gesture per station and plays it with human-like noise.

Planning is a brute-force search: candidate drag vectors on a numpy grid are
dry-run through a throwaway StationSession, and the best-graded success wins.
Plans are cached per (station, opponent) because station geometry never
changes at runtime.
"""

import math
import random
from functools import lru_cache
from typing import Optional

import numpy as np

from gauntlet.session import StationSession
from gauntlet.stations import Station, get_station
from gauntlet.types import Outcome, Vec2
from gauntlet import arena


SKILL_PRESETS = {
    "beginner": {
        "label": "Beginner",
        "angle_noise_deg": 6.0,
        "power_noise": 0.12,
        "learning": 0.90,  # noise multiplier per retry at the same station
        "aim_time_ms": (1500, 3500),
    },
    "casual": {
        "label": "Casual",
        "angle_noise_deg": 3.0,
        "power_noise": 0.06,
        "learning": 0.85,
        "aim_time_ms": (900, 2200),
    },
    "sharp": {
        "label": "Sharp",
        "angle_noise_deg": 1.2,
        "power_noise": 0.03,
        "learning": 0.80,
        "aim_time_ms": (600, 1400),
    },
    "pro": {
        "label": "Professional",
        "angle_noise_deg": 0.4,
        "power_noise": 0.01,
        "learning": 0.70,
        "aim_time_ms": (350, 800),
    },
}

_TIER_SCORE = {"flawless": 3, "precise": 2, "normal": 1}

# Coarse then fine search grids (angles around the full circle, drag lengths)
_COARSE_GRID = (24, 8)
_FINE_GRID = (72, 16)
_REFINE_STEPS = 5


def dry_run(station: Station, drag: Vec2, max_frames: int = None) -> tuple[Optional[Outcome], int]:
    """Play one attempt with the given drag vector; returns (outcome, frames)."""
    if max_frames is None:
        max_frames = int(station.rules.max_attempt_ms / arena.FRAME_MS) + 2
    session = StationSession(station)
    session.begin_aim(station.spawn)
    if not session.release_aim(station.spawn + drag):
        return None, 0
    for frame in range(1, max_frames + 1):
        outcome = session.tick(arena.FRAME_MS)
        if outcome is not None:
            return outcome, frame
    return None, max_frames


def _drag_vector(angle: float, distance: float) -> Vec2:
    return Vec2(math.cos(angle) * distance, math.sin(angle) * distance)


def _score(outcome: Optional[Outcome], frames: int) -> tuple:
    if outcome is None or not outcome.is_success:
        return (0, 0)
    return (_TIER_SCORE.get(outcome.quality_tier, 1), -frames)


def _search(station: Station, angles: np.ndarray, distances: np.ndarray) -> tuple:
    best = ((0, 0), None)
    for angle in angles:
        for distance in distances:
            outcome, frames = dry_run(station, _drag_vector(float(angle), float(distance)))
            score = _score(outcome, frames)
            if score > best[0]:
                best = (score, (float(angle), float(distance)))
    return best


@lru_cache(maxsize=None)
def plan_shot(station_key: str, opponent_id: str = "veteran") -> Optional[tuple[float, float]]:
    """Find a (drag_angle_rad, drag_distance_px) that scores at this station.

    Returns None if no grid point succeeds.
    """
    station = get_station(station_key, opponent_id)
    launch = station.launch
    max_distance = launch.power_divisor * launch.power_cap * 1.1

    best_score, best = None, None
    for n_angles, n_distances in (_COARSE_GRID, _FINE_GRID):
        angles = np.linspace(-math.pi, math.pi, n_angles, endpoint=False)
        distances = np.linspace(launch.min_drag, max_distance, n_distances)
        best_score, best = _search(station, angles, distances)
        if best is not None:
            break

    if best is None:
        return None

    # Local refinement around the best grid point
    angle, distance = best
    angle_step = 2 * math.pi / _FINE_GRID[0] / 2
    distance_step = (max_distance - launch.min_drag) / _FINE_GRID[1] / 2
    angles = angle + np.linspace(-angle_step, angle_step, _REFINE_STEPS)
    distances = np.clip(
        distance + np.linspace(-distance_step, distance_step, _REFINE_STEPS),
        launch.min_drag,
        max_distance,
    )
    refined_score, refined = _search(station, angles, distances)
    if refined is not None and refined_score > best_score:
        return refined
    return best


class AIPlayer:
    """A bot that plays the gauntlet with a given skill level."""

    def __init__(self, name: str, skill: str = "casual"):
        """Create a player.

        Args:
            name: Display name; its first three letters become the label.
            skill: Key from SKILL_PRESETS.
        """
        self.name = name
        preset = SKILL_PRESETS[skill]
        self.skill = skill
        self.label = preset["label"]
        self.angle_noise = math.radians(preset["angle_noise_deg"])
        self.power_noise = preset["power_noise"]
        self.learning = preset["learning"]
        self.aim_time_ms = preset["aim_time_ms"]

    @property
    def initials(self) -> str:
        letters = "".join(ch for ch in self.name if ch.isalpha())
        return (letters or "BOT")[:arena.PLAYER_LABEL_MAX].upper()

    def think_time_ms(self) -> float:
        """Idle time before the next gesture."""
        low, high = self.aim_time_ms
        return random.uniform(low, high)

    def aim(self, station: Station, attempt: int = 0, opponent_id: str = "veteran") -> tuple[Vec2, Vec2]:
        """Return a drag gesture (anchor, release) for the station.

        Noise shrinks on each retry at the same station.
        """
        plan = plan_shot(station.id, opponent_id)
        if plan is None:
            # Nothing found; flail in a random direction
            plan = (random.uniform(-math.pi, math.pi), station.launch.min_drag * 4)

        angle, distance = plan
        focus = self.learning ** attempt
        angle += random.gauss(0, self.angle_noise * focus)
        distance *= random.gauss(1.0, self.power_noise * focus)
        distance = max(distance, station.launch.min_drag + 1.0)

        anchor = station.spawn.copy()
        return anchor, anchor + _drag_vector(angle, distance)
