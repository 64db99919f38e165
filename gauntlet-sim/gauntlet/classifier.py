"""Shot outcome classification: reduces per-tick collision events to one Outcome.

Rules:
- Pocket stations succeed when the projectile is inside a pocket ("enter")
  and slower than the stillness threshold. Sensor stations succeed on the
  first "enter" of a goal sensor.
- Entering a blocker sensor (the goalie) is a miss ("blocked").
- Leaving the play bounds is a boundary miss; resting outside every pocket
  for STOPPED_TIME_MS, running past MAX_ATTEMPT_MS, or rattling on the rim
  more than RIM_BOUNCE_CAP times is a miss.
- A miss whose last physical contact was a rim deflection is tagged
  "rim-out". The tag is feedback only, the result type does not change.
- Quality tier: center accuracy dominates. Off-center entries are always
  "normal"; centered ones are "flawless" on the station's first attempt with
  a clean terminal speed, "precise" otherwise.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from gauntlet.errors import ConfigurationError
from gauntlet.types import (
    CircularPocket,
    CollisionEvent,
    Outcome,
    ProjectileState,
    Rect,
    RimPair,
    SensorRegion,
    Vec2,
)
from gauntlet import arena

logger = logging.getLogger(__name__)

CAPTURE_MODES = ["pocket", "sensor"]


@dataclass(frozen=True)
class ClassifierRules:
    """Per-station classification thresholds."""
    capture_mode: str = "pocket"
    play_bounds: Rect = field(default_factory=lambda: Rect(
        -arena.OFFSCREEN_MARGIN,
        -arena.OFFSCREEN_MARGIN * 6,
        arena.ARENA_WIDTH + arena.OFFSCREEN_MARGIN,
        arena.ARENA_HEIGHT + arena.OFFSCREEN_MARGIN,
    ))
    stillness_threshold: float = arena.STILLNESS_THRESHOLD
    stopped_time_ms: float = arena.STOPPED_TIME_MS
    max_attempt_ms: float = arena.MAX_ATTEMPT_MS
    rim_bounce_cap: int = arena.RIM_BOUNCE_CAP
    center_tolerance: float = arena.CENTER_TOLERANCE
    clean_speed_min: float = arena.CLEAN_SPEED_MIN
    clean_speed_max: float = arena.CLEAN_SPEED_MAX

    def __post_init__(self):
        if self.capture_mode not in CAPTURE_MODES:
            raise ConfigurationError(
                f"Unknown capture mode: {self.capture_mode}", {"capture_mode": self.capture_mode}
            )
        if self.clean_speed_max < self.clean_speed_min:
            raise ConfigurationError(
                "clean speed band is empty",
                {"min": self.clean_speed_min, "max": self.clean_speed_max},
            )
        if self.rim_bounce_cap < 0:
            raise ConfigurationError("rim_bounce_cap must be >= 0", {"rim_bounce_cap": self.rim_bounce_cap})


def _target_centers(shapes: list) -> dict:
    centers = {}
    for shape in shapes:
        if isinstance(shape, CircularPocket):
            centers[shape.id] = shape.center
        elif isinstance(shape, SensorRegion):
            centers[shape.id] = shape.bounds.center()
        elif isinstance(shape, RimPair):
            centers[shape.id] = shape.center()
    return centers


class ShotClassifier:
    """Stateful classifier for a single attempt. Call reset() before the next one."""

    def __init__(self, rules: ClassifierRules, shapes: list, first_attempt: bool = True):
        self.rules = rules
        self._centers = _target_centers(shapes)
        self.reset(first_attempt)

    def reset(self, first_attempt: bool = True) -> None:
        self.first_attempt = first_attempt
        self.outcome: Optional[Outcome] = None
        self.rim_bounces = 0
        self.last_contact: Optional[CollisionEvent] = None
        self.entry_points: dict = {}
        self._stopped_since: Optional[float] = None

    def classify(
        self,
        events: list,
        projectile: ProjectileState,
        elapsed_ms: float,
    ) -> Optional[Outcome]:
        """Return the attempt's Outcome, or None while the shot is still live.

        Once an Outcome has been produced the same Outcome is returned on every
        further call until reset().
        """
        if self.outcome is not None:
            return self.outcome

        speed = projectile.speed()
        entered_goal = False

        for event in events:
            if event.kind == "pass":
                continue
            self.last_contact = event

            if event.kind == "deflect":
                if event.shape == "rim":
                    self.rim_bounces += 1
                continue

            # "enter"
            if event.role == "blocker":
                return self._finish(Outcome(result="miss", cause="blocked"))

            self.entry_points.setdefault(event.target_id, event.contact_point.copy())
            entered_goal = True

            if self.rules.capture_mode == "sensor":
                return self._finish(self._success(event.target_id, speed, cause="goal"))
            if speed < self.rules.stillness_threshold:
                return self._finish(self._success(event.target_id, speed, cause="settled"))

        if self.rim_bounces > self.rules.rim_bounce_cap:
            return self._finish(Outcome(result="miss", cause="rim-out"))

        if not self.rules.play_bounds.contains(projectile.position):
            return self._finish(self._miss("boundary_miss", "out-of-bounds"))

        if elapsed_ms > self.rules.max_attempt_ms:
            return self._finish(self._miss("miss", "timeout"))

        if speed < self.rules.stillness_threshold and not entered_goal:
            if self._stopped_since is None:
                self._stopped_since = elapsed_ms
            elif elapsed_ms - self._stopped_since >= self.rules.stopped_time_ms:
                return self._finish(self._miss("miss", "stopped"))
        else:
            self._stopped_since = None

        return None

    def _finish(self, outcome: Outcome) -> Outcome:
        self.outcome = outcome
        logger.debug("Attempt resolved: %s (%s) tier=%s", outcome.result, outcome.cause, outcome.quality_tier)
        return outcome

    def _miss(self, result: str, cause: str) -> Outcome:
        last = self.last_contact
        if last is not None and last.kind == "deflect" and last.shape == "rim":
            cause = "rim-out"
        return Outcome(result=result, cause=cause)

    def _success(self, target_id: str, speed: float, cause: str) -> Outcome:
        return Outcome(result="success", cause=cause, quality_tier=self._grade(target_id, speed))

    def _grade(self, target_id: str, speed: float) -> str:
        center = self._centers.get(target_id)
        entry = self.entry_points.get(target_id)
        if center is None or entry is None:
            return "normal"
        return grade_entry(entry, center, speed, self.first_attempt, self.rules)


def grade_entry(
    entry: Vec2,
    center: Vec2,
    speed: float,
    first_attempt: bool,
    rules: ClassifierRules,
) -> str:
    """Quality tier for a standalone entry point, same rule as ShotClassifier."""
    centered = entry.distance_to(center) <= rules.center_tolerance
    clean = rules.clean_speed_min <= speed <= rules.clean_speed_max
    if not centered:
        return "normal"
    if first_attempt and clean:
        return "flawless"
    return "precise"
