"""Station session: the per-attempt state machine.

    idle --begin_aim--> aiming --release_aim--> launched --tick*--> resolved
      ^                                                               |
      +---------------------------- reset ---------------------------+

Input arriving in the wrong state is ignored (returns False/None). Drag
gestures can race scene transitions, so out-of-order calls are expected and
are never errors.
"""

from typing import Optional

from gauntlet.classifier import ShotClassifier
from gauntlet.collision import resolve
from gauntlet.physics import advance
from gauntlet.stations import LaunchConfig, Station
from gauntlet.types import Outcome, ProjectileState, Vec2
from gauntlet import arena


def launch_velocity(drag: Vec2, launch: LaunchConfig) -> Optional[Vec2]:
    """Convert a drag vector into a launch velocity, or None if the drag is too short."""
    distance = drag.magnitude()
    if distance < launch.min_drag:
        return None
    direction = drag.normalized()
    if launch.slingshot:
        direction = direction * -1.0
    power = min(distance / launch.power_divisor, launch.power_cap)
    return Vec2(direction.x * power * launch.scale_x, direction.y * power * launch.scale_y)


class StationSession:
    """Owns the projectile and classifier for one station's attempts."""

    def __init__(self, station: Station, attempts_used: int = 0):
        self.station = station
        self.attempts_used = attempts_used
        self.classifier = ShotClassifier(station.rules, list(station.shapes))
        self._clear()

    @property
    def station_id(self) -> str:
        return self.station.id

    def _clear(self) -> None:
        self.state = "idle"
        self.anchor: Optional[Vec2] = None
        self.drag = Vec2()
        self.projectile: Optional[ProjectileState] = None
        self.elapsed_ms = 0.0
        self.outcome: Optional[Outcome] = None
        self.last_events: list = []
        self.classifier.reset(first_attempt=self.attempts_used == 0)

    # --- Input ----------------------------------------------------------------

    def begin_aim(self, point: Vec2) -> bool:
        """Start (or restart) a drag at point."""
        if self.state not in ("idle", "aiming"):
            return False
        self.anchor = point.copy()
        self.drag = Vec2()
        self.state = "aiming"
        return True

    def update_aim(self, point: Vec2) -> Optional[Vec2]:
        """Track the drag for the aim preview; returns the would-be launch velocity.

        No physics runs while aiming. Returns None when not aiming or when the
        drag is still too short to preview.
        """
        if self.state != "aiming":
            return None
        self.drag = point - self.anchor
        if self.drag.magnitude() < arena.AIM_PREVIEW_MIN:
            return None
        return launch_velocity(self.drag, self.station.launch)

    def release_aim(self, point: Vec2) -> bool:
        """Launch the projectile. Returns True only if a launch happened.

        A drag shorter than the station's min_drag leaves the session aiming.
        """
        if self.state != "aiming":
            return False
        self.drag = point - self.anchor
        velocity = launch_velocity(self.drag, self.station.launch)
        if velocity is None:
            return False

        self.projectile = ProjectileState(
            position=self.station.spawn.copy(),
            velocity=velocity,
            spin=velocity.x * self.station.launch.spin_factor,
        )
        self.elapsed_ms = 0.0
        self.state = "launched"
        return True

    # --- Simulation ---------------------------------------------------------------

    def tick(self, dt_ms: float) -> Optional[Outcome]:
        """Run one integrate -> resolve -> classify step.

        Returns the Outcome on the tick the attempt resolves, None otherwise
        (including every tick after resolution until reset()).
        """
        if self.state != "launched":
            return None

        self.elapsed_ms += dt_ms
        profile = self.station.profile
        self.projectile = advance(self.projectile, profile, dt_ms / arena.FRAME_MS)

        events, override = resolve(
            self.projectile, self.station.shapes, t=self.elapsed_ms, bounce_damping=profile.bounce_damping,
        )
        if override is not None:
            self.projectile.velocity = override
        self.last_events = events

        outcome = self.classifier.classify(events, self.projectile, self.elapsed_ms)
        if outcome is None:
            return None

        self.outcome = outcome
        self.state = "resolved"
        return outcome

    def reset(self) -> bool:
        """Back to idle for another attempt at the same station."""
        if self.state != "resolved":
            return False
        self.attempts_used += 1
        self._clear()
        return True
