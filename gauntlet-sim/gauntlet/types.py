"""Core data types for the Gauntlet simulation."""

from dataclasses import dataclass, field, replace
from typing import Optional, Union

from gauntlet.errors import ConfigurationError
from gauntlet import arena


@dataclass
class Vec2:
    """2D vector for position, velocity, and drag direction (screen space, +y down)."""
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> "Vec2":
        return Vec2(self.x * scalar, self.y * scalar)

    def __rmul__(self, scalar: float) -> "Vec2":
        return self.__mul__(scalar)

    def dot(self, other: "Vec2") -> float:
        return self.x * other.x + self.y * other.y

    def magnitude(self) -> float:
        return (self.x**2 + self.y**2) ** 0.5

    def normalized(self) -> "Vec2":
        """Unit vector in the same direction; the zero vector stays zero."""
        mag = self.magnitude()
        if mag < 1e-9:
            return Vec2()
        return Vec2(self.x / mag, self.y / mag)

    def distance_to(self, other: "Vec2") -> float:
        return (self - other).magnitude()

    def copy(self) -> "Vec2":
        return Vec2(self.x, self.y)


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle used for shape bounds and play bounds."""
    left: float
    top: float
    right: float
    bottom: float

    def __post_init__(self):
        if self.right < self.left or self.bottom < self.top:
            raise ConfigurationError(
                f"Rect has negative extent: {self}",
                {"left": self.left, "top": self.top, "right": self.right, "bottom": self.bottom},
            )

    def contains(self, point: Vec2) -> bool:
        return self.left <= point.x <= self.right and self.top <= point.y <= self.bottom

    def center(self) -> Vec2:
        return Vec2((self.left + self.right) / 2, (self.top + self.bottom) / 2)

    def scaled_x(self, factor: float) -> "Rect":
        """Same rectangle widened (or narrowed) about its horizontal center."""
        cx = (self.left + self.right) / 2
        half = (self.right - self.left) / 2 * factor
        return Rect(cx - half, self.top, cx + half, self.bottom)


@dataclass
class ProjectileState:
    """Full state of the projectile for a single throw or shot."""
    position: Vec2 = field(default_factory=Vec2)
    velocity: Vec2 = field(default_factory=Vec2)
    spin: float = 0.0

    def speed(self) -> float:
        return self.velocity.magnitude()

    def copy(self) -> "ProjectileState":
        return ProjectileState(
            position=self.position.copy(),
            velocity=self.velocity.copy(),
            spin=self.spin,
        )


@dataclass(frozen=True)
class PhysicsProfile:
    """Immutable per-station physics configuration.

    gravity and max_speed are in px/frame^2 and px/frame, air_drag is the
    fraction of velocity lost per frame.
    """
    gravity: float = 0.5
    air_drag: float = 0.02
    spin_coupling: float = 0.0
    max_speed: float = 45.0
    bounce_damping: float = 0.7

    def __post_init__(self):
        if not 0.0 <= self.air_drag < 1.0:
            raise ConfigurationError("air_drag must be in [0, 1)", {"air_drag": self.air_drag})
        if self.max_speed <= 0:
            raise ConfigurationError("max_speed must be positive", {"max_speed": self.max_speed})
        if not 0.0 <= self.bounce_damping <= 1.0:
            raise ConfigurationError(
                "bounce_damping must be in [0, 1]", {"bounce_damping": self.bounce_damping}
            )


# --- Target shapes -----------------------------------------------------------
# Shape geometry never changes after construction; collision responses only
# ever touch the projectile.


@dataclass(frozen=True)
class CircularPocket:
    """A hole the projectile must settle into (cornhole board hole)."""
    id: str
    center: Vec2
    capture_radius: float
    capture_speed: float = 3.0  # faster than this passes over the pocket

    def __post_init__(self):
        if self.capture_radius <= 0:
            raise ConfigurationError(
                f"Pocket {self.id} has non-positive radius", {"capture_radius": self.capture_radius}
            )
        if self.capture_speed <= 0:
            raise ConfigurationError(
                f"Pocket {self.id} has non-positive capture speed", {"capture_speed": self.capture_speed}
            )


@dataclass(frozen=True)
class RimPair:
    """Two rigid posts (hoop rim ends, goal posts) that deflect the projectile."""
    id: str
    left_center: Vec2
    right_center: Vec2
    collision_radius: float

    def __post_init__(self):
        if self.collision_radius <= 0:
            raise ConfigurationError(
                f"Rim {self.id} has non-positive radius", {"collision_radius": self.collision_radius}
            )

    def posts(self) -> tuple[Vec2, Vec2]:
        return self.left_center, self.right_center

    def center(self) -> Vec2:
        return Vec2(
            (self.left_center.x + self.right_center.x) / 2,
            (self.left_center.y + self.right_center.y) / 2,
        )


@dataclass(frozen=True)
class Backboard:
    """A flat board: the plane through `origin` with unit `normal` facing the play side.

    Only the part of the plane inside `bounds` is solid.
    """
    id: str
    origin: Vec2
    normal: Vec2
    bounds: Rect

    def __post_init__(self):
        if abs(self.normal.magnitude() - 1.0) > 1e-6:
            raise ConfigurationError(
                f"Backboard {self.id} normal must be a unit vector",
                {"normal": (self.normal.x, self.normal.y)},
            )


@dataclass(frozen=True)
class SensorRegion:
    """A bounding box with no physical response.

    role is "goal" (entering scores) or "blocker" (entering is a save).
    """
    id: str
    bounds: Rect
    role: str = "goal"
    descending_only: bool = False  # hoop nets only count a ball coming down

    def __post_init__(self):
        if self.role not in SENSOR_ROLES:
            raise ConfigurationError(f"Unknown sensor role: {self.role}", {"role": self.role})


SENSOR_ROLES = ["goal", "blocker"]

TargetShape = Union[CircularPocket, RimPair, Backboard, SensorRegion]


def shape_kind(shape: TargetShape) -> str:
    """Short tag for a shape type: "pocket", "rim", "backboard" or "sensor"."""
    if isinstance(shape, CircularPocket):
        return "pocket"
    if isinstance(shape, RimPair):
        return "rim"
    if isinstance(shape, Backboard):
        return "backboard"
    return "sensor"


# --- Per-tick and per-attempt results ------------------------------------------


@dataclass
class CollisionEvent:
    """A single contact produced by the resolver during one tick."""
    target_id: str
    kind: str  # "enter", "deflect" or "pass"
    contact_point: Vec2
    timestamp: float  # ms since launch
    shape: str = "sensor"  # see shape_kind()
    role: str = "goal"

    def __post_init__(self):
        if self.kind not in EVENT_KINDS:
            raise ValueError(f"Unknown collision event kind: {self.kind}")


EVENT_KINDS = ["enter", "deflect", "pass"]


@dataclass(frozen=True)
class Outcome:
    """Terminal result of one attempt."""
    result: str  # "success", "miss" or "boundary_miss"
    cause: str
    quality_tier: Optional[str] = None  # "normal", "precise", "flawless" (success only)

    def __post_init__(self):
        if self.result not in OUTCOME_RESULTS:
            raise ValueError(f"Unknown outcome result: {self.result}")
        if self.quality_tier is not None and self.quality_tier not in QUALITY_TIERS:
            raise ValueError(f"Unknown quality tier: {self.quality_tier}")

    @property
    def is_success(self) -> bool:
        return self.result == "success"


OUTCOME_RESULTS = ["success", "miss", "boundary_miss"]
QUALITY_TIERS = ["normal", "precise", "flawless"]


# --- Run-level state -----------------------------------------------------------


@dataclass
class RunState:
    """Mutable state of the run in progress, owned by the orchestrator."""
    run_id: str
    start_time: int = 0  # wall-clock ms at the first committed release, 0 until then
    current_station_index: int = 0
    miss_count_by_station: dict = field(default_factory=dict)
    elapsed_ms: float = 0.0
    degraded: bool = False
    opponent_id: str = ""
    timer_running: bool = False
    finalized: bool = False


@dataclass(frozen=True)
class RunResult:
    """Immutable snapshot of a finished run, as stored on the leaderboard."""
    player_label: str
    elapsed_ms: int
    degraded: bool
    timestamp: int
    opponent_id: str
    client_tag: str

    def with_label(self, label: str) -> "RunResult":
        """Return a copy carrying the player's initials (upper-cased, at most 3 chars)."""
        return replace(self, player_label=normalize_label(label))

    def to_record(self) -> dict:
        return {
            "playerLabel": self.player_label,
            "elapsedMs": self.elapsed_ms,
            "degraded": self.degraded,
            "timestamp": self.timestamp,
            "opponentId": self.opponent_id,
            "clientTag": self.client_tag,
        }

    @classmethod
    def from_record(cls, record: dict) -> "RunResult":
        """Build from a persisted record. Raises KeyError/TypeError/ValueError on bad input."""
        degraded = record["degraded"]
        if not isinstance(degraded, bool):
            raise ValueError(f"degraded must be a boolean, got {degraded!r}")
        return cls(
            player_label=normalize_label(str(record["playerLabel"])),
            elapsed_ms=int(record["elapsedMs"]),
            degraded=degraded,
            timestamp=int(record["timestamp"]),
            opponent_id=str(record["opponentId"]),
            client_tag=str(record["clientTag"]),
        )


def normalize_label(label: str) -> str:
    return label.strip().upper()[:arena.PLAYER_LABEL_MAX]


# --- Orchestrator events for the presentation layer --------------------------


@dataclass(frozen=True)
class StationActivated:
    station_id: str
    index: int
    attempt: int


@dataclass(frozen=True)
class OutcomeRecorded:
    station_id: str
    outcome: Outcome
    attempt: int
    action: str  # "advance", "retry" or "force_advance"


@dataclass(frozen=True)
class RunFinalized:
    result: RunResult
    miss_count_by_station: dict
