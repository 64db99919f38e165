"""Station presets: each mini-challenge is configuration, not code.

A station is a PhysicsProfile, 1-4 target shapes, classifier rules, a spawn
point and a launch configuration. All stations share the same integrator,
resolver, classifier and session.

Coordinates use the 400x800 reference arena (+y down):
  - cornhole, goalie, wiffle: top-down view, projectile thrown "up" the screen
  - football, corner3_*: side view, gravity pulls toward the floor
"""

from dataclasses import dataclass

from gauntlet.classifier import ClassifierRules
from gauntlet.errors import ConfigurationError
from gauntlet.opponents import get_modifiers, DEFAULT_OPPONENT
from gauntlet.types import (
    Backboard,
    CircularPocket,
    PhysicsProfile,
    Rect,
    RimPair,
    SensorRegion,
    Vec2,
)
from gauntlet import arena

MAX_SHAPES = 4


@dataclass(frozen=True)
class LaunchConfig:
    """How a drag gesture turns into a launch velocity.

    power = min(drag_distance / power_divisor, power_cap), then each axis is
    scaled. Slingshot launches opposite to the drag (pull back to throw).
    """
    power_divisor: float = 6.0
    power_cap: float = 40.0
    scale_x: float = 1.0
    scale_y: float = 1.0
    slingshot: bool = False
    spin_factor: float = 0.0  # initial spin = vx * spin_factor
    min_drag: float = arena.MIN_DRAG_DISTANCE

    def __post_init__(self):
        if self.power_divisor <= 0 or self.power_cap <= 0:
            raise ConfigurationError(
                "launch power settings must be positive",
                {"power_divisor": self.power_divisor, "power_cap": self.power_cap},
            )


@dataclass(frozen=True)
class Station:
    """One mini-challenge: read-only configuration shared by all its attempts."""
    id: str
    name: str
    profile: PhysicsProfile
    shapes: tuple
    rules: ClassifierRules
    spawn: Vec2
    launch: LaunchConfig

    def __post_init__(self):
        if not 1 <= len(self.shapes) <= MAX_SHAPES:
            raise ConfigurationError(
                f"Station {self.id} needs 1-{MAX_SHAPES} shapes", {"shapes": len(self.shapes)}
            )
        ids = [s.id for s in self.shapes]
        if len(set(ids)) != len(ids):
            raise ConfigurationError(f"Station {self.id} has duplicate shape ids", {"ids": ids})

        if self.rules.capture_mode == "pocket":
            has_target = any(isinstance(s, CircularPocket) for s in self.shapes)
        else:
            has_target = any(isinstance(s, SensorRegion) and s.role == "goal" for s in self.shapes)
        if not has_target:
            raise ConfigurationError(
                f"Station {self.id} has nothing to score in for mode {self.rules.capture_mode}",
                {"capture_mode": self.rules.capture_mode},
            )


# --- Shape builders --------------------------------------------------------------


def _cornhole_shapes(mods: dict) -> tuple:
    return (
        CircularPocket("hole", center=Vec2(200, 300), capture_radius=32, capture_speed=3.0),
    )


def _goalie_shapes(mods: dict) -> tuple:
    keeper = Rect(165, 175, 235, 175 + 30 * mods["reach_multiplier"]).scaled_x(mods["width_multiplier"])
    return (
        RimPair("posts", left_center=Vec2(100, 170), right_center=Vec2(300, 170), collision_radius=10),
        SensorRegion("keeper", keeper, role="blocker"),
        SensorRegion("net", Rect(110, 110, 290, 170)),
    )


def _wiffle_shapes(mods: dict) -> tuple:
    return (
        SensorRegion("pitcher", Rect(185, 380, 215, 410), role="blocker"),
        SensorRegion("bleachers", Rect(60, 40, 340, 120)),
    )


def _football_shapes(mods: dict) -> tuple:
    return (
        RimPair("tire", left_center=Vec2(300, 272), right_center=Vec2(300, 348), collision_radius=9),
        SensorRegion("tire_hole", Rect(292, 284, 308, 336)),
    )


def _corner3_left_shapes(mods: dict) -> tuple:
    # Shooter in the left corner, backboard on the right
    return (
        Backboard("glass", origin=Vec2(345, 260), normal=Vec2(-1, 0), bounds=Rect(345, 210, 380, 315)),
        RimPair("rim", left_center=Vec2(279, 300), right_center=Vec2(331, 300), collision_radius=10),
        SensorRegion("net", Rect(290, 304, 320, 325), descending_only=True),
    )


def _corner3_right_shapes(mods: dict) -> tuple:
    # Mirror image: shooter in the right corner, backboard on the left
    return (
        Backboard("glass", origin=Vec2(55, 260), normal=Vec2(1, 0), bounds=Rect(20, 210, 55, 315)),
        RimPair("rim", left_center=Vec2(69, 300), right_center=Vec2(121, 300), collision_radius=10),
        SensorRegion("net", Rect(80, 304, 110, 325), descending_only=True),
    )


STATION_ORDER = ["cornhole", "goalie", "wiffle", "football", "corner3_right", "corner3_left"]

STATION_PRESETS = {
    "cornhole": {
        "label": "Cornhole",
        "profile": {"gravity": 0.5, "air_drag": 0.02, "max_speed": 45, "bounce_damping": 0.1},
        "spawn": (200, 680),
        "launch": {"power_divisor": 6.0, "power_cap": 40.0, "slingshot": True},
        "rules": {"capture_mode": "pocket"},
        "shapes": _cornhole_shapes,
    },
    "goalie": {
        "label": "Penalty Kick",
        "profile": {"gravity": 0.0, "air_drag": 0.01, "max_speed": 30, "bounce_damping": 0.6},
        "spawn": (200, 700),
        "launch": {"power_divisor": 10.0, "power_cap": 18.0, "slingshot": True},
        "rules": {"capture_mode": "sensor", "center_tolerance": 75.0,
                  "clean_speed_min": 6.0, "clean_speed_max": 14.0},
        "shapes": _goalie_shapes,
    },
    "wiffle": {
        "label": "Wiffle Ball",
        "profile": {"gravity": 0.0, "air_drag": 0.015, "max_speed": 30, "bounce_damping": 0.3},
        "spawn": (200, 650),
        "launch": {"power_divisor": 8.0, "power_cap": 20.0, "slingshot": False},
        "rules": {"capture_mode": "sensor", "center_tolerance": 40.0,
                  "clean_speed_min": 4.0, "clean_speed_max": 12.0},
        "shapes": _wiffle_shapes,
    },
    "football": {
        "label": "Tire Toss",
        "profile": {"gravity": 0.35, "air_drag": 0.005, "max_speed": 40, "bounce_damping": 0.4},
        "spawn": (70, 650),
        "launch": {"power_divisor": 7.0, "power_cap": 40.0, "scale_x": 0.35, "scale_y": 0.9,
                   "slingshot": True},
        "rules": {"capture_mode": "sensor", "center_tolerance": 10.0,
                  "clean_speed_min": 4.0, "clean_speed_max": 10.0},
        "shapes": _football_shapes,
    },
    "corner3_right": {
        "label": "Corner Three (Right)",
        "profile": {"gravity": 0.35, "air_drag": 0.005, "spin_coupling": 0.015,
                    "max_speed": 45, "bounce_damping": 0.7},
        "spawn": (360, 700),
        "launch": {"power_divisor": 5.0, "power_cap": 50.0, "scale_x": 0.55, "scale_y": 0.95,
                   "spin_factor": 0.1},
        "rules": {"capture_mode": "sensor", "center_tolerance": 8.0,
                  "clean_speed_min": 0.0, "clean_speed_max": 9.0},
        "shapes": _corner3_right_shapes,
    },
    "corner3_left": {
        "label": "Corner Three (Left)",
        "profile": {"gravity": 0.35, "air_drag": 0.005, "spin_coupling": 0.015,
                    "max_speed": 45, "bounce_damping": 0.7},
        "spawn": (40, 700),
        "launch": {"power_divisor": 5.0, "power_cap": 50.0, "scale_x": 0.55, "scale_y": 0.95,
                   "spin_factor": 0.1},
        "rules": {"capture_mode": "sensor", "center_tolerance": 8.0,
                  "clean_speed_min": 0.0, "clean_speed_max": 9.0},
        "shapes": _corner3_left_shapes,
    },
}


def get_station(key: str, opponent_id: str = DEFAULT_OPPONENT) -> Station:
    """Build a Station from a preset key. Raises ConfigurationError on unknown keys."""
    if key not in STATION_PRESETS:
        raise ConfigurationError(f"Unknown station: {key}", {"station": key})
    preset = STATION_PRESETS[key]
    mods = get_modifiers(opponent_id)
    return Station(
        id=key,
        name=preset["label"],
        profile=PhysicsProfile(**preset["profile"]),
        shapes=preset["shapes"](mods),
        rules=ClassifierRules(**preset["rules"]),
        spawn=Vec2(*preset["spawn"]),
        launch=LaunchConfig(**preset["launch"]),
    )


def list_stations() -> list[str]:
    """Return station keys in run order."""
    return list(STATION_ORDER)
