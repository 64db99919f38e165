"""Target geometry: pockets, rim posts, backboards, and sensor regions.

resolve() is pure apart from one documented exception: deflections need to
hand back a changed velocity. Instead of mutating the projectile it returns
the adjusted velocity as an override, which the caller writes back.
"""

from typing import Optional

from gauntlet.types import (
    Backboard,
    CircularPocket,
    CollisionEvent,
    ProjectileState,
    RimPair,
    SensorRegion,
    Vec2,
)

_EPS = 1e-9


def _fallback_normal(vel: Vec2) -> Vec2:
    """Normal used when the projectile sits exactly on a post center."""
    if vel.magnitude() < _EPS:
        return Vec2(0.0, -1.0)
    return vel.normalized() * -1.0


def _check_backboard(
    pos: Vec2, vel: Vec2, board: Backboard, damping: float, t: float
) -> tuple[Vec2, list[CollisionEvent]]:
    """Bounce off the board face when the projectile reaches it moving toward it."""
    events: list[CollisionEvent] = []
    n = board.normal
    signed_dist = (pos - board.origin).dot(n)
    approach = vel.dot(n)

    if board.bounds.contains(pos) and signed_dist <= 0.0 and approach < 0.0:
        # Invert and damp the perpendicular component, keep the tangential one
        vel = vel - n * ((1.0 + damping) * approach)
        contact = pos - n * signed_dist
        events.append(CollisionEvent(
            target_id=board.id, kind="deflect", contact_point=contact, timestamp=t, shape="backboard",
        ))

    return vel, events


def _check_rim(
    pos: Vec2, vel: Vec2, rim: RimPair, damping: float, t: float
) -> tuple[Vec2, list[CollisionEvent]]:
    """Reflect off either post of the rim. Both posts may register in one tick."""
    events: list[CollisionEvent] = []

    for post in rim.posts():
        offset = pos - post
        dist = offset.magnitude()
        if dist >= rim.collision_radius:
            continue

        if dist < _EPS:
            # Dead center counts as full overlap
            n = _fallback_normal(vel)
            approaching = True
        else:
            n = offset * (1.0 / dist)
            approaching = vel.dot(n) < 0.0

        if not approaching:
            continue  # already separating

        vn = vel.dot(n)
        vel = (vel - n * (2.0 * vn)) * damping
        events.append(CollisionEvent(
            target_id=rim.id,
            kind="deflect",
            contact_point=post + n * rim.collision_radius,
            timestamp=t,
            shape="rim",
        ))

    return vel, events


def _check_pocket(
    pos: Vec2, vel: Vec2, pocket: CircularPocket, deflected: bool, t: float
) -> list[CollisionEvent]:
    """Capture only slow projectiles; fast ones fly over the hole."""
    if pos.distance_to(pocket.center) >= pocket.capture_radius:
        return []
    captured = not deflected and vel.magnitude() < pocket.capture_speed
    return [CollisionEvent(
        target_id=pocket.id,
        kind="enter" if captured else "pass",
        contact_point=pos.copy(),
        timestamp=t,
        shape="pocket",
    )]


def _check_sensor(
    pos: Vec2, vel: Vec2, sensor: SensorRegion, deflected: bool, t: float
) -> list[CollisionEvent]:
    if not sensor.bounds.contains(pos):
        return []
    if sensor.descending_only and vel.y <= 0.0:
        return []
    return [CollisionEvent(
        target_id=sensor.id,
        kind="pass" if deflected else "enter",
        contact_point=pos.copy(),
        timestamp=t,
        shape="sensor",
        role=sensor.role,
    )]


def resolve(
    state: ProjectileState,
    shapes: list,
    t: float = 0.0,
    bounce_damping: float = 0.7,
) -> tuple[list[CollisionEvent], Optional[Vec2]]:
    """Detect contacts between the projectile and the station's shapes.

    Backboards and rims are resolved first (in list order), then pockets and
    sensors see the post-deflection velocity. A tick that deflects can never
    also capture: pockets and sensors report "pass" instead of "enter".

    Returns (events, velocity_override). The override is None when nothing
    deflected; otherwise the caller must replace the projectile's velocity.
    """
    pos = state.position
    vel = state.velocity.copy()
    events: list[CollisionEvent] = []

    for shape in shapes:
        if isinstance(shape, Backboard):
            vel, hit = _check_backboard(pos, vel, shape, bounce_damping, t)
            events.extend(hit)
        elif isinstance(shape, RimPair):
            vel, hit = _check_rim(pos, vel, shape, bounce_damping, t)
            events.extend(hit)

    deflected = bool(events)

    for shape in shapes:
        if isinstance(shape, CircularPocket):
            events.extend(_check_pocket(pos, vel, shape, deflected, t))
        elif isinstance(shape, SensorRegion):
            events.extend(_check_sensor(pos, vel, shape, deflected, t))

    return events, (vel if deflected else None)
