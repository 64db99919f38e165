"""Projectile kinematics: gravity, per-frame drag, spin coupling, speed clamp.

A simplified kinematic model, not a rigid-body solver. dt is measured in
frames (arena.FRAME_MS); dt = 1.0 is one 60 Hz step.
"""

from gauntlet.types import CollisionEvent, PhysicsProfile, ProjectileState, Vec2
from gauntlet.collision import resolve
from gauntlet import arena


def _apply_gravity(vel: Vec2, profile: PhysicsProfile, dt: float) -> Vec2:
    return Vec2(vel.x, vel.y + profile.gravity * dt)


def _apply_drag(vel: Vec2, profile: PhysicsProfile, dt: float) -> Vec2:
    # Constant multiplicative damping per frame, not continuous drag
    factor = (1.0 - profile.air_drag) ** dt
    return Vec2(vel.x * factor, vel.y * factor)


def _apply_spin(vel: Vec2, spin: float, profile: PhysicsProfile, dt: float) -> Vec2:
    """Spin pushes the projectile sideways to its direction of travel (2D Magnus)."""
    if profile.spin_coupling == 0.0 or abs(spin) < 1e-9:
        return vel.copy()
    # spin (about the screen normal) x velocity
    push = profile.spin_coupling * spin * dt
    direction = vel.normalized()
    return Vec2(vel.x - direction.y * push, vel.y + direction.x * push)


def _clamp_speed(vel: Vec2, max_speed: float) -> Vec2:
    speed = vel.magnitude()
    if speed <= max_speed:
        return vel.copy()
    scale = max_speed / speed
    return Vec2(vel.x * scale, vel.y * scale)


def advance(state: ProjectileState, profile: PhysicsProfile, dt: float = 1.0) -> ProjectileState:
    """Advance the projectile by dt frames and return the new state.

    Pure: the input state is never modified, and identical inputs give
    identical outputs. The resulting speed never exceeds profile.max_speed.
    """
    vel = _apply_gravity(state.velocity, profile, dt)
    vel = _apply_drag(vel, profile, dt)
    vel = _apply_spin(vel, state.spin, profile, dt)
    vel = _clamp_speed(vel, profile.max_speed)

    pos = Vec2(state.position.x + vel.x * dt, state.position.y + vel.y * dt)
    spin = state.spin * arena.SPIN_DECAY**dt

    return ProjectileState(position=pos, velocity=vel, spin=spin)


def simulate(
    initial_state: ProjectileState,
    profile: PhysicsProfile,
    shapes: list,
    dt: float = 1.0,
    max_frames: int = 600,
) -> tuple[list[ProjectileState], list[CollisionEvent]]:
    """Integrate and resolve collisions without classifying the shot.

    Returns (positions, events) where positions holds the state after every
    frame (starting with the initial state). Runs for exactly max_frames steps
    unless the projectile leaves a generous area around the arena.
    """
    state = initial_state.copy()
    positions = [state.copy()]
    all_events: list[CollisionEvent] = []
    margin = arena.OFFSCREEN_MARGIN * 4

    for frame in range(max_frames):
        state = advance(state, profile, dt)
        events, override = resolve(
            state, shapes, t=(frame + 1) * dt * arena.FRAME_MS, bounce_damping=profile.bounce_damping,
        )
        if override is not None:
            state.velocity = override
        all_events.extend(events)
        positions.append(state.copy())

        if (
            state.position.x < -margin
            or state.position.x > arena.ARENA_WIDTH + margin
            or state.position.y > arena.ARENA_HEIGHT + margin
        ):
            break

    return positions, all_events
