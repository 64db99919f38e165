"""Arena dimensions and tuned gameplay constants.

Units are screen pixels (+y down) and frames of FRAME_MS milliseconds.
Velocities are px/frame, accelerations px/frame^2.
"""

# Frame timing: physics constants are tuned for a 60 Hz step
FRAME_MS = 1000.0 / 60.0
MAX_TICK_MS = 100.0  # host should clamp larger steps (backgrounded tab)

# Reference play area (portrait phone)
ARENA_WIDTH = 400
ARENA_HEIGHT = 800
OFFSCREEN_MARGIN = 50  # px past the edge before a projectile counts as gone

# Spin
SPIN_DECAY = 0.98  # per frame

# Aiming
AIM_PREVIEW_MIN = 10  # px of drag before a preview is shown
MIN_DRAG_DISTANCE = 15  # px, shorter releases are ignored

# Outcome classification
STILLNESS_THRESHOLD = 0.5  # px/frame, "at rest"
STOPPED_TIME_MS = 1000  # at rest this long outside every pocket = miss
MAX_ATTEMPT_MS = 8000
RIM_BOUNCE_CAP = 6  # rim deflections before a forced rim-out

# Quality tiers (product-tuned)
CENTER_TOLERANCE = 12.0  # px from target center
CLEAN_SPEED_MIN = 0.0
CLEAN_SPEED_MAX = 0.35  # px/frame at the moment of capture

# Run rules
MISS_CAP = 5  # misses allowed at a station before it is force-advanced
DEGRADED_THRESHOLD_MS = 75_000  # slower runs are "wet"

# Leaderboard
LEADERBOARD_CAPACITY = 10
PLAYER_LABEL_MAX = 3
CLIENT_VERSION = "1.0.0"
