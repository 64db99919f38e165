"""Opponent (goalkeeper) presets and per-run selection.

An opponent only changes the size of the goalie station's blocker; it never
touches the physics of any other station.
"""

OPPONENTS = {
    "rookie": {"label": "The Rookie", "width_multiplier": 0.90, "reach_multiplier": 0.90},
    "veteran": {"label": "The Veteran", "width_multiplier": 1.00, "reach_multiplier": 1.10},
    "giant": {"label": "The Giant", "width_multiplier": 1.20, "reach_multiplier": 1.00},
    "cat": {"label": "The Cat", "width_multiplier": 0.85, "reach_multiplier": 1.20},
    "wall": {"label": "The Wall", "width_multiplier": 1.10, "reach_multiplier": 1.10},
    "sprinter": {"label": "The Sprinter", "width_multiplier": 0.95, "reach_multiplier": 1.05},
    "showboat": {"label": "The Showboat", "width_multiplier": 1.00, "reach_multiplier": 0.85},
    "sleepy": {"label": "Sleepy", "width_multiplier": 1.00, "reach_multiplier": 0.80},
    "captain": {"label": "The Captain", "width_multiplier": 1.05, "reach_multiplier": 1.00},
    "octopus": {"label": "The Octopus", "width_multiplier": 1.15, "reach_multiplier": 0.95},
}

DEFAULT_OPPONENT = "veteran"


def _hash_to_index(text: str, size: int) -> int:
    """Stable 32-bit string hash (h * 31 + c) folded into [0, size)."""
    h = 0
    for ch in text:
        h = ((h << 5) - h + ord(ch)) & 0xFFFFFFFF
    if h >= 2**31:
        h -= 2**32
    return abs(h) % size


def select_opponent(run_id: str) -> str:
    """Pick the opponent for a run. The same run id always gets the same opponent."""
    keys = list(OPPONENTS.keys())
    return keys[_hash_to_index(run_id, len(keys))]


def get_modifiers(opponent_id: str) -> dict:
    """Modifiers for an opponent; unknown ids fall back to the default opponent."""
    return OPPONENTS.get(opponent_id, OPPONENTS[DEFAULT_OPPONENT])
