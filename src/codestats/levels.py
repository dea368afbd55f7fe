"""Level progression calculation. Pure functions, no side effects.

Code::Stats levels follow level = floor(LEVEL_FACTOR * sqrt(xp)).
All arithmetic is done on integers so the level/threshold pair is exact.
"""

import math

LEVEL_FACTOR = 0.025

# 1 / LEVEL_FACTOR; level = floor(sqrt(xp) / XP_ROOT_PER_LEVEL)
XP_ROOT_PER_LEVEL: int = round(1 / LEVEL_FACTOR)


def get_level(xp: int) -> int:
    """Return the level for a given XP total. Negative XP is level 0."""
    if xp < 0:
        return 0
    return math.isqrt(xp) // XP_ROOT_PER_LEVEL


def get_xp_for_level(level: int) -> int:
    """Minimum XP needed to reach a level. Formula: ceil((level / LEVEL_FACTOR)^2)."""
    if level <= 0:
        return 0
    return (level * XP_ROOT_PER_LEVEL) ** 2


def get_xp_for_next_level(xp: int) -> int:
    """XP threshold of the level after the one xp currently sits in."""
    return get_xp_for_level(get_level(xp) + 1)


def get_level_percentage(xp: int) -> float:
    """Return progress through the current level as a float in [0.0, 1.0].

    0.0 means the level was just reached, values approach 1.0 right before
    the next threshold. Negative XP yields 0.0.
    """
    if xp < 0:
        return 0.0

    level = get_level(xp)
    current_threshold = get_xp_for_level(level)
    next_threshold = get_xp_for_level(level + 1)

    span = next_threshold - current_threshold
    if span <= 0:
        return 1.0

    percentage = (xp - current_threshold) / span
    return min(max(percentage, 0.0), 1.0)


def xp_progress_in_level(xp: int) -> tuple[int, int]:
    """Return (xp_into_current_level, xp_span_of_current_level).

    Negative XP counts as 0.
    """
    xp = max(0, xp)
    level = get_level(xp)
    current_threshold = get_xp_for_level(level)
    return (xp - current_threshold, get_xp_for_level(level + 1) - current_threshold)
