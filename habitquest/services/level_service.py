"""
Level resolution.
Maps lifetime points to one of the fixed level tiers and its multipliers.
"""
from dataclasses import dataclass
from typing import List

from habitquest.constants import LEVEL_TIERS


@dataclass(frozen=True)
class LevelTier:
    level: int
    name: str
    min_points: int
    xp_multiplier: float
    daily_bonus_multiplier: float
    ad_reward: int


@dataclass(frozen=True)
class LevelProgress:
    current: int   # Points earned inside the current tier
    required: int  # Points the current tier spans
    percent: int


LEVELS: List[LevelTier] = [LevelTier(*row) for row in LEVEL_TIERS]


def resolve_level(lifetime_points: int) -> LevelTier:
    """
    Return the highest tier whose threshold does not exceed lifetime_points.

    Args:
        lifetime_points: Cumulative points ever earned

    Returns:
        Matching LevelTier (tier 1 for anything below the first threshold)
    """
    tier = LEVELS[0]
    for candidate in LEVELS:
        if lifetime_points >= candidate.min_points:
            tier = candidate
        else:
            break
    return tier


def progress_to_next(lifetime_points: int) -> LevelProgress:
    """
    Progress through the current tier, for display.

    At the final tier the percentage is clamped to 100.
    """
    tier = resolve_level(lifetime_points)
    next_index = tier.level  # levels are 1-based, list is 0-based

    if next_index >= len(LEVELS):
        return LevelProgress(
            current=lifetime_points - tier.min_points,
            required=0,
            percent=100,
        )

    next_tier = LEVELS[next_index]
    current = max(0, lifetime_points - tier.min_points)
    required = next_tier.min_points - tier.min_points
    percent = round(current / required * 100)

    return LevelProgress(current=current, required=required, percent=min(percent, 100))
