"""
Reward roll engine.
Computes the points for one habit completion: difficulty base, an optional
critical roll, then the level multiplier.
"""
import math
import random
from dataclasses import dataclass

from habitquest.constants import (
    HABIT_DIFFICULTY_REWARDS,
    DIFFICULTY_BONUS_CHANCE,
    CRITICAL_SUCCESS_MULTIPLIER,
)
from habitquest.exceptions import ValidationError


@dataclass(frozen=True)
class RewardRoll:
    points: int
    base: int
    is_critical: bool


class RewardService:
    """Variable reward calculation with an injectable random source"""

    def __init__(self, rng=None):
        # Anything with a random() -> float in [0, 1) method
        self.rng = rng or random.Random()

    def roll_reward(self, difficulty: str, level_multiplier: float) -> RewardRoll:
        """
        Roll the reward for one completion.

        Args:
            difficulty: Habit difficulty key
            level_multiplier: xp multiplier of the user's current level

        Returns:
            RewardRoll, points within [base * mult, base * crit * mult]
        """
        if difficulty not in HABIT_DIFFICULTY_REWARDS:
            raise ValidationError("difficulty", f"unknown difficulty '{difficulty}'")

        base = HABIT_DIFFICULTY_REWARDS[difficulty]
        is_critical = self.rng.random() < DIFFICULTY_BONUS_CHANCE[difficulty]

        raw = base * (CRITICAL_SUCCESS_MULTIPLIER if is_critical else 1.0) * level_multiplier
        # round() first so 40 * 1.15 floors to 46, not 45
        points = math.floor(round(raw, 6))

        return RewardRoll(points=points, base=base, is_critical=is_critical)
