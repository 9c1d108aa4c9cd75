"""
Achievement unlocking.
Compares a snapshot of the user's counters against the seeded catalogue and
unlocks anything newly reached, at most once per user.
"""
import logging
from dataclasses import dataclass, replace
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from habitquest.models import Achievement, UserAchievement, User, PointsSource
from habitquest.repositories.achievement_repository import AchievementRepository
from habitquest.repositories.habit_repository import HabitRepository, HabitCompletionRepository
from habitquest.services.ledger_service import LedgerService
from habitquest.services.user_service import UserService
from habitquest.constants import (
    ACHIEVEMENT_CATALOG,
    METRIC_CLICKS,
    METRIC_LIFETIME_POINTS,
    METRIC_STREAK_DAYS,
    METRIC_HABIT_STREAK,
    METRIC_HABITS_COMPLETED,
)
from habitquest.exceptions import ValidationError

logger = logging.getLogger("habitquest.achievements")

METRICS = (
    METRIC_CLICKS,
    METRIC_LIFETIME_POINTS,
    METRIC_STREAK_DAYS,
    METRIC_HABIT_STREAK,
    METRIC_HABITS_COMPLETED,
)


@dataclass
class AchievementSignal:
    """Counters achievements are measured against"""
    clicks: int = 0
    lifetime_points: int = 0
    streak_days: int = 0
    habit_streak: int = 0
    habits_completed: int = 0

    def value(self, metric: str) -> int:
        if metric not in METRICS:
            raise ValidationError("metric", f"unknown achievement metric '{metric}'")
        return getattr(self, metric)

    @classmethod
    def from_user(cls, db: Session, user: User, habit_streak: int = None) -> "AchievementSignal":
        """
        Build a signal from stored state.
        habit_streak defaults to the user's longest stored habit streak.
        """
        if habit_streak is None:
            habit_streak = HabitRepository(db).longest_streak(user.id)
        return cls(
            clicks=user.clicks,
            lifetime_points=user.lifetime_points,
            streak_days=user.streak_days,
            habit_streak=habit_streak,
            habits_completed=HabitCompletionRepository(db).count_for_user(user.id),
        )


def seed_catalog(db: Session) -> int:
    """Insert catalogue entries that are missing. Returns how many were added"""
    repo = AchievementRepository(db)
    known = repo.get_codes()
    added = 0
    for entry in ACHIEVEMENT_CATALOG:
        if entry["code"] in known:
            continue
        repo.add(Achievement(**entry))
        added += 1
    db.commit()
    if added:
        logger.info(f"Seeded {added} achievements")
    return added


class AchievementService:
    """Service for evaluating and listing achievements"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AchievementRepository(db)
        self.ledger = LedgerService(db)
        self.users = UserService(db)

    def evaluate_and_unlock(self, user_id: int, signal: AchievementSignal) -> List[Achievement]:
        """
        Unlock every achievement whose threshold the signal meets.

        Rewards raise lifetime points, so after any paid unlock the catalogue
        is checked again against the new total until nothing else unlocks.
        Each unlock is inserted in its own savepoint; losing a race against a
        concurrent unlock of the same achievement is silently skipped and
        pays nothing. Staged on the caller's session.

        Returns:
            Achievements unlocked by this call
        """
        owned = set(self.repo.get_unlocked_ids(user_id))
        catalog = self.repo.get_all()
        user = None
        unlocked = []

        while True:
            paid = False
            for achievement in catalog:
                if achievement.id in owned:
                    continue
                if signal.value(achievement.metric) < achievement.threshold:
                    continue
                owned.add(achievement.id)

                try:
                    with self.db.begin_nested():
                        self.repo.add_unlock(UserAchievement(user_id=user_id, achievement_id=achievement.id))
                except IntegrityError:
                    logger.debug(f"Achievement {achievement.code} already unlocked for user {user_id}")
                    continue

                if achievement.reward > 0:
                    user = user or self.users.get_user(user_id)
                    self.ledger.credit(
                        user,
                        achievement.reward,
                        PointsSource.ACHIEVEMENT,
                        f"Achievement: {achievement.name}"
                    )
                    paid = True

                logger.info(f"User {user_id} unlocked achievement {achievement.code}")
                unlocked.append(achievement)

            if not paid:
                return unlocked
            signal = replace(signal, lifetime_points=max(signal.lifetime_points, user.lifetime_points))

    def list_achievements(self, user_id: int) -> List[dict]:
        """Unlocked achievements, newest first"""
        return [
            {
                "id": ua.achievement.id,
                "code": ua.achievement.code,
                "name": ua.achievement.name,
                "description": ua.achievement.description,
                "reward": ua.achievement.reward,
                "unlocked_at": ua.unlocked_at,
            }
            for ua in self.repo.get_user_achievements(user_id)
        ]
