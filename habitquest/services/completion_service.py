"""
Habit completion orchestration.

One completion runs as a single unit of work: record the day, roll the
reward, move the streak, credit the ledger, advance challenges and unlock
achievements. Either all of it is committed or none of it is.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from habitquest.database import atomic
from habitquest.models import HabitCompletion, PointsSource
from habitquest.repositories.habit_repository import HabitRepository, HabitCompletionRepository
from habitquest.services.date_service import DateService
from habitquest.services.habit_service import get_owned_habit
from habitquest.services.ledger_service import LedgerService
from habitquest.services.user_service import UserService
from habitquest.services.level_service import resolve_level
from habitquest.services.reward_service import RewardService
from habitquest.services.streak_service import next_streak
from habitquest.services.challenge_service import ChallengeService
from habitquest.services.achievement_service import AchievementService, AchievementSignal
from habitquest.services.notification_service import NotificationService
from habitquest.constants import CHALLENGE_COMPLETE_HABITS, CHALLENGE_EARN_POINTS
from habitquest.exceptions import ValidationError, AlreadyCompletedError

logger = logging.getLogger("habitquest.completions")


@dataclass
class CompletionResult:
    points_earned: int
    new_streak: int
    is_critical: bool
    leveled_up: bool
    new_level: int
    unlocked_achievements: List[str] = field(default_factory=list)


class CompletionService:
    """Service composing every progression rule for one habit completion"""

    def __init__(self, db: Session, rng=None, notifier=None, date_service: Optional[DateService] = None):
        self.db = db
        self.habit_repo = HabitRepository(db)
        self.completion_repo = HabitCompletionRepository(db)
        self.ledger = LedgerService(db)
        self.users = UserService(db)
        self.rewards = RewardService(rng)
        self.challenges = ChallengeService(db, rng)
        self.achievements = AchievementService(db)
        self.notifications = NotificationService(notifier)
        self.dates = date_service or DateService()

    def complete_habit(self, user_id: int, habit_id: int, today: Optional[date] = None) -> CompletionResult:
        """
        Complete a habit for today.

        Raises:
            NotFoundError: habit missing
            ForbiddenError: habit belongs to someone else
            ValidationError: habit archived
            AlreadyCompletedError: habit already completed today
            ConflictError: lost a race against a concurrent update
        """
        today = today or self.dates.get_today()

        with atomic(self.db, "complete_habit"):
            habit = get_owned_habit(self.habit_repo, user_id, habit_id)
            if not habit.is_active:
                raise ValidationError("habit", f"habit {habit_id} is archived")

            # The unique (habit_id, completed_on) row decides exactly-once
            completion = HabitCompletion(
                habit_id=habit.id,
                user_id=user_id,
                completed_at=datetime.now(),
                completed_on=today,
            )
            try:
                with self.db.begin_nested():
                    self.completion_repo.add(completion)
            except IntegrityError:
                raise AlreadyCompletedError(habit_id)

            user = self.users.get_user(user_id)
            level_before = resolve_level(user.lifetime_points)

            roll = self.rewards.roll_reward(habit.difficulty, level_before.xp_multiplier)
            new_streak = next_streak(
                habit.streak, habit.last_completed_at, today, habit.is_currently_frozen
            )

            habit.streak = new_streak
            habit.last_completed_at = today
            habit.is_currently_frozen = False
            habit.total_completed += 1

            completion.points_earned = roll.points
            completion.is_critical = roll.is_critical

            self.ledger.credit(
                user,
                roll.points,
                PointsSource.HABIT_COMPLETION,
                f"Completed '{habit.name}'" + (" (critical!)" if roll.is_critical else "")
            )
            self.users.touch_activity_streak(user, today)
            self.db.flush()

            self.challenges.record_progress(user_id, CHALLENGE_COMPLETE_HABITS, 1, today)
            self.challenges.record_progress(user_id, CHALLENGE_EARN_POINTS, roll.points, today)

            unlocked = self.achievements.evaluate_and_unlock(
                user_id, AchievementSignal.from_user(self.db, user)
            )

            level_after = resolve_level(user.lifetime_points)

        result = CompletionResult(
            points_earned=roll.points,
            new_streak=new_streak,
            is_critical=roll.is_critical,
            leveled_up=level_after.level > level_before.level,
            new_level=level_after.level,
            unlocked_achievements=[a.code for a in unlocked],
        )
        logger.info(
            f"User {user_id} completed habit {habit_id}: +{result.points_earned} "
            f"(critical={result.is_critical}), streak {result.new_streak}"
        )

        self._notify(user_id, result, level_after.name, unlocked)
        return result

    def _notify(self, user_id: int, result: CompletionResult, level_name: str, unlocked) -> None:
        """Best-effort notifications, sent only after the commit"""
        if result.leveled_up:
            self.notifications.dispatch(
                user_id,
                "Level up!",
                f"You reached level {result.new_level}: {level_name}",
                {"type": "level_up", "level": result.new_level}
            )
        for achievement in unlocked:
            self.notifications.dispatch(
                user_id,
                "Achievement unlocked!",
                f"{achievement.name}: {achievement.description}",
                {"type": "achievement", "code": achievement.code, "reward": achievement.reward}
            )
