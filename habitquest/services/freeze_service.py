"""
Streak freeze management.
A freeze is bought with points, banked on a habit (at most one) and later
spent to bridge a single missed day.
"""
import logging
from datetime import date

from sqlalchemy.orm import Session

from habitquest.database import atomic
from habitquest.models import PointsSource
from habitquest.repositories.habit_repository import HabitRepository
from habitquest.services.habit_service import get_owned_habit
from habitquest.services.ledger_service import LedgerService
from habitquest.services.user_service import UserService
from habitquest.services.streak_service import is_streak_broken
from habitquest.constants import STREAK_FREEZE_COST, MAX_BANKED_FREEZES
from habitquest.exceptions import (
    FreezeCapReachedError,
    NoFreezeAvailableError,
    AlreadyFrozenTodayError,
    StreakBrokenError,
)

logger = logging.getLogger("habitquest.freeze")


class FreezeService:
    """Service for buying and using streak freezes"""

    def __init__(self, db: Session):
        self.db = db
        self.habit_repo = HabitRepository(db)
        self.ledger = LedgerService(db)
        self.users = UserService(db)

    def purchase_freeze(self, user_id: int, habit_id: int) -> dict:
        """
        Buy one freeze for a habit.

        Raises:
            NotFoundError, ForbiddenError: habit lookup
            FreezeCapReachedError: a freeze is already banked
            InsufficientBalanceError: balance below the freeze cost
        """
        with atomic(self.db, "purchase_freeze"):
            habit = get_owned_habit(self.habit_repo, user_id, habit_id)
            if habit.freeze_count >= MAX_BANKED_FREEZES:
                raise FreezeCapReachedError(habit_id)

            user = self.users.get_user(user_id)
            self.ledger.debit(
                user,
                STREAK_FREEZE_COST,
                PointsSource.STREAK_FREEZE_PURCHASE,
                f"Streak freeze for '{habit.name}'"
            )
            habit.freeze_count += 1
            self.db.flush()

        logger.info(f"User {user_id} bought a freeze for habit {habit_id}")
        return {"freeze_count": habit.freeze_count, "points": user.points}

    def use_freeze(self, user_id: int, habit_id: int, today: date) -> dict:
        """
        Spend the banked freeze to cover today.
        Marks today as bridged without touching the streak or paying points.

        Raises:
            NoFreezeAvailableError: nothing banked
            AlreadyFrozenTodayError: a freeze already covers today
            StreakBrokenError: more than one day missed since the last completion
        """
        with atomic(self.db, "use_freeze"):
            habit = get_owned_habit(self.habit_repo, user_id, habit_id)
            if habit.freeze_count < 1:
                raise NoFreezeAvailableError(habit_id)
            if habit.is_currently_frozen and habit.last_completed_at == today:
                raise AlreadyFrozenTodayError(habit_id)
            if is_streak_broken(habit.last_completed_at, today):
                raise StreakBrokenError(habit_id)

            habit.freeze_count -= 1
            habit.last_completed_at = today
            habit.is_currently_frozen = True
            self.db.flush()

        logger.info(f"User {user_id} used a freeze on habit {habit_id} for {today}")
        return {"streak": habit.streak, "freeze_count": habit.freeze_count}
