"""
Habit service - owner CRUD and statistics.
"""
import logging
from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session

from habitquest.models import Habit
from habitquest.database import atomic
from habitquest.repositories.habit_repository import HabitRepository, HabitCompletionRepository
from habitquest.services.streak_service import effective_streak
from habitquest.constants import HABIT_DIFFICULTY_REWARDS, HABIT_CATEGORIES, DEFAULT_HABIT_CATEGORY
from habitquest.exceptions import NotFoundError, ForbiddenError, ValidationError

logger = logging.getLogger("habitquest.habits")

EDITABLE_FIELDS = ("name", "description", "difficulty", "category", "is_active")


def _validate_fields(data: dict) -> None:
    if "name" in data and (data["name"] is None or not data["name"].strip()):
        raise ValidationError("name", "must not be empty")
    if "difficulty" in data and data["difficulty"] not in HABIT_DIFFICULTY_REWARDS:
        raise ValidationError("difficulty", f"must be one of {', '.join(HABIT_DIFFICULTY_REWARDS)}")
    if "category" in data and data["category"] not in HABIT_CATEGORIES:
        raise ValidationError("category", f"must be one of {', '.join(HABIT_CATEGORIES)}")


def get_owned_habit(repo: HabitRepository, user_id: int, habit_id: int) -> Habit:
    """Load a habit and check it belongs to user_id"""
    habit = repo.get_by_id(habit_id)
    if not habit:
        raise NotFoundError("habit", habit_id)
    if habit.owner_id != user_id:
        raise ForbiddenError("habit", habit_id)
    return habit


class HabitService:
    """Service for habit management"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = HabitRepository(db)
        self.completion_repo = HabitCompletionRepository(db)

    def get_habit(self, user_id: int, habit_id: int) -> Habit:
        return get_owned_habit(self.repo, user_id, habit_id)

    def create_habit(
        self,
        user_id: int,
        name: str,
        difficulty: str,
        category: Optional[str] = None,
        description: Optional[str] = None
    ) -> Habit:
        """Create a new habit for user_id"""
        category = category or DEFAULT_HABIT_CATEGORY
        _validate_fields({"name": name, "difficulty": difficulty, "category": category})

        with atomic(self.db, "create_habit"):
            habit = self.repo.add(Habit(
                owner_id=user_id,
                name=name.strip(),
                description=description,
                difficulty=difficulty,
                category=category,
            ))

        logger.info(f"User {user_id} created habit {habit.id} ({difficulty})")
        return habit

    def list_habits(self, user_id: int, today: date, include_inactive: bool = False) -> List[dict]:
        """Habits with the streak they should display today"""
        habits = self.repo.get_for_owner(user_id, active_only=not include_inactive)
        return [self.to_view(habit, today) for habit in habits]

    @staticmethod
    def to_view(habit: Habit, today: date) -> dict:
        return {
            "id": habit.id,
            "name": habit.name,
            "description": habit.description,
            "difficulty": habit.difficulty,
            "category": habit.category,
            "streak": effective_streak(habit.streak, habit.last_completed_at, today),
            "total_completed": habit.total_completed,
            "last_completed_at": habit.last_completed_at,
            "freeze_count": habit.freeze_count,
            "is_currently_frozen": habit.is_currently_frozen,
            "is_active": habit.is_active,
            "completed_today": habit.last_completed_at == today and not habit.is_currently_frozen,
            "created_at": habit.created_at,
        }

    def update_habit(self, user_id: int, habit_id: int, data: dict) -> Habit:
        """Apply a partial update. Unknown keys are ignored"""
        changes = {key: value for key, value in data.items() if key in EDITABLE_FIELDS}
        _validate_fields(changes)

        with atomic(self.db, "update_habit"):
            habit = get_owned_habit(self.repo, user_id, habit_id)
            for field, value in changes.items():
                setattr(habit, field, value.strip() if field == "name" else value)
            self.db.flush()

        return habit

    def delete_habit(self, user_id: int, habit_id: int) -> None:
        with atomic(self.db, "delete_habit"):
            habit = get_owned_habit(self.repo, user_id, habit_id)
            self.repo.delete(habit)

        logger.info(f"User {user_id} deleted habit {habit_id}")

    def get_stats(self, user_id: int, today: date) -> dict:
        """
        Per-user habit statistics.

        Week completions count the last seven days including today.
        """
        habits = self.repo.get_for_owner(user_id, active_only=False)
        longest = max(
            (effective_streak(h.streak, h.last_completed_at, today) for h in habits),
            default=0
        )

        return {
            "total_habits": len(habits),
            "active_habits": sum(1 for h in habits if h.is_active),
            "today_completions": self.completion_repo.count_for_user(user_id, since=today),
            "week_completions": self.completion_repo.count_for_user(
                user_id, since=today - timedelta(days=6)
            ),
            "longest_streak": longest,
        }
