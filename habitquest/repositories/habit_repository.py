"""
Habit repository - Data access layer for Habit and HabitCompletion models.
Repositories only stage changes; services own commits.
"""
from datetime import date
from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from habitquest.models import Habit, HabitCompletion


class HabitRepository:
    """Repository for Habit data access"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, habit_id: int) -> Optional[Habit]:
        """Get habit by ID"""
        return self.db.query(Habit).filter(Habit.id == habit_id).first()

    def get_for_owner(self, owner_id: int, active_only: bool = True) -> List[Habit]:
        """Get a user's habits, newest first"""
        query = self.db.query(Habit).filter(Habit.owner_id == owner_id)
        if active_only:
            query = query.filter(Habit.is_active == True)
        return query.order_by(Habit.created_at.desc(), Habit.id.desc()).all()

    def longest_streak(self, owner_id: int) -> int:
        result = self.db.query(func.max(Habit.streak)).filter(Habit.owner_id == owner_id).scalar()
        return result or 0

    def add(self, habit: Habit) -> Habit:
        self.db.add(habit)
        self.db.flush()
        return habit

    def delete(self, habit: Habit) -> None:
        self.db.delete(habit)
        self.db.flush()


class HabitCompletionRepository:
    """Repository for HabitCompletion data access"""

    def __init__(self, db: Session):
        self.db = db

    def add(self, completion: HabitCompletion) -> HabitCompletion:
        """
        Insert a completion row.
        Raises IntegrityError when the habit already has one for that day.
        """
        self.db.add(completion)
        self.db.flush()
        return completion

    def count_for_user(self, user_id: int, since: Optional[date] = None) -> int:
        """Count a user's completions, optionally from a given day onwards"""
        query = self.db.query(HabitCompletion).filter(HabitCompletion.user_id == user_id)
        if since is not None:
            query = query.filter(HabitCompletion.completed_on >= since)
        return query.count()

