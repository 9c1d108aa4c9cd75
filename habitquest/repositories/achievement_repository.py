"""
Achievement repository - Data access layer for achievements and unlocks.
"""
from typing import List, Set
from sqlalchemy.orm import Session

from habitquest.models import Achievement, UserAchievement


class AchievementRepository:
    """Repository for Achievement and UserAchievement data access"""

    def __init__(self, db: Session):
        self.db = db

    def get_all(self) -> List[Achievement]:
        return self.db.query(Achievement).order_by(Achievement.id).all()

    def get_codes(self) -> Set[str]:
        return {code for (code,) in self.db.query(Achievement.code).all()}

    def add(self, achievement: Achievement) -> Achievement:
        self.db.add(achievement)
        self.db.flush()
        return achievement

    def get_unlocked_ids(self, user_id: int) -> Set[int]:
        """IDs of achievements the user already owns"""
        rows = self.db.query(UserAchievement.achievement_id).filter(
            UserAchievement.user_id == user_id
        ).all()
        return {achievement_id for (achievement_id,) in rows}

    def add_unlock(self, unlock: UserAchievement) -> UserAchievement:
        """Insert an unlock. Raises IntegrityError if the user already owns it"""
        self.db.add(unlock)
        self.db.flush()
        return unlock

    def get_user_achievements(self, user_id: int) -> List[UserAchievement]:
        """Unlocked achievements, newest first"""
        return self.db.query(UserAchievement).filter(
            UserAchievement.user_id == user_id
        ).order_by(UserAchievement.unlocked_at.desc(), UserAchievement.id.desc()).all()
