"""
User service.
Users are owned by the identity subsystem; this covers lookups, local
provisioning and the global activity streak.
"""
import logging
import secrets
from datetime import date

from sqlalchemy.orm import Session

from habitquest.models import User
from habitquest.repositories.user_repository import UserRepository
from habitquest.services.level_service import resolve_level, progress_to_next
from habitquest.services.streak_service import next_streak, effective_streak
from habitquest.exceptions import NotFoundError, ValidationError

logger = logging.getLogger("habitquest.users")


class UserService:
    """Service for user lookups and activity tracking"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepository(db)

    def get_user(self, user_id: int) -> User:
        user = self.repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("user", user_id)
        return user

    def create_user(self, username: str) -> User:
        """Provision a user row for an identity handed to us"""
        if not username or not username.strip():
            raise ValidationError("username", "must not be empty")
        if self.repo.get_by_username(username):
            raise ValidationError("username", f"'{username}' is taken")

        user = self.repo.add(User(
            username=username.strip(),
            referral_code=secrets.token_hex(4).upper()
        ))
        self.db.commit()
        logger.info(f"Provisioned user {user.id} ({user.username})")
        return user

    @staticmethod
    def touch_activity_streak(user: User, today: date) -> int:
        """
        Advance the global activity streak the first time the user earns on a day.
        Later activity the same day leaves it unchanged.
        """
        if user.last_active_on == today:
            return user.streak_days

        user.streak_days = next_streak(user.streak_days, user.last_active_on, today)
        user.last_active_on = today
        return user.streak_days

    def get_balance(self, user_id: int, today: date) -> dict:
        """Balance, level and progress summary"""
        user = self.get_user(user_id)
        tier = resolve_level(user.lifetime_points)
        progress = progress_to_next(user.lifetime_points)

        return {
            "points": user.points,
            "lifetime_points": user.lifetime_points,
            "streak_days": effective_streak(user.streak_days, user.last_active_on, today),
            "clicks": user.clicks,
            "level": tier.level,
            "level_name": tier.name,
            "xp_multiplier": tier.xp_multiplier,
            "daily_bonus_multiplier": tier.daily_bonus_multiplier,
            "ad_reward": tier.ad_reward,
            "progress": {
                "current": progress.current,
                "required": progress.required,
                "percent": progress.percent,
            },
        }
