from enum import Enum

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Date, ForeignKey, UniqueConstraint
)
from sqlalchemy.orm import relationship
from datetime import datetime

from habitquest.database import Base


class PointsSource(str, Enum):
    """Closed set of ledger sources"""
    HABIT_COMPLETION = "habit_completion"
    AD_WATCH = "ad_watch"
    CLICK = "click"
    MINI_GAME = "mini_game"
    REFERRAL = "referral"
    ADMIN_GIFT = "admin_gift"
    STREAK_FREEZE_PURCHASE = "streak_freeze_purchase"
    ACHIEVEMENT = "achievement"
    CHALLENGE = "challenge"


# Display metadata for history views
POINTS_SOURCE_LABELS = {
    PointsSource.HABIT_COMPLETION: {"label": "Habit completed", "icon": "✅"},
    PointsSource.AD_WATCH: {"label": "Ad watched", "icon": "📺"},
    PointsSource.CLICK: {"label": "Click", "icon": "👆"},
    PointsSource.MINI_GAME: {"label": "Mini-game", "icon": "🎮"},
    PointsSource.REFERRAL: {"label": "Referral", "icon": "👥"},
    PointsSource.ADMIN_GIFT: {"label": "Gift", "icon": "🎁"},
    PointsSource.STREAK_FREEZE_PURCHASE: {"label": "Streak freeze", "icon": "🧊"},
    PointsSource.ACHIEVEMENT: {"label": "Achievement", "icon": "🏆"},
    PointsSource.CHALLENGE: {"label": "Daily challenge", "icon": "🎯"},
}


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, nullable=False, unique=True)
    points = Column(Integer, nullable=False, default=0)           # Spendable balance
    lifetime_points = Column(Integer, nullable=False, default=0)  # Never reduced by spending
    streak_days = Column(Integer, nullable=False, default=0)      # Global activity streak
    last_active_on = Column(Date, nullable=True)
    clicks = Column(Integer, nullable=False, default=0)

    referral_code = Column(String, nullable=True, unique=True)
    referred_by = Column(String, nullable=True)
    total_referrals = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.now)
    version = Column(Integer, nullable=False)

    habits = relationship("Habit", back_populates="owner", cascade="all, delete-orphan")

    __mapper_args__ = {"version_id_col": version}


class Habit(Base):
    __tablename__ = "habits"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    difficulty = Column(String, nullable=False, default="easy")  # easy, medium, hard, very_hard, epic
    category = Column(String, nullable=False, default="other")

    streak = Column(Integer, nullable=False, default=0)
    total_completed = Column(Integer, nullable=False, default=0)
    last_completed_at = Column(Date, nullable=True)  # Last completion or freeze bridge day
    freeze_count = Column(Integer, nullable=False, default=0)  # 0 or 1
    is_currently_frozen = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, default=datetime.now)
    version = Column(Integer, nullable=False)

    owner = relationship("User", back_populates="habits")
    completions = relationship("HabitCompletion", back_populates="habit", cascade="all, delete-orphan")

    __mapper_args__ = {"version_id_col": version}


class HabitCompletion(Base):
    __tablename__ = "habit_completions"
    __table_args__ = (
        UniqueConstraint("habit_id", "completed_on", name="uq_habit_completion_day"),
    )

    id = Column(Integer, primary_key=True, index=True)
    habit_id = Column(Integer, ForeignKey("habits.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    completed_at = Column(DateTime, nullable=False, default=datetime.now)
    completed_on = Column(Date, nullable=False)  # Reference-zone day bucket
    points_earned = Column(Integer, nullable=False, default=0)
    is_critical = Column(Boolean, nullable=False, default=False)

    habit = relationship("Habit", back_populates="completions")


class PointsHistory(Base):
    __tablename__ = "points_history"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Integer, nullable=False)  # Signed
    source = Column(String, nullable=False)   # PointsSource value
    description = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.now, index=True)


class ChallengeDay(Base):
    """One row per materialized day; the unique day is the creation guard"""
    __tablename__ = "challenge_days"

    id = Column(Integer, primary_key=True, index=True)
    day = Column(Date, nullable=False, unique=True)
    created_at = Column(DateTime, default=datetime.now)


class DailyChallenge(Base):
    __tablename__ = "daily_challenges"
    __table_args__ = (
        UniqueConstraint("type", "day", name="uq_daily_challenge_type_day"),
    )

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String, nullable=False)
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    target = Column(Integer, nullable=False)
    reward = Column(Integer, nullable=False)
    difficulty = Column(String, nullable=False, default="easy")
    day = Column(Date, nullable=False, index=True)

    completions = relationship("ChallengeCompletion", back_populates="challenge", cascade="all, delete-orphan")


class ChallengeCompletion(Base):
    __tablename__ = "challenge_completions"
    __table_args__ = (
        UniqueConstraint("user_id", "challenge_id", name="uq_challenge_completion_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    challenge_id = Column(Integer, ForeignKey("daily_challenges.id"), nullable=False, index=True)
    progress = Column(Integer, nullable=False, default=0)
    completed = Column(Boolean, nullable=False, default=False)  # One-way flip
    completed_at = Column(DateTime, nullable=True)
    claimed = Column(Boolean, nullable=False, default=False)
    claimed_at = Column(DateTime, nullable=True)

    challenge = relationship("DailyChallenge", back_populates="completions")


class Achievement(Base):
    __tablename__ = "achievements"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    metric = Column(String, nullable=False)  # clicks, lifetime_points, streak_days, habit_streak, habits_completed
    threshold = Column(Integer, nullable=False)
    reward = Column(Integer, nullable=False, default=0)


class UserAchievement(Base):
    __tablename__ = "user_achievements"
    __table_args__ = (
        UniqueConstraint("user_id", "achievement_id", name="uq_user_achievement"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    achievement_id = Column(Integer, ForeignKey("achievements.id"), nullable=False)
    unlocked_at = Column(DateTime, nullable=False, default=datetime.now)

    achievement = relationship("Achievement")
