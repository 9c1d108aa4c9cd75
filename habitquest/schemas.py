from pydantic import BaseModel, Field
from datetime import datetime, date
from typing import List, Optional


# Habit schemas

class HabitBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    difficulty: str = Field(default="easy")  # easy, medium, hard, very_hard, epic
    category: str = Field(default="other")

class HabitCreate(HabitBase):
    pass

class HabitUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    difficulty: Optional[str] = None
    category: Optional[str] = None
    is_active: Optional[bool] = None

class HabitResponse(HabitBase):
    id: int
    streak: int = 0  # Effective streak for today
    total_completed: int = 0
    last_completed_at: Optional[date] = None
    freeze_count: int = 0
    is_currently_frozen: bool = False
    is_active: bool = True
    completed_today: bool = False
    created_at: datetime

    class Config:
        from_attributes = True

class HabitStatsResponse(BaseModel):
    total_habits: int
    active_habits: int
    today_completions: int
    week_completions: int
    longest_streak: int

class CompletionResponse(BaseModel):
    points_earned: int
    new_streak: int
    is_critical: bool
    leveled_up: bool
    new_level: int
    unlocked_achievements: List[str] = []

    class Config:
        from_attributes = True

class FreezePurchaseResponse(BaseModel):
    freeze_count: int
    points: int

class FreezeUseResponse(BaseModel):
    streak: int
    freeze_count: int


# Challenge schemas

class ChallengeResponse(BaseModel):
    id: int
    type: str
    title: str
    description: Optional[str] = None
    difficulty: str
    target: int
    progress: int = 0
    completed: bool = False
    claimed: bool = False
    reward: int

class ClaimResponse(BaseModel):
    challenge_id: int
    points_earned: int
    reward: int
    points: int


# Achievement schemas

class AchievementResponse(BaseModel):
    id: int
    code: str
    name: str
    description: Optional[str] = None
    reward: int
    unlocked_at: datetime


# Points schemas

class LevelProgressResponse(BaseModel):
    current: int
    required: int
    percent: int

class BalanceResponse(BaseModel):
    points: int
    lifetime_points: int
    streak_days: int
    clicks: int
    level: int
    level_name: str
    xp_multiplier: float
    daily_bonus_multiplier: float
    ad_reward: int
    progress: LevelProgressResponse

class PointsHistoryResponse(BaseModel):
    id: int
    amount: int
    source: str
    label: str
    icon: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime


# Activity schemas

class GameScoreRequest(BaseModel):
    game_type: str = Field(..., min_length=1, max_length=50)
    score: int = Field(..., ge=0)

class ReferralRequest(BaseModel):
    referral_code: str = Field(..., min_length=1, max_length=32)

class ActivityResponse(BaseModel):
    points_earned: int
    points: int
    leveled_up: bool = False
    new_level: int
    unlocked_achievements: List[str] = []

    class Config:
        from_attributes = True

class ReferralResponse(BaseModel):
    points_earned: int
    points: int
    referrer_bonus: int
    unlocked_achievements: List[str] = []
