"""
Application constants and environment-derived settings.
Static reference tables (levels, rewards, challenge templates, achievements)
live here and are immutable at runtime.
"""
import os

# === Environment ===

DATABASE_URL = os.getenv("HABITQUEST_DATABASE_URL", "sqlite:///./habitquest.db")
API_KEY = os.getenv("HABITQUEST_API_KEY", "your-secret-key-change-me")

# Day boundaries for streaks and challenges are computed in this zone for every user
REFERENCE_TIMEZONE = os.getenv("HABITQUEST_TIMEZONE", "UTC")

DEFAULT_LOG_DIRECTORY_PROD = "/var/log/habitquest"
DEFAULT_LOG_DIRECTORY_DEV = "./logs"

CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "HABITQUEST_CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"
    ).split(",")
    if origin.strip()
]

SCHEDULER_ENABLED = os.getenv("HABITQUEST_SCHEDULER_ENABLED", "true").lower() == "true"

# === Habits ===

DIFFICULTY_EASY = "easy"
DIFFICULTY_MEDIUM = "medium"
DIFFICULTY_HARD = "hard"
DIFFICULTY_VERY_HARD = "very_hard"
DIFFICULTY_EPIC = "epic"

HABIT_DIFFICULTY_REWARDS = {
    DIFFICULTY_EASY: 15,
    DIFFICULTY_MEDIUM: 40,
    DIFFICULTY_HARD: 80,
    DIFFICULTY_VERY_HARD: 150,
    DIFFICULTY_EPIC: 300,
}

# Harder habits get better odds on the variable reward
DIFFICULTY_BONUS_CHANCE = {
    DIFFICULTY_EASY: 0.05,
    DIFFICULTY_MEDIUM: 0.10,
    DIFFICULTY_HARD: 0.15,
    DIFFICULTY_VERY_HARD: 0.20,
    DIFFICULTY_EPIC: 0.25,
}

CRITICAL_SUCCESS_MULTIPLIER = 2.0

HABIT_CATEGORIES = [
    "fitness",
    "learning",
    "health",
    "productivity",
    "mindfulness",
    "social",
    "creative",
    "other",
]
DEFAULT_HABIT_CATEGORY = "other"

# === Streak freeze ===

STREAK_FREEZE_COST = 50
MAX_BANKED_FREEZES = 1

# === Levels ===
# (level, name, min_points, xp_multiplier, daily_bonus_multiplier, ad_reward)

LEVEL_TIERS = [
    (1, "Beginner", 0, 1.0, 1.0, 50),
    (2, "Novice", 100, 1.05, 1.05, 55),
    (3, "Apprentice", 250, 1.1, 1.1, 60),
    (4, "Rising", 500, 1.15, 1.15, 70),
    (5, "Climber", 1000, 1.2, 1.2, 80),
    (6, "Achiever", 2500, 1.3, 1.3, 100),
    (7, "Expert", 5000, 1.4, 1.4, 125),
    (8, "Master", 10000, 1.5, 1.5, 150),
    (9, "Legend", 25000, 1.75, 1.75, 200),
    (10, "Mythic", 50000, 2.0, 2.0, 250),
    (11, "Divine", 100000, 2.5, 2.5, 300),
    (12, "Godlike", 250000, 3.0, 3.0, 500),
]

# === Activities ===

POINTS_PER_CLICK = 10
CLICK_MILESTONE_INTERVAL = 100

REFERRAL_BONUS = 100  # Referrer
WELCOME_BONUS = 250   # New user
REFERRAL_WINDOW_MINUTES = 5

GAME_MIN_POINTS = 10
GAME_MAX_POINTS = 100
GAME_DEFAULT_POINTS = 50
GAME_TYPES = ["memory", "reaction", "number-guess", "pattern"]

# === Daily challenges ===

CHALLENGES_PER_DAY = 3

CHALLENGE_CLICK_COUNT = "click_count"
CHALLENGE_EARN_POINTS = "earn_points"
CHALLENGE_WATCH_ADS = "watch_ads"
CHALLENGE_PLAY_GAMES = "play_games"
CHALLENGE_SOCIAL_POST = "social_post"
CHALLENGE_COMPLETE_HABITS = "complete_habits"

# Reward bracket per difficulty, inclusive bounds
CHALLENGE_REWARD_RANGES = {
    DIFFICULTY_EASY: (5, 25),
    DIFFICULTY_MEDIUM: (25, 50),
    DIFFICULTY_HARD: (50, 80),
}

CHALLENGE_TEMPLATES = [
    {"title": "Click Master", "description": "Make 100 clicks today",
     "type": CHALLENGE_CLICK_COUNT, "target": 100, "difficulty": DIFFICULTY_EASY},
    {"title": "Click Champion", "description": "Make 50 clicks today",
     "type": CHALLENGE_CLICK_COUNT, "target": 50, "difficulty": DIFFICULTY_EASY},
    {"title": "Point Collector", "description": "Earn 1000 points today",
     "type": CHALLENGE_EARN_POINTS, "target": 1000, "difficulty": DIFFICULTY_MEDIUM},
    {"title": "Point Hunter", "description": "Earn 400 points today",
     "type": CHALLENGE_EARN_POINTS, "target": 400, "difficulty": DIFFICULTY_EASY},
    {"title": "Ad Enthusiast", "description": "Watch 3 ads",
     "type": CHALLENGE_WATCH_ADS, "target": 3, "difficulty": DIFFICULTY_EASY},
    {"title": "Ad Watcher", "description": "Watch 5 ads",
     "type": CHALLENGE_WATCH_ADS, "target": 5, "difficulty": DIFFICULTY_MEDIUM},
    {"title": "Game Champion", "description": "Play 2 mini-games",
     "type": CHALLENGE_PLAY_GAMES, "target": 2, "difficulty": DIFFICULTY_MEDIUM},
    {"title": "Game Master", "description": "Play 3 mini-games",
     "type": CHALLENGE_PLAY_GAMES, "target": 3, "difficulty": DIFFICULTY_HARD},
    {"title": "Social Butterfly", "description": "Make a community post",
     "type": CHALLENGE_SOCIAL_POST, "target": 1, "difficulty": DIFFICULTY_EASY},
    {"title": "Community Star", "description": "Make 3 community posts",
     "type": CHALLENGE_SOCIAL_POST, "target": 3, "difficulty": DIFFICULTY_MEDIUM},
    {"title": "Habit Starter", "description": "Complete 1 habit today",
     "type": CHALLENGE_COMPLETE_HABITS, "target": 1, "difficulty": DIFFICULTY_EASY},
    {"title": "Habit Hero", "description": "Complete 3 habits today",
     "type": CHALLENGE_COMPLETE_HABITS, "target": 3, "difficulty": DIFFICULTY_HARD},
]

# === Achievements ===

METRIC_CLICKS = "clicks"
METRIC_LIFETIME_POINTS = "lifetime_points"
METRIC_STREAK_DAYS = "streak_days"
METRIC_HABIT_STREAK = "habit_streak"
METRIC_HABITS_COMPLETED = "habits_completed"

ACHIEVEMENT_CATALOG = [
    {"code": "habit_count_1", "name": "First Step", "description": "Complete your first habit",
     "metric": METRIC_HABITS_COMPLETED, "threshold": 1, "reward": 50},
    {"code": "habit_count_10", "name": "Habit Builder", "description": "Complete 10 habits",
     "metric": METRIC_HABITS_COMPLETED, "threshold": 10, "reward": 200},
    {"code": "habit_count_100", "name": "Habit Master", "description": "Complete 100 habits",
     "metric": METRIC_HABITS_COMPLETED, "threshold": 100, "reward": 1000},
    {"code": "streak_7", "name": "Week Warrior", "description": "Reach a 7-day habit streak",
     "metric": METRIC_HABIT_STREAK, "threshold": 7, "reward": 500},
    {"code": "streak_30", "name": "Monthly Master", "description": "Reach a 30-day habit streak",
     "metric": METRIC_HABIT_STREAK, "threshold": 30, "reward": 2000},
    {"code": "first_click", "name": "First Click", "description": "Complete your first click",
     "metric": METRIC_CLICKS, "threshold": 1, "reward": 100},
    {"code": "hundred_clicks", "name": "Century", "description": "Reach 100 clicks",
     "metric": METRIC_CLICKS, "threshold": 100, "reward": 500},
    {"code": "thousand_clicks", "name": "Millionaire Clicker", "description": "Reach 1,000 clicks",
     "metric": METRIC_CLICKS, "threshold": 1000, "reward": 2000},
    {"code": "thousand_points", "name": "Big Earner", "description": "Earn 1,000 lifetime points",
     "metric": METRIC_LIFETIME_POINTS, "threshold": 1000, "reward": 500},
    {"code": "five_thousand_points", "name": "Rich", "description": "Earn 5,000 lifetime points",
     "metric": METRIC_LIFETIME_POINTS, "threshold": 5000, "reward": 1000},
    {"code": "activity_streak_7", "name": "7-Day Streak", "description": "Stay active 7 days in a row",
     "metric": METRIC_STREAK_DAYS, "threshold": 7, "reward": 300},
    {"code": "activity_streak_30", "name": "Monthly Warrior", "description": "Stay active 30 days in a row",
     "metric": METRIC_STREAK_DAYS, "threshold": 30, "reward": 1500},
]
