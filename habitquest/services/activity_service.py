"""
Activity rewards.
Point-earning actions outside habits: clicks, rewarded ads, mini-games and
referrals. Every one of them credits the ledger, keeps the activity streak,
advances matching challenges and checks achievements in one transaction.
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from habitquest.database import atomic
from habitquest.models import User, PointsSource
from habitquest.repositories.user_repository import UserRepository
from habitquest.services.date_service import DateService
from habitquest.services.ledger_service import LedgerService
from habitquest.services.user_service import UserService
from habitquest.services.level_service import resolve_level
from habitquest.services.challenge_service import ChallengeService
from habitquest.services.achievement_service import AchievementService, AchievementSignal
from habitquest.services.notification_service import NotificationService
from habitquest.constants import (
    POINTS_PER_CLICK,
    CLICK_MILESTONE_INTERVAL,
    REFERRAL_BONUS,
    WELCOME_BONUS,
    REFERRAL_WINDOW_MINUTES,
    GAME_MIN_POINTS,
    GAME_MAX_POINTS,
    GAME_DEFAULT_POINTS,
    CHALLENGE_CLICK_COUNT,
    CHALLENGE_EARN_POINTS,
    CHALLENGE_WATCH_ADS,
    CHALLENGE_PLAY_GAMES,
    CHALLENGE_SOCIAL_POST,
)
from habitquest.exceptions import ValidationError, ConflictError, NotFoundError

logger = logging.getLogger("habitquest.activity")


@dataclass
class ActivityResult:
    points_earned: int
    points: int
    leveled_up: bool
    new_level: int
    unlocked_achievements: List[str] = field(default_factory=list)


def game_points(game_type: str, score: int) -> int:
    """
    Points for a finished mini-game.

    memory, reaction: score / 10, number-guess: score / 5 (both capped),
    pattern: 20 per level reached. Unknown games pay the default.
    Never below GAME_MIN_POINTS.
    """
    if game_type in ("memory", "reaction"):
        points = min(score // 10, GAME_MAX_POINTS)
    elif game_type == "number-guess":
        points = min(score // 5, GAME_MAX_POINTS)
    elif game_type == "pattern":
        points = score * 20
    else:
        points = GAME_DEFAULT_POINTS
    return max(points, GAME_MIN_POINTS)


class ActivityService:
    """Service for non-habit point earning"""

    def __init__(self, db: Session, rng=None, notifier=None, date_service: Optional[DateService] = None):
        self.db = db
        self.user_repo = UserRepository(db)
        self.ledger = LedgerService(db)
        self.users = UserService(db)
        self.challenges = ChallengeService(db, rng)
        self.achievements = AchievementService(db)
        self.notifications = NotificationService(notifier)
        self.dates = date_service or DateService()

    def _earn(
        self,
        user: User,
        amount: int,
        source: PointsSource,
        description: str,
        progress: List[Tuple[str, int]],
        today: date,
        active: bool = True
    ) -> ActivityResult:
        """Credit, streak, challenge progress and achievements for one earning event"""
        level_before = resolve_level(user.lifetime_points)

        self.ledger.credit(user, amount, source, description)
        if active:
            self.users.touch_activity_streak(user, today)
        self.db.flush()

        for challenge_type, increment in progress + [(CHALLENGE_EARN_POINTS, amount)]:
            self.challenges.record_progress(user.id, challenge_type, increment, today)

        unlocked = self.achievements.evaluate_and_unlock(
            user.id, AchievementSignal.from_user(self.db, user)
        )
        level_after = resolve_level(user.lifetime_points)

        return ActivityResult(
            points_earned=amount,
            points=user.points,
            leveled_up=level_after.level > level_before.level,
            new_level=level_after.level,
            unlocked_achievements=[a.code for a in unlocked],
        )

    def record_click(self, user_id: int, today: Optional[date] = None) -> ActivityResult:
        """One click, worth POINTS_PER_CLICK scaled by the level multiplier"""
        today = today or self.dates.get_today()

        with atomic(self.db, "record_click"):
            user = self.users.get_user(user_id)
            tier = resolve_level(user.lifetime_points)
            reward = math.floor(round(POINTS_PER_CLICK * tier.xp_multiplier, 6))

            user.clicks += 1
            clicks = user.clicks
            result = self._earn(
                user, reward, PointsSource.CLICK, "Click",
                [(CHALLENGE_CLICK_COUNT, 1)], today
            )

        if clicks % CLICK_MILESTONE_INTERVAL == 0:
            self.notifications.dispatch(
                user_id, "Click milestone", f"You reached {clicks} clicks!",
                {"type": "click_milestone", "clicks": clicks}
            )
        self._notify(user_id, result)
        return result

    def record_ad_watch(self, user_id: int, today: Optional[date] = None) -> ActivityResult:
        """A completed rewarded ad pays the level's ad reward"""
        today = today or self.dates.get_today()

        with atomic(self.db, "record_ad_watch"):
            user = self.users.get_user(user_id)
            tier = resolve_level(user.lifetime_points)
            result = self._earn(
                user, tier.ad_reward, PointsSource.AD_WATCH, "Rewarded ad",
                [(CHALLENGE_WATCH_ADS, 1)], today
            )

        logger.info(f"User {user_id} watched an ad: +{result.points_earned}")
        self._notify(user_id, result)
        return result

    def record_game_score(
        self,
        user_id: int,
        game_type: str,
        score: int,
        today: Optional[date] = None
    ) -> ActivityResult:
        today = today or self.dates.get_today()
        if score < 0:
            raise ValidationError("score", "must not be negative")

        points = game_points(game_type, score)

        with atomic(self.db, "record_game_score"):
            user = self.users.get_user(user_id)
            result = self._earn(
                user, points, PointsSource.MINI_GAME, f"Mini-game: {game_type} ({score})",
                [(CHALLENGE_PLAY_GAMES, 1)], today
            )

        logger.info(f"User {user_id} played {game_type} (score {score}): +{points}")
        self._notify(user_id, result)
        return result

    def record_social_post(self, user_id: int, today: Optional[date] = None) -> None:
        """Community posts earn nothing directly, they only advance challenges"""
        today = today or self.dates.get_today()

        with atomic(self.db, "record_social_post"):
            self.users.get_user(user_id)
            self.challenges.record_progress(user_id, CHALLENGE_SOCIAL_POST, 1, today)

    def apply_referral(
        self,
        user_id: int,
        referral_code: str,
        today: Optional[date] = None,
        now: Optional[datetime] = None
    ) -> dict:
        """
        Redeem a referral code for a freshly created account.

        The referrer gets REFERRAL_BONUS, the new user WELCOME_BONUS.

        Raises:
            ConflictError: the user already redeemed a code
            ValidationError: account too old, or own code
            NotFoundError: no user has that code
        """
        today = today or self.dates.get_today()
        now = now or datetime.now()
        code = (referral_code or "").strip().upper()

        with atomic(self.db, "apply_referral"):
            user = self.users.get_user(user_id)
            if user.referred_by:
                raise ConflictError("Referral already applied")
            if user.created_at and now - user.created_at > timedelta(minutes=REFERRAL_WINDOW_MINUTES):
                raise ValidationError("referral_code", "only new accounts can redeem a referral code")

            referrer = self.user_repo.get_by_referral_code(code)
            if not referrer:
                raise NotFoundError("referral code", code)
            if referrer.id == user.id:
                raise ValidationError("referral_code", "cannot refer yourself")

            user.referred_by = code
            referrer.total_referrals += 1

            self._earn(
                referrer, REFERRAL_BONUS, PointsSource.REFERRAL,
                f"Referred {user.username}", [], today, active=False
            )
            result = self._earn(
                user, WELCOME_BONUS, PointsSource.REFERRAL,
                f"Welcome bonus from {referrer.username}", [], today
            )
            referrer_id = referrer.id

        logger.info(f"User {user_id} redeemed referral code of user {referrer_id}")
        self.notifications.dispatch(
            referrer_id, "New referral", "A friend joined with your code!",
            {"type": "referral", "bonus": REFERRAL_BONUS}
        )
        return {
            "points_earned": result.points_earned,
            "points": result.points,
            "referrer_bonus": REFERRAL_BONUS,
            "unlocked_achievements": result.unlocked_achievements,
        }

    def _notify(self, user_id: int, result: ActivityResult) -> None:
        if result.leveled_up:
            self.notifications.dispatch(
                user_id, "Level up!", f"You reached level {result.new_level}",
                {"type": "level_up", "level": result.new_level}
            )
        for code in result.unlocked_achievements:
            self.notifications.dispatch(
                user_id, "Achievement unlocked!", code,
                {"type": "achievement", "code": code}
            )
