"""
Tests for clicks, rewarded ads, mini-games and referrals.
"""
import pytest
from datetime import datetime, timedelta

from habitquest.models import PointsHistory, ChallengeCompletion
from habitquest.services.activity_service import ActivityService, game_points
from habitquest.constants import CHALLENGE_CLICK_COUNT, CHALLENGE_EARN_POINTS
from habitquest.exceptions import ConflictError, NotFoundError, ValidationError
from habitquest.tests.conftest import RecordingNotifier


def make_service(db, notifier=None):
    return ActivityService(db, notifier=notifier or RecordingNotifier())


class TestRecordClick:
    """Tests for record_click"""

    def test_click_pays_base(self, db_session, user, today):
        result = make_service(db_session).record_click(user.id, today)

        assert result.points_earned == 10
        db_session.refresh(user)
        assert user.clicks == 1
        assert user.points == 10
        assert user.streak_days == 1
        assert db_session.query(PointsHistory).one().source == "click"

    def test_click_scaled_by_level(self, db_session, user, today):
        # Level 8, multiplier 1.5
        user.lifetime_points = 10000
        db_session.commit()

        assert make_service(db_session).record_click(user.id, today).points_earned == 15

    def test_click_advances_challenges(self, db_session, user, today, todays_challenges):
        service = make_service(db_session)

        for _ in range(3):
            service.record_click(user.id, today)

        click_row = db_session.query(ChallengeCompletion).filter(
            ChallengeCompletion.challenge_id == todays_challenges[CHALLENGE_CLICK_COUNT].id
        ).one()
        points_row = db_session.query(ChallengeCompletion).filter(
            ChallengeCompletion.challenge_id == todays_challenges[CHALLENGE_EARN_POINTS].id
        ).one()
        assert click_row.completed is True
        assert points_row.progress == 30

    def test_first_click_achievement(self, catalog, user, today):
        result = make_service(catalog).record_click(user.id, today)

        assert result.unlocked_achievements == ["first_click"]
        assert result.points == 110

    def test_click_milestone_notifies(self, db_session, user, today):
        user.clicks = 99
        db_session.commit()
        notifier = RecordingNotifier()

        make_service(db_session, notifier).record_click(user.id, today)

        assert notifier.sent[0][1] == "Click milestone"

    def test_unknown_user(self, db_session, today):
        with pytest.raises(NotFoundError):
            make_service(db_session).record_click(42, today)


class TestRecordAdWatch:
    """Tests for record_ad_watch"""

    def test_ad_reward_follows_level(self, db_session, user, today):
        user.lifetime_points = 2500
        db_session.commit()

        result = make_service(db_session).record_ad_watch(user.id, today)

        assert result.points_earned == 100
        assert db_session.query(PointsHistory).one().source == "ad_watch"


class TestGamePoints:
    """Tests for the mini-game score formula"""

    @pytest.mark.parametrize("game_type,score,expected", [
        ("memory", 500, 50),
        ("memory", 5000, 100),
        ("memory", 20, 10),
        ("reaction", 350, 35),
        ("number-guess", 250, 50),
        ("number-guess", 1000, 100),
        ("pattern", 4, 80),
        ("pattern", 0, 10),
        ("snake", 9999, 50),
    ])
    def test_formula(self, game_type, score, expected):
        assert game_points(game_type, score) == expected

    def test_game_score_credits(self, db_session, user, today):
        result = make_service(db_session).record_game_score(user.id, "memory", 500, today)

        assert result.points_earned == 50
        assert db_session.query(PointsHistory).one().source == "mini_game"

    def test_negative_score(self, db_session, user, today):
        with pytest.raises(ValidationError):
            make_service(db_session).record_game_score(user.id, "memory", -1, today)


class TestSocialPost:
    """Tests for record_social_post"""

    def test_post_earns_nothing(self, db_session, user, today):
        make_service(db_session).record_social_post(user.id, today)

        db_session.refresh(user)
        assert user.points == 0
        assert db_session.query(PointsHistory).count() == 0


class TestApplyReferral:
    """Tests for apply_referral"""

    def test_both_sides_paid(self, db_session, user, other_user, today):
        result = make_service(db_session).apply_referral(other_user.id, "alice001", today)

        assert result["points_earned"] == 250
        assert result["referrer_bonus"] == 100
        db_session.refresh(user)
        db_session.refresh(other_user)
        assert user.points == 100
        assert user.total_referrals == 1
        assert user.streak_days == 0
        assert other_user.points == 250
        assert other_user.referred_by == "ALICE001"

    def test_only_once(self, db_session, user, other_user, today):
        service = make_service(db_session)
        service.apply_referral(other_user.id, "ALICE001", today)

        with pytest.raises(ConflictError):
            service.apply_referral(other_user.id, "ALICE001", today)

    def test_own_code(self, db_session, user, today):
        with pytest.raises(ValidationError):
            make_service(db_session).apply_referral(user.id, "ALICE001", today)

    def test_unknown_code(self, db_session, other_user, today):
        with pytest.raises(NotFoundError):
            make_service(db_session).apply_referral(other_user.id, "NOPE", today)

    def test_old_account(self, db_session, user, other_user, today):
        later = datetime.now() + timedelta(minutes=10)

        with pytest.raises(ValidationError):
            make_service(db_session).apply_referral(other_user.id, "ALICE001", today, now=later)

        db_session.refresh(user)
        assert user.points == 0
