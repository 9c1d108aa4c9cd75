"""
Tests for user provisioning, activity streak and balance summary.
"""
import pytest
from datetime import timedelta

from habitquest.services.user_service import UserService
from habitquest.exceptions import NotFoundError, ValidationError


class TestCreateUser:
    """Tests for create_user"""

    def test_provisions_with_referral_code(self, db_session):
        user = UserService(db_session).create_user("carol")

        assert user.id is not None
        assert user.points == 0
        assert user.lifetime_points == 0
        assert len(user.referral_code) == 8

    def test_duplicate_username(self, db_session, user):
        with pytest.raises(ValidationError):
            UserService(db_session).create_user("alice")

    def test_missing_user(self, db_session):
        with pytest.raises(NotFoundError):
            UserService(db_session).get_user(404)


class TestActivityStreak:
    """Tests for touch_activity_streak"""

    def test_first_activity(self, user, today):
        assert UserService.touch_activity_streak(user, today) == 1
        assert user.last_active_on == today

    def test_same_day_is_unchanged(self, user, today):
        UserService.touch_activity_streak(user, today)

        assert UserService.touch_activity_streak(user, today) == 1

    def test_next_day_continues(self, user, today, yesterday):
        UserService.touch_activity_streak(user, yesterday)

        assert UserService.touch_activity_streak(user, today) == 2

    def test_gap_resets(self, user, today):
        user.streak_days = 9
        user.last_active_on = today - timedelta(days=4)

        assert UserService.touch_activity_streak(user, today) == 1


class TestBalance:
    """Tests for get_balance"""

    def test_summary(self, db_session, user, today):
        user.points = 300
        user.lifetime_points = 600
        user.streak_days = 4
        user.last_active_on = today - timedelta(days=3)
        db_session.commit()

        balance = UserService(db_session).get_balance(user.id, today)

        assert balance["points"] == 300
        assert balance["level"] == 4
        assert balance["level_name"] == "Rising"
        assert balance["streak_days"] == 0
        assert balance["progress"] == {"current": 100, "required": 500, "percent": 20}
