"""
Tests for habit CRUD and statistics.
"""
import pytest
from datetime import datetime, timedelta

from habitquest.models import Habit, HabitCompletion
from habitquest.services.habit_service import HabitService
from habitquest.exceptions import ValidationError, ForbiddenError, NotFoundError


class TestCreateHabit:
    """Tests for create_habit"""

    def test_create_with_defaults(self, db_session, user):
        habit = HabitService(db_session).create_habit(user.id, "  Meditate ", "easy")

        assert habit.id is not None
        assert habit.name == "Meditate"
        assert habit.category == "other"
        assert habit.streak == 0
        assert habit.freeze_count == 0

    @pytest.mark.parametrize("name,difficulty,category", [
        ("", "easy", "other"),
        ("Run", "legendary", "other"),
        ("Run", "easy", "cooking"),
    ])
    def test_rejects_bad_input(self, db_session, user, name, difficulty, category):
        with pytest.raises(ValidationError):
            HabitService(db_session).create_habit(user.id, name, difficulty, category)


class TestUpdateDelete:
    """Tests for update_habit and delete_habit"""

    def test_partial_update(self, db_session, user, habit):
        updated = HabitService(db_session).update_habit(
            user.id, habit.id, {"difficulty": "hard", "streak": 99}
        )

        assert updated.difficulty == "hard"
        assert updated.streak == 0

    def test_archive(self, db_session, user, habit, today):
        service = HabitService(db_session)
        service.update_habit(user.id, habit.id, {"is_active": False})

        assert service.list_habits(user.id, today) == []
        assert len(service.list_habits(user.id, today, include_inactive=True)) == 1

    def test_update_other_users_habit(self, db_session, other_user, habit):
        with pytest.raises(ForbiddenError):
            HabitService(db_session).update_habit(other_user.id, habit.id, {"name": "Mine"})

    def test_delete(self, db_session, user, habit):
        habit_id = habit.id
        HabitService(db_session).delete_habit(user.id, habit_id)

        assert db_session.query(Habit).count() == 0
        with pytest.raises(NotFoundError):
            HabitService(db_session).get_habit(user.id, habit_id)


class TestListHabits:
    """Tests for list_habits"""

    def test_stale_streak_displays_zero(self, db_session, user, habit, today):
        habit.streak = 8
        habit.last_completed_at = today - timedelta(days=3)
        db_session.commit()

        view = HabitService(db_session).list_habits(user.id, today)[0]

        assert view["streak"] == 0
        db_session.refresh(habit)
        assert habit.streak == 8

    def test_completed_today_flag(self, db_session, user, habit, today):
        habit.streak = 1
        habit.last_completed_at = today
        db_session.commit()

        view = HabitService(db_session).list_habits(user.id, today)[0]

        assert view["completed_today"] is True
        assert view["streak"] == 1


class TestStats:
    """Tests for get_stats"""

    def test_stats(self, db_session, user, habit, today):
        second = Habit(owner_id=user.id, name="Stretch", difficulty="easy", is_active=False,
                       streak=3, last_completed_at=today - timedelta(days=1))
        db_session.add(second)
        db_session.commit()
        for offset in (0, 2, 10):
            db_session.add(HabitCompletion(
                habit_id=habit.id, user_id=user.id, completed_at=datetime.now(),
                completed_on=today - timedelta(days=offset), points_earned=40
            ))
        db_session.commit()

        stats = HabitService(db_session).get_stats(user.id, today)

        assert stats == {
            "total_habits": 2,
            "active_habits": 1,
            "today_completions": 1,
            "week_completions": 2,
            "longest_streak": 3,
        }
