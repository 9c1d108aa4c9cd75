"""
Tests for daily challenge creation, progress and claims.
"""
import random
import pytest
from datetime import timedelta

from habitquest.models import ChallengeDay, DailyChallenge, ChallengeCompletion, PointsHistory
from habitquest.services.challenge_service import ChallengeService
from habitquest.constants import (
    CHALLENGE_REWARD_RANGES,
    CHALLENGE_COMPLETE_HABITS,
    CHALLENGE_EARN_POINTS,
    CHALLENGE_CLICK_COUNT,
    CHALLENGE_WATCH_ADS,
)
from habitquest.exceptions import NotFoundError, NotCompletedError, AlreadyClaimedError


class TestEnsureTodayChallenges:
    """Tests for ensure_today_challenges"""

    def test_creates_three_distinct_types(self, db_session, today):
        service = ChallengeService(db_session, random.Random(3))

        challenges = service.ensure_today_challenges(today)

        assert len(challenges) == 3
        assert len({c.type for c in challenges}) == 3
        for challenge in challenges:
            low, high = CHALLENGE_REWARD_RANGES[challenge.difficulty]
            assert low <= challenge.reward <= high
            assert challenge.day == today

    def test_second_call_reuses_the_set(self, db_session, today):
        service = ChallengeService(db_session, random.Random(3))

        first = [c.id for c in service.ensure_today_challenges(today)]
        second = [c.id for c in service.ensure_today_challenges(today)]

        assert first == second
        assert db_session.query(DailyChallenge).count() == 3

    def test_new_day_gets_new_set(self, db_session, today):
        service = ChallengeService(db_session, random.Random(3))

        service.ensure_today_challenges(today)
        service.ensure_today_challenges(today + timedelta(days=1))

        assert db_session.query(DailyChallenge).count() == 6
        assert db_session.query(ChallengeDay).count() == 2

    def test_day_claimed_by_another_worker(self, db_session, today):
        """Losing the ChallengeDay insert means no second set is written"""
        db_session.add(ChallengeDay(day=today))
        db_session.commit()

        result = ChallengeService(db_session, random.Random(3)).ensure_today_challenges(today)

        assert result == []
        assert db_session.query(DailyChallenge).count() == 0
        assert db_session.query(ChallengeDay).count() == 1


class TestGetTodayChallenges:
    """Tests for get_today_challenges"""

    def test_merges_user_progress(self, db_session, user, today, todays_challenges):
        service = ChallengeService(db_session)
        service.record_progress(user.id, CHALLENGE_CLICK_COUNT, 2, today)
        db_session.commit()

        items = {c["type"]: c for c in service.get_today_challenges(user.id, today)}

        assert items[CHALLENGE_CLICK_COUNT]["progress"] == 2
        assert items[CHALLENGE_CLICK_COUNT]["completed"] is False
        assert items[CHALLENGE_EARN_POINTS]["progress"] == 0
        assert items[CHALLENGE_COMPLETE_HABITS]["reward"] == 60


class TestRecordProgress:
    """Tests for record_progress"""

    def test_first_progress_creates_row(self, db_session, user, today, todays_challenges):
        completion = ChallengeService(db_session).record_progress(
            user.id, CHALLENGE_COMPLETE_HABITS, 1, today
        )

        assert completion.progress == 1
        assert completion.completed is False

    def test_reaching_target_completes(self, db_session, user, today, todays_challenges):
        service = ChallengeService(db_session)

        service.record_progress(user.id, CHALLENGE_CLICK_COUNT, 1, today)
        service.record_progress(user.id, CHALLENGE_CLICK_COUNT, 1, today)
        completion = service.record_progress(user.id, CHALLENGE_CLICK_COUNT, 1, today)

        assert completion.progress == 3
        assert completion.completed is True
        assert completion.completed_at is not None

    def test_overshoot_completes(self, db_session, user, today, todays_challenges):
        completion = ChallengeService(db_session).record_progress(
            user.id, CHALLENGE_EARN_POINTS, 250, today
        )

        assert completion.completed is True

    def test_completed_challenge_stops_counting(self, db_session, user, today, todays_challenges):
        service = ChallengeService(db_session)
        service.record_progress(user.id, CHALLENGE_EARN_POINTS, 100, today)

        completion = service.record_progress(user.id, CHALLENGE_EARN_POINTS, 40, today)

        assert completion.progress == 100
        assert completion.completed is True

    def test_type_not_offered_today(self, db_session, user, today, todays_challenges):
        result = ChallengeService(db_session).record_progress(user.id, CHALLENGE_WATCH_ADS, 1, today)

        assert result is None
        assert db_session.query(ChallengeCompletion).count() == 0

    def test_no_challenges_materialized(self, db_session, user, today):
        """Progress never creates the day's set on its own"""
        result = ChallengeService(db_session).record_progress(user.id, CHALLENGE_CLICK_COUNT, 1, today)

        assert result is None
        assert db_session.query(DailyChallenge).count() == 0

    def test_progress_is_per_user(self, db_session, user, other_user, today, todays_challenges):
        service = ChallengeService(db_session)
        service.record_progress(user.id, CHALLENGE_CLICK_COUNT, 2, today)

        completion = service.record_progress(other_user.id, CHALLENGE_CLICK_COUNT, 1, today)

        assert completion.progress == 1


class TestClaimReward:
    """Tests for claim_reward"""

    def test_claim_pays_once(self, db_session, user, today, todays_challenges):
        """Complete, claim once, second claim is rejected"""
        service = ChallengeService(db_session)
        challenge = todays_challenges[CHALLENGE_COMPLETE_HABITS]
        service.record_progress(user.id, CHALLENGE_COMPLETE_HABITS, 2, today)
        db_session.commit()

        result = service.claim_reward(user.id, challenge.id)

        assert result["reward"] == 60
        assert result["points"] == 60

        with pytest.raises(AlreadyClaimedError):
            service.claim_reward(user.id, challenge.id)

        db_session.refresh(user)
        assert user.points == 60
        assert user.lifetime_points == 60
        entries = db_session.query(PointsHistory).filter(PointsHistory.source == "challenge").all()
        assert len(entries) == 1

    def test_claim_before_completion(self, db_session, user, today, todays_challenges):
        service = ChallengeService(db_session)
        challenge = todays_challenges[CHALLENGE_COMPLETE_HABITS]
        service.record_progress(user.id, CHALLENGE_COMPLETE_HABITS, 1, today)
        db_session.commit()

        with pytest.raises(NotCompletedError):
            service.claim_reward(user.id, challenge.id)

    def test_claim_without_progress(self, db_session, user, todays_challenges):
        with pytest.raises(NotCompletedError):
            ChallengeService(db_session).claim_reward(user.id, todays_challenges[CHALLENGE_EARN_POINTS].id)

    def test_claim_unknown_challenge(self, db_session, user):
        with pytest.raises(NotFoundError):
            ChallengeService(db_session).claim_reward(user.id, 12345)

    def test_claim_still_valid_next_day(self, db_session, user, today, todays_challenges):
        """Completed challenges can be claimed after the day rolls over"""
        service = ChallengeService(db_session)
        challenge = todays_challenges[CHALLENGE_CLICK_COUNT]
        service.record_progress(user.id, CHALLENGE_CLICK_COUNT, 3, today)
        db_session.commit()

        service.ensure_today_challenges(today + timedelta(days=1))
        result = service.claim_reward(user.id, challenge.id)

        assert result["reward"] == 10
