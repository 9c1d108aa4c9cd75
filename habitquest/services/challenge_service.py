"""
Daily challenge tracking.

Each reference-zone day gets three challenges of distinct types drawn from a
fixed template pool. Users advance them through normal activity and claim
the reward once a challenge is completed.
"""
import logging
import random
from datetime import date
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from habitquest.database import atomic
from habitquest.models import ChallengeDay, DailyChallenge, ChallengeCompletion, PointsSource
from habitquest.repositories.challenge_repository import (
    ChallengeRepository,
    ChallengeCompletionRepository,
)
from habitquest.services.ledger_service import LedgerService
from habitquest.services.user_service import UserService
from habitquest.constants import CHALLENGE_TEMPLATES, CHALLENGE_REWARD_RANGES, CHALLENGES_PER_DAY
from habitquest.exceptions import NotFoundError, NotCompletedError, AlreadyClaimedError

logger = logging.getLogger("habitquest.challenges")


class ChallengeService:
    """Service for daily challenge creation, progress and claims"""

    def __init__(self, db: Session, rng=None):
        self.db = db
        # Needs sample(), choice() and randint(), as on random.Random
        self.rng = rng or random.Random()
        self.repo = ChallengeRepository(db)
        self.completion_repo = ChallengeCompletionRepository(db)
        self.ledger = LedgerService(db)
        self.users = UserService(db)

    def _pick_templates(self) -> List[dict]:
        """One template per type, for CHALLENGES_PER_DAY distinct types"""
        types = sorted({template["type"] for template in CHALLENGE_TEMPLATES})
        chosen = self.rng.sample(types, min(CHALLENGES_PER_DAY, len(types)))
        return [
            self.rng.choice([t for t in CHALLENGE_TEMPLATES if t["type"] == challenge_type])
            for challenge_type in chosen
        ]

    def ensure_today_challenges(self, today: date) -> List[DailyChallenge]:
        """
        Materialize the challenge set for a day if nobody has yet.

        The ChallengeDay row is the single-winner guard: whoever inserts it
        creates the set, a concurrent loser hits the unique constraint and
        just reads what the winner wrote.
        """
        existing = self.repo.get_for_day(today)
        if existing:
            return existing

        try:
            with self.db.begin_nested():
                self.repo.add_day(ChallengeDay(day=today))
                for template in self._pick_templates():
                    low, high = CHALLENGE_REWARD_RANGES[template["difficulty"]]
                    self.repo.add(DailyChallenge(
                        type=template["type"],
                        title=template["title"],
                        description=template["description"],
                        target=template["target"],
                        difficulty=template["difficulty"],
                        reward=self.rng.randint(low, high),
                        day=today,
                    ))
        except IntegrityError:
            logger.info(f"Challenges for {today} already created by another worker")
        else:
            logger.info(f"Created daily challenges for {today}")

        self.db.commit()
        return self.repo.get_for_day(today)

    def get_today_challenges(self, user_id: int, today: date) -> List[dict]:
        """Today's challenges merged with the user's progress"""
        challenges = self.ensure_today_challenges(today)
        completions = {
            c.challenge_id: c
            for c in self.completion_repo.get_for_challenges(user_id, [ch.id for ch in challenges])
        }

        result = []
        for challenge in challenges:
            completion = completions.get(challenge.id)
            result.append({
                "id": challenge.id,
                "type": challenge.type,
                "title": challenge.title,
                "description": challenge.description,
                "difficulty": challenge.difficulty,
                "target": challenge.target,
                "reward": challenge.reward,
                "progress": min(completion.progress, challenge.target) if completion else 0,
                "completed": completion.completed if completion else False,
                "claimed": completion.claimed if completion else False,
            })
        return result

    def record_progress(
        self,
        user_id: int,
        challenge_type: str,
        increment: int,
        today: date
    ) -> Optional[ChallengeCompletion]:
        """
        Advance the user's challenge of a type for today.

        Does nothing when today has no challenge of that type or the
        challenge is already completed. Staged on the caller's session.

        Returns:
            The progress row, or None if no challenge matched
        """
        if increment <= 0:
            return None

        challenge = self.repo.get_by_type(challenge_type, today)
        if not challenge:
            return None

        completion = self.completion_repo.get(user_id, challenge.id)
        if completion is None:
            try:
                with self.db.begin_nested():
                    completion = self.completion_repo.add(
                        ChallengeCompletion(user_id=user_id, challenge_id=challenge.id, progress=0)
                    )
            except IntegrityError:
                completion = self.completion_repo.get(user_id, challenge.id)

        if completion.completed:
            return completion

        self.completion_repo.increment_progress(completion.id, increment)
        if self.completion_repo.mark_completed(completion.id, challenge.target):
            logger.info(f"User {user_id} completed challenge {challenge.id} ({challenge.type})")

        self.db.refresh(completion)
        return completion

    def claim_reward(self, user_id: int, challenge_id: int) -> dict:
        """
        Pay out a completed challenge exactly once.

        Raises:
            NotFoundError: unknown challenge
            NotCompletedError: target not reached
            AlreadyClaimedError: reward already paid
        """
        with atomic(self.db, "claim_reward"):
            challenge = self.repo.get_by_id(challenge_id)
            if not challenge:
                raise NotFoundError("challenge", challenge_id)

            completion = self.completion_repo.get(user_id, challenge_id)
            if not completion or not completion.completed:
                raise NotCompletedError(challenge_id)
            if completion.claimed or not self.completion_repo.claim(completion.id):
                raise AlreadyClaimedError(challenge_id)

            user = self.users.get_user(user_id)
            self.ledger.credit(
                user,
                challenge.reward,
                PointsSource.CHALLENGE,
                f"Daily challenge: {challenge.title}"
            )

        logger.info(f"User {user_id} claimed {challenge.reward} points for challenge {challenge_id}")
        return {
            "challenge_id": challenge_id,
            "points_earned": challenge.reward,
            "reward": challenge.reward,
            "points": user.points,
        }
