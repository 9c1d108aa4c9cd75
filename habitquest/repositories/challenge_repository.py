"""
Challenge repository - Data access layer for daily challenges and per-user progress.
Progress, completion and claim updates are conditional UPDATEs so two
concurrent requests cannot both win the same transition.
"""
from datetime import date, datetime
from typing import List, Optional
from sqlalchemy import update
from sqlalchemy.orm import Session

from habitquest.models import ChallengeDay, DailyChallenge, ChallengeCompletion


class ChallengeRepository:
    """Repository for ChallengeDay and DailyChallenge data access"""

    def __init__(self, db: Session):
        self.db = db

    def add_day(self, challenge_day: ChallengeDay) -> ChallengeDay:
        """Claim a day for materialization. Raises IntegrityError if already claimed"""
        self.db.add(challenge_day)
        self.db.flush()
        return challenge_day

    def add(self, challenge: DailyChallenge) -> DailyChallenge:
        self.db.add(challenge)
        self.db.flush()
        return challenge

    def get_by_id(self, challenge_id: int) -> Optional[DailyChallenge]:
        return self.db.query(DailyChallenge).filter(DailyChallenge.id == challenge_id).first()

    def get_for_day(self, day: date) -> List[DailyChallenge]:
        """Get all challenges of a day"""
        return self.db.query(DailyChallenge).filter(
            DailyChallenge.day == day
        ).order_by(DailyChallenge.id).all()

    def get_by_type(self, challenge_type: str, day: date) -> Optional[DailyChallenge]:
        return self.db.query(DailyChallenge).filter(
            DailyChallenge.type == challenge_type,
            DailyChallenge.day == day
        ).first()


class ChallengeCompletionRepository:
    """Repository for ChallengeCompletion data access"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int, challenge_id: int) -> Optional[ChallengeCompletion]:
        return self.db.query(ChallengeCompletion).filter(
            ChallengeCompletion.user_id == user_id,
            ChallengeCompletion.challenge_id == challenge_id
        ).first()

    def get_for_challenges(self, user_id: int, challenge_ids: List[int]) -> List[ChallengeCompletion]:
        if not challenge_ids:
            return []
        return self.db.query(ChallengeCompletion).filter(
            ChallengeCompletion.user_id == user_id,
            ChallengeCompletion.challenge_id.in_(challenge_ids)
        ).all()

    def add(self, completion: ChallengeCompletion) -> ChallengeCompletion:
        """Insert first progress. Raises IntegrityError if the row already exists"""
        self.db.add(completion)
        self.db.flush()
        return completion

    def increment_progress(self, completion_id: int, increment: int) -> bool:
        """Add to progress unless the challenge is already completed"""
        result = self.db.execute(
            update(ChallengeCompletion)
            .where(
                ChallengeCompletion.id == completion_id,
                ChallengeCompletion.completed == False
            )
            .values(progress=ChallengeCompletion.progress + increment)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def mark_completed(self, completion_id: int, target: int) -> bool:
        """Flip completed once progress has reached the target"""
        result = self.db.execute(
            update(ChallengeCompletion)
            .where(
                ChallengeCompletion.id == completion_id,
                ChallengeCompletion.completed == False,
                ChallengeCompletion.progress >= target
            )
            .values(completed=True, completed_at=datetime.now())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def claim(self, completion_id: int) -> bool:
        """Compare-and-swap the claimed flag. False if someone claimed first"""
        result = self.db.execute(
            update(ChallengeCompletion)
            .where(
                ChallengeCompletion.id == completion_id,
                ChallengeCompletion.completed == True,
                ChallengeCompletion.claimed == False
            )
            .values(claimed=True, claimed_at=datetime.now())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
