"""
Daily challenge HTTP routes.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from habitquest.database import get_db
from habitquest.auth import verify_api_key, get_current_user_id
from habitquest.schemas import ChallengeResponse, ClaimResponse
from habitquest.routes.habits import get_date_service
from habitquest.services.date_service import DateService
from habitquest.services.challenge_service import ChallengeService

router = APIRouter(prefix="/api/challenges", tags=["challenges"], dependencies=[Depends(verify_api_key)])


@router.get("/today", response_model=List[ChallengeResponse])
def get_today_challenges(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    dates: DateService = Depends(get_date_service)
):
    """Today's challenges with the user's progress"""
    return ChallengeService(db).get_today_challenges(user_id, dates.get_today())


@router.post("/{challenge_id}/claim", response_model=ClaimResponse)
def claim_challenge(
    challenge_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return ChallengeService(db).claim_reward(user_id, challenge_id)
