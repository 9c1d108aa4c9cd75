"""
Activity HTTP routes: clicks, rewarded ads, mini-games, referrals.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from habitquest.database import get_db
from habitquest.auth import verify_api_key, get_current_user_id
from habitquest.schemas import GameScoreRequest, ReferralRequest, ActivityResponse, ReferralResponse
from habitquest.routes.habits import get_date_service
from habitquest.services.date_service import DateService
from habitquest.services.activity_service import ActivityService

router = APIRouter(prefix="/api/activity", tags=["activity"], dependencies=[Depends(verify_api_key)])


@router.post("/click", response_model=ActivityResponse)
def click(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    dates: DateService = Depends(get_date_service)
):
    return ActivityService(db, date_service=dates).record_click(user_id)


@router.post("/ad-watch", response_model=ActivityResponse)
def ad_watch(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    dates: DateService = Depends(get_date_service)
):
    """Reward a completed ad view"""
    return ActivityService(db, date_service=dates).record_ad_watch(user_id)


@router.post("/game-score", response_model=ActivityResponse)
def game_score(
    payload: GameScoreRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    dates: DateService = Depends(get_date_service)
):
    return ActivityService(db, date_service=dates).record_game_score(
        user_id, payload.game_type, payload.score
    )


@router.post("/social-post")
def social_post(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    dates: DateService = Depends(get_date_service)
):
    """Count a community post towards today's challenges"""
    ActivityService(db, date_service=dates).record_social_post(user_id)
    return {"message": "Post recorded"}


@router.post("/referral", response_model=ReferralResponse)
def referral(
    payload: ReferralRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    dates: DateService = Depends(get_date_service)
):
    return ActivityService(db, date_service=dates).apply_referral(user_id, payload.referral_code)
