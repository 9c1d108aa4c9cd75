"""
Achievement HTTP routes.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from habitquest.database import get_db
from habitquest.auth import verify_api_key, get_current_user_id
from habitquest.schemas import AchievementResponse
from habitquest.services.achievement_service import AchievementService

router = APIRouter(prefix="/api/achievements", tags=["achievements"], dependencies=[Depends(verify_api_key)])


@router.get("", response_model=List[AchievementResponse])
def list_achievements(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Unlocked achievements, newest first"""
    return AchievementService(db).list_achievements(user_id)
