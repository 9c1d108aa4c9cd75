"""
Points HTTP routes.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List

from habitquest.database import get_db
from habitquest.auth import verify_api_key, get_current_user_id
from habitquest.schemas import BalanceResponse, PointsHistoryResponse
from habitquest.routes.habits import get_date_service
from habitquest.services.date_service import DateService
from habitquest.services.ledger_service import LedgerService
from habitquest.services.user_service import UserService

router = APIRouter(prefix="/api/points", tags=["points"], dependencies=[Depends(verify_api_key)])


@router.get("", response_model=BalanceResponse)
def get_balance(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    dates: DateService = Depends(get_date_service)
):
    """Balance, level and progress to the next level"""
    return UserService(db).get_balance(user_id, dates.get_today())


@router.get("/history", response_model=List[PointsHistoryResponse])
def get_points_history(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Ledger entries, newest first"""
    return LedgerService(db).get_history(user_id, limit, offset)
