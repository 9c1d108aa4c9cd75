"""
Habit HTTP routes.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List

from habitquest.database import get_db
from habitquest.auth import verify_api_key, get_current_user_id
from habitquest.schemas import (
    HabitCreate, HabitUpdate, HabitResponse, HabitStatsResponse,
    CompletionResponse, FreezePurchaseResponse, FreezeUseResponse,
)
from habitquest.services.date_service import DateService
from habitquest.services.habit_service import HabitService
from habitquest.services.completion_service import CompletionService
from habitquest.services.freeze_service import FreezeService

router = APIRouter(prefix="/api/habits", tags=["habits"], dependencies=[Depends(verify_api_key)])


def get_date_service() -> DateService:
    return DateService()


@router.get("", response_model=List[HabitResponse])
def list_habits(
    include_inactive: bool = Query(False),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    dates: DateService = Depends(get_date_service)
):
    """List the user's habits with today's effective streaks"""
    return HabitService(db).list_habits(user_id, dates.get_today(), include_inactive)


@router.post("", response_model=HabitResponse, status_code=201)
def create_habit(
    payload: HabitCreate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    dates: DateService = Depends(get_date_service)
):
    service = HabitService(db)
    habit = service.create_habit(
        user_id, payload.name, payload.difficulty, payload.category, payload.description
    )
    return service.to_view(habit, dates.get_today())


@router.get("/stats", response_model=HabitStatsResponse)
def get_habit_stats(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    dates: DateService = Depends(get_date_service)
):
    return HabitService(db).get_stats(user_id, dates.get_today())


@router.patch("/{habit_id}", response_model=HabitResponse)
def update_habit(
    habit_id: int,
    payload: HabitUpdate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    dates: DateService = Depends(get_date_service)
):
    service = HabitService(db)
    habit = service.update_habit(user_id, habit_id, payload.model_dump(exclude_unset=True))
    return service.to_view(habit, dates.get_today())


@router.delete("/{habit_id}")
def delete_habit(
    habit_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    HabitService(db).delete_habit(user_id, habit_id)
    return {"message": "Habit deleted", "id": habit_id}


@router.post("/{habit_id}/complete", response_model=CompletionResponse)
def complete_habit(
    habit_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    dates: DateService = Depends(get_date_service)
):
    """Complete a habit for today: reward, streak, challenges and achievements"""
    return CompletionService(db, date_service=dates).complete_habit(user_id, habit_id)


@router.post("/{habit_id}/freeze/purchase", response_model=FreezePurchaseResponse)
def purchase_freeze(
    habit_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return FreezeService(db).purchase_freeze(user_id, habit_id)


@router.post("/{habit_id}/freeze/use", response_model=FreezeUseResponse)
def use_freeze(
    habit_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    dates: DateService = Depends(get_date_service)
):
    return FreezeService(db).use_freeze(user_id, habit_id, dates.get_today())
