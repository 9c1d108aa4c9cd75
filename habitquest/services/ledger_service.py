"""
Points ledger service.
Every balance change goes through here so it always has a PointsHistory entry.
Changes are staged on the caller's session; the caller commits.
"""
import logging
from typing import List, Union

from sqlalchemy.orm import Session

from habitquest.models import User, PointsHistory, PointsSource, POINTS_SOURCE_LABELS
from habitquest.repositories.points_repository import PointsHistoryRepository
from habitquest.exceptions import ValidationError, InsufficientBalanceError

logger = logging.getLogger("habitquest.ledger")


def _to_source(source: Union[PointsSource, str]) -> PointsSource:
    try:
        return PointsSource(source)
    except ValueError:
        raise ValidationError("source", f"unknown points source '{source}'")


class LedgerService:
    """Service for crediting and debiting user balances"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PointsHistoryRepository(db)

    def credit(
        self,
        user: User,
        amount: int,
        source: Union[PointsSource, str],
        description: str
    ) -> PointsHistory:
        """
        Add earned points to both the spendable and lifetime balances.

        Args:
            user: User to credit
            amount: Positive number of points
            source: Ledger source
            description: Human readable reason

        Returns:
            The staged ledger entry
        """
        source = _to_source(source)
        if amount <= 0:
            raise ValidationError("amount", "credit must be positive")

        user.points += amount
        user.lifetime_points += amount

        return self.repo.add(PointsHistory(
            user_id=user.id,
            amount=amount,
            source=source.value,
            description=description
        ))

    def debit(
        self,
        user: User,
        amount: int,
        source: Union[PointsSource, str],
        description: str
    ) -> PointsHistory:
        """
        Spend points. Lifetime points are never reduced.

        Raises:
            InsufficientBalanceError: balance below amount
        """
        source = _to_source(source)
        if amount <= 0:
            raise ValidationError("amount", "debit must be positive")
        if user.points < amount:
            raise InsufficientBalanceError(required=amount, available=user.points)

        user.points -= amount

        return self.repo.add(PointsHistory(
            user_id=user.id,
            amount=-amount,
            source=source.value,
            description=description
        ))

    def get_history(self, user_id: int, limit: int = 50, offset: int = 0) -> List[dict]:
        """Ledger entries with display metadata"""
        entries = self.repo.get_history(user_id, limit, offset)
        result = []
        for entry in entries:
            meta = POINTS_SOURCE_LABELS.get(_to_source(entry.source), {})
            result.append({
                "id": entry.id,
                "amount": entry.amount,
                "source": entry.source,
                "label": meta.get("label", entry.source),
                "icon": meta.get("icon"),
                "description": entry.description,
                "created_at": entry.created_at,
            })
        return result
