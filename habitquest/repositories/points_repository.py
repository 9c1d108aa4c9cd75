"""
Points repository - Data access layer for the PointsHistory ledger.
"""
from typing import List
from sqlalchemy.orm import Session

from habitquest.models import PointsHistory


class PointsHistoryRepository:
    """Repository for PointsHistory data access"""

    def __init__(self, db: Session):
        self.db = db

    def add(self, entry: PointsHistory) -> PointsHistory:
        """Append a ledger entry"""
        self.db.add(entry)
        self.db.flush()
        return entry

    def get_history(self, user_id: int, limit: int = 50, offset: int = 0) -> List[PointsHistory]:
        """Get a user's ledger entries, newest first"""
        return self.db.query(PointsHistory).filter(
            PointsHistory.user_id == user_id
        ).order_by(
            PointsHistory.created_at.desc(), PointsHistory.id.desc()
        ).offset(offset).limit(limit).all()
