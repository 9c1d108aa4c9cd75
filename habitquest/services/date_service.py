"""
Date calculation service.
Every calendar-day boundary (streaks, completions, challenges) is computed
in one reference time zone for all users.
"""
from datetime import datetime, date
from typing import Optional
from zoneinfo import ZoneInfo

from habitquest.constants import REFERENCE_TIMEZONE


class DateService:
    """Service for date-related operations"""

    def __init__(self, timezone_name: Optional[str] = None):
        self.tz = ZoneInfo(timezone_name or REFERENCE_TIMEZONE)

    def now(self) -> datetime:
        """Current time in the reference zone"""
        return datetime.now(self.tz)

    def get_today(self) -> date:
        """
        Get the current day in the reference zone.

        Returns:
            Today's date at the canonical boundary
        """
        return self.now().date()
