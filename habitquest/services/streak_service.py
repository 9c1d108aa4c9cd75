"""
Streak calculator.
Pure functions deciding how a streak moves when a new day is recorded.
"""
from datetime import date
from typing import Optional

from habitquest.exceptions import ConflictError


def next_streak(
    previous_streak: int,
    last_completed_date: Optional[date],
    today: date,
    freeze_applied: bool = False
) -> int:
    """
    Compute the streak after recording `today`.

    A freeze stamps the missed day itself as the last day, so a bridged day
    followed by a completion is an ordinary one-day gap.

    Rules:
    - last day is today, no freeze bridge: rejected (already recorded)
    - last day is today because a freeze bridged it: continue
    - last day is yesterday (completed or frozen): continue
    - anything else (first ever, longer gap, future date): restart at 1

    Args:
        previous_streak: Current stored streak
        last_completed_date: Last completion or freeze-bridge day
        today: Day being recorded (reference zone)
        freeze_applied: Whether last_completed_date was set by a freeze

    Returns:
        New streak value
    """
    if last_completed_date is None:
        return 1

    gap = (today - last_completed_date).days

    if gap == 0:
        if not freeze_applied:
            raise ConflictError(f"Day {today.isoformat()} already recorded")
        return previous_streak + 1

    if gap == 1:
        return previous_streak + 1

    return 1


def effective_streak(streak: int, last_completed_date: Optional[date], today: date) -> int:
    """
    Streak as it should be displayed today.

    Stored streaks are only reset on the next completion; a streak whose last
    day (completion or freeze) is older than yesterday reads as broken.
    """
    if last_completed_date is None:
        return 0

    if (today - last_completed_date).days <= 1:
        return streak
    return 0


def is_streak_broken(last_completed_date: Optional[date], today: date) -> bool:
    """True when more than one day was missed since the last completion or freeze"""
    if last_completed_date is None:
        return False
    return (today - last_completed_date).days > 2
