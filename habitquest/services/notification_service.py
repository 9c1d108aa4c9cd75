"""
Notification dispatch.
Delivery is owned by an external transport; the engine only fires and forgets.
"""
import logging
from typing import Optional

from habitquest.exceptions import ExternalServiceError

logger = logging.getLogger("habitquest.notifications")


class LoggingNotifier:
    """Default notifier: writes notifications to the log instead of a transport"""

    def notify(self, user_id: int, title: str, message: str, data: Optional[dict] = None) -> None:
        logger.info(f"Notify user {user_id}: {title} - {message} {data or {}}")


class NotificationService:
    """Best-effort wrapper around a notifier"""

    def __init__(self, notifier=None):
        self.notifier = notifier or LoggingNotifier()

    def dispatch(self, user_id: int, title: str, message: str, data: Optional[dict] = None) -> bool:
        """
        Send one notification.

        Returns:
            True if the notifier accepted it. Failures are logged, never raised.
        """
        try:
            self.notifier.notify(user_id, title, message, data or {})
            return True
        except Exception as e:
            error = ExternalServiceError("notifier", str(e))
            logger.error(f"Notification to user {user_id} dropped: {error.message}")
            return False
