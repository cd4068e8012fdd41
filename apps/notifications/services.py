"""
Notification dispatch

Lifecycle handlers describe *what* to tell a user as a
``NotificationMessage``; the dispatcher hands it to Celery. Delivery is
fire-and-forget: a broker outage is logged and never reaches the caller.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional
import logging

from shared.domain.exceptions import DependencyUnavailable

from .tasks import deliver_notification

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationMessage:
    recipient_id: int
    kind: str
    title: str
    message: str
    correlated_entity_id: Optional[str] = None


class NotificationDispatcher:
    def dispatch(self, message: NotificationMessage) -> bool:
        """Enqueue delivery; returns False when the broker refused the task"""
        try:
            deliver_notification.delay(**asdict(message))
        except Exception as e:
            error = DependencyUnavailable(f"Could not enqueue {message.kind} for user {message.recipient_id}: {e}")
            logger.error(f"{error.code}: {error.message}", exc_info=True)
            return False
        logger.info(f"Queued {message.kind} notification for user {message.recipient_id}")
        return True


notification_dispatcher = NotificationDispatcher()
