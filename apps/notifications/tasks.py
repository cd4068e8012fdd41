"""Celery tasks for notification delivery."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore
from django.contrib.auth import get_user_model  # type: ignore
from django.core.mail import send_mail  # type: ignore

from .models import Notification

logger = logging.getLogger(__name__)


@shared_task(name="notifications.deliver_notification")
def deliver_notification(
    recipient_id: int,
    kind: str,
    title: str,
    message: str,
    correlated_entity_id: str | None = None,
) -> int | None:
    """
    Store the in-app notification and email a plain-text copy.

    Returns the id of the stored notification, or ``None`` when the
    recipient no longer exists.
    """
    recipient = get_user_model().objects.filter(pk=recipient_id).first()
    if recipient is None:
        logger.warning(f"Dropping {kind} notification: user {recipient_id} not found")
        return None

    notification = Notification.objects.create(
        recipient=recipient,
        kind=kind,
        title=title,
        message=message,
        correlated_entity_id=str(correlated_entity_id) if correlated_entity_id is not None else "",
    )

    if recipient.email:
        try:
            send_mail(
                subject=title,
                message=message,
                from_email=settings.DEFAULT_FROM_EMAIL,
                recipient_list=[recipient.email],
                fail_silently=False,
            )
        except Exception as e:
            logger.error(f"Failed to email {kind} notification to {recipient.email}: {e}", exc_info=True)
        else:
            logger.info(f"Email sent to {recipient.email}: {title}")

    return notification.pk
