"""In-app notification model.

Rows are written by the ``notifications.deliver_notification`` Celery task
after a lifecycle transition commits, and read back through the API. A
notification can be marked as read by its recipient.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Notification(models.Model):
    """A message sent to a user about a change to one of their entities."""

    class Kind(models.TextChoices):
        RENTAL_STATUS = "rental_status", _("Rental status")
        BOOKING_CONFIRMED = "booking_confirmed", _("Booking confirmed")
        BOOKING_PRICE = "booking_price", _("Booking price confirmed")
        TOUR_BOOKING_CONFIRMED = "tour_booking_confirmed", _("Tour booking confirmed")
        PROVIDER_CONTRACT = "provider_contract", _("Provider contract status")

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    kind = models.CharField(max_length=40, choices=Kind.choices)
    title = models.CharField(max_length=255)
    message = models.TextField()
    correlated_entity_id = models.CharField(max_length=64, blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Notification")
        verbose_name_plural = _("Notifications")
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["recipient", "is_read"]),
        ]

    def __str__(self) -> str:
        return f"Notification to {self.recipient_id}: {self.title}"
