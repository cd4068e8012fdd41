"""Booking domain models."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.base import EventRecorder
from shared.domain.pricing import PricingConfirmation

from .domain import lifecycle


class Booking(EventRecorder, models.Model):
    """A short-ride booking (wedding car, airport transfer, cargo, daily hire)."""

    class ServiceType(models.TextChoices):
        WEDDING = "wedding", _("Wedding")
        AIRPORT = "airport", _("Airport transfer")
        CARGO = "cargo", _("Cargo")
        DAILY = "daily", _("Daily hire")

    class Status(models.TextChoices):
        PENDING = lifecycle.PENDING, _("Pending")
        CONFIRMED = lifecycle.CONFIRMED, _("Confirmed")
        IN_PROGRESS = lifecycle.IN_PROGRESS, _("In progress")
        COMPLETED = lifecycle.COMPLETED, _("Completed")
        CANCELLED = lifecycle.CANCELLED, _("Cancelled")

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        PAID = "paid", _("Paid")
        COMPLETED = "completed", _("Completed")
        FAILED = "failed", _("Failed")

    class PaymentMethod(models.TextChoices):
        CASH = "cash", _("Cash")
        CARD = "card", _("Card")
        STRIPE = "stripe", _("Online (gateway)")

    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    service_type = models.CharField(max_length=20, choices=ServiceType.choices)
    pickup_location = models.CharField(max_length=255)
    dropoff_location = models.CharField(max_length=255)
    pickup_date = models.DateField()
    pickup_time = models.TimeField()
    return_date = models.DateField(null=True, blank=True)
    return_time = models.TimeField(null=True, blank=True)
    passengers = models.PositiveSmallIntegerField(default=1)
    distance = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Distance in km as estimated by the customer."),
    )
    price_per_km = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    admin_calculated_distance = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    admin_set_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    is_price_confirmed = models.BooleanField(default=False)
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    payment_status = models.CharField(max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    additional_notes = models.TextField(blank=True)
    service_details = models.JSONField(default=dict, blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(condition=models.Q(passengers__gte=1), name="booking_has_passengers"),
        ]
        indexes = [
            models.Index(fields=["status"]),
            models.Index(fields=["service_type"]),
            models.Index(fields=["customer", "status"]),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.pk} ({self.service_type}, {self.status})"

    @property
    def effective_distance(self) -> Decimal:
        if self.admin_calculated_distance is not None:
            return self.admin_calculated_distance
        return self.distance

    @property
    def estimated_price(self) -> Decimal:
        return Decimal(self.effective_distance) * Decimal(self.price_per_km)

    @property
    def pricing(self) -> PricingConfirmation:
        override = self.admin_set_price if self.admin_set_price and self.admin_set_price > 0 else None
        return PricingConfirmation(
            estimate=self.estimated_price,
            admin_override=override,
            confirmed_price=self.total_price if self.is_price_confirmed else None,
        )

    def apply_pricing(self, pricing: PricingConfirmation) -> None:
        self.admin_set_price = pricing.admin_override or Decimal("0.00")
        self.is_price_confirmed = pricing.is_confirmed
        self.total_price = pricing.authoritative_price
