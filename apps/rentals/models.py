"""Rental domain models."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.base import EventRecorder
from shared.domain.pricing import PricingConfirmation
from shared.domain.value_objects import DateRange

from .domain import lifecycle


class Rental(EventRecorder, models.Model):
    """Long-term rental of a single vehicle by a customer."""

    class RentalType(models.TextChoices):
        DAILY = "daily", _("Daily")
        MONTHLY = "monthly", _("Monthly")

    class Status(models.TextChoices):
        PENDING = lifecycle.PENDING, _("Pending")
        APPROVED = lifecycle.APPROVED, _("Approved")
        REJECTED = lifecycle.REJECTED, _("Rejected")
        ACTIVE = lifecycle.ACTIVE, _("Active")
        COMPLETED = lifecycle.COMPLETED, _("Completed")
        CANCELLED = lifecycle.CANCELLED, _("Cancelled")

    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="rentals",
    )
    vehicle = models.ForeignKey(
        "fleet.Vehicle",
        on_delete=models.PROTECT,
        related_name="rentals",
    )
    vehicle_snapshot = models.JSONField(
        default=dict,
        blank=True,
        help_text=_("Vehicle details at the time of the request."),
    )
    rental_type = models.CharField(max_length=10, choices=RentalType.choices)
    start_date = models.DateField()
    end_date = models.DateField()
    duration = models.PositiveIntegerField(help_text=_("Length of the rental in days."))
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)

    estimated_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    admin_set_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    is_price_confirmed = models.BooleanField(default=False)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    daily_fee = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    monthly_fee = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    purpose = models.TextField(blank=True)
    special_requirements = models.TextField(blank=True)
    conditions = models.TextField(blank=True)
    admin_notes = models.TextField(blank=True)

    contract_id = models.CharField(max_length=64, unique=True, null=True, blank=True, editable=False)
    contract_terms = models.TextField(blank=True)
    admin_guidelines = models.TextField(blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="approved_rentals",
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    contract_created_at = models.DateTimeField(null=True, blank=True)
    contract_activated_at = models.DateTimeField(null=True, blank=True)
    contract_completed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Rental")
        verbose_name_plural = _("Rentals")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gt=models.F("start_date")),
                name="rental_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["vehicle", "status"]),
            models.Index(fields=["customer", "status"]),
        ]

    def __str__(self) -> str:
        return f"Rental #{self.pk} of {self.vehicle_id} ({self.status})"

    @property
    def window(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    @property
    def holds_vehicle(self) -> bool:
        return self.status in lifecycle.HOLDING_STATUSES

    @property
    def pricing(self) -> PricingConfirmation:
        return PricingConfirmation(
            estimate=self.estimated_amount,
            admin_override=self.admin_set_amount,
            confirmed_price=self.total_amount if self.is_price_confirmed else None,
        )

    def apply_pricing(self, pricing: PricingConfirmation) -> None:
        self.estimated_amount = pricing.estimate
        self.admin_set_amount = pricing.admin_override
        self.is_price_confirmed = pricing.is_confirmed
        self.total_amount = pricing.authoritative_price
