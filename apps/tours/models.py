"""Tour package and tour booking models."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.base import EventRecorder
from shared.domain.exceptions import InvalidTransition
from shared.domain.pricing import PricingConfirmation

from .domain import lifecycle


class PaymentType(models.TextChoices):
    FULL_UPFRONT = "full_upfront", _("Full upfront")
    INSTALLMENT = "installment", _("Installment")


class TourPackage(models.Model):
    """A sellable tour: destination, length and per-person price."""

    class Category(models.TextChoices):
        ADVENTURE = "Adventure", _("Adventure")
        PILGRIMAGE = "Pilgrimage", _("Pilgrimage")
        NATURE = "Nature", _("Nature")
        CULTURAL = "Cultural", _("Cultural")
        FAMILY = "Family", _("Family")
        CORPORATE = "Corporate", _("Corporate")

    class TourType(models.TextChoices):
        ONE_DAY = "One-day", _("One day")
        MULTI_DAY = "Multi-day", _("Multi day")
        SEASONAL = "Seasonal", _("Seasonal")

    class Status(models.TextChoices):
        ACTIVE = "active", _("Active")
        INACTIVE = "inactive", _("Inactive")
        SEASONAL = "seasonal", _("Seasonal")

    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    destination = models.CharField(max_length=200)
    visit_locations = models.JSONField(default=list, blank=True)
    tour_days = models.PositiveSmallIntegerField(validators=[MinValueValidator(1)])
    full_distance = models.DecimalField(max_digits=8, decimal_places=2, default=Decimal("0.00"))
    min_passengers = models.PositiveSmallIntegerField(default=10)
    max_passengers = models.PositiveSmallIntegerField(default=20)
    price_per_person = models.DecimalField(max_digits=12, decimal_places=2)
    category = models.CharField(max_length=20, choices=Category.choices)
    tour_type = models.CharField(max_length=20, choices=TourType.choices)
    payment_type = models.CharField(max_length=20, choices=PaymentType.choices, default=PaymentType.FULL_UPFRONT)
    vehicle_types = models.JSONField(default=list, blank=True)
    included_services = models.JSONField(default=list, blank=True)
    excluded_services = models.JSONField(default=list, blank=True)
    cancellation_policy = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    is_available = models.BooleanField(default=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="tour_packages",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Tour package")
        verbose_name_plural = _("Tour packages")
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(condition=models.Q(tour_days__gte=1), name="tour_package_has_days"),
            models.CheckConstraint(condition=models.Q(price_per_person__gte=0), name="tour_package_price_not_negative"),
            models.CheckConstraint(
                condition=models.Q(min_passengers__lte=models.F("max_passengers")),
                name="tour_package_passenger_range",
            ),
        ]
        indexes = [
            models.Index(fields=["destination", "category", "status"]),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.destination}, {self.tour_days}d)"

    @property
    def is_bookable(self) -> bool:
        return self.is_available and self.status != self.Status.INACTIVE


class TourBooking(EventRecorder, models.Model):
    """A customer's booking of a tour package for a group."""

    class Status(models.TextChoices):
        PENDING = lifecycle.PENDING, _("Pending")
        CONFIRMED = lifecycle.CONFIRMED, _("Confirmed")
        REJECTED = lifecycle.REJECTED, _("Rejected")
        CANCELLED = lifecycle.CANCELLED, _("Cancelled")
        COMPLETED = lifecycle.COMPLETED, _("Completed")

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        PARTIAL = "partial", _("Partially paid")
        COMPLETED = "completed", _("Completed")
        REFUNDED = "refunded", _("Refunded")

    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="tour_bookings",
    )
    package = models.ForeignKey(TourPackage, on_delete=models.PROTECT, related_name="bookings")
    booking_date = models.DateField()
    number_of_passengers = models.PositiveSmallIntegerField()
    passengers = models.JSONField(default=list, blank=True)
    contact_person = models.JSONField(default=dict, blank=True)

    base_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    discount_applied = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    admin_set_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    final_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    is_price_confirmed = models.BooleanField(default=False)

    payment_method = models.CharField(max_length=20, choices=PaymentType.choices)
    payment_status = models.CharField(max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    remaining_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    admin_notes = models.TextField(blank=True)
    special_requests = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Tour booking")
        verbose_name_plural = _("Tour bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(number_of_passengers__gte=1),
                name="tour_booking_has_passengers",
            ),
        ]
        indexes = [
            models.Index(fields=["customer", "status"]),
            models.Index(fields=["package", "status"]),
            models.Index(fields=["booking_date"]),
        ]

    def __str__(self) -> str:
        return f"Tour booking #{self.pk} ({self.package_id}, {self.status})"

    def save(self, *args, **kwargs):  # type: ignore
        if self.payment_method == PaymentType.INSTALLMENT:
            self.remaining_amount = Decimal(self.final_price) - Decimal(self.amount_paid)
        else:
            self.remaining_amount = None
        super().save(*args, **kwargs)

    @property
    def pricing(self) -> PricingConfirmation:
        return PricingConfirmation(
            estimate=self.total_price,
            admin_override=self.admin_set_price,
            confirmed_price=self.final_price if self.is_price_confirmed else None,
        )

    def apply_pricing(self, pricing: PricingConfirmation) -> None:
        self.admin_set_price = pricing.admin_override
        self.is_price_confirmed = pricing.is_confirmed
        self.final_price = pricing.authoritative_price


class TourAdminAction(models.Model):
    """Audit trail of admin decisions on a tour booking. Rows are never edited."""

    class Action(models.TextChoices):
        PRICE_SET = "price_set", _("Price set")
        CONFIRMED = "confirmed", _("Confirmed")
        REJECTED = "rejected", _("Rejected")
        CANCELLED = "cancelled", _("Cancelled")
        COMPLETED = "completed", _("Completed")
        STATUS_UPDATED = "status_updated", _("Status updated")

    booking = models.ForeignKey(TourBooking, on_delete=models.CASCADE, related_name="admin_actions")
    action = models.CharField(max_length=20, choices=Action.choices)
    note = models.TextField(blank=True)
    admin = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="+",
    )
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["timestamp", "id"]

    def __str__(self) -> str:
        return f"{self.action} on tour booking #{self.booking_id}"

    def save(self, *args, **kwargs):  # type: ignore
        if not self._state.adding:
            raise InvalidTransition("Tour admin actions cannot be edited", field="action")
        super().save(*args, **kwargs)
