"""Vehicle provider contracts and vehicle requests."""

from __future__ import annotations

import random
import string
import time
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.serializers.json import DjangoJSONEncoder  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.db.models import Sum  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.fleet.models import Vehicle
from shared.domain.base import EventRecorder
from shared.domain.exceptions import InvalidTransition

from .domain import lifecycle


def generate_contract_id() -> str:
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=5))
    return f"VPC-{int(time.time() * 1000)}-{suffix}"


def generate_payment_id() -> str:
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=5))
    return f"VPP-{int(time.time() * 1000)}-{suffix}"


class PaymentTerms(models.TextChoices):
    MONTHLY = "Monthly", _("Monthly")
    QUARTERLY = "Quarterly", _("Quarterly")
    SEMI_ANNUAL = "Semi-Annual", _("Semi-annual")
    ANNUAL = "Annual", _("Annual")


class ContractPaymentMethod(models.TextChoices):
    BANK_TRANSFER = "Bank Transfer", _("Bank transfer")
    CASH = "Cash", _("Cash")
    CHEQUE = "Cheque", _("Cheque")
    ONLINE = "Online Payment", _("Online payment")


class VehicleProviderContract(EventRecorder, models.Model):
    """Agreement under which a provider supplies one vehicle to the fleet."""

    class Status(models.TextChoices):
        PENDING = lifecycle.PENDING, _("Pending")
        UNDER_REVIEW = lifecycle.UNDER_REVIEW, _("Under review")
        APPROVED = lifecycle.APPROVED, _("Approved")
        ACTIVE = lifecycle.ACTIVE, _("Active")
        SUSPENDED = lifecycle.SUSPENDED, _("Suspended")
        TERMINATED = lifecycle.TERMINATED, _("Terminated")
        EXPIRED = lifecycle.EXPIRED, _("Expired")

    contract_id = models.CharField(max_length=40, unique=True, default=generate_contract_id, editable=False)
    provider = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="provider_contracts",
    )
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviewed_provider_contracts",
    )
    vehicle = models.JSONField(
        encoder=DjangoJSONEncoder,
        default=dict,
        help_text=_("Vehicle specification: number, make, model, insurance and registration details."),
    )

    start_date = models.DateField()
    end_date = models.DateField()
    duration_months = models.PositiveSmallIntegerField(
        validators=[
            MinValueValidator(lifecycle.MIN_DURATION_MONTHS),
            MaxValueValidator(lifecycle.MAX_DURATION_MONTHS),
        ]
    )
    monthly_fee = models.DecimalField(max_digits=12, decimal_places=2)
    payment_terms = models.CharField(max_length=20, choices=PaymentTerms.choices, default=PaymentTerms.MONTHLY)
    payment_method = models.CharField(
        max_length=20,
        choices=ContractPaymentMethod.choices,
        default=ContractPaymentMethod.BANK_TRANSFER,
    )
    late_payment_penalty = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    security_deposit = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    special_conditions = models.JSONField(default=list, blank=True)
    notes = models.TextField(max_length=1000, blank=True)
    last_payment_date = models.DateField(null=True, blank=True)
    next_payment_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Vehicle provider contract")
        verbose_name_plural = _("Vehicle provider contracts")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(duration_months__gte=lifecycle.MIN_DURATION_MONTHS)
                & models.Q(duration_months__lte=lifecycle.MAX_DURATION_MONTHS),
                name="provider_contract_duration_range",
            ),
            models.CheckConstraint(condition=models.Q(monthly_fee__gte=0), name="provider_contract_fee_not_negative"),
            models.CheckConstraint(
                condition=models.Q(end_date__gt=models.F("start_date")),
                name="provider_contract_end_after_start",
            ),
        ]
        indexes = [
            models.Index(fields=["provider", "status"]),
            models.Index(fields=["start_date"]),
            models.Index(fields=["end_date"]),
        ]

    def __str__(self) -> str:
        return f"{self.contract_id} ({self.status})"

    @property
    def total_earnings(self) -> Decimal:
        total = self.payments.filter(status=ContractPayment.Status.COMPLETED).aggregate(total=Sum("amount"))["total"]
        return total or Decimal("0.00")

    @property
    def duration_in_days(self) -> int | None:
        if not (self.start_date and self.end_date):
            return None
        return (self.end_date - self.start_date).days

    @property
    def remaining_payments(self) -> int:
        if self.status != self.Status.ACTIVE or not self.end_date:
            return 0
        return lifecycle.months_remaining(self.end_date, timezone.localdate())


class ContractAdminAction(models.Model):
    """Audit trail of a provider contract. Rows are never edited."""

    class Action(models.TextChoices):
        CREATED = "created", _("Created")
        REVIEWED = "reviewed", _("Reviewed")
        APPROVED = "approved", _("Approved")
        REJECTED = "rejected", _("Rejected")
        SUSPENDED = "suspended", _("Suspended")
        TERMINATED = "terminated", _("Terminated")
        MODIFIED = "modified", _("Modified")
        ACTIVATED = "activated", _("Activated")
        EXPIRED = "expired", _("Expired")

    contract = models.ForeignKey(VehicleProviderContract, on_delete=models.CASCADE, related_name="admin_actions")
    action = models.CharField(max_length=20, choices=Action.choices)
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="+",
    )
    notes = models.TextField(blank=True)
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["timestamp", "id"]

    def __str__(self) -> str:
        return f"{self.action} on {self.contract_id}"

    def save(self, *args, **kwargs):  # type: ignore
        if not self._state.adding:
            raise InvalidTransition("Contract admin actions cannot be edited", field="action")
        super().save(*args, **kwargs)


class ContractPayment(models.Model):
    """One entry in a contract's payment history."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        COMPLETED = "completed", _("Completed")
        FAILED = "failed", _("Failed")
        REFUNDED = "refunded", _("Refunded")

    contract = models.ForeignKey(VehicleProviderContract, on_delete=models.CASCADE, related_name="payments")
    payment_id = models.CharField(max_length=40, unique=True, default=generate_payment_id, editable=False)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    payment_date = models.DateField()
    payment_method = models.CharField(max_length=20, choices=ContractPaymentMethod.choices)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    notes = models.TextField(blank=True)
    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["payment_date", "id"]
        constraints = [
            models.CheckConstraint(condition=models.Q(amount__gte=0), name="contract_payment_not_negative"),
        ]

    def __str__(self) -> str:
        return f"{self.payment_id} {self.amount} ({self.status})"


class VehicleRequest(models.Model):
    """A provider's proposal to add one vehicle to the operator's fleet."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        APPROVED = "approved", _("Approved")
        REJECTED = "rejected", _("Rejected")

    provider = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="vehicle_requests",
    )
    vehicle_number = models.CharField(max_length=20, unique=True)
    vehicle_type = models.CharField(max_length=20, choices=Vehicle.VehicleType.choices)
    brand = models.CharField(max_length=100)
    model = models.CharField(max_length=100)
    year = models.PositiveSmallIntegerField(validators=[MinValueValidator(1990)])
    color = models.CharField(max_length=50)
    capacity = models.PositiveSmallIntegerField(validators=[MinValueValidator(1)])
    fuel_type = models.CharField(max_length=20, choices=Vehicle.FuelType.choices)
    transmission = models.CharField(max_length=20, choices=Vehicle.Transmission.choices)
    daily_rate = models.DecimalField(max_digits=12, decimal_places=2)
    monthly_rate = models.DecimalField(max_digits=12, decimal_places=2)
    description = models.TextField(max_length=500, blank=True)
    features = models.JSONField(default=list, blank=True)

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    admin_notes = models.TextField(max_length=500, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Vehicle request")
        verbose_name_plural = _("Vehicle requests")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(daily_rate__gte=0) & models.Q(monthly_rate__gte=0),
                name="vehicle_request_rates_non_negative",
            ),
        ]
        indexes = [models.Index(fields=["provider", "status"])]

    def __str__(self) -> str:
        return f"{self.vehicle_number} ({self.status})"

    def save(self, *args, **kwargs):  # type: ignore
        self.vehicle_number = self.vehicle_number.strip().upper()
        super().save(*args, **kwargs)
