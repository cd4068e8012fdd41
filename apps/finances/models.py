"""Financial domain models: booking payments and the manual ledger."""

from __future__ import annotations

import random
import string
import time
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


def generate_transaction_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"TXN_{int(time.time() * 1000)}_{suffix}"


class Payment(models.Model):
    """A payment made against a short-ride booking."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        COMPLETED = "completed", _("Completed")
        FAILED = "failed", _("Failed")
        REFUNDED = "refunded", _("Refunded")

    class Method(models.TextChoices):
        CASH = "cash", _("Cash")
        CARD = "card", _("Card")

    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.CASCADE,
        related_name="payments",
    )
    payer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="payments",
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default="LKR")
    payment_method = models.CharField(max_length=20, choices=Method.choices)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    transaction_id = models.CharField(
        max_length=40,
        unique=True,
        default=generate_transaction_id,
        editable=False,
    )
    gateway_reference = models.CharField(
        max_length=100,
        blank=True,
        help_text=_("Opaque reference issued by the card gateway."),
    )
    processed_at = models.DateTimeField(null=True, blank=True)
    failure_reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Payment")
        verbose_name_plural = _("Payments")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(condition=models.Q(amount__gte=0), name="payment_amount_not_negative"),
        ]
        indexes = [
            models.Index(fields=["status", "processed_at"]),
        ]

    def __str__(self) -> str:
        return f"Payment {self.transaction_id} for booking {self.booking_id} ({self.status})"

    def mark_completed(self) -> None:
        self.status = self.Status.COMPLETED
        self.processed_at = timezone.now()
        self.failure_reason = ""

    def mark_failed(self, reason: str | None = None) -> None:
        self.status = self.Status.FAILED
        self.failure_reason = reason or ""

    def mark_refunded(self) -> None:
        self.status = self.Status.REFUNDED


class FinancialEntry(models.Model):
    """Manual income or expense line entered by an administrator."""

    class EntryType(models.TextChoices):
        INCOME = "income", _("Income")
        EXPENSE = "expense", _("Expense")

    class Category(models.TextChoices):
        BOOKING_FEES = "booking_fees", _("Booking fees")
        RENTAL_INCOME = "rental_income", _("Rental income")
        SERVICE_FEES = "service_fees", _("Service fees")
        OTHER_INCOME = "other_income", _("Other income")
        DRIVER_SALARY = "driver_salary", _("Driver salary")
        FUEL = "fuel", _("Fuel")
        MAINTENANCE = "maintenance", _("Maintenance")
        INSURANCE = "insurance", _("Insurance")
        OFFICE_RENT = "office_rent", _("Office rent")
        UTILITIES = "utilities", _("Utilities")
        MARKETING = "marketing", _("Marketing")
        OTHER_EXPENSE = "other_expense", _("Other expense")

    INCOME_CATEGORIES = frozenset({
        Category.BOOKING_FEES,
        Category.RENTAL_INCOME,
        Category.SERVICE_FEES,
        Category.OTHER_INCOME,
    })

    type = models.CharField(max_length=10, choices=EntryType.choices)
    category = models.CharField(max_length=30, choices=Category.choices)
    description = models.CharField(max_length=255)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    date = models.DateField(default=timezone.localdate)
    reference = models.CharField(max_length=100, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="financial_entries",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Financial entry")
        verbose_name_plural = _("Financial entries")
        ordering = ["-date", "-created_at"]
        constraints = [
            models.CheckConstraint(condition=models.Q(amount__gte=0), name="financial_entry_not_negative"),
        ]
        indexes = [
            models.Index(fields=["type", "date"]),
            models.Index(fields=["category", "date"]),
        ]

    def __str__(self) -> str:
        return f"{self.type} {self.category} {self.amount} on {self.date}"

    @classmethod
    def category_matches(cls, entry_type: str, category: str) -> bool:
        is_income_category = category in cls.INCOME_CATEGORIES
        return is_income_category == (entry_type == cls.EntryType.INCOME)
