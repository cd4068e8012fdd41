"""
Payment processing, the manual ledger and financial reporting.

``PaymentService`` keeps a booking's ``payment_status`` in step with its
payments. ``FinancialAggregator`` reduces completed payments, ledger rows
and service costs into income, expenses and net profit.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
import logging

from django.db.models import Count, Q, Sum  # type: ignore
from django.db.models.functions import TruncMonth  # type: ignore

from shared.application.guards import is_admin, require_admin, require_owner
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import NotFound, ValidationFailed
from shared.domain.value_objects import DateRange, Money

from apps.bookings.models import Booking
from apps.fleet.models import ServiceRecord

from .models import FinancialEntry, Payment

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")

BOOKING_PAYMENT_STATUS = {
    Payment.Status.PENDING: Booking.PaymentStatus.PENDING,
    Payment.Status.COMPLETED: Booking.PaymentStatus.COMPLETED,
    Payment.Status.FAILED: Booking.PaymentStatus.FAILED,
    Payment.Status.REFUNDED: Booking.PaymentStatus.PENDING,
}


@dataclass
class CreatePaymentCommand:
    booking_id: int
    payment_method: str
    amount: Optional[Decimal] = None
    status: str = Payment.Status.PENDING
    gateway_reference: str = ''


class PaymentService:
    """Records booking payments and mirrors their status onto the booking."""

    def _sync_booking(self, payment: Payment) -> None:
        booking = payment.booking
        booking.payment_status = BOOKING_PAYMENT_STATUS[payment.status]
        booking.payment_method = payment.payment_method
        booking.save(update_fields=["payment_status", "payment_method", "updated_at"])

    def create_payment(self, command: CreatePaymentCommand, actor) -> Payment:
        if command.payment_method not in Payment.Method.values:
            raise ValidationFailed(f"Unknown payment method '{command.payment_method}'", field="payment_method")
        if command.status not in Payment.Status.values:
            raise ValidationFailed(f"Unknown payment status '{command.status}'", field="status")
        if command.amount is not None and command.amount < 0:
            raise ValidationFailed("Payment amount cannot be negative", field="amount")

        with DjangoUnitOfWork():
            booking = Booking.objects.select_for_update().filter(pk=command.booking_id).first()
            if booking is None:
                raise NotFound(f"Booking {command.booking_id} not found")
            require_owner(actor, booking.customer_id, allow_admin=True)
            # only admins may record money as already received
            if command.status != Payment.Status.PENDING:
                require_admin(actor)

            payment = Payment(
                booking=booking,
                payer=booking.customer,
                amount=command.amount if command.amount is not None else booking.pricing.authoritative_price,
                payment_method=command.payment_method,
                gateway_reference=command.gateway_reference,
            )
            if command.status == Payment.Status.COMPLETED:
                payment.mark_completed()
            else:
                payment.status = command.status
            payment.save()
            self._sync_booking(payment)

        logger.info(
            f"Payment {payment.transaction_id} of {payment.amount} ({payment.status}) "
            f"created for booking {booking.pk} by {actor.pk}"
        )
        return payment

    def set_status(self, payment_id: int, status: str, actor, failure_reason: str | None = None) -> Payment:
        require_admin(actor)
        if status not in Payment.Status.values:
            raise ValidationFailed(f"Unknown payment status '{status}'", field="status")

        with DjangoUnitOfWork():
            payment = Payment.objects.select_for_update().select_related("booking").filter(pk=payment_id).first()
            if payment is None:
                raise NotFound(f"Payment {payment_id} not found")
            old_status = payment.status
            if status == Payment.Status.COMPLETED:
                if old_status != Payment.Status.COMPLETED:
                    payment.mark_completed()
            elif status == Payment.Status.FAILED:
                payment.mark_failed(failure_reason)
            elif status == Payment.Status.REFUNDED:
                payment.mark_refunded()
            else:
                payment.status = status
            payment.save()
            self._sync_booking(payment)

        logger.info(f"Payment {payment.transaction_id} moved {old_status} -> {payment.status} by admin {actor.pk}")
        return payment

    def delete_payment(self, payment_id: int, actor) -> None:
        require_admin(actor)
        deleted, _ = Payment.objects.filter(pk=payment_id).delete()
        if not deleted:
            raise NotFound(f"Payment {payment_id} not found")
        logger.info(f"Payment {payment_id} deleted by admin {actor.pk}")

    def visible_to(self, actor):
        qs = Payment.objects.select_related("booking", "payer")
        if is_admin(actor):
            return qs
        return qs.filter(payer=actor)

    def statistics(self) -> dict:
        counts = Payment.objects.aggregate(
            total=Count("id"),
            completed=Count("id", filter=Q(status=Payment.Status.COMPLETED)),
            pending=Count("id", filter=Q(status=Payment.Status.PENDING)),
            failed=Count("id", filter=Q(status=Payment.Status.FAILED)),
            revenue=Sum("amount", filter=Q(status=Payment.Status.COMPLETED)),
        )
        counts["revenue"] = counts["revenue"] or ZERO
        by_method = Payment.objects.values("payment_method").annotate(count=Count("id"), total=Sum("amount")).order_by()
        counts["by_method"] = {
            row["payment_method"]: {"count": row["count"], "total": row["total"] or ZERO} for row in by_method
        }
        return counts


# ===== Manual ledger =====

LEDGER_FIELDS = ("type", "category", "description", "amount", "date", "reference")


def _validate_entry(values: dict) -> None:
    if values.get("amount") is None or values["amount"] < 0:
        raise ValidationFailed("Amount cannot be negative", field="amount")
    if values.get("type") not in FinancialEntry.EntryType.values:
        raise ValidationFailed(f"Unknown entry type '{values.get('type')}'", field="type")
    if values.get("category") not in FinancialEntry.Category.values:
        raise ValidationFailed(f"Unknown category '{values.get('category')}'", field="category")
    if not FinancialEntry.category_matches(values["type"], values["category"]):
        raise ValidationFailed(
            f"Category '{values['category']}' does not belong to {values['type']} entries",
            field="category",
        )


def create_entry(actor, **fields) -> FinancialEntry:
    require_admin(actor)
    values = {name: fields[name] for name in LEDGER_FIELDS if name in fields}
    _validate_entry(values)
    entry = FinancialEntry.objects.create(created_by=actor, **values)
    logger.info(f"Ledger {entry.type} {entry.category} {entry.amount} on {entry.date} added by {actor.pk}")
    return entry


def update_entry(actor, entry_id: int, **changes) -> FinancialEntry:
    require_admin(actor)
    with DjangoUnitOfWork():
        entry = FinancialEntry.objects.select_for_update().filter(pk=entry_id).first()
        if entry is None:
            raise NotFound(f"Financial entry {entry_id} not found")
        values = {name: getattr(entry, name) for name in LEDGER_FIELDS}
        values.update({name: value for name, value in changes.items() if name in LEDGER_FIELDS})
        _validate_entry(values)
        for name, value in values.items():
            setattr(entry, name, value)
        entry.save()
    logger.info(f"Ledger entry {entry.pk} updated by {actor.pk}")
    return entry


def delete_entry(actor, entry_id: int) -> None:
    require_admin(actor)
    deleted, _ = FinancialEntry.objects.filter(pk=entry_id).delete()
    if not deleted:
        raise NotFound(f"Financial entry {entry_id} not found")
    logger.info(f"Ledger entry {entry_id} deleted by {actor.pk}")


# ===== Reporting =====

class FinancialAggregator:
    """Income, expenses and profit over an optional end-exclusive period"""

    def _sources(self, period: Optional[DateRange]):
        payments = Payment.objects.filter(status=Payment.Status.COMPLETED, processed_at__isnull=False)
        entries = FinancialEntry.objects.all()
        services = ServiceRecord.objects.all()
        if period is not None:
            payments = payments.filter(
                processed_at__date__gte=period.start_date,
                processed_at__date__lt=period.end_date,
            )
            entries = entries.filter(date__gte=period.start_date, date__lt=period.end_date)
            services = services.filter(service_date__gte=period.start_date, service_date__lt=period.end_date)
        return payments, entries, services

    @staticmethod
    def _reduce(booking_income, manual_income, manual_expenses, service_expenses) -> dict:
        income = Money(booking_income or ZERO) + Money(manual_income or ZERO)
        expenses = Money(manual_expenses or ZERO) + Money(service_expenses or ZERO)
        return {
            "total_income": income.quantized().amount,
            "total_expenses": expenses.quantized().amount,
            "net_profit": income.quantized().amount - expenses.quantized().amount,
            "booking_income": Money(booking_income or ZERO).quantized().amount,
            "manual_income": Money(manual_income or ZERO).quantized().amount,
            "manual_expenses": Money(manual_expenses or ZERO).quantized().amount,
            "service_expenses": Money(service_expenses or ZERO).quantized().amount,
        }

    def summary(self, period: Optional[DateRange] = None) -> dict:
        payments, entries, services = self._sources(period)
        ledger = entries.aggregate(
            income=Sum("amount", filter=Q(type=FinancialEntry.EntryType.INCOME)),
            expenses=Sum("amount", filter=Q(type=FinancialEntry.EntryType.EXPENSE)),
        )
        return self._reduce(
            payments.aggregate(total=Sum("amount"))["total"],
            ledger["income"],
            ledger["expenses"],
            services.aggregate(total=Sum("cost"))["total"],
        )

    def monthly_breakdown(self, period: Optional[DateRange] = None) -> list[dict]:
        payments, entries, services = self._sources(period)
        buckets: dict[str, dict[str, Decimal]] = defaultdict(lambda: defaultdict(lambda: ZERO))

        for row in payments.annotate(month=TruncMonth("processed_at")).values("month").annotate(total=Sum("amount")).order_by():
            buckets[row["month"].strftime("%Y-%m")]["booking_income"] += row["total"]
        rows = entries.annotate(month=TruncMonth("date")).values("month", "type").annotate(total=Sum("amount")).order_by()
        for row in rows:
            key = "manual_income" if row["type"] == FinancialEntry.EntryType.INCOME else "manual_expenses"
            buckets[row["month"].strftime("%Y-%m")][key] += row["total"]
        for row in services.annotate(month=TruncMonth("service_date")).values("month").annotate(total=Sum("cost")).order_by():
            buckets[row["month"].strftime("%Y-%m")]["service_expenses"] += row["total"]

        return [
            {
                "month": month,
                **self._reduce(
                    sums["booking_income"],
                    sums["manual_income"],
                    sums["manual_expenses"],
                    sums["service_expenses"],
                ),
            }
            for month, sums in sorted(buckets.items())
        ]


payment_service = PaymentService()
financial_aggregator = FinancialAggregator()
