"""Tests for the manual ledger and financial reporting."""

from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal

import pytest
from django.utils import timezone

from apps.bookings.models import Booking
from apps.finances import services
from apps.finances.models import Payment
from apps.fleet.models import ServiceRecord
from shared.domain.exceptions import AccessDenied, ValidationFailed
from shared.domain.value_objects import DateRange


def _completed_payment(customer, amount, processed_on):
    booking = Booking.objects.create(
        customer=customer,
        service_type=Booking.ServiceType.DAILY,
        pickup_location="Negombo",
        dropoff_location="Colombo",
        pickup_date=processed_on,
        pickup_time=time(8, 0),
        passengers=1,
        total_price=amount,
    )
    return Payment.objects.create(
        booking=booking,
        payer=customer,
        amount=amount,
        payment_method=Payment.Method.CASH,
        status=Payment.Status.COMPLETED,
        processed_at=timezone.make_aware(datetime.combine(processed_on, time(12, 0))),
    )


def _service(vehicle, cost, on):
    return ServiceRecord.objects.create(
        vehicle=vehicle,
        service_date=on,
        service_type="repair",
        description="Clutch plate",
        mileage=51000,
        cost=cost,
    )


@pytest.fixture
def ledger(operator_admin, customer, vehicle):
    _completed_payment(customer, Decimal("20000.00"), date(2030, 1, 10))
    _completed_payment(customer, Decimal("15000.00"), date(2030, 2, 5))
    Payment.objects.create(
        booking=Booking.objects.first(),
        payer=customer,
        amount=Decimal("99999.00"),
        payment_method=Payment.Method.CARD,
        status=Payment.Status.PENDING,
    )
    services.create_entry(
        operator_admin, type="income", category="rental_income", description="Van hire", amount=Decimal("50000.00"), date=date(2030, 1, 20)
    )
    services.create_entry(
        operator_admin, type="expense", category="fuel", description="Diesel", amount=Decimal("12000.00"), date=date(2030, 2, 1)
    )
    _service(vehicle, Decimal("8000.00"), date(2030, 1, 25))


@pytest.mark.django_db
def test_summary_over_all_time(ledger):
    summary = services.financial_aggregator.summary()

    assert summary == {
        "total_income": Decimal("85000.00"),
        "total_expenses": Decimal("20000.00"),
        "net_profit": Decimal("65000.00"),
        "booking_income": Decimal("35000.00"),
        "manual_income": Decimal("50000.00"),
        "manual_expenses": Decimal("12000.00"),
        "service_expenses": Decimal("8000.00"),
    }


@pytest.mark.django_db
def test_summary_for_january(ledger):
    summary = services.financial_aggregator.summary(DateRange(date(2030, 1, 1), date(2030, 2, 1)))

    assert summary["booking_income"] == Decimal("20000.00")
    assert summary["manual_expenses"] == Decimal("0.00")
    assert summary["service_expenses"] == Decimal("8000.00")
    assert summary["net_profit"] == Decimal("62000.00")


@pytest.mark.django_db
def test_empty_period_is_zero():
    summary = services.financial_aggregator.summary(DateRange(date(2031, 1, 1), date(2031, 2, 1)))

    assert summary["total_income"] == Decimal("0.00")
    assert summary["net_profit"] == Decimal("0.00")


@pytest.mark.django_db
def test_monthly_breakdown(ledger):
    months = services.financial_aggregator.monthly_breakdown()

    assert [row["month"] for row in months] == ["2030-01", "2030-02"]
    assert months[0]["total_income"] == Decimal("70000.00")
    assert months[0]["total_expenses"] == Decimal("8000.00")
    assert months[1]["booking_income"] == Decimal("15000.00")
    assert months[1]["net_profit"] == Decimal("3000.00")


@pytest.mark.django_db
def test_net_profit_can_be_negative(operator_admin):
    services.create_entry(
        operator_admin, type="expense", category="office_rent", description="Rent", amount=Decimal("75000.00"), date=date(2030, 5, 1)
    )

    assert services.financial_aggregator.summary()["net_profit"] == Decimal("-75000.00")


@pytest.mark.django_db
@pytest.mark.parametrize(
    "fields, field",
    [
        ({"type": "income", "category": "fuel"}, "category"),
        ({"type": "expense", "category": "booking_fees"}, "category"),
        ({"type": "income", "category": "other_income", "amount": Decimal("-1")}, "amount"),
    ],
)
def test_ledger_validation(operator_admin, fields, field):
    values = {"description": "x", "amount": Decimal("10.00"), "date": date(2030, 1, 1), **fields}

    with pytest.raises(ValidationFailed) as excinfo:
        services.create_entry(operator_admin, **values)

    assert excinfo.value.field == field


@pytest.mark.django_db
def test_ledger_is_admin_only(customer):
    with pytest.raises(AccessDenied):
        services.create_entry(
            customer, type="income", category="other_income", description="x", amount=Decimal("1.00"), date=date(2030, 1, 1)
        )


@pytest.mark.django_db
def test_update_revalidates_against_stored_type(operator_admin):
    entry = services.create_entry(
        operator_admin, type="expense", category="fuel", description="Petrol", amount=Decimal("4000.00"), date=date(2030, 1, 1)
    )

    with pytest.raises(ValidationFailed):
        services.update_entry(operator_admin, entry.pk, category="service_fees")

    updated = services.update_entry(operator_admin, entry.pk, type="income", category="service_fees")
    assert updated.type == "income"
