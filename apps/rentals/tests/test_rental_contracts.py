"""Tests for the rental contract workflow."""

from __future__ import annotations

import re
import threading
from datetime import date, datetime
from decimal import Decimal

import pytest
from django.db import connection

from apps.rentals.application.command_handlers import (
    CreateRentalCommand,
    SetRentalStatusCommand,
    UpdateRentalCommand,
    rental_contracts,
)
from apps.rentals.domain.lifecycle import rental_duration_days
from apps.rentals.models import Rental
from shared.domain.exceptions import AccessDenied, InvalidTransition, NotFound, ResourceConflict, ValidationFailed

CONTRACT_ID = re.compile(r"^CONTRACT-\d{20}-[0-9A-F]{6}$")


def _request(actor, vehicle, start=date(2030, 6, 1), end=date(2030, 6, 4), rental_type="daily"):
    return rental_contracts.create(
        CreateRentalCommand(vehicle_id=vehicle.pk, rental_type=rental_type, start_date=start, end_date=end),
        actor,
    )


def _set_status(actor, rental, status, **extra):
    return rental_contracts.admin_set_status(SetRentalStatusCommand(rental_id=rental.pk, status=status, **extra), actor)


def test_partial_days_round_up():
    assert rental_duration_days(date(2030, 1, 1), date(2030, 1, 4)) == 3
    assert rental_duration_days(datetime(2030, 1, 1, 9), datetime(2030, 1, 2, 10)) == 2


@pytest.mark.django_db
def test_daily_rental_amount(customer, vehicle):
    rental = _request(customer, vehicle)

    assert rental.status == Rental.Status.PENDING
    assert rental.duration == 3
    assert rental.total_amount == Decimal("30000.00")
    assert rental.is_price_confirmed is False
    assert rental.contract_id is None
    assert rental.vehicle_snapshot["vehicle_number"] == vehicle.vehicle_number


@pytest.mark.django_db
def test_monthly_rental_bills_started_months(customer, vehicle):
    rental = _request(customer, vehicle, start=date(2030, 6, 1), end=date(2030, 7, 16), rental_type="monthly")

    assert rental.duration == 45
    assert rental.total_amount == Decimal("500000.00")


@pytest.mark.django_db
def test_create_validates_vehicle_and_dates(customer, vehicle):
    with pytest.raises(NotFound):
        rental_contracts.create(
            CreateRentalCommand(vehicle_id=424242, rental_type="daily", start_date=date(2030, 1, 1), end_date=date(2030, 1, 2)),
            customer,
        )
    with pytest.raises(ValidationFailed):
        _request(customer, vehicle, start=date(2030, 1, 5), end=date(2030, 1, 5))


@pytest.mark.django_db
def test_approval_mints_contract_and_reserves_vehicle(operator_admin, customer, vehicle):
    rental = _set_status(operator_admin, _request(customer, vehicle), "approved", daily_fee=Decimal("9500.00"))

    assert CONTRACT_ID.match(rental.contract_id)
    assert rental.approved_by == operator_admin
    assert rental.approved_at is not None
    assert rental.contract_created_at is not None
    assert rental.is_price_confirmed is True
    assert rental.daily_fee == Decimal("9500.00")
    vehicle.refresh_from_db()
    assert vehicle.is_available is False
    assert vehicle.occupied_by_id == rental.pk


@pytest.mark.django_db
def test_reapproval_keeps_contract_id(operator_admin, customer, vehicle):
    rental = _set_status(operator_admin, _request(customer, vehicle), "approved")
    contract_id = rental.contract_id

    again = _set_status(operator_admin, rental, "approved")

    assert again.contract_id == contract_id


@pytest.mark.django_db
def test_full_lifecycle_releases_vehicle(operator_admin, customer, vehicle):
    rental = _request(customer, vehicle)
    _set_status(operator_admin, rental, "approved")
    active = _set_status(operator_admin, rental, "active")
    assert active.contract_activated_at is not None

    completed = _set_status(operator_admin, rental, "completed")

    assert completed.contract_completed_at is not None
    vehicle.refresh_from_db()
    assert vehicle.is_available is True
    assert vehicle.occupied_by is None


@pytest.mark.django_db
def test_losing_approval_rolls_back_its_status(operator_admin, customer, other_customer, vehicle):
    first = _request(customer, vehicle)
    second = _request(other_customer, vehicle)
    _set_status(operator_admin, first, "approved")

    with pytest.raises(ResourceConflict):
        _set_status(operator_admin, second, "approved")

    second.refresh_from_db()
    assert second.status == Rental.Status.PENDING
    assert second.contract_id is None
    vehicle.refresh_from_db()
    assert vehicle.occupied_by_id == first.pk


@pytest.mark.django_db
def test_rejecting_a_competitor_does_not_free_the_vehicle(operator_admin, customer, other_customer, vehicle):
    holder = _request(customer, vehicle)
    competitor = _request(other_customer, vehicle)
    _set_status(operator_admin, holder, "approved")

    _set_status(operator_admin, competitor, "rejected")

    vehicle.refresh_from_db()
    assert vehicle.is_available is False
    assert vehicle.occupied_by_id == holder.pk


@pytest.mark.django_db
def test_illegal_transitions_and_roles(operator_admin, customer, vehicle):
    rental = _request(customer, vehicle)

    with pytest.raises(InvalidTransition) as excinfo:
        _set_status(operator_admin, rental, "completed")
    assert excinfo.value.field == "status"

    with pytest.raises(AccessDenied):
        _set_status(customer, rental, "approved")


@pytest.mark.django_db
def test_new_request_for_occupied_window_conflicts(operator_admin, customer, other_customer, vehicle):
    _set_status(operator_admin, _request(customer, vehicle), "approved")

    with pytest.raises(ResourceConflict):
        _request(other_customer, vehicle, start=date(2030, 6, 2), end=date(2030, 6, 8))

    later = _request(other_customer, vehicle, start=date(2030, 6, 4), end=date(2030, 6, 8))
    assert later.status == Rental.Status.PENDING


@pytest.mark.django_db
def test_vehicle_cannot_be_reassigned_while_held(operator_admin, customer, make_vehicle):
    vehicle = make_vehicle()
    spare = make_vehicle(daily_rate=Decimal("12000.00"))
    rental = _set_status(operator_admin, _request(customer, vehicle), "approved")

    with pytest.raises(InvalidTransition):
        rental_contracts.admin_update(UpdateRentalCommand(rental_id=rental.pk, vehicle_id=spare.pk), operator_admin)


@pytest.mark.django_db
def test_pending_reassignment_reestimates(operator_admin, customer, make_vehicle):
    vehicle = make_vehicle()
    spare = make_vehicle(daily_rate=Decimal("12000.00"))
    rental = _request(customer, vehicle)

    updated = rental_contracts.admin_update(
        UpdateRentalCommand(rental_id=rental.pk, vehicle_id=spare.pk, contract_terms="Driver included"),
        operator_admin,
    )

    assert updated.vehicle == spare
    assert updated.total_amount == Decimal("36000.00")
    assert updated.contract_terms == "Driver included"
    assert updated.status == Rental.Status.PENDING


@pytest.mark.django_db
def test_admin_override_then_confirmation_locks_amount(operator_admin, customer, vehicle):
    rental = _request(customer, vehicle)
    rental = rental_contracts.admin_update(
        UpdateRentalCommand(rental_id=rental.pk, total_amount=Decimal("27000.00")), operator_admin
    )
    assert rental.total_amount == Decimal("27000.00")
    assert rental.is_price_confirmed is False

    rental = _set_status(operator_admin, rental, "approved")
    assert rental.total_amount == Decimal("27000.00")

    extended = rental_contracts.admin_update(
        UpdateRentalCommand(rental_id=rental.pk, end_date=date(2030, 6, 10)), operator_admin
    )
    assert extended.total_amount == Decimal("27000.00")
    vehicle.refresh_from_db()
    assert vehicle.occupied_until == date(2030, 6, 10)

    with pytest.raises(InvalidTransition):
        rental_contracts.admin_update(
            UpdateRentalCommand(rental_id=rental.pk, total_amount=Decimal("20000.00")), operator_admin
        )


@pytest.mark.django_db
def test_held_rental_cannot_be_deleted(operator_admin, customer, vehicle):
    rental = _set_status(operator_admin, _request(customer, vehicle), "approved")

    with pytest.raises(InvalidTransition):
        rental_contracts.delete(rental.pk, operator_admin)

    _set_status(operator_admin, rental, "cancelled")
    rental_contracts.delete(rental.pk, operator_admin)

    assert not Rental.objects.filter(pk=rental.pk).exists()
    vehicle.refresh_from_db()
    assert vehicle.is_available is True


@pytest.mark.django_db
def test_statistics(operator_admin, customer, make_vehicle):
    active = _request(customer, make_vehicle())
    _set_status(operator_admin, active, "approved")
    _set_status(operator_admin, active, "active")
    _request(customer, make_vehicle())

    stats = rental_contracts.statistics()

    assert stats["total"] == 2
    assert stats["pending"] == 1
    assert stats["active"] == 1
    assert stats["active_revenue"] == Decimal("30000.00")


@pytest.mark.django_db
def test_deleting_a_customer_frees_their_vehicle(operator_admin, customer, vehicle):
    rental = _set_status(operator_admin, _request(customer, vehicle), "approved")
    vehicle.refresh_from_db()
    assert vehicle.occupied_by_id == rental.pk

    customer.delete()

    assert not Rental.objects.filter(pk=rental.pk).exists()
    vehicle.refresh_from_db()
    assert vehicle.is_available is True
    assert vehicle.occupied_by is None
    assert vehicle.occupied_from is None


@pytest.mark.django_db
def test_deleting_a_competitor_leaves_the_holder_in_place(operator_admin, customer, other_customer, vehicle):
    holder = _set_status(operator_admin, _request(customer, vehicle), "approved")
    _request(other_customer, vehicle)

    other_customer.delete()

    vehicle.refresh_from_db()
    assert vehicle.is_available is False
    assert vehicle.occupied_by_id == holder.pk


@pytest.mark.django_db(transaction=True)
def test_concurrent_approvals_admit_exactly_one(operator_admin, customer, other_customer, vehicle):
    rentals = [_request(customer, vehicle), _request(other_customer, vehicle)]
    barrier = threading.Barrier(len(rentals))
    outcomes = {}

    def approve(rental):
        try:
            barrier.wait(timeout=10)
            _set_status(operator_admin, rental, "approved")
            outcomes[rental.pk] = "approved"
        except ResourceConflict:
            outcomes[rental.pk] = "conflict"
        finally:
            connection.close()

    threads = [threading.Thread(target=approve, args=(rental,)) for rental in rentals]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert sorted(outcomes.values()) == ["approved", "conflict"]
    winner = next(pk for pk, outcome in outcomes.items() if outcome == "approved")
    loser = next(pk for pk, outcome in outcomes.items() if outcome == "conflict")
    vehicle.refresh_from_db()
    assert vehicle.occupied_by_id == winner
    assert Rental.objects.get(pk=winner).contract_id is not None
    assert Rental.objects.get(pk=loser).status == Rental.Status.PENDING
    assert Rental.objects.get(pk=loser).contract_id is None
