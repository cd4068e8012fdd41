"""Tests for vehicle occupancy bookkeeping."""

from __future__ import annotations

from datetime import date

import pytest

from apps.fleet.services import resource_registry
from apps.rentals.application.command_handlers import CreateRentalCommand, rental_contracts
from shared.domain.exceptions import NotFound, ResourceConflict
from shared.domain.value_objects import DateRange

JUNE = DateRange(date(2030, 6, 1), date(2030, 6, 10))


@pytest.fixture
def request_rental(customer):
    def factory(vehicle, window=JUNE):
        return rental_contracts.create(
            CreateRentalCommand(
                vehicle_id=vehicle.pk,
                rental_type="daily",
                start_date=window.start_date,
                end_date=window.end_date,
            ),
            customer,
        )

    return factory


@pytest.mark.django_db
def test_reserve_marks_vehicle_occupied(vehicle, request_rental):
    rental = request_rental(vehicle)

    reserved = resource_registry.reserve(vehicle.pk, rental, JUNE)

    assert reserved.is_available is False
    assert reserved.occupied_by_id == rental.pk
    assert reserved.occupied_window == JUNE


@pytest.mark.django_db
def test_reserve_by_same_holder_refreshes_window(vehicle, request_rental):
    rental = request_rental(vehicle)
    resource_registry.reserve(vehicle.pk, rental, JUNE)

    longer = DateRange(date(2030, 6, 1), date(2030, 6, 20))
    reserved = resource_registry.reserve(vehicle.pk, rental, longer)

    assert reserved.occupied_by_id == rental.pk
    assert reserved.occupied_until == date(2030, 6, 20)


@pytest.mark.django_db
def test_reserve_refuses_second_holder(vehicle, request_rental):
    first = request_rental(vehicle)
    second = request_rental(vehicle, DateRange(date(2030, 7, 1), date(2030, 7, 5)))
    resource_registry.reserve(vehicle.pk, first, JUNE)

    with pytest.raises(ResourceConflict):
        resource_registry.reserve(vehicle.pk, second, second.window)

    vehicle.refresh_from_db()
    assert vehicle.occupied_by_id == first.pk
    assert vehicle.occupied_window == JUNE


@pytest.mark.django_db
def test_reserve_refuses_inactive_and_missing_vehicles(make_vehicle, request_rental):
    vehicle = make_vehicle()
    rental = request_rental(vehicle)
    vehicle.is_active = False
    vehicle.save()

    with pytest.raises(ResourceConflict):
        resource_registry.reserve(vehicle.pk, rental, JUNE)
    with pytest.raises(NotFound):
        resource_registry.reserve(999_999, rental, JUNE)


@pytest.mark.django_db
def test_release_is_idempotent(vehicle, request_rental):
    rental = request_rental(vehicle)
    resource_registry.reserve(vehicle.pk, rental, JUNE)

    resource_registry.release(vehicle.pk, holder=rental)
    resource_registry.release(vehicle.pk, holder=rental)
    resource_registry.release(vehicle.pk)

    vehicle.refresh_from_db()
    assert vehicle.is_available is True
    assert vehicle.occupied_by is None
    assert vehicle.occupied_from is None
    assert vehicle.occupied_until is None


@pytest.mark.django_db
def test_release_by_foreign_holder_keeps_occupancy(vehicle, request_rental):
    holder = request_rental(vehicle)
    stranger = request_rental(vehicle, DateRange(date(2030, 8, 1), date(2030, 8, 3)))
    resource_registry.reserve(vehicle.pk, holder, JUNE)

    resource_registry.release(vehicle.pk, holder=stranger)

    vehicle.refresh_from_db()
    assert vehicle.is_available is False
    assert vehicle.occupied_by_id == holder.pk


@pytest.mark.django_db
def test_is_free_checks_window_overlap(vehicle, request_rental):
    rental = request_rental(vehicle)
    resource_registry.reserve(vehicle.pk, rental, JUNE)

    assert resource_registry.is_free(vehicle.pk, DateRange(date(2030, 6, 5), date(2030, 6, 12))) is False
    assert resource_registry.is_free(vehicle.pk, DateRange(date(2030, 6, 10), date(2030, 6, 12))) is True
    assert resource_registry.is_free(vehicle.pk, JUNE, holder=rental) is True
    assert resource_registry.is_free(999_999, JUNE) is False


@pytest.mark.django_db
def test_occupied_vehicle_cannot_be_deactivated(vehicle, request_rental):
    rental = request_rental(vehicle)
    resource_registry.reserve(vehicle.pk, rental, JUNE)

    with pytest.raises(ResourceConflict):
        resource_registry.deactivate(vehicle.pk)

    resource_registry.release(vehicle.pk, holder=rental)
    assert resource_registry.deactivate(vehicle.pk).is_active is False
    assert not resource_registry.available_vehicles().filter(pk=vehicle.pk).exists()
