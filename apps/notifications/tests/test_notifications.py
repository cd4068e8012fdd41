"""Tests for lifecycle notifications."""

from __future__ import annotations

from datetime import date, time
from decimal import Decimal

import pytest
from django.core import mail

from apps.bookings.application.command_handlers import (
    CreateBookingCommand,
    SetBookingStatusCommand,
    booking_lifecycle,
)
from apps.notifications import services
from apps.notifications.models import Notification
from apps.notifications.services import NotificationMessage, notification_dispatcher
from apps.notifications.tasks import deliver_notification
from apps.providers.domain.events import ProviderContractStatusChanged
from apps.rentals.application.command_handlers import CreateRentalCommand, SetRentalStatusCommand, rental_contracts
from apps.tours.domain.events import TourBookingConfirmed
from shared.application.message_bus import message_bus
from shared.domain.exceptions import InvalidTransition


def _booking(customer):
    return booking_lifecycle.create(
        CreateBookingCommand(
            service_type="airport",
            pickup_location="Colombo Fort",
            dropoff_location="Katunayake",
            pickup_date=date(2030, 4, 2),
            pickup_time=time(5, 30),
            passengers=3,
            distance=Decimal("35"),
        ),
        customer,
    )


@pytest.mark.django_db
def test_confirming_a_booking_notifies_the_customer(operator_admin, customer, django_capture_on_commit_callbacks):
    booking = _booking(customer)

    with django_capture_on_commit_callbacks(execute=True):
        booking_lifecycle.admin_set_status(SetBookingStatusCommand(booking_id=booking.pk, status="confirmed"), operator_admin)

    notification = Notification.objects.get(recipient=customer)
    assert notification.kind == Notification.Kind.BOOKING_CONFIRMED
    assert notification.correlated_entity_id == str(booking.pk)
    assert "2030-04-02 at 05:30" in notification.message
    assert len(mail.outbox) == 1
    assert mail.outbox[0].to == ["customer@example.com"]
    assert mail.outbox[0].subject == "Booking confirmed"


@pytest.mark.django_db
def test_failed_transition_sends_nothing(operator_admin, customer, django_capture_on_commit_callbacks):
    booking = _booking(customer)

    with django_capture_on_commit_callbacks(execute=True):
        with pytest.raises(InvalidTransition):
            booking_lifecycle.admin_set_status(SetBookingStatusCommand(booking_id=booking.pk, status="completed"), operator_admin)

    assert not Notification.objects.exists()
    assert mail.outbox == []


@pytest.mark.django_db
def test_rental_approval_carries_contract_number(operator_admin, customer, vehicle, django_capture_on_commit_callbacks):
    rental = rental_contracts.create(
        CreateRentalCommand(vehicle_id=vehicle.pk, rental_type="daily", start_date=date(2030, 6, 1), end_date=date(2030, 6, 4)),
        customer,
    )

    with django_capture_on_commit_callbacks(execute=True):
        rental = rental_contracts.admin_set_status(SetRentalStatusCommand(rental_id=rental.pk, status="approved"), operator_admin)

    notification = Notification.objects.get(recipient=customer)
    assert notification.kind == Notification.Kind.RENTAL_STATUS
    assert notification.title == "Rental approved"
    assert rental.contract_id in notification.message


@pytest.mark.django_db
def test_tour_and_contract_events(customer, provider):
    message_bus.publish_events([
        TourBookingConfirmed(
            tour_booking_id=7,
            customer_id=customer.pk,
            package_name="Hill Country",
            booking_date=date(2030, 8, 1),
            final_price=Decimal("120000"),
        ),
        ProviderContractStatusChanged(
            contract_pk=3,
            contract_id="VPC-1700000000000-AB12C",
            provider_id=provider.pk,
            old_status="under_review",
            new_status="approved",
        ),
    ])

    tour = Notification.objects.get(recipient=customer)
    assert "LKR 120,000.00" in tour.message
    assert tour.correlated_entity_id == "7"
    contract = Notification.objects.get(recipient=provider)
    assert contract.title == "Contract approved"
    assert contract.message == "Contract VPC-1700000000000-AB12C moved from under review to approved."


@pytest.mark.django_db
def test_broker_outage_is_swallowed(customer, monkeypatch):
    class Unreachable:
        def delay(self, **kwargs):
            raise ConnectionError("broker down")

    monkeypatch.setattr(services, "deliver_notification", Unreachable())

    sent = notification_dispatcher.dispatch(NotificationMessage(recipient_id=customer.pk, kind="booking_confirmed", title="t", message="m"))

    assert sent is False
    assert not Notification.objects.exists()


@pytest.mark.django_db
def test_delivery_to_a_missing_user_is_dropped():
    assert deliver_notification(recipient_id=999999, kind="rental_status", title="t", message="m") is None
    assert not Notification.objects.exists()
