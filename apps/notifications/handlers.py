"""
Lifecycle event handlers

Each handler turns a committed domain event into a message for the
entity's owner.
"""

from __future__ import annotations

from decimal import Decimal

from shared.application.message_bus import message_bus

from apps.bookings.domain.events import BookingConfirmed, BookingPriceConfirmed
from apps.providers.domain.events import ProviderContractStatusChanged
from apps.rentals.domain.events import RentalStatusChanged
from apps.tours.domain.events import TourBookingConfirmed

from .models import Notification
from .services import NotificationMessage, notification_dispatcher

RENTAL_TITLES = {
    "approved": "Rental approved",
    "rejected": "Rental request rejected",
    "active": "Rental started",
    "completed": "Rental completed",
    "cancelled": "Rental cancelled",
}

CONTRACT_TITLES = {
    "under_review": "Contract under review",
    "approved": "Contract approved",
    "active": "Contract activated",
    "suspended": "Contract suspended",
    "terminated": "Contract terminated",
    "expired": "Contract expired",
}


def _lkr(amount) -> str:
    return f"LKR {Decimal(amount):,.2f}"


def _humanize(status: str) -> str:
    return status.replace("_", " ")


@message_bus.subscribe(RentalStatusChanged)
def notify_rental_status(event: RentalStatusChanged) -> None:
    title = RENTAL_TITLES.get(event.new_status)
    if title is None or event.customer_id is None:
        return
    message = f"Your rental #{event.rental_id} is now {_humanize(event.new_status)}."
    if event.new_status == "approved" and event.contract_id:
        message += f" Contract number: {event.contract_id}."
    notification_dispatcher.dispatch(NotificationMessage(
        recipient_id=event.customer_id,
        kind=Notification.Kind.RENTAL_STATUS,
        title=title,
        message=message,
        correlated_entity_id=str(event.rental_id),
    ))


@message_bus.subscribe(BookingConfirmed)
def notify_booking_confirmed(event: BookingConfirmed) -> None:
    if event.customer_id is None:
        return
    when = f"{event.pickup_date:%Y-%m-%d}"
    if event.pickup_time is not None:
        when += f" at {event.pickup_time:%H:%M}"
    notification_dispatcher.dispatch(NotificationMessage(
        recipient_id=event.customer_id,
        kind=Notification.Kind.BOOKING_CONFIRMED,
        title="Booking confirmed",
        message=(
            f"Your {_humanize(event.service_type)} booking #{event.booking_id} is confirmed. "
            f"Pickup from {event.pickup_location} on {when}."
        ),
        correlated_entity_id=str(event.booking_id),
    ))


@message_bus.subscribe(BookingPriceConfirmed)
def notify_booking_price(event: BookingPriceConfirmed) -> None:
    if event.customer_id is None:
        return
    notification_dispatcher.dispatch(NotificationMessage(
        recipient_id=event.customer_id,
        kind=Notification.Kind.BOOKING_PRICE,
        title="Booking price confirmed",
        message=f"The price of booking #{event.booking_id} is confirmed at {_lkr(event.total_price)}.",
        correlated_entity_id=str(event.booking_id),
    ))


@message_bus.subscribe(TourBookingConfirmed)
def notify_tour_booking_confirmed(event: TourBookingConfirmed) -> None:
    if event.customer_id is None:
        return
    notification_dispatcher.dispatch(NotificationMessage(
        recipient_id=event.customer_id,
        kind=Notification.Kind.TOUR_BOOKING_CONFIRMED,
        title="Tour booking confirmed",
        message=(
            f"Your {event.package_name} tour on {event.booking_date:%Y-%m-%d} is confirmed. "
            f"Final price: {_lkr(event.final_price)}."
        ),
        correlated_entity_id=str(event.tour_booking_id),
    ))


@message_bus.subscribe(ProviderContractStatusChanged)
def notify_provider_contract(event: ProviderContractStatusChanged) -> None:
    title = CONTRACT_TITLES.get(event.new_status)
    if title is None or event.provider_id is None:
        return
    notification_dispatcher.dispatch(NotificationMessage(
        recipient_id=event.provider_id,
        kind=Notification.Kind.PROVIDER_CONTRACT,
        title=title,
        message=(
            f"Contract {event.contract_id} moved from {_humanize(event.old_status)} "
            f"to {_humanize(event.new_status)}."
        ),
        correlated_entity_id=event.contract_id,
    ))
