"""Booking status rules."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore

from shared.domain.state_machine import TransitionTable

PENDING = "pending"
CONFIRMED = "confirmed"
IN_PROGRESS = "in_progress"
COMPLETED = "completed"
CANCELLED = "cancelled"

BOOKING_TRANSITIONS = TransitionTable.build(
    "booking",
    {
        PENDING: {CONFIRMED, CANCELLED},
        CONFIRMED: {IN_PROGRESS, COMPLETED, CANCELLED},
        IN_PROGRESS: {COMPLETED},
        COMPLETED: set(),
        CANCELLED: set(),
    },
)

# Fields a customer may still change while the booking is pending.
CUSTOMER_EDITABLE_FIELDS = (
    "pickup_location",
    "dropoff_location",
    "pickup_date",
    "pickup_time",
    "return_date",
    "return_time",
    "passengers",
    "additional_notes",
    "payment_method",
)


def rate_per_km(service_type: str) -> Decimal:
    return Decimal(settings.BOOKING_RATES_PER_KM[service_type])
