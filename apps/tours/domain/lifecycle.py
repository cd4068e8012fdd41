"""Tour booking status rules and package pricing."""

from __future__ import annotations

from decimal import Decimal

from shared.domain.state_machine import TransitionTable

PENDING = "pending"
CONFIRMED = "confirmed"
REJECTED = "rejected"
CANCELLED = "cancelled"
COMPLETED = "completed"

TOUR_BOOKING_TRANSITIONS = TransitionTable.build(
    "tour booking",
    {
        PENDING: {CONFIRMED, REJECTED, CANCELLED},
        CONFIRMED: {COMPLETED},
        REJECTED: set(),
        CANCELLED: set(),
        COMPLETED: set(),
    },
)

# Admin action recorded for a status write; anything else is "status_updated".
ACTION_FOR_STATUS = {
    CONFIRMED: "confirmed",
    REJECTED: "rejected",
}


def tour_base_price(passengers: int, price_per_person, tour_days: int) -> Decimal:
    return Decimal(passengers) * Decimal(price_per_person) * Decimal(tour_days)


def action_for_status(status: str) -> str:
    return ACTION_FOR_STATUS.get(status, "status_updated")
