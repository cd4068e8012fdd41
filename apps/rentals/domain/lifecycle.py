"""Rental status rules and amount estimation."""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta
from decimal import Decimal

from shared.domain.state_machine import TransitionTable

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"
ACTIVE = "active"
COMPLETED = "completed"
CANCELLED = "cancelled"

RENTAL_TRANSITIONS = TransitionTable.build(
    "rental",
    {
        PENDING: {APPROVED, REJECTED, CANCELLED},
        APPROVED: {ACTIVE, REJECTED, CANCELLED},
        ACTIVE: {COMPLETED},
        REJECTED: set(),
        CANCELLED: set(),
        COMPLETED: set(),
    },
)

# Statuses in which the rental holds its vehicle.
HOLDING_STATUSES = frozenset({APPROVED, ACTIVE})
RELEASING_STATUSES = frozenset({COMPLETED, CANCELLED, REJECTED})

DAYS_PER_BILLING_MONTH = 30


def rental_duration_days(start: date | datetime, end: date | datetime) -> int:
    """Whole days between start and end, any partial day counted as one."""
    delta: timedelta = end - start
    return math.ceil(delta.total_seconds() / timedelta(days=1).total_seconds())


def estimate_rental_amount(rental_type: str, duration_days: int, daily_rate: Decimal, monthly_rate: Decimal) -> Decimal:
    if rental_type == "monthly":
        months = math.ceil(duration_days / DAYS_PER_BILLING_MONTH)
        return Decimal(monthly_rate) * months
    return Decimal(daily_rate) * duration_days
