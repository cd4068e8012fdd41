"""Provider contract status rules and payment cadence."""

from __future__ import annotations

import math
from datetime import date

from dateutil.relativedelta import relativedelta

from shared.domain.state_machine import TransitionTable

PENDING = "pending"
UNDER_REVIEW = "under_review"
APPROVED = "approved"
ACTIVE = "active"
SUSPENDED = "suspended"
TERMINATED = "terminated"
EXPIRED = "expired"

CONTRACT_TRANSITIONS = TransitionTable.build(
    "contract",
    {
        PENDING: {UNDER_REVIEW, TERMINATED},
        UNDER_REVIEW: {APPROVED, TERMINATED},
        APPROVED: {ACTIVE},
        ACTIVE: {SUSPENDED, TERMINATED, EXPIRED},
        SUSPENDED: {ACTIVE, TERMINATED},
        TERMINATED: set(),
        EXPIRED: set(),
    },
)

# Provider edits are accepted only before an admin has decided.
EDITABLE_STATUSES = frozenset({PENDING, UNDER_REVIEW})

ACTION_FOR_STATUS = {
    UNDER_REVIEW: "reviewed",
    APPROVED: "approved",
    ACTIVE: "activated",
    SUSPENDED: "suspended",
    TERMINATED: "terminated",
    EXPIRED: "expired",
}

PAYMENT_CADENCE = {
    "Monthly": relativedelta(months=1),
    "Quarterly": relativedelta(months=3),
    "Semi-Annual": relativedelta(months=6),
    "Annual": relativedelta(years=1),
}

MIN_DURATION_MONTHS = 1
MAX_DURATION_MONTHS = 60

REQUIRED_VEHICLE_FIELDS = (
    "vehicle_number",
    "brand",
    "model",
    "year",
    "color",
    "vehicle_type",
    "fuel_type",
    "transmission",
    "seating_capacity",
)

REQUIRED_TERMS_FIELDS = (
    "start_date",
    "end_date",
    "duration_months",
    "monthly_fee",
    "payment_terms",
    "payment_method",
)


def action_for_status(old_status: str, new_status: str) -> str:
    # Terminating before approval is a rejection of the request.
    if new_status == TERMINATED and old_status in EDITABLE_STATUSES:
        return "rejected"
    return ACTION_FOR_STATUS[new_status]


def next_payment_after(day: date, payment_terms: str) -> date:
    return day + PAYMENT_CADENCE[payment_terms]


def months_remaining(end: date, today: date) -> int:
    """Billing months (30 days) left until ``end``, never negative."""
    return max(0, math.ceil((end - today).days / 30))


# Request and registration statistics count the last this many days as recent.
RECENT_REQUEST_DAYS = 30
MAX_REQUEST_TEXT = 500
