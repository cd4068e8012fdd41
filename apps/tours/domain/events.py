"""
Tour Domain Events
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from shared.domain.base import DomainEvent


@dataclass
class TourBookingConfirmed(DomainEvent):
    """
    Event: an admin confirmed a tour booking

    Triggers:
    - Notify the customer with the package and the final price
    """
    tour_booking_id: Optional[int] = None
    customer_id: Optional[int] = None
    package_name: str = ""
    booking_date: Optional[date] = None
    final_price: Decimal = Decimal("0")
