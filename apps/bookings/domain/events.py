"""
Booking Domain Events

Published after the surrounding transaction commits.
"""

from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal
from typing import Optional

from shared.domain.base import DomainEvent


@dataclass
class BookingConfirmed(DomainEvent):
    """
    Event: an admin confirmed a booking (-> confirmed)

    Triggers:
    - Notify the customer with the service type and pickup schedule
    """
    booking_id: Optional[int] = None
    customer_id: Optional[int] = None
    service_type: str = ""
    pickup_date: Optional[date] = None
    pickup_time: Optional[time] = None
    pickup_location: str = ""


@dataclass
class BookingPriceConfirmed(DomainEvent):
    """Event: the booking price was locked by an admin"""
    booking_id: Optional[int] = None
    customer_id: Optional[int] = None
    total_price: Decimal = Decimal("0")
