"""Rental Domain Events"""

from dataclasses import dataclass
from typing import Optional

from shared.domain.base import DomainEvent


@dataclass
class RentalStatusChanged(DomainEvent):
    """
    Event: an admin moved a rental to a new status

    Triggers:
    - Notify the customer (approved, rejected, active, completed, cancelled)
    """
    rental_id: Optional[int] = None
    customer_id: Optional[int] = None
    vehicle_id: Optional[int] = None
    old_status: str = ""
    new_status: str = ""
    contract_id: Optional[str] = None
