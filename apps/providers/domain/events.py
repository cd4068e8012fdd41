"""
Provider Contract Domain Events
"""

from dataclasses import dataclass
from typing import Optional

from shared.domain.base import DomainEvent


@dataclass
class ProviderContractStatusChanged(DomainEvent):
    """
    Event: an admin moved a provider contract to a new status

    Triggers:
    - Notify the provider
    """
    contract_pk: Optional[int] = None
    contract_id: str = ""
    provider_id: Optional[int] = None
    old_status: str = ""
    new_status: str = ""
