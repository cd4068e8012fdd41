"""
Two-phase pricing

Every modality prices the same way: the system computes an estimate from
the request, an admin may write an override, and an explicit confirmation
locks the price. ``PricingConfirmation`` holds those three numbers and
answers "what price should a consumer trust?".

Models embed it by exposing ``pricing`` (built from their own columns)
and ``apply_pricing()`` (written back to those columns).
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Optional

from shared.domain.base import ValueObject
from shared.domain.exceptions import InvalidTransition


class PricingState(str, Enum):
    ESTIMATED = 'estimated'
    ADMIN_REVIEWED = 'admin_reviewed'
    CONFIRMED = 'confirmed'


def _as_decimal(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


@dataclass(frozen=True)
class PricingConfirmation(ValueObject):
    """
    Estimate -> admin override -> confirmed price

    The object is immutable; every operation returns a new instance.
    Confirmation is terminal: there is no way back to an editable state.
    """
    estimate: Decimal
    admin_override: Optional[Decimal] = None
    confirmed_price: Optional[Decimal] = None

    def __post_init__(self):
        object.__setattr__(self, 'estimate', _as_decimal(self.estimate))
        if self.admin_override is not None:
            object.__setattr__(self, 'admin_override', _as_decimal(self.admin_override))
        if self.confirmed_price is not None:
            object.__setattr__(self, 'confirmed_price', _as_decimal(self.confirmed_price))
        if self.estimate < 0:
            raise ValueError("Estimate cannot be negative")

    @property
    def state(self) -> PricingState:
        if self.confirmed_price is not None:
            return PricingState.CONFIRMED
        if self.admin_override is not None:
            return PricingState.ADMIN_REVIEWED
        return PricingState.ESTIMATED

    @property
    def is_confirmed(self) -> bool:
        return self.state is PricingState.CONFIRMED

    @property
    def authoritative_price(self) -> Decimal:
        if self.confirmed_price is not None:
            return self.confirmed_price
        if self.admin_override is not None:
            return self.admin_override
        return self.estimate

    def revise_estimate(self, amount) -> 'PricingConfirmation':
        """New estimate inputs; a confirmed price is left untouched"""
        return replace(self, estimate=_as_decimal(amount))

    def override(self, amount) -> 'PricingConfirmation':
        amount = _as_decimal(amount)
        if amount <= 0:
            raise ValueError("Override price must be positive")
        if self.is_confirmed:
            if amount == self.confirmed_price:
                return self
            raise InvalidTransition(
                f"Price is already confirmed at {self.confirmed_price}",
                field='price',
            )
        return replace(self, admin_override=amount)

    def confirm(self, amount=None) -> 'PricingConfirmation':
        """Lock ``amount`` (or the current authoritative price)"""
        if amount is not None:
            amount = _as_decimal(amount)
            if amount < 0:
                raise ValueError("Confirmed price cannot be negative")
        if self.is_confirmed:
            if amount is None or amount == self.confirmed_price:
                return self
            raise InvalidTransition(
                f"Price is already confirmed at {self.confirmed_price}",
                field='price',
            )
        locked = amount if amount is not None else self.authoritative_price
        return replace(self, confirmed_price=locked)
