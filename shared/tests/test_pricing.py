from decimal import Decimal

import pytest

from shared.domain.exceptions import InvalidTransition
from shared.domain.pricing import PricingConfirmation, PricingState


def test_estimate_is_authoritative_until_reviewed():
    pricing = PricingConfirmation(estimate=Decimal("4200"))

    assert pricing.state is PricingState.ESTIMATED
    assert pricing.authoritative_price == Decimal("4200")


def test_override_then_confirm():
    pricing = PricingConfirmation(estimate="4200").override(Decimal("3900"))
    assert pricing.state is PricingState.ADMIN_REVIEWED
    assert pricing.authoritative_price == Decimal("3900")

    confirmed = pricing.confirm()
    assert confirmed.is_confirmed
    assert confirmed.confirmed_price == Decimal("3900")
    # the earlier value is untouched
    assert pricing.confirmed_price is None


def test_confirm_with_explicit_amount():
    confirmed = PricingConfirmation(estimate=Decimal("100")).confirm(Decimal("80"))

    assert confirmed.authoritative_price == Decimal("80")


@pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
def test_override_must_be_positive(amount):
    with pytest.raises(ValueError):
        PricingConfirmation(estimate=Decimal("100")).override(amount)


def test_confirmed_price_is_locked():
    confirmed = PricingConfirmation(estimate=Decimal("100")).confirm()

    assert confirmed.confirm() == confirmed
    assert confirmed.override(Decimal("100")) == confirmed
    with pytest.raises(InvalidTransition):
        confirmed.override(Decimal("120"))
    with pytest.raises(InvalidTransition):
        confirmed.confirm(Decimal("90"))


def test_revising_the_estimate_keeps_the_confirmation():
    confirmed = PricingConfirmation(estimate=Decimal("100")).confirm()

    revised = confirmed.revise_estimate(Decimal("150"))

    assert revised.estimate == Decimal("150")
    assert revised.authoritative_price == Decimal("100")


def test_negative_estimate_rejected():
    with pytest.raises(ValueError):
        PricingConfirmation(estimate=Decimal("-1"))
