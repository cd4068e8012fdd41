from datetime import date
from decimal import Decimal

import pytest

from shared.domain.value_objects import DateRange, Money


class TestMoney:
    def test_addition_and_rounding(self):
        total = Money(Decimal("10.005")) + Money("2")

        assert total.quantized().amount == Decimal("12.01")
        assert str(total.quantized()) == "12.01 LKR"

    def test_negative_amount_rejected(self):
        with pytest.raises(ValueError):
            Money(Decimal("-0.01"))

    def test_only_lkr(self):
        with pytest.raises(ValueError):
            Money(Decimal("1"), currency="USD")

    def test_multiply(self):
        assert Money(Decimal("250000")) * 2 == Money(Decimal("500000"))
        with pytest.raises(TypeError):
            Money(Decimal("1")) * "2"


class TestDateRange:
    def test_end_is_exclusive(self):
        window = DateRange(date(2030, 1, 25), date(2030, 1, 28))

        assert len(window) == 3
        assert window.contains(date(2030, 1, 27))
        assert not window.contains(date(2030, 1, 28))

    def test_adjacent_ranges_do_not_overlap(self):
        first = DateRange(date(2030, 1, 25), date(2030, 1, 28))

        assert first.overlaps_with(DateRange(date(2030, 1, 27), date(2030, 1, 30)))
        assert not first.overlaps_with(DateRange(date(2030, 1, 28), date(2030, 1, 31)))

    def test_empty_range_rejected(self):
        with pytest.raises(ValueError):
            DateRange(date(2030, 1, 1), date(2030, 1, 1))
