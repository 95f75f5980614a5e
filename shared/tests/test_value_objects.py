from datetime import date
from decimal import Decimal

import pytest

from shared.domain.value_objects import DateRange, Money


def test_money_keeps_full_precision_until_rounded():
    money = Money("10.005", "usd")

    assert money.amount == Decimal("10.005")
    assert money.currency == "USD"
    assert money.rounded().amount == Decimal("10.01")


def test_zero_decimal_currency_rounds_to_whole_units():
    assert Money("2300000.5", "VND").rounded().amount == Decimal("2300001")


def test_money_rejects_negative_amounts_and_bad_currency():
    with pytest.raises(ValueError):
        Money(-1, "VND")
    with pytest.raises(ValueError):
        Money(1, "DONG")


def test_money_arithmetic_requires_same_currency():
    assert Money(10, "USD") + Money("2.5", "USD") == Money("12.5", "USD")
    with pytest.raises(ValueError):
        Money(10, "USD") + Money(10, "VND")


def test_convert_applies_rate():
    converted = Money(230, "USD").convert(25000, "VND")

    assert converted == Money(5750000, "VND")
    assert Money(1, "VND").convert(3, "vnd") == Money(1, "VND")


def test_date_range_nights():
    stay = DateRange(date(2025, 3, 1), date(2025, 3, 4))

    assert stay.nights == 3
    assert len(stay) == 3
    assert str(stay) == "2025-03-01 - 2025-03-04"


def test_date_range_requires_checkout_after_checkin():
    with pytest.raises(ValueError):
        DateRange(date(2025, 3, 4), date(2025, 3, 4))
