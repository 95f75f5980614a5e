from datetime import date
from decimal import Decimal

import pytest

from apps.bookings.domain.pricing import DiscountMode, calculate_refund, compute_quote
from shared.domain.exceptions import ValidationError


def test_two_night_stay_with_tax_and_service():
    quote = compute_quote(100, 2, tax_rate=0.1, service_rate=0.05, discount=0, currency="usd")

    assert quote.subtotal == Decimal("200")
    assert quote.tax_amount == Decimal("20.0")
    assert quote.service_amount == Decimal("10.00")
    assert quote.payable_total == Decimal("230.00")
    assert quote.currency == "USD"


def test_rates_default_to_settings(settings):
    settings.DEFAULT_TAX_RATE = "0.08"
    settings.DEFAULT_SERVICE_RATE = "0"

    quote = compute_quote(50, 1)

    assert quote.payable_total == Decimal("54.00")
    assert quote.currency == "VND"


@pytest.mark.parametrize(
    "base_price, nights, tax_rate, service_rate, discount, mode",
    [
        ("99.99", 3, "0.1", "0.05", "12.34", DiscountMode.AMOUNT),
        ("0.335", 7, "0.075", "0.033", "0", DiscountMode.AMOUNT),
        ("1234.5", 2, "0.1", "0.05", "15", DiscountMode.PERCENT),
    ],
)
def test_total_equals_sum_of_components(base_price, nights, tax_rate, service_rate, discount, mode):
    quote = compute_quote(base_price, nights, tax_rate, service_rate, discount, mode)

    assert quote.total_amount == (
        quote.subtotal - quote.discount_amount + quote.tax_amount + quote.service_amount
    )
    assert quote.total_amount >= 0


def test_components_are_not_rounded():
    quote = compute_quote("0.335", 1, tax_rate="0.1", service_rate="0")

    assert quote.tax_amount == Decimal("0.0335")
    assert quote.payable_total == Decimal("0.37")


def test_rounding_is_half_up():
    quote = compute_quote("0.125", 1, tax_rate=0, service_rate=0)

    assert quote.payable_total == Decimal("0.13")


def test_percent_discount():
    quote = compute_quote(200, 1, tax_rate=0, service_rate=0, discount=25, discount_mode=DiscountMode.PERCENT)

    assert quote.discount_amount == Decimal("50")
    assert quote.payable_total == Decimal("150.00")


def test_discount_larger_than_total_clamps_to_zero():
    quote = compute_quote(100, 1, tax_rate=0, service_rate=0, discount=500)

    assert quote.total_amount == Decimal("0")
    assert quote.display()["total_amount"] == Decimal("0.00")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"base_price": -1, "nights": 1},
        {"base_price": 100, "nights": 0},
        {"base_price": 100, "nights": True},
        {"base_price": 100, "nights": 1, "tax_rate": -0.1},
        {"base_price": 100, "nights": 1, "discount": -5},
        {"base_price": 100, "nights": 1, "discount": 101, "discount_mode": DiscountMode.PERCENT},
        {"base_price": "abc", "nights": 1},
    ],
)
def test_invalid_inputs_are_rejected(kwargs):
    with pytest.raises(ValidationError):
        compute_quote(**kwargs)


@pytest.mark.parametrize(
    "days_before, percentage, refund",
    [
        (10, 100, Decimal("230.00")),
        (7, 100, Decimal("230.00")),
        (5, 50, Decimal("115.00")),
        (1, 25, Decimal("57.50")),
        (0, 0, Decimal("0.00")),
    ],
)
def test_refund_policy_tiers(days_before, percentage, refund):
    check_in = date(2025, 6, 20)
    cancelled_on = date.fromordinal(check_in.toordinal() - days_before)

    quote = calculate_refund("230", check_in, cancelled_on)

    assert quote.refund_percentage == percentage
    assert quote.refund_amount == refund
    assert quote.penalty_amount == Decimal("230.00") - refund


def test_non_refundable_rate_never_refunds():
    quote = calculate_refund(230, date(2025, 6, 20), date(2025, 6, 1), refundable=False)

    assert quote.refund_amount == 0
    assert quote.penalty_amount == Decimal("230.00")
