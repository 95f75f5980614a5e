"""
Stay pricing

Pure functions, no I/O. Amounts are carried in full ``Decimal`` precision;
only the figures a guest sees or pays are rounded, half-up, to 2 places.
Rounding intermediate terms would let the parts drift away from the total.
"""

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Optional

from django.conf import settings

from shared.domain.base import ValueObject
from shared.domain.exceptions import ValidationError
from shared.domain.value_objects import TWO_PLACES, Money, to_decimal

ZERO = Decimal('0')
HUNDRED = Decimal('100')


class DiscountMode(Enum):
    """How the discount input is interpreted"""
    AMOUNT = 'amount'     # flat amount off the subtotal
    PERCENT = 'percent'   # percentage of the subtotal


def round_half_up(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class BookingQuote(ValueObject):
    """
    Price breakdown of a stay

    Components are unrounded. Unless the total had to be clamped at zero,
    ``total_amount == subtotal - discount_amount + tax_amount + service_amount``
    holds exactly.
    """
    subtotal: Decimal
    tax_amount: Decimal
    service_amount: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    currency: str

    @property
    def payable_total(self) -> Decimal:
        """Total rounded to 2 places, as sent to the backend"""
        return round_half_up(self.total_amount)

    @property
    def total(self) -> Money:
        return Money(self.payable_total, self.currency)

    def display(self) -> dict:
        """Rounded figures for presentation"""
        return {
            'subtotal': round_half_up(self.subtotal),
            'tax_amount': round_half_up(self.tax_amount),
            'service_amount': round_half_up(self.service_amount),
            'discount_amount': round_half_up(self.discount_amount),
            'total_amount': self.payable_total,
            'currency': self.currency,
        }


def _decimal(value, name: str) -> Decimal:
    try:
        return to_decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValidationError(f"{name} must be a number, got {value!r}") from e


def compute_quote(
    base_price,
    nights: int,
    tax_rate=None,
    service_rate=None,
    discount=0,
    discount_mode: DiscountMode = DiscountMode.AMOUNT,
    currency: Optional[str] = None,
) -> BookingQuote:
    """
    Price a stay

    Args:
        base_price: Nightly rate
        nights: Number of nights, at least 1
        tax_rate: Fraction of the subtotal, e.g. 0.1 for 10%
        service_rate: Fraction of the subtotal, e.g. 0.05 for 5%
        discount: Flat amount or percent, depending on ``discount_mode``
        currency: Rate plan currency

    Raises:
        ValidationError: on negative or non-numeric inputs
    """
    if tax_rate is None:
        tax_rate = getattr(settings, 'DEFAULT_TAX_RATE', '0.1')
    if service_rate is None:
        service_rate = getattr(settings, 'DEFAULT_SERVICE_RATE', '0.05')
    currency = (currency or getattr(settings, 'DEFAULT_RATE_PLAN_CURRENCY', 'VND')).upper()

    base = _decimal(base_price, 'base_price')
    tax = _decimal(tax_rate, 'tax_rate')
    service = _decimal(service_rate, 'service_rate')
    discount_value = _decimal(discount or 0, 'discount')

    if base < 0:
        raise ValidationError("base_price cannot be negative")
    if isinstance(nights, bool) or not isinstance(nights, int) or nights < 1:
        raise ValidationError(f"nights must be a positive integer, got {nights!r}")
    if tax < 0 or service < 0:
        raise ValidationError("Tax and service rates cannot be negative")
    if discount_value < 0:
        raise ValidationError("Discount cannot be negative")

    subtotal = base * nights
    tax_amount = subtotal * tax
    service_amount = subtotal * service

    if discount_mode is DiscountMode.PERCENT:
        if discount_value > HUNDRED:
            raise ValidationError("Discount percent cannot exceed 100")
        discount_amount = subtotal * discount_value / HUNDRED
    else:
        discount_amount = discount_value

    total_amount = subtotal - discount_amount + tax_amount + service_amount
    if total_amount < 0:
        total_amount = ZERO

    return BookingQuote(
        subtotal=subtotal,
        tax_amount=tax_amount,
        service_amount=service_amount,
        discount_amount=discount_amount,
        total_amount=total_amount,
        currency=currency,
    )


@dataclass(frozen=True)
class RefundQuote(ValueObject):
    refund_amount: Decimal
    refund_percentage: int
    penalty_amount: Decimal


# (minimum days before check-in, refund percent), checked top-down
REFUND_TIERS = (
    (7, 100),
    (3, 50),
    (1, 25),
)


def calculate_refund(total_amount, check_in: date, cancelled_on: date, refundable: bool = True) -> RefundQuote:
    """
    Refund owed when a reservation is cancelled

    Policy: 7+ days before check-in 100%, 3+ days 50%, 1+ day 25%,
    otherwise nothing. Non-refundable rate plans never refund.
    """
    total = _decimal(total_amount, 'total_amount')
    if total < 0:
        raise ValidationError("total_amount cannot be negative")

    if not refundable:
        return RefundQuote(refund_amount=ZERO, refund_percentage=0, penalty_amount=round_half_up(total))

    days_before = (check_in - cancelled_on).days
    percentage = 0
    for min_days, percent in REFUND_TIERS:
        if days_before >= min_days:
            percentage = percent
            break

    refund = round_half_up(total * percentage / HUNDRED)
    return RefundQuote(
        refund_amount=refund,
        refund_percentage=percentage,
        penalty_amount=round_half_up(total) - refund,
    )
