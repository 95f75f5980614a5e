"""
Common Value Objects

Value objects used across multiple contexts:
- Money: Represents monetary amounts with currency
- DateRange: Represents a stay (check-in to check-out)
"""

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from shared.domain.base import ValueObject

TWO_PLACES = Decimal('0.01')

# Currencies settled in whole units by the payment provider
ZERO_DECIMAL_CURRENCIES = frozenset({'VND', 'JPY', 'KRW'})


def to_decimal(value) -> Decimal:
    """Convert int/float/str/Decimal to Decimal without binary float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("Booleans are not monetary values")
    return Decimal(str(value))


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Represents a monetary amount with currency.
    Keeps full precision; rounding happens only through ``rounded()``.
    """
    amount: Decimal
    currency: str = 'VND'

    def __post_init__(self):
        # Normalise amount so Money(100, 'USD') works
        object.__setattr__(self, 'amount', to_decimal(self.amount))

        if self.amount < 0:
            raise ValueError("Amount cannot be negative")
        if not self.currency:
            raise ValueError("Currency is required")
        if len(self.currency) != 3 or not self.currency.isalpha():
            raise ValueError(f"Unsupported currency: {self.currency}")
        object.__setattr__(self, 'currency', self.currency.upper())

    def __add__(self, other: 'Money') -> 'Money':
        """Add two money objects"""
        if not isinstance(other, Money):
            raise TypeError("Can only add Money to Money")
        if self.currency != other.currency:
            raise ValueError(f"Cannot add different currencies: {self.currency} and {other.currency}")
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        """Subtract two money objects"""
        if not isinstance(other, Money):
            raise TypeError("Can only subtract Money from Money")
        if self.currency != other.currency:
            raise ValueError(f"Cannot subtract different currencies: {self.currency} and {other.currency}")
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, factor) -> 'Money':
        """Multiply money by a factor"""
        if not isinstance(factor, (int, float, Decimal)) or isinstance(factor, bool):
            raise TypeError("Can only multiply Money by number")
        return Money(self.amount * to_decimal(factor), self.currency)

    def rounded(self) -> 'Money':
        """Round half-up to the currency's minor unit."""
        places = Decimal('1') if self.currency in ZERO_DECIMAL_CURRENCIES else TWO_PLACES
        return Money(self.amount.quantize(places, rounding=ROUND_HALF_UP), self.currency)

    def convert(self, rate, currency: str) -> 'Money':
        """
        Convert into another currency

        ``rate`` is the number of ``currency`` units per one unit of ours.
        """
        if self.currency == currency.upper():
            return self
        rate = to_decimal(rate)
        if rate <= 0:
            raise ValueError(f"Exchange rate must be positive, got {rate}")
        return Money(self.amount * rate, currency)

    def __str__(self):
        return f"{self.amount:,.2f} {self.currency}"

    def __repr__(self):
        return f"Money({self.amount}, '{self.currency}')"


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents a range from start_date (inclusive) to end_date (exclusive).
    Used for stays: check-in to check-out.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.start_date >= self.end_date:
            raise ValueError(f"Start date ({self.start_date}) must be before end date ({self.end_date})")

    @property
    def nights(self) -> int:
        """Number of nights of the stay"""
        return (self.end_date - self.start_date).days

    def __len__(self) -> int:
        return self.nights

    def __str__(self):
        return f"{self.start_date.isoformat()} - {self.end_date.isoformat()}"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"
