"""
Booking Domain Entities

Records the booking pipeline reads and creates on the hotel backend:
- RatePlan: Pricing policy bound to a room type
- Reservation: The booking record, with its status and payment status
- ReservationStatus / PaymentStatus: Lifecycle values
"""

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from shared.domain.base import Entity
from shared.domain.value_objects import DateRange, Money


class ReservationStatus(Enum):
    """
    Reservation lifecycle

    - PENDING -> CONFIRMED (hotel confirms)
    - PENDING/CONFIRMED -> CANCELLED (guest or hotel cancels)
    - CONFIRMED -> CHECKED_IN -> CHECKED_OUT, or NO_SHOW
    """
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CHECKED_IN = 'checked_in'
    CHECKED_OUT = 'checked_out'
    CANCELLED = 'cancelled'
    NO_SHOW = 'no_show'


class PaymentStatus(Enum):
    """Payment state of a reservation"""
    UNPAID = 'unpaid'       # Created, nothing settled yet
    PARTIAL = 'partial'     # Deposit taken at the front desk
    PAID = 'paid'           # Settlement reported success, or pay-at-hotel
    REFUNDED = 'refunded'


@dataclass(frozen=True, eq=False)
class RatePlan(Entity):
    """Pricing policy for a room type; a reservation needs one."""
    room_type_id: str
    currency: str
    name: str = ''


@dataclass(frozen=True, eq=False)
class Reservation(Entity):
    """
    Reservation as returned by the hotel backend

    Created in PENDING/UNPAID. Only the settlement outcome (or pay-at-hotel)
    moves payment_status to PAID. Fields the backend leaves out of its
    answer keep their defaults.
    """
    guest_id: str = ''
    property_id: str = ''
    room_type_id: str = ''
    rate_plan_id: str = ''
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    adults: int = 1
    children: int = 0
    total_amount: Decimal = Decimal('0')
    currency: str = ''
    status: ReservationStatus = ReservationStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    confirmation_code: Optional[str] = None

    @property
    def party_size(self) -> int:
        return self.adults + self.children

    @property
    def dates(self) -> Optional[DateRange]:
        if self.check_in is None or self.check_out is None:
            return None
        return DateRange(self.check_in, self.check_out)

    @property
    def is_cancelled(self) -> bool:
        return self.status is ReservationStatus.CANCELLED

    @property
    def total(self) -> Money:
        return Money(self.total_amount, self.currency)

    @property
    def is_paid(self) -> bool:
        return self.payment_status is PaymentStatus.PAID

    def mark_paid(self) -> 'Reservation':
        """Local copy with payment_status PAID"""
        return replace(self, payment_status=PaymentStatus.PAID)

    def mark_cancelled(self) -> 'Reservation':
        """Local copy with status CANCELLED"""
        return replace(self, status=ReservationStatus.CANCELLED)

    def __str__(self):
        return f"Reservation {self.confirmation_code or self.id} ({self.status.value}/{self.payment_status.value})"
