"""
Booking Domain Events

Published on the message bus after the corresponding API call succeeded.
"""

from dataclasses import dataclass
from decimal import Decimal

from shared.domain.base import DomainEvent


@dataclass(frozen=True)
class ReservationCreated(DomainEvent):
    """
    Event: A reservation was created on the backend (PENDING/UNPAID)

    Triggers:
    - Start payment settlement for QR/POS methods
    - Mark paid immediately for pay-at-hotel
    """
    reservation_id: str
    guest_id: str
    room_type_id: str
    total_amount: Decimal
    currency: str


@dataclass(frozen=True)
class ReservationPaid(DomainEvent):
    """
    Event: A reservation's payment status was recorded as paid

    ``payment_method`` tells settlement-driven payments apart from
    pay-at-hotel.
    """
    reservation_id: str
    payment_method: str
