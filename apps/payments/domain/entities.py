"""
Payment Domain Entities

- PaymentIntent: the provider-side record of one asynchronous payment attempt
- PaymentStatusSnapshot: one answer of the status endpoint
- SettlementState: lifecycle of a settlement attempt
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from shared.domain.base import ValueObject
from shared.domain.value_objects import Money


class SettlementState(Enum):
    """
    INIT -> AWAITING_PAYMENT -> one of the terminal states

    Terminal states are never left.
    """
    INIT = 'init'
    AWAITING_PAYMENT = 'awaiting_payment'
    SETTLED = 'settled'
    FAILED = 'failed'
    TIMED_OUT = 'timed_out'
    CANCELLED = 'cancelled'

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset({
    SettlementState.SETTLED,
    SettlementState.FAILED,
    SettlementState.TIMED_OUT,
    SettlementState.CANCELLED,
})

# Provider statuses that end an attempt without payment (compared lowercased)
FAILED_STATUSES = frozenset({'failed', 'cancelled', 'canceled'})


@dataclass(frozen=True)
class PaymentIntent(ValueObject):
    """
    Created once per reservation payment attempt

    ``order_code`` is the polling key; ``qr_payload`` is what the QR code
    encodes and ``checkout_url`` the redirect alternative.
    """
    order_code: str
    reservation_id: str
    amount: Money
    qr_payload: Optional[str] = None
    checkout_url: Optional[str] = None


@dataclass(frozen=True)
class PaymentStatusSnapshot(ValueObject):
    status: str
    success: bool = False

    @property
    def is_settled(self) -> bool:
        return self.success

    @property
    def is_failed(self) -> bool:
        return not self.success and self.status.lower() in FAILED_STATUSES
