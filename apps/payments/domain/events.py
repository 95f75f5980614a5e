"""
Settlement Outcome Events

Exactly one of these ends every settlement attempt. The terminal outcome is
delivered through the machine's future and published on the message bus.
"""

from dataclasses import dataclass
from typing import ClassVar, Optional

from shared.domain.base import DomainEvent
from shared.domain.exceptions import (
    CancelledByUser,
    PaymentFailedError,
    SettlementError,
    TimedOutError,
)

from .entities import SettlementState


@dataclass(frozen=True)
class SettlementOutcome(DomainEvent):
    """Base of the terminal outcomes"""
    order_code: str
    reservation_id: str

    state: ClassVar[SettlementState]

    @property
    def succeeded(self) -> bool:
        return self.state is SettlementState.SETTLED

    @property
    def error(self) -> Optional[SettlementError]:
        """Exception equivalent for callers that prefer raising"""
        return None

    def raise_for_outcome(self) -> None:
        error = self.error
        if error is not None:
            raise error

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            'order_code': self.order_code,
            'reservation_id': self.reservation_id,
            'state': self.state.value,
        })
        return data


@dataclass(frozen=True)
class PaymentSettled(SettlementOutcome):
    """Event: the provider confirmed the payment"""
    state: ClassVar[SettlementState] = SettlementState.SETTLED


@dataclass(frozen=True)
class PaymentFailed(SettlementOutcome):
    """Event: the provider reported the payment as failed or cancelled"""
    status: str = 'failed'

    state: ClassVar[SettlementState] = SettlementState.FAILED

    @property
    def error(self) -> SettlementError:
        return PaymentFailedError(f"Payment {self.order_code} ended with status {self.status!r}")


@dataclass(frozen=True)
class PaymentTimedOut(SettlementOutcome):
    """Event: the polling ceiling elapsed without a terminal answer"""
    polls: int = 0

    state: ClassVar[SettlementState] = SettlementState.TIMED_OUT

    @property
    def error(self) -> SettlementError:
        return TimedOutError(f"Payment {self.order_code} not confirmed after {self.polls} polls")


@dataclass(frozen=True)
class PaymentCancelled(SettlementOutcome):
    """Event: the user closed the payment view"""
    state: ClassVar[SettlementState] = SettlementState.CANCELLED

    @property
    def error(self) -> SettlementError:
        return CancelledByUser(f"Payment {self.order_code} cancelled by user")
