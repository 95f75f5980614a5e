r"""
Checkout Session

State of one guest's checkout, from pressing "Book" to a paid (or unpaid)
reservation:

    IDLE -> SUBMITTING -> RESERVED -> AWAITING_PAYMENT -> PAID
                     \            \                   \-> PAYMENT_FAILED
                      \            \-> PAID (pay at hotel)
                       \-> FAILED

A failed payment leaves the reservation PENDING/UNPAID on the backend.
"""

from enum import Enum
from typing import Callable, Optional
import logging
import threading

from django.conf import settings

from shared.application.message_bus import MessageBus, message_bus
from shared.domain.exceptions import (
    BookingPipelineError,
    ReservationUpdateError,
    SubmissionInProgressError,
    ValidationError,
)
from shared.domain.value_objects import Money
from shared.infrastructure.api_client import ApiError, BookingApiClient
from apps.bookings.application.command_handlers import (
    BookingResult,
    CreateReservationCommand,
    ReservationCoordinator,
)
from apps.bookings.domain.entities import Reservation
from apps.bookings.domain.events import ReservationPaid
from apps.bookings.domain.pricing import BookingQuote
from apps.bookings.services import mark_reservation_paid
from apps.payments.domain.entities import PaymentIntent
from apps.payments.domain.events import PaymentSettled, SettlementOutcome
from apps.payments.gateway import PaymentGateway
from apps.payments.settlement import PaymentSettlementMachine

logger = logging.getLogger(__name__)


class PaymentMethod(Enum):
    PAY_AT_HOTEL = 'pay_at_hotel'
    QR = 'qr'
    POS = 'pos'

    @property
    def is_asynchronous(self) -> bool:
        """Settled through the payment provider, confirmed by polling"""
        return self is not PaymentMethod.PAY_AT_HOTEL


class CheckoutState(Enum):
    IDLE = 'idle'
    SUBMITTING = 'submitting'
    RESERVED = 'reserved'
    AWAITING_PAYMENT = 'awaiting_payment'
    PAID = 'paid'
    PAYMENT_FAILED = 'payment_failed'
    FAILED = 'failed'


def settlement_amount(quote: BookingQuote, currency: Optional[str] = None) -> Money:
    """
    The quote total expressed in the settlement currency

    PAYMENT_EXCHANGE_RATES maps a source currency to the number of
    settlement units per source unit, e.g. ``{"USD": 25000}`` for VND.

    Raises:
        ValidationError: no rate configured for the quote currency
    """
    currency = (currency or getattr(settings, 'PAYMENT_SETTLEMENT_CURRENCY', 'VND')).upper()
    total = quote.total
    if total.currency == currency:
        return total.rounded()

    rates = getattr(settings, 'PAYMENT_EXCHANGE_RATES', {}) or {}
    rate = rates.get(total.currency)
    if rate is None:
        raise ValidationError(f"No exchange rate from {total.currency} to {currency}")
    return total.convert(rate, currency).rounded()


class CheckoutSession:
    """
    One checkout, one reservation, at most one settlement attempt

    ``submit`` returns once the reservation exists; for QR/POS the payment
    continues in the background and ``wait_for_settlement`` blocks on it.
    """

    def __init__(
        self,
        api: BookingApiClient,
        coordinator: Optional[ReservationCoordinator] = None,
        machine_factory: Optional[Callable[[PaymentGateway], PaymentSettlementMachine]] = None,
        bus: Optional[MessageBus] = None,
    ):
        self.api = api
        self.bus = bus or message_bus
        self.coordinator = coordinator or ReservationCoordinator(api, bus=self.bus)
        self.machine_factory = machine_factory or (lambda gateway: PaymentSettlementMachine(gateway, bus=self.bus))

        self.state = CheckoutState.IDLE
        self.payment_method: Optional[PaymentMethod] = None
        self.reservation: Optional[Reservation] = None
        self.quote: Optional[BookingQuote] = None
        self.intent: Optional[PaymentIntent] = None
        self.machine: Optional[PaymentSettlementMachine] = None
        self.last_error: Optional[Exception] = None
        self._lock = threading.Lock()
        self._paid = threading.Event()
        self._settled = threading.Event()

    @property
    def submitting(self) -> bool:
        return self.state is CheckoutState.SUBMITTING

    def submit(self, command: CreateReservationCommand, payment_method: PaymentMethod) -> BookingResult:
        """
        Create the reservation and start collecting payment

        Raises:
            SubmissionInProgressError: a submit is already running
            ValidationError: the session already holds a reservation, or bad input
            any BookingPipelineError of the reservation or payment initiation
        """
        with self._lock:
            if self.state is CheckoutState.SUBMITTING:
                raise SubmissionInProgressError("A reservation is already being submitted")
            if self.reservation is not None:
                raise ValidationError(f"Session already holds reservation {self.reservation.id}")
            self.state = CheckoutState.SUBMITTING
            self.payment_method = payment_method
            self.last_error = None

        try:
            result = self.coordinator.book(command)
        except BookingPipelineError as e:
            self._fail(e, CheckoutState.FAILED)
            raise

        self.reservation = result.reservation
        self.quote = result.quote
        self.state = CheckoutState.RESERVED
        logger.info(f"Checkout reserved {result.reservation.id}, paying with {payment_method.value}")

        if payment_method.is_asynchronous:
            self._start_settlement(result)
        else:
            self._record_payment(PaymentMethod.PAY_AT_HOTEL)
        return result

    def _start_settlement(self, result: BookingResult) -> None:
        try:
            amount = settlement_amount(result.quote)
            machine = self.machine_factory(PaymentGateway(self.api))
            self.intent = machine.initiate(result.reservation.id, amount)
            self.machine = machine
            self.state = CheckoutState.AWAITING_PAYMENT
            machine.add_outcome_callback(self._on_outcome)
            machine.start()
        except BookingPipelineError as e:
            self._fail(e, CheckoutState.PAYMENT_FAILED)
            self._settled.set()
            raise

    def _on_outcome(self, outcome: SettlementOutcome) -> None:
        try:
            if isinstance(outcome, PaymentSettled):
                self._record_payment(self.payment_method)
            else:
                self._fail(outcome.error, CheckoutState.PAYMENT_FAILED)
        except BookingPipelineError as e:
            self._fail(e, CheckoutState.PAYMENT_FAILED)
        finally:
            self._settled.set()

    def _record_payment(self, method: PaymentMethod) -> None:
        try:
            self.reservation = mark_reservation_paid(self.api, self.reservation)
        except ApiError as e:
            error = ReservationUpdateError(f"Could not mark reservation {self.reservation.id} as paid: {e}")
            self._fail(error, CheckoutState.PAYMENT_FAILED)
            if method is PaymentMethod.PAY_AT_HOTEL:
                raise error from e
            return

        self.state = CheckoutState.PAID
        self._paid.set()
        self.bus.publish_events([
            ReservationPaid(
                aggregate_id=self.reservation.id,
                reservation_id=self.reservation.id,
                payment_method=method.value,
            )
        ])

    def _fail(self, error: Exception, state: CheckoutState) -> None:
        logger.warning(f"Checkout failed in state {self.state.value}: {error}")
        self.last_error = error
        self.state = state

    @property
    def is_paid(self) -> bool:
        return self._paid.is_set()

    def wait_for_settlement(self, timeout: Optional[float] = None) -> Optional[SettlementOutcome]:
        """
        Block until the payment attempt ends

        Returns None for pay-at-hotel, which has no settlement attempt.
        """
        if self.machine is None:
            return None
        outcome = self.machine.wait(timeout)
        # the outcome callback may still be recording the payment
        self._settled.wait(timeout)
        return outcome

    def close(self) -> None:
        """The user left the checkout; stop any payment polling"""
        if self.machine is not None and not self.machine.done:
            logger.info(f"Checkout closed, cancelling settlement for {self.reservation.id}")
            self.machine.cancel()
