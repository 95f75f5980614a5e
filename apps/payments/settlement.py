"""
Payment Settlement

Drives one asynchronous payment attempt from intent creation to exactly one
terminal outcome.

    INIT --initiate/start--> AWAITING_PAYMENT --+--> SETTLED    (webhookData.success)
                                                +--> FAILED     (status failed/cancelled)
                                                +--> TIMED_OUT  (ceiling elapsed)
                                                +--> CANCELLED  (user closed the view)

The poll ticker and the ceiling run in one PollingSchedule, so a tick and
the deadline never race each other. The user's cancel() and an in-flight
poll still can; the lock around the state check lets the first one win.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future
from typing import Callable, Optional

import structlog
from django.conf import settings

from shared.application.message_bus import MessageBus, message_bus
from shared.domain.exceptions import PollTransientError, SettlementAlreadyActiveError
from shared.domain.value_objects import Money
from shared.infrastructure.clock import Clock
from shared.infrastructure.scheduling import PollingSchedule

from .domain.entities import PaymentIntent, SettlementState
from .domain.events import (
    PaymentCancelled,
    PaymentFailed,
    PaymentSettled,
    PaymentTimedOut,
    SettlementOutcome,
)
from .gateway import PaymentGateway

logger = structlog.get_logger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 2
DEFAULT_POLL_CEILING_SECONDS = 60


class SettlementRegistry:
    """Order codes that currently have a polling loop"""

    def __init__(self):
        self._active: set = set()
        self._lock = threading.Lock()

    def claim(self, order_code: str) -> None:
        with self._lock:
            if order_code in self._active:
                raise SettlementAlreadyActiveError(f"Order {order_code} is already being settled")
            self._active.add(order_code)

    def release(self, order_code: str) -> None:
        with self._lock:
            self._active.discard(order_code)

    def is_active(self, order_code: str) -> bool:
        with self._lock:
            return order_code in self._active


default_registry = SettlementRegistry()


class PaymentSettlementMachine:
    """
    One settlement attempt

    Usage:
        machine = PaymentSettlementMachine(PaymentGateway(api))
        intent = machine.initiate(reservation.id, amount)
        machine.start()
        outcome = machine.wait(timeout=90)

    ``outcome`` is one of PaymentSettled, PaymentFailed, PaymentTimedOut,
    PaymentCancelled. It is also published on the message bus.
    """

    def __init__(
        self,
        gateway: PaymentGateway,
        *,
        poll_interval: Optional[float] = None,
        ceiling: Optional[float] = None,
        clock: Optional[Clock] = None,
        registry: Optional[SettlementRegistry] = None,
        bus: Optional[MessageBus] = None,
    ):
        self.gateway = gateway
        self.poll_interval = poll_interval or getattr(
            settings, 'PAYMENT_POLL_INTERVAL_SECONDS', DEFAULT_POLL_INTERVAL_SECONDS
        )
        self.ceiling = ceiling or getattr(
            settings, 'PAYMENT_POLL_CEILING_SECONDS', DEFAULT_POLL_CEILING_SECONDS
        )
        self.clock = clock
        self.registry = registry if registry is not None else default_registry
        self.bus = bus or message_bus

        self._lock = threading.Lock()
        self._state = SettlementState.INIT
        self._intent: Optional[PaymentIntent] = None
        self._schedule: Optional[PollingSchedule] = None
        self._future: Future = Future()
        self._polls = 0

    @property
    def state(self) -> SettlementState:
        return self._state

    @property
    def intent(self) -> Optional[PaymentIntent]:
        return self._intent

    @property
    def polls(self) -> int:
        """Status calls issued so far"""
        return self._polls

    @property
    def schedule(self) -> Optional[PollingSchedule]:
        return self._schedule

    @property
    def future(self) -> Future:
        return self._future

    @property
    def done(self) -> bool:
        return self._future.done()

    def initiate(self, reservation_id: str, amount: Money, description: Optional[str] = None) -> PaymentIntent:
        """
        Create the payment intent

        Raises:
            PaymentInitiationError: nothing is polled in that case
        """
        with self._lock:
            if self._state is not SettlementState.INIT or self._intent is not None:
                raise RuntimeError(f"Settlement already initiated (state={self._state.value})")

        intent = self.gateway.create_intent(reservation_id, amount, description)
        with self._lock:
            self._intent = intent
        logger.info(
            "settlement.initiated",
            order_code=intent.order_code,
            reservation_id=reservation_id,
            amount=str(amount.amount),
            currency=amount.currency,
        )
        return intent

    def start(self) -> None:
        """Begin polling the intent created by ``initiate``"""
        with self._lock:
            if self._intent is None:
                raise RuntimeError("initiate() must succeed before start()")
            if self._state is not SettlementState.INIT:
                raise RuntimeError(f"Settlement cannot start from state {self._state.value}")
            order_code = self._intent.order_code
            self.registry.claim(order_code)
            self._state = SettlementState.AWAITING_PAYMENT
            self._schedule = PollingSchedule(
                interval=self.poll_interval,
                ceiling=self.ceiling,
                on_tick=self._poll_once,
                on_deadline=self._on_deadline,
                clock=self.clock,
                name=f"settlement-{order_code}",
            )
        logger.info(
            "settlement.awaiting_payment",
            order_code=order_code,
            interval=self.poll_interval,
            ceiling=self.ceiling,
        )
        self._schedule.start()

    def cancel(self) -> None:
        """
        The user closed the payment view

        No-op once an outcome exists. When it returns, no further status
        call will be made.
        """
        intent = self._intent
        self._finish(PaymentCancelled(
            aggregate_id=intent.reservation_id if intent else None,
            order_code=intent.order_code if intent else '',
            reservation_id=intent.reservation_id if intent else '',
        ))

    def wait(self, timeout: Optional[float] = None) -> SettlementOutcome:
        """Block until the terminal outcome; raises concurrent.futures.TimeoutError"""
        return self._future.result(timeout)

    def add_outcome_callback(self, callback: Callable[[SettlementOutcome], None]) -> None:
        """Run ``callback(outcome)`` once the attempt ends, immediately if it already has"""
        self._future.add_done_callback(lambda future: callback(future.result()))

    def _poll_once(self) -> None:
        with self._lock:
            if self._state is not SettlementState.AWAITING_PAYMENT:
                return
            intent = self._intent
            self._polls += 1
            poll_no = self._polls

        try:
            snapshot = self.gateway.fetch_status(intent.order_code)
        except PollTransientError as e:
            logger.warning("settlement.poll_failed", order_code=intent.order_code, poll=poll_no, error=str(e))
            return

        logger.debug("settlement.polled", order_code=intent.order_code, poll=poll_no, status=snapshot.status)

        if snapshot.is_settled:
            self._finish(PaymentSettled(
                aggregate_id=intent.reservation_id,
                order_code=intent.order_code,
                reservation_id=intent.reservation_id,
            ))
        elif snapshot.is_failed:
            self._finish(PaymentFailed(
                aggregate_id=intent.reservation_id,
                order_code=intent.order_code,
                reservation_id=intent.reservation_id,
                status=snapshot.status,
            ))

    def _on_deadline(self) -> None:
        intent = self._intent
        self._finish(PaymentTimedOut(
            aggregate_id=intent.reservation_id,
            order_code=intent.order_code,
            reservation_id=intent.reservation_id,
            polls=self._polls,
        ))

    def _finish(self, outcome: SettlementOutcome) -> bool:
        """Record ``outcome`` unless another one got there first"""
        with self._lock:
            if self._state.is_terminal:
                logger.debug(
                    "settlement.outcome_ignored",
                    order_code=outcome.order_code,
                    ignored=outcome.state.value,
                    state=self._state.value,
                )
                return False
            was_polling = self._state is SettlementState.AWAITING_PAYMENT
            self._state = outcome.state
            schedule = self._schedule

        # outside the lock: the loop thread may be waiting on it inside _poll_once
        if schedule is not None:
            schedule.cancel()
        if was_polling:
            self.registry.release(outcome.order_code)

        logger.info(
            f"settlement.{outcome.state.value}",
            order_code=outcome.order_code,
            reservation_id=outcome.reservation_id,
            polls=self._polls,
        )
        self._future.set_result(outcome)
        self.bus.publish_events([outcome])
        return True
