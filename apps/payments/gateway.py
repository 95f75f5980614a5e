"""
POS Payment Gateway

Creates payment intents and reads their status through the booking backend,
which fronts the payment provider.
"""

import logging
import uuid
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from shared.domain.exceptions import PaymentInitiationError, PollTransientError
from shared.domain.value_objects import ZERO_DECIMAL_CURRENCIES, Money
from shared.infrastructure.api_client import ApiError, BookingApiClient

from .domain.entities import PaymentIntent, PaymentStatusSnapshot
from .serializers import normalize_payment_intent, normalize_payment_status

logger = logging.getLogger(__name__)

PAYMENTS_PATH = "/payments-pos"
PAYMENT_STATUS_PATH = "/payments-pos/status/{order_code}"


def wire_amount(amount: Money):
    """Whole units for zero-decimal currencies, 2 places otherwise"""
    if amount.currency in ZERO_DECIMAL_CURRENCIES:
        return int(amount.amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return float(amount.rounded().amount)


class PaymentGateway:
    def __init__(self, api: BookingApiClient):
        self.api = api

    def create_intent(
        self,
        reservation_id: str,
        amount: Money,
        description: Optional[str] = None,
    ) -> PaymentIntent:
        """
        Create a payment intent for a reservation

        Raises:
            PaymentInitiationError: the call failed or the answer is unusable
        """
        if amount.amount <= 0:
            raise PaymentInitiationError(f"Cannot collect a non-positive amount: {amount}")

        order_id = f"booking_{reservation_id}_{uuid.uuid4().hex[:8]}"
        payload = {
            "orderId": order_id,
            "amount": wire_amount(amount),
            "description": description or f"Reservation {reservation_id}",
            "reservationId": reservation_id,
        }
        logger.info(f"Initiating payment for reservation {reservation_id}, amount {amount}")

        try:
            intent = normalize_payment_intent(
                self.api.post(PAYMENTS_PATH, json=payload),
                reservation_id=reservation_id,
                amount=amount,
            )
        except ApiError as e:
            logger.error(f"Payment initiation failed for reservation {reservation_id}: {e}")
            raise PaymentInitiationError(f"Could not create payment: {e}") from e

        logger.info(f"Payment intent {intent.order_code} created for reservation {reservation_id}")
        return intent

    def fetch_status(self, order_code: str) -> PaymentStatusSnapshot:
        """
        One status read

        Raises:
            PollTransientError: any transport or shape problem; never terminal
        """
        try:
            payload = self.api.get(PAYMENT_STATUS_PATH.format(order_code=order_code))
            return normalize_payment_status(payload)
        except ApiError as e:
            raise PollTransientError(f"Status check for {order_code} failed: {e}") from e
