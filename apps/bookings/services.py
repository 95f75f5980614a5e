"""Reservation and rate plan calls against the hotel backend."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from django.utils import timezone

from shared.domain.exceptions import ValidationError
from shared.infrastructure.api_client import BookingApiClient

from .domain.entities import PaymentStatus, RatePlan, Reservation
from .domain.pricing import BookingQuote, RefundQuote, calculate_refund
from .serializers import normalize_rate_plans, normalize_reservation, reservation_fields

logger = logging.getLogger(__name__)

RATE_PLANS_PATH = "/rate-plans"
RESERVATIONS_PATH = "/reservations"


def fetch_rate_plans(api: BookingApiClient, room_type_id: str) -> list[RatePlan]:
    """Rate plans bound to a room type; may be empty."""
    payload = api.get(RATE_PLANS_PATH, params={"roomTypeId": room_type_id})
    plans = normalize_rate_plans(payload)
    logger.debug(f"Room type {room_type_id}: {len(plans)} rate plan(s)")
    return plans


def build_reservation_payload(
    *,
    property_id: str,
    guest_id: str,
    room_type_id: str,
    rate_plan: RatePlan,
    check_in,
    check_out,
    adults: int,
    children: int,
    quote: BookingQuote,
    contact: dict,
    channel: str,
) -> dict:
    """Body of ``POST /reservations``; always PENDING/UNPAID."""
    display = quote.display()
    return {
        "propertyId": property_id,
        "guestId": guest_id,
        "roomTypeId": room_type_id,
        "ratePlanId": rate_plan.id,
        "checkIn": check_in.isoformat(),
        "checkOut": check_out.isoformat(),
        "adults": adults,
        "children": children,
        "totalAmount": float(quote.payable_total),
        "taxAmount": float(display["tax_amount"]),
        "serviceAmount": float(display["service_amount"]),
        "discountAmount": float(display["discount_amount"]),
        "currency": quote.currency,
        "contactName": contact.get("name", ""),
        "contactEmail": contact.get("email", ""),
        "contactPhone": contact.get("phone") or "",
        "channel": channel,
        "status": "pending",
        "paymentStatus": PaymentStatus.UNPAID.value,
    }


def submit_reservation(api: BookingApiClient, payload: dict) -> Reservation:
    """
    Create the reservation

    Fields missing from the backend's answer are taken from ``payload``.
    """
    reservation = normalize_reservation(api.post(RESERVATIONS_PATH, json=payload), fallback=payload)
    logger.info(f"Reservation {reservation.id} created via API")
    return reservation


def mark_reservation_paid(api: BookingApiClient, reservation: Reservation) -> Reservation:
    """
    Record the payment on the backend

    Falls back to the local copy when the backend answers without a body.
    """
    payload = api.put(
        f"{RESERVATIONS_PATH}/{reservation.id}",
        json={"paymentStatus": PaymentStatus.PAID.value},
    )
    paid = reservation.mark_paid()
    updated = normalize_reservation(payload, fallback=reservation_fields(paid)) if payload else paid
    logger.info(f"Reservation {reservation.id} marked as paid")
    return updated


@dataclass(frozen=True)
class Cancellation:
    reservation: Reservation
    refund: RefundQuote


def cancel_reservation(
    api: BookingApiClient,
    reservation: Reservation,
    reason: str = "",
    *,
    cancelled_on: Optional[date] = None,
    refundable: bool = True,
) -> Cancellation:
    """
    Cancel on the backend and quote the refund owed

    The refund follows the cancellation tiers of ``calculate_refund``; an
    unpaid reservation is owed nothing.

    Raises:
        ValidationError: already cancelled, or no check-in date to price the refund
        ApiError: the backend refused the cancellation
    """
    if reservation.is_cancelled:
        raise ValidationError(f"Reservation {reservation.id} is already cancelled")
    if reservation.check_in is None:
        raise ValidationError(f"Reservation {reservation.id} has no check-in date")

    cancelled_on = cancelled_on or timezone.localdate()
    if reservation.payment_status is PaymentStatus.UNPAID:
        refund = RefundQuote(refund_amount=Decimal("0"), refund_percentage=0, penalty_amount=Decimal("0"))
    else:
        refund = calculate_refund(reservation.total_amount, reservation.check_in, cancelled_on, refundable)

    payload = api.put(f"{RESERVATIONS_PATH}/{reservation.id}/cancel", json={"reason": reason})
    cancelled = reservation.mark_cancelled()
    if payload:
        cancelled = normalize_reservation(payload, fallback=reservation_fields(cancelled))

    logger.info(
        f"Reservation {reservation.id} cancelled ({reason or 'no reason'}), "
        f"refund {refund.refund_amount} ({refund.refund_percentage}%)"
    )
    return Cancellation(reservation=cancelled, refund=refund)
