"""Serializers for rate plan and reservation payloads."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from django.conf import settings  # type: ignore
from rest_framework import serializers  # type: ignore

from shared.infrastructure.fields import IsoDateField, LooseDecimalField, normalize, normalize_list

from .domain.entities import PaymentStatus, RatePlan, Reservation, ReservationStatus


class RatePlanSerializer(serializers.Serializer):
    """Rate plan as listed by ``GET /rate-plans?roomTypeId=``."""

    id = serializers.CharField()
    roomTypeId = serializers.CharField(required=False, allow_null=True, source="room_type_id")
    currency = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=3)
    name = serializers.CharField(required=False, allow_blank=True, allow_null=True)


def _build_rate_plan(data: dict) -> RatePlan:
    return RatePlan(
        id=data["id"],
        room_type_id=data.get("room_type_id") or "",
        currency=(data.get("currency") or getattr(settings, "DEFAULT_RATE_PLAN_CURRENCY", "VND")).upper(),
        name=data.get("name") or "",
    )


def normalize_rate_plans(payload: Any) -> list[RatePlan]:
    return normalize_list(RatePlanSerializer, payload, _build_rate_plan, "rate plan")


class ReservationSerializer(serializers.Serializer):
    """
    Reservation detail

    The backend mixes camelCase and snake_case keys (``guestId`` next to
    ``property_id``) and upper-cases statuses on some routes; both spellings
    are accepted. Only ``id`` is required.
    """

    ALIASES = {
        "guest_id": "guestId",
        "property_id": "propertyId",
        "room_type_id": "roomTypeId",
        "rate_plan_id": "ratePlanId",
        "check_in": "checkIn",
        "check_out": "checkOut",
        "total_amount": "totalAmount",
        "payment_status": "paymentStatus",
        "confirmation_code": "confirmationCode",
    }
    LOWERCASE = ("status", "paymentStatus")

    id = serializers.CharField()
    guestId = serializers.CharField(required=False, source="guest_id")
    propertyId = serializers.CharField(required=False, source="property_id")
    roomTypeId = serializers.CharField(required=False, source="room_type_id")
    ratePlanId = serializers.CharField(required=False, source="rate_plan_id")
    checkIn = IsoDateField(required=False, source="check_in")
    checkOut = IsoDateField(required=False, source="check_out")
    adults = serializers.IntegerField(min_value=0, default=1)
    children = serializers.IntegerField(min_value=0, default=0)
    totalAmount = LooseDecimalField(required=False, source="total_amount")
    currency = serializers.CharField(max_length=3, required=False, allow_blank=True)
    status = serializers.ChoiceField(
        choices=[s.value for s in ReservationStatus],
        default=ReservationStatus.PENDING.value,
    )
    paymentStatus = serializers.ChoiceField(
        choices=[s.value for s in PaymentStatus],
        default=PaymentStatus.UNPAID.value,
        source="payment_status",
    )
    confirmationCode = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, source="confirmation_code"
    )

    @classmethod
    def canonical(cls, data: dict) -> dict:
        """Keys renamed to camelCase, statuses lower-cased, nulls dropped."""
        result = {}
        for key, value in data.items():
            if value is None:
                continue
            name = cls.ALIASES.get(key, key)
            # an explicit camelCase key wins over its snake_case alias
            if name != key and name in data and data[name] is not None:
                continue
            if name in cls.LOWERCASE and isinstance(value, str):
                value = value.lower()
            result[name] = value
        return result

    def to_internal_value(self, data):  # type: ignore
        if isinstance(data, dict):
            data = self.canonical(data)
        return super().to_internal_value(data)

    def validate(self, attrs):  # type: ignore
        check_in, check_out = attrs.get("check_in"), attrs.get("check_out")
        if check_in and check_out and check_in >= check_out:
            raise serializers.ValidationError("checkOut must be after checkIn")
        return attrs


def _build_reservation(data: dict) -> Reservation:
    return Reservation(
        id=data["id"],
        guest_id=data.get("guest_id", ""),
        property_id=data.get("property_id", ""),
        room_type_id=data.get("room_type_id", ""),
        rate_plan_id=data.get("rate_plan_id", ""),
        check_in=data.get("check_in"),
        check_out=data.get("check_out"),
        adults=data["adults"],
        children=data["children"],
        total_amount=data.get("total_amount", Decimal("0")),
        currency=(data.get("currency") or getattr(settings, "DEFAULT_RATE_PLAN_CURRENCY", "VND")).upper(),
        status=ReservationStatus(data["status"]),
        payment_status=PaymentStatus(data["payment_status"]),
        confirmation_code=data.get("confirmation_code") or None,
    )


def reservation_fields(reservation: Reservation) -> dict:
    """A known reservation in the backend's key style, for ``fallback``."""
    fields = {
        "id": reservation.id,
        "guestId": reservation.guest_id,
        "propertyId": reservation.property_id,
        "roomTypeId": reservation.room_type_id,
        "ratePlanId": reservation.rate_plan_id,
        "checkIn": reservation.check_in.isoformat() if reservation.check_in else None,
        "checkOut": reservation.check_out.isoformat() if reservation.check_out else None,
        "adults": reservation.adults,
        "children": reservation.children,
        "totalAmount": str(reservation.total_amount),
        "currency": reservation.currency,
        "status": reservation.status.value,
        "paymentStatus": reservation.payment_status.value,
        "confirmationCode": reservation.confirmation_code,
    }
    return {key: value for key, value in fields.items() if value not in (None, "")}


def normalize_reservation(payload: Any, fallback: Optional[dict] = None) -> Reservation:
    """
    Build a Reservation from a backend answer

    ``fallback`` (the request body, or ``reservation_fields`` of a known
    reservation) fills whatever the answer leaves out.
    """
    if fallback and isinstance(payload, dict):
        payload = {
            **ReservationSerializer.canonical(fallback),
            **ReservationSerializer.canonical(payload),
        }
    return normalize(ReservationSerializer, payload, _build_reservation, "reservation")
