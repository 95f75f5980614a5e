"""Serializers for the POS payment endpoints."""

from __future__ import annotations

from typing import Any

from rest_framework import serializers  # type: ignore

from shared.domain.value_objects import Money
from shared.infrastructure.api_client import MalformedResponseError
from shared.infrastructure.fields import normalize

from .domain.entities import PaymentIntent, PaymentStatusSnapshot


class PaymentIntentDataSerializer(serializers.Serializer):
    orderCode = serializers.CharField(source="order_code")
    qrCode = serializers.CharField(required=False, allow_blank=True, allow_null=True, source="qr_code")
    checkoutUrl = serializers.CharField(required=False, allow_blank=True, allow_null=True, source="checkout_url")

    def validate(self, attrs):  # type: ignore
        if not attrs.get("qr_code") and not attrs.get("checkout_url"):
            raise serializers.ValidationError("Payment intent carries neither qrCode nor checkoutUrl")
        return attrs


class PaymentIntentSerializer(serializers.Serializer):
    """``{code, data: {orderCode, qrCode, checkoutUrl}}``"""

    code = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    data = PaymentIntentDataSerializer()


def normalize_payment_intent(payload: Any, reservation_id: str, amount: Money) -> PaymentIntent:
    """
    Build the intent from the create response

    A non-zero ``code`` means the provider refused the order even though the
    HTTP call succeeded.
    """
    if isinstance(payload, dict) and "data" not in payload and "orderCode" in payload:
        payload = {"data": payload}

    def build(data: dict) -> PaymentIntent:
        code = data.get("code")
        if code not in (None, "", "00", "0"):
            raise MalformedResponseError(f"Payment provider returned code {code}", payload=payload)
        intent = data["data"]
        return PaymentIntent(
            order_code=str(intent["order_code"]),
            reservation_id=reservation_id,
            amount=amount,
            qr_payload=intent.get("qr_code") or None,
            checkout_url=intent.get("checkout_url") or None,
        )

    return normalize(PaymentIntentSerializer, payload, build, "payment intent")


class WebhookDataSerializer(serializers.Serializer):
    success = serializers.BooleanField(default=False)


class PaymentStatusSerializer(serializers.Serializer):
    """``{status, webhookData: {success}}``; webhookData is absent until the provider calls back"""

    status = serializers.CharField(required=False, allow_blank=True, default="")
    webhookData = WebhookDataSerializer(required=False, allow_null=True, source="webhook_data")


def _build_status(data: dict) -> PaymentStatusSnapshot:
    webhook = data.get("webhook_data") or {}
    return PaymentStatusSnapshot(
        status=(data.get("status") or "").strip(),
        success=bool(webhook.get("success", False)),
    )


def normalize_payment_status(payload: Any) -> PaymentStatusSnapshot:
    return normalize(PaymentStatusSerializer, payload, _build_status, "payment status")
