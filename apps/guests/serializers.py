"""Serializers for guest payloads returned by the hotel backend."""

from __future__ import annotations

from typing import Any

from rest_framework import serializers  # type: ignore

from shared.infrastructure.fields import normalize, normalize_list

from .domain.entities import Guest


class GuestSerializer(serializers.Serializer):
    """Guest record; ``name`` may be split into first/last name."""

    id = serializers.CharField()
    email = serializers.CharField()
    name = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    firstName = serializers.CharField(required=False, allow_blank=True, allow_null=True, source="first_name")
    lastName = serializers.CharField(required=False, allow_blank=True, allow_null=True, source="last_name")
    phone = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate(self, attrs):  # type: ignore
        if not attrs.get("name"):
            parts = [attrs.get("first_name") or "", attrs.get("last_name") or ""]
            attrs["name"] = " ".join(p for p in parts if p).strip()
        return attrs


def _build_guest(data: dict) -> Guest:
    return Guest(
        id=data["id"],
        name=data.get("name") or "",
        email=data["email"],
        phone=data.get("phone") or None,
    )


def normalize_guest(payload: Any) -> Guest:
    return normalize(GuestSerializer, payload, _build_guest, "guest")


def normalize_guest_list(payload: Any, skip_invalid: bool = False) -> list[Guest]:
    return normalize_list(GuestSerializer, payload, _build_guest, "guest", skip_invalid=skip_invalid)
