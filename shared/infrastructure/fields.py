"""
Custom serializer fields and the normalization entry point.

Every external response type has exactly one serializer; call sites go
through ``normalize()`` and only ever see the typed DTO it builds.
"""

import logging
from typing import Any, Callable, Type, TypeVar

from rest_framework import serializers  # type: ignore

from shared.infrastructure.api_client import MalformedResponseError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class IsoDateField(serializers.DateField):
    """
    DateField that also accepts full ISO datetimes

    The backend returns ``checkIn`` either as ``2025-01-31`` or as
    ``2025-01-31T00:00:00.000Z``; only the date part matters.
    """

    def to_internal_value(self, value):
        if isinstance(value, str) and "T" in value:
            value = value.split("T", 1)[0]
        return super().to_internal_value(value)


class LooseDecimalField(serializers.DecimalField):
    """Decimal without digit limits: amounts come back as 230, 230.5 or "230.00"."""

    def __init__(self, **kwargs):
        kwargs.setdefault("max_digits", None)
        kwargs.setdefault("decimal_places", None)
        super().__init__(**kwargs)


def normalize(
    serializer_class: Type[serializers.Serializer],
    payload: Any,
    build: Callable[[dict], T],
    label: str,
) -> T:
    """Validate ``payload`` with ``serializer_class`` and build the DTO."""
    if not isinstance(payload, dict):
        raise MalformedResponseError(
            f"Expected {label} object, got {type(payload).__name__}",
            payload=payload,
        )
    serializer = serializer_class(data=payload)
    if not serializer.is_valid():
        raise MalformedResponseError(
            f"Malformed {label} payload: {dict(serializer.errors)}",
            payload=payload,
        )
    return build(serializer.validated_data)


def normalize_list(
    serializer_class: Type[serializers.Serializer],
    payload: Any,
    build: Callable[[dict], T],
    label: str,
    skip_invalid: bool = False,
) -> list:
    """
    List flavour of ``normalize``; accepts ``[...]`` or ``{"items": [...]}``

    With ``skip_invalid`` a malformed item is logged and dropped instead of
    failing the whole list.
    """
    if isinstance(payload, dict) and isinstance(payload.get("items"), list):
        payload = payload["items"]
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise MalformedResponseError(
            f"Expected list of {label}, got {type(payload).__name__}",
            payload=payload,
        )
    if not skip_invalid:
        return [normalize(serializer_class, item, build, label) for item in payload]

    items = []
    for index, item in enumerate(payload):
        try:
            items.append(normalize(serializer_class, item, build, label))
        except MalformedResponseError as e:
            logger.warning(f"Skipping {label} #{index}: {e}")
    return items
