"""Serializers for restaurant table and table booking payloads."""

from __future__ import annotations

from typing import Any

from rest_framework import serializers  # type: ignore

from shared.infrastructure.fields import IsoDateField, normalize, normalize_list

from .domain.entities import RestaurantTable, TableBooking, TableBookingStatus, TableStatus


class RestaurantTableSerializer(serializers.Serializer):
    id = serializers.CharField()
    restaurantId = serializers.CharField(source="restaurant_id")
    tableNumber = serializers.CharField(required=False, allow_blank=True, default="", source="table_number")
    capacity = serializers.IntegerField(min_value=0)
    status = serializers.ChoiceField(
        choices=[s.value for s in TableStatus],
        default=TableStatus.AVAILABLE.value,
    )


def _build_table(data: dict) -> RestaurantTable:
    return RestaurantTable(
        id=data["id"],
        restaurant_id=data["restaurant_id"],
        table_number=data["table_number"],
        capacity=data["capacity"],
        status=TableStatus(data["status"]),
    )


def normalize_tables(payload: Any) -> list[RestaurantTable]:
    return normalize_list(RestaurantTableSerializer, payload, _build_table, "restaurant table")


class TableBookingSerializer(serializers.Serializer):
    id = serializers.CharField()
    restaurantId = serializers.CharField(source="restaurant_id")
    guestId = serializers.CharField(required=False, allow_null=True, allow_blank=True, source="guest_id")
    bookingDate = IsoDateField(source="booking_date")
    bookingTime = serializers.RegexField(r"^\d{1,2}:\d{2}", source="booking_time")
    pax = serializers.IntegerField(min_value=1, source="party_size")
    status = serializers.ChoiceField(
        choices=[s.value for s in TableBookingStatus],
        default=TableBookingStatus.PENDING.value,
    )
    specialRequests = serializers.CharField(
        required=False, allow_null=True, allow_blank=True, source="special_requests"
    )


def _build_table_booking(data: dict) -> TableBooking:
    return TableBooking(
        id=data["id"],
        restaurant_id=data["restaurant_id"],
        booking_date=data["booking_date"],
        booking_time=data["booking_time"][:5],
        party_size=data["party_size"],
        guest_id=data.get("guest_id") or None,
        status=TableBookingStatus(data["status"]),
        special_requests=data.get("special_requests") or "",
    )


def normalize_table_booking(payload: Any) -> TableBooking:
    return normalize(TableBookingSerializer, payload, _build_table_booking, "table booking")
