"""Table availability and table booking."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

from django.conf import settings
from django.utils import timezone

from shared.domain.exceptions import ValidationError
from shared.infrastructure.api_client import BookingApiClient

from .domain.availability import is_slot_available, to_label, to_minutes
from .domain.entities import RestaurantTable, TableBooking, TableBookingStatus
from .serializers import normalize_table_booking, normalize_tables

logger = logging.getLogger(__name__)

AVAILABLE_TABLES_PATH = "/restaurants/tables/available"
TABLE_BOOKINGS_PATH = "/restaurants/bookings"
DEFAULT_DURATION_MINUTES = 120


class TableBookingService:
    """
    Table search and booking for one restaurant screen

    Every call first checks the slot locally; a slot that is in the past,
    too close to now, or outside operating hours never reaches the backend.
    """

    def __init__(self, api: BookingApiClient, buffer_minutes: Optional[int] = None):
        self.api = api
        self.buffer_minutes = (
            buffer_minutes if buffer_minutes is not None
            else getattr(settings, "TABLE_BOOKING_BUFFER_MINUTES", 30)
        )

    def check_slot(self, slot: str, booking_date: date, hours_text: Optional[str], now: Optional[datetime] = None) -> None:
        """Raises ValidationError when the slot cannot be booked"""
        now = now or timezone.localtime()
        if not is_slot_available(slot, hours_text, booking_date, now, self.buffer_minutes):
            raise ValidationError(f"Time slot {slot} on {booking_date.isoformat()} is not available")

    def find_available_tables(
        self,
        restaurant_id: str,
        booking_date: date,
        slot: str,
        party_size: int,
        hours_text: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> list[RestaurantTable]:
        if party_size < 1:
            raise ValidationError("Party size must be at least 1")
        self.check_slot(slot, booking_date, hours_text, now)

        payload = self.api.get(
            AVAILABLE_TABLES_PATH,
            params={
                "restaurantId": restaurant_id,
                "date": booking_date.isoformat(),
                "time": slot,
                "partySize": party_size,
            },
        )
        tables = [t for t in normalize_tables(payload) if t.seats(party_size)]
        logger.info(f"Restaurant {restaurant_id}: {len(tables)} table(s) for {party_size} at {booking_date} {slot}")
        return tables

    def create_table_booking(
        self,
        restaurant_id: str,
        booking_date: date,
        slot: str,
        party_size: int,
        guest_id: Optional[str] = None,
        special_requests: str = "",
        hours_text: Optional[str] = None,
        now: Optional[datetime] = None,
        duration_minutes: int = DEFAULT_DURATION_MINUTES,
    ) -> TableBooking:
        if party_size < 1:
            raise ValidationError("Party size must be at least 1")
        self.check_slot(slot, booking_date, hours_text, now)

        data = {
            "restaurantId": restaurant_id,
            "bookingDate": booking_date.isoformat(),
            "bookingTime": to_label(to_minutes(slot)),
            "pax": party_size,
            "duration_minutes": duration_minutes,
        }
        if guest_id:
            data["guestId"] = guest_id
        if special_requests:
            data["specialRequests"] = special_requests

        booking = normalize_table_booking(self.api.post(TABLE_BOOKINGS_PATH, json=data))
        logger.info(f"Created {booking}")
        return booking

    def cancel_table_booking(self, booking: TableBooking) -> TableBooking:
        """
        Cancel on the backend

        The request has no body. Falls back to a local CANCELLED copy when
        the backend answers without one.
        """
        if booking.status is TableBookingStatus.CANCELLED:
            raise ValidationError(f"{booking} is already cancelled")

        payload = self.api.put(f"{TABLE_BOOKINGS_PATH}/{booking.id}")
        cancelled = normalize_table_booking(payload) if payload else replace(booking, status=TableBookingStatus.CANCELLED)
        logger.info(f"Cancelled {cancelled}")
        return cancelled
