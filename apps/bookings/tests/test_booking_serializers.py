from datetime import date
from decimal import Decimal

import pytest

from apps.bookings.domain.entities import PaymentStatus, ReservationStatus
from apps.bookings.serializers import normalize_rate_plans, normalize_reservation
from shared.infrastructure.api_client import MalformedResponseError

RESERVATION = {
    "id": "res-9",
    "guestId": "g-1",
    "propertyId": "prop-1",
    "roomTypeId": "rt-1",
    "ratePlanId": "rp-1",
    "checkIn": "2025-07-01T00:00:00.000Z",
    "checkOut": "2025-07-03",
    "adults": 2,
    "totalAmount": 230.5,
    "currency": "usd",
    "paymentStatus": "paid",
    "confirmationCode": "HX42",
}


def test_reservation_normalized_from_camel_case():
    reservation = normalize_reservation(RESERVATION)

    assert reservation.check_in == date(2025, 7, 1)
    assert reservation.check_out == date(2025, 7, 3)
    assert reservation.total_amount == Decimal("230.5")
    assert reservation.currency == "USD"
    assert reservation.children == 0
    assert reservation.status is ReservationStatus.PENDING
    assert reservation.payment_status is PaymentStatus.PAID
    assert reservation.dates.nights == 2
    assert str(reservation) == "Reservation HX42 (pending/paid)"


def test_reservation_with_inverted_dates_is_malformed():
    with pytest.raises(MalformedResponseError):
        normalize_reservation({**RESERVATION, "checkOut": "2025-06-30"})


def test_reservation_must_be_an_object():
    with pytest.raises(MalformedResponseError):
        normalize_reservation([RESERVATION])


def test_rate_plan_currency_defaults_to_configured_currency(settings):
    settings.DEFAULT_RATE_PLAN_CURRENCY = "VND"

    plans = normalize_rate_plans({"items": [{"id": "rp-1", "roomTypeId": "rt-1"}, {"id": "rp-2", "currency": "usd"}]})

    assert [p.currency for p in plans] == ["VND", "USD"]
    assert plans[0].room_type_id == "rt-1"


def test_missing_rate_plan_list_is_empty():
    assert normalize_rate_plans(None) == []


def test_reservation_accepts_snake_case_and_upper_case_statuses():
    reservation = normalize_reservation({
        "id": "res-9",
        "guestId": "g-1",
        "property_id": "prop-1",
        "room_type_id": "rt-1",
        "check_in": "2025-07-01",
        "check_out": "2025-07-04",
        "total_amount": "300.00",
        "status": "CHECKED_IN",
        "payment_status": "Partial",
        "confirmation_code": "HX43",
    })

    assert reservation.property_id == "prop-1"
    assert reservation.room_type_id == "rt-1"
    assert reservation.dates.nights == 3
    assert reservation.total_amount == Decimal("300.00")
    assert reservation.status is ReservationStatus.CHECKED_IN
    assert reservation.payment_status is PaymentStatus.PARTIAL
    assert reservation.confirmation_code == "HX43"


def test_camel_case_key_wins_over_snake_case_alias():
    reservation = normalize_reservation({"id": "res-9", "propertyId": "prop-2", "property_id": "prop-1"})

    assert reservation.property_id == "prop-2"


def test_missing_reservation_fields_come_from_fallback():
    request = {**RESERVATION, "paymentStatus": "unpaid"}
    del request["confirmationCode"]

    reservation = normalize_reservation({"id": "res-10", "status": "CONFIRMED"}, fallback=request)

    assert reservation.id == "res-10"
    assert reservation.guest_id == "g-1"
    assert reservation.rate_plan_id == "rp-1"
    assert reservation.check_in == date(2025, 7, 1)
    assert reservation.status is ReservationStatus.CONFIRMED
    assert reservation.payment_status is PaymentStatus.UNPAID
    assert reservation.confirmation_code is None


def test_reservation_with_only_an_id_keeps_defaults():
    reservation = normalize_reservation({"id": "res-11"})

    assert reservation.dates is None
    assert reservation.total_amount == Decimal("0")
    assert reservation.status is ReservationStatus.PENDING


def test_reservation_without_id_is_malformed():
    with pytest.raises(MalformedResponseError):
        normalize_reservation({"status": "confirmed"}, fallback=RESERVATION)


def test_unknown_reservation_status_is_malformed():
    with pytest.raises(MalformedResponseError):
        normalize_reservation({**RESERVATION, "status": "archived"})
