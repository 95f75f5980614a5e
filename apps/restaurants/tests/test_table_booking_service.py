from datetime import date, datetime

import pytest

from apps.restaurants.domain.entities import TableBooking, TableBookingStatus
from apps.restaurants.services import TableBookingService
from shared.domain.exceptions import ValidationError

NOW = datetime(2025, 1, 10, 12, 0)
BOOKING_DATE = date(2025, 1, 11)
HOURS = "17:00 - 02:00"


@pytest.fixture
def service(api):
    return TableBookingService(api)


def test_unavailable_slot_never_hits_the_network(api, service):
    with pytest.raises(ValidationError):
        service.find_available_tables("rest-1", BOOKING_DATE, "10:00", 2, hours_text=HOURS, now=NOW)
    with pytest.raises(ValidationError):
        service.create_table_booking("rest-1", date(2025, 1, 9), "19:00", 2, hours_text=HOURS, now=NOW)

    assert api.calls == []


def test_finds_tables_that_seat_the_party(api, service):
    api.on(
        "GET",
        "/restaurants/tables/available",
        [
            {"id": "t-1", "restaurantId": "rest-1", "tableNumber": "A1", "capacity": 2},
            {"id": "t-2", "restaurantId": "rest-1", "tableNumber": "B4", "capacity": 6, "status": "available"},
        ],
    )

    tables = service.find_available_tables("rest-1", BOOKING_DATE, "19:30", 4, hours_text=HOURS, now=NOW)

    assert [t.id for t in tables] == ["t-2"]
    assert api.payloads("GET", "/restaurants/tables/available") == [
        {"restaurantId": "rest-1", "date": "2025-01-11", "time": "19:30", "partySize": 4}
    ]


def test_creates_table_booking(api, service):
    api.on(
        "POST",
        "/restaurants/bookings",
        lambda payload: {"id": "tb-1", "status": "pending", **payload, "bookingTime": "19:30:00"},
    )

    booking = service.create_table_booking(
        "rest-1", BOOKING_DATE, "19:30", 3,
        guest_id="g-1", special_requests="Window seat", hours_text=HOURS, now=NOW,
    )

    assert booking.id == "tb-1"
    assert booking.booking_time == "19:30"
    assert booking.party_size == 3
    assert booking.status is TableBookingStatus.PENDING
    [payload] = api.payloads("POST", "/restaurants/bookings")
    assert payload == {
        "restaurantId": "rest-1",
        "bookingDate": "2025-01-11",
        "bookingTime": "19:30",
        "pax": 3,
        "duration_minutes": 120,
        "guestId": "g-1",
        "specialRequests": "Window seat",
    }


def test_buffer_comes_from_settings(api, settings):
    settings.TABLE_BOOKING_BUFFER_MINUTES = 120
    service = TableBookingService(api)

    with pytest.raises(ValidationError):
        service.find_available_tables("rest-1", NOW.date(), "13:30", 2, now=NOW)


def make_booking(**overrides):
    data = {
        "id": "tb-1",
        "restaurant_id": "rest-1",
        "booking_date": BOOKING_DATE,
        "booking_time": "19:30",
        "party_size": 2,
        "status": TableBookingStatus.CONFIRMED,
    }
    data.update(overrides)
    return TableBooking(**data)


def test_cancel_table_booking_puts_without_body(api, service):
    api.on(
        "PUT",
        "/restaurants/bookings/tb-1",
        {"id": "tb-1", "restaurantId": "rest-1", "bookingDate": "2025-01-11",
         "bookingTime": "19:30:00", "pax": 2, "status": "cancelled"},
    )

    booking = service.cancel_table_booking(make_booking())

    assert booking.status is TableBookingStatus.CANCELLED
    assert api.payloads("PUT", "/restaurants/bookings/tb-1") == [None]


def test_cancel_table_booking_without_answer_marks_local_copy(api, service):
    api.on("PUT", "/restaurants/bookings/tb-1", None)

    booking = service.cancel_table_booking(make_booking(special_requests="Window seat"))

    assert booking.status is TableBookingStatus.CANCELLED
    assert booking.special_requests == "Window seat"


def test_cancelled_table_booking_is_not_cancelled_again(api, service):
    with pytest.raises(ValidationError):
        service.cancel_table_booking(make_booking(status=TableBookingStatus.CANCELLED))

    assert api.calls == []
