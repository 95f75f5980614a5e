"""
Booking Command Handlers

Use cases of the booking pipeline. Each one orchestrates calls to the hotel
backend in a fixed order and stops at the first failure.

Commands:
- CreateReservationCommand: Resolve the guest, price the stay, create the reservation
"""

from dataclasses import dataclass, field
from typing import Optional
import logging
import threading

from django.utils import timezone

from shared.application.message_bus import MessageBus, message_bus
from shared.domain.exceptions import (
    MissingRatePlanError,
    ReservationCreateError,
    SubmissionInProgressError,
    ValidationError,
)
from shared.domain.value_objects import DateRange
from shared.infrastructure.api_client import ApiError, BookingApiClient
from apps.bookings.domain.entities import RatePlan, Reservation
from apps.bookings.domain.events import ReservationCreated
from apps.bookings.domain.pricing import BookingQuote, DiscountMode, compute_quote
from apps.bookings.services import build_reservation_payload, fetch_rate_plans, submit_reservation
from apps.guests.domain.entities import Guest
from apps.guests.services import GuestResolver

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class GuestInput:
    """Contact details typed in by the guest"""
    name: str
    email: str
    phone: Optional[str] = None


@dataclass
class PriceInputs:
    """Inputs of the pricing engine; rates default to the configured ones"""
    base_price: object
    tax_rate: object = None
    service_rate: object = None
    discount: object = 0
    discount_mode: DiscountMode = DiscountMode.AMOUNT


@dataclass
class CreateReservationCommand:
    """
    Command to create a new reservation

    This is the primary entry point for room bookings.
    """
    guest: GuestInput
    property_id: str
    room_type_id: str
    dates: DateRange
    price: PriceInputs
    adults: int = 1
    children: int = 0
    channel: str = 'mobile_app'

    @property
    def party_size(self) -> int:
        return self.adults + self.children


@dataclass
class BookingResult:
    """Everything the pipeline learned while creating one reservation"""
    reservation: Reservation
    quote: BookingQuote
    guest: Guest
    rate_plan: RatePlan
    events: list = field(default_factory=list)


# ===== Command Handlers =====

class ReservationCoordinator:
    """
    Handler for CreateReservation command

    Steps, in order, each a failure point with no automatic retry:
    1. Resolve guest (GuestResolutionError)
    2. Look up rate plans for the room type (MissingRatePlanError when empty;
       the reservation is never attempted)
    3. Price the stay with the first rate plan's currency
    4. POST the reservation as PENDING/UNPAID (ReservationCreateError)
    5. Publish ReservationCreated and return the created reservation

    One coordinator belongs to one booking session. A second call arriving
    while the first is running is rejected, not queued.
    """

    def __init__(
        self,
        api: BookingApiClient,
        guest_resolver: Optional[GuestResolver] = None,
        bus: Optional[MessageBus] = None,
    ):
        self.api = api
        self.guest_resolver = guest_resolver or GuestResolver(api)
        self.bus = bus or message_bus
        self._submitting = threading.Lock()

    @property
    def submitting(self) -> bool:
        return self._submitting.locked()

    def create_reservation(self, command: CreateReservationCommand) -> Reservation:
        return self.book(command).reservation

    def book(self, command: CreateReservationCommand) -> BookingResult:
        """
        Handle reservation creation

        Returns: BookingResult with the created reservation and its quote

        Raises:
            SubmissionInProgressError: another submit of this session is running
            ValidationError: bad input, nothing was sent
            GuestResolutionError, MissingRatePlanError, ReservationCreateError
        """
        if not self._submitting.acquire(blocking=False):
            raise SubmissionInProgressError("A reservation is already being submitted")
        try:
            self._validate(command)
            return self._handle(command)
        finally:
            self._submitting.release()

    def _validate(self, command: CreateReservationCommand) -> None:
        if not isinstance(command.dates, DateRange):
            raise ValidationError("dates must be a DateRange")
        if command.dates.start_date < timezone.localdate():
            raise ValidationError("Check-in date cannot be in the past")
        if command.adults < 1:
            raise ValidationError("At least one adult is required")
        if command.children < 0:
            raise ValidationError("Children count cannot be negative")
        if not command.property_id or not command.room_type_id:
            raise ValidationError("property_id and room_type_id are required")
        # Price inputs are checked now so a bad rate never reaches the network
        self._quote(command, currency=None)

    def _quote(self, command: CreateReservationCommand, currency: Optional[str]) -> BookingQuote:
        price = command.price
        return compute_quote(
            price.base_price,
            command.dates.nights,
            tax_rate=price.tax_rate,
            service_rate=price.service_rate,
            discount=price.discount,
            discount_mode=price.discount_mode,
            currency=currency,
        )

    def _handle(self, command: CreateReservationCommand) -> BookingResult:
        logger.info(
            f"Creating reservation for property {command.property_id}, "
            f"room type {command.room_type_id}, dates {command.dates}"
        )

        guest = self.guest_resolver.resolve(
            command.guest.name, command.guest.email, command.guest.phone
        )

        try:
            plans = fetch_rate_plans(self.api, command.room_type_id)
        except ApiError as e:
            raise MissingRatePlanError(
                f"Cannot fetch rate plans for room type {command.room_type_id}: {e}"
            ) from e
        if not plans:
            logger.warning(f"No rate plan for room type {command.room_type_id}")
            raise MissingRatePlanError(
                f"No rate plan available for room type {command.room_type_id}"
            )
        rate_plan = plans[0]

        quote = self._quote(command, currency=rate_plan.currency)

        payload = build_reservation_payload(
            property_id=command.property_id,
            guest_id=guest.id,
            room_type_id=command.room_type_id,
            rate_plan=rate_plan,
            check_in=command.dates.start_date,
            check_out=command.dates.end_date,
            adults=command.adults,
            children=command.children,
            quote=quote,
            contact={"name": guest.name, "email": guest.email, "phone": command.guest.phone},
            channel=command.channel,
        )
        try:
            reservation = submit_reservation(self.api, payload)
        except ApiError as e:
            raise ReservationCreateError(f"Failed to create reservation: {e}") from e

        event = ReservationCreated(
            aggregate_id=reservation.id,
            reservation_id=reservation.id,
            guest_id=guest.id,
            room_type_id=command.room_type_id,
            total_amount=quote.payable_total,
            currency=quote.currency,
        )
        self.bus.publish_events([event])

        return BookingResult(
            reservation=reservation,
            quote=quote,
            guest=guest,
            rate_plan=rate_plan,
            events=[event],
        )
