"""
Restaurant Domain Entities
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from shared.domain.base import Entity


class TableStatus(Enum):
    AVAILABLE = 'available'
    OCCUPIED = 'occupied'
    RESERVED = 'reserved'


class TableBookingStatus(Enum):
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    SEATED = 'seated'
    COMPLETED = 'completed'
    NO_SHOW = 'no_show'
    CANCELLED = 'cancelled'


@dataclass(frozen=True, eq=False)
class RestaurantTable(Entity):
    restaurant_id: str
    table_number: str
    capacity: int
    status: TableStatus = TableStatus.AVAILABLE

    def seats(self, party_size: int) -> bool:
        return self.capacity >= party_size


@dataclass(frozen=True, eq=False)
class TableBooking(Entity):
    """A table reservation at a given date and "HH:MM" time"""
    restaurant_id: str
    booking_date: date
    booking_time: str
    party_size: int
    guest_id: Optional[str] = None
    status: TableBookingStatus = TableBookingStatus.PENDING
    special_requests: str = ''

    def __str__(self):
        return f"Table booking {self.id} ({self.booking_date} {self.booking_time}, {self.party_size} pax)"
