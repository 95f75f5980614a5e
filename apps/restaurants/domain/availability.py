"""
Table slot availability

Pure functions over "HH:MM" labels. Operating hours come from free text
such as "17:00 - 02:00" and may wrap past midnight.

Hours that cannot be parsed are treated as always open. That keeps the
screen usable for restaurants with odd hour strings, and it means the
backend has the final word on whether a slot can actually be booked.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional

from shared.domain.base import ValueObject
from shared.domain.exceptions import ValidationError

HOURS_PATTERN = re.compile(r'(\d{1,2}):(\d{2})')
MINUTES_PER_DAY = 24 * 60


def to_minutes(label: str) -> int:
    """Minutes since midnight of an "HH:MM" label"""
    match = HOURS_PATTERN.fullmatch((label or '').strip())
    if not match:
        raise ValidationError(f"Invalid time slot: {label!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValidationError(f"Invalid time slot: {label!r}")
    return hours * 60 + minutes


def to_label(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def generate_slots(start: str = '00:00', end: str = '23:30', step_minutes: int = 30) -> List[str]:
    """
    Fixed grid of slots from ``start`` to ``end``, both included

    >>> generate_slots('11:00', '12:00', 30)
    ['11:00', '11:30', '12:00']
    """
    if step_minutes <= 0:
        raise ValidationError("step_minutes must be positive")
    first, last = to_minutes(start), to_minutes(end)
    return [to_label(m) for m in range(first, last + 1, step_minutes)]


@dataclass(frozen=True)
class OperatingHours(ValueObject):
    open_minutes: int
    close_minutes: int

    @property
    def wraps_midnight(self) -> bool:
        return self.close_minutes < self.open_minutes

    def contains(self, minutes: int) -> bool:
        if self.wraps_midnight:
            return minutes >= self.open_minutes or minutes <= self.close_minutes
        return self.open_minutes <= minutes <= self.close_minutes

    def __str__(self):
        return f"{to_label(self.open_minutes)} - {to_label(self.close_minutes)}"


def parse_operating_hours(text: Optional[str]) -> Optional[OperatingHours]:
    """
    Open and close times from free text

    Only the first two "HH:MM" substrings count. Returns None when there
    are fewer than two, or when they are not valid clock times.
    """
    matches = HOURS_PATTERN.findall(text or '')
    if len(matches) < 2:
        return None
    (open_h, open_m), (close_h, close_m) = matches[0], matches[1]
    try:
        return OperatingHours(
            open_minutes=to_minutes(f"{open_h}:{open_m}"),
            close_minutes=to_minutes(f"{close_h}:{close_m}"),
        )
    except ValidationError:
        return None


def is_slot_available(
    slot: str,
    operating_hours_text: Optional[str],
    selected_date: date,
    now: datetime,
    buffer_minutes: int = 30,
) -> bool:
    """
    Whether ``slot`` on ``selected_date`` can still be booked

    - past dates are never available
    - today, slots earlier than ``now + buffer_minutes`` are not available
    - the slot must fall within operating hours, when those can be parsed
    """
    slot_minutes = to_minutes(slot)

    today = now.date()
    if selected_date < today:
        return False
    if selected_date == today:
        earliest = now + timedelta(minutes=buffer_minutes)
        slot_at = datetime.combine(selected_date, time(slot_minutes // 60, slot_minutes % 60), tzinfo=now.tzinfo)
        if slot_at < earliest:
            return False

    hours = parse_operating_hours(operating_hours_text)
    if hours is None:
        return True
    return hours.contains(slot_minutes)


def available_slots(
    slots: Iterable[str],
    operating_hours_text: Optional[str],
    selected_date: date,
    now: datetime,
    buffer_minutes: int = 30,
) -> List[str]:
    return [
        slot for slot in slots
        if is_slot_available(slot, operating_hours_text, selected_date, now, buffer_minutes)
    ]
