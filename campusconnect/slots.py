# campusconnect/slots.py
"""
Slot grid for room bookings.

A day is cut into 30 minute base slots between 08:30 and 21:00. Intervals
are half-open ``[start, end)``; a booking holds either one base slot or a
contiguous run of up to four of them (two hours), stored as one compound
interval such as ``"17:00-19:00"``.
"""
import re
from datetime import time
from typing import List, NamedTuple, Tuple

from campusconnect.exceptions import ValidationError

OPENING_TIME = time(8, 30)
CLOSING_TIME = time(21, 0)
SLOT_MINUTES = 30
MAX_SPAN_SLOTS = 4
MAX_SPAN_MINUTES = SLOT_MINUTES * MAX_SPAN_SLOTS

_INTERVAL_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*-\s*(\d{1,2}):(\d{2})\s*$")


def _to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def _from_minutes(minutes: int) -> time:
    return time(minutes // 60, minutes % 60)


class Interval(NamedTuple):
    start: time
    end: time

    def __str__(self) -> str:
        return f"{self.start:%H:%M}-{self.end:%H:%M}"

    @property
    def minutes(self) -> int:
        return _to_minutes(self.end) - _to_minutes(self.start)


_BASE_SLOTS: Tuple[Interval, ...] = tuple(
    Interval(_from_minutes(m), _from_minutes(m + SLOT_MINUTES))
    for m in range(_to_minutes(OPENING_TIME), _to_minutes(CLOSING_TIME), SLOT_MINUTES)
)

# Every start or end a booking may use, in minutes since midnight
_BOUNDARIES = frozenset(
    range(_to_minutes(OPENING_TIME), _to_minutes(CLOSING_TIME) + 1, SLOT_MINUTES)
)


def base_slots() -> Tuple[Interval, ...]:
    """The day's base slots in order. Always the same tuple."""
    return _BASE_SLOTS


def overlaps(a: Interval, b: Interval) -> bool:
    """Two intervals of the same date conflict. Touching endpoints do not."""
    return a.start < b.end and b.start < a.end


def is_valid_span(start: time, end: time) -> bool:
    start_m, end_m = _to_minutes(start), _to_minutes(end)
    if start.second or start.microsecond or end.second or end.microsecond:
        return False
    return (
        start_m in _BOUNDARIES
        and end_m in _BOUNDARIES
        and start_m < end_m
        and end_m - start_m <= MAX_SPAN_MINUTES
    )


def parse_interval(text: str) -> Interval:
    """
    Parses ``"HH:MM-HH:MM"`` into an Interval.

    Only the syntax is checked here; use ``is_valid_span`` to check the
    interval against the grid.
    """
    match = _INTERVAL_RE.match(text or "")
    if not match:
        raise ValidationError(f"Invalid time slot format '{text}'. Use 'HH:MM-HH:MM'")

    start_h, start_m, end_h, end_m = (int(part) for part in match.groups())
    try:
        return Interval(time(start_h, start_m), time(end_h, end_m))
    except ValueError:
        raise ValidationError(f"Invalid time slot '{text}'")


def split_into_base_slots(interval: Interval) -> List[Interval]:
    """Base slots covered by ``interval``."""
    return [slot for slot in _BASE_SLOTS if overlaps(slot, interval)]
