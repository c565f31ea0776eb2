# campusconnect/services/availability.py
"""
Availability of a room on a given day.

The free/booked picture is computed from admitted booking requests
(pending or approved) using the same ``overlaps`` predicate the booking
writer uses, so a slot shown as free is a slot ``submit`` will accept.
"""
import datetime
import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from sqlalchemy.orm import Session

from campusconnect import models
from campusconnect.exceptions import NotFoundError, ValidationError
from campusconnect.slots import Interval, base_slots, overlaps, parse_interval

logger = logging.getLogger(__name__)


@dataclass
class Availability:
    building: str
    room: str
    date: datetime.date
    available_slots: List[Interval]
    booked_intervals: List[Interval]


def parse_booking_date(value: Union[str, datetime.date]) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    try:
        return datetime.date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError("Valid date is required (YYYY-MM-DD)")


def get_active_room(db: Session, building: str, room: str) -> models.Room:
    found = db.query(models.Room).filter(
        models.Room.building == building,
        models.Room.room_number == room,
        models.Room.is_active.is_(True)
    ).first()
    if not found:
        raise NotFoundError(f"Room {room} in {building} not found")
    return found


def admitted_bookings(db: Session, building: str, room: str, day: datetime.date):
    return db.query(models.BookingRequest).filter(
        models.BookingRequest.building == building,
        models.BookingRequest.room == room,
        models.BookingRequest.date == day,
        models.BookingRequest.status.in_(models.ADMITTED_STATUSES)
    ).all()


def find_conflict(
    db: Session, building: str, room: str, day: datetime.date, interval: Interval
) -> Optional[models.BookingRequest]:
    """First admitted booking whose interval overlaps ``interval``, if any."""
    for booking in admitted_bookings(db, building, room, day):
        if overlaps(parse_interval(booking.time_slot), interval):
            return booking
    return None


def get_availability(db: Session, building: str, room: str, day: Union[str, datetime.date]) -> Availability:
    day = parse_booking_date(day)
    room = (room or "").strip()
    get_active_room(db, building, room)

    booked = sorted(parse_interval(b.time_slot) for b in admitted_bookings(db, building, room, day))
    available = [
        slot for slot in base_slots()
        if not any(overlaps(slot, taken) for taken in booked)
    ]

    logger.debug("Availability for %s/%s on %s: %d free, %d booked",
                 building, room, day, len(available), len(booked))
    return Availability(
        building=building,
        room=room,
        date=day,
        available_slots=available,
        booked_intervals=booked,
    )
