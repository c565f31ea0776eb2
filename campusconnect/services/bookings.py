# campusconnect/services/bookings.py
"""
Booking request writer and review workflow.

Admission is guarded twice: ``find_conflict`` rejects overlapping requests
up front, and the unique constraint on ``slot_occupancy`` rejects the
loser of two concurrent submissions that both passed the pre-check.
Each admitted request owns one occupancy row per base slot it covers;
rejecting or deleting the request releases them. A review only applies to
a row that is still pending at write time, so two reviewers racing on one
request cannot both decide it.
"""
import datetime
import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from campusconnect import models, schemas
from campusconnect.database import paginate
from campusconnect.exceptions import (
    ConflictError, InvalidStateError, NotFoundError, PermissionDeniedError, ValidationError,
)
from campusconnect.services.availability import find_conflict, get_active_room, parse_booking_date
from campusconnect.slots import is_valid_span, parse_interval, split_into_base_slots

logger = logging.getLogger(__name__)

BUILDINGS = {b.value for b in models.Building}
DECISIONS = (models.BookingStatus.APPROVED.value, models.BookingStatus.REJECTED.value)


def submit(db: Session, candidate: schemas.BookingCreate, requester: models.User) -> models.BookingRequest:
    """
    Admits a new booking request in ``pending`` state.

    Raises ValidationError for bad input or a past date, NotFoundError when
    the room is missing or inactive, and ConflictError when the interval
    overlaps an admitted request for the same room and date.
    """
    if candidate.building not in BUILDINGS:
        raise ValidationError("Invalid building")

    room = (candidate.room or "").strip()
    if not room:
        raise ValidationError("Room is required")

    purpose = (candidate.purpose or "").strip()
    if not purpose:
        raise ValidationError("Purpose is required")

    day = parse_booking_date(candidate.date)
    if day < datetime.date.today():
        raise ValidationError("Bookings can only be made for today or a later date")

    interval = parse_interval(candidate.time_slot)
    if not is_valid_span(interval.start, interval.end):
        raise ValidationError(
            f"Time slot {interval} must follow the 30 minute grid between 08:30 and 21:00 "
            f"and last at most 2 hours"
        )

    get_active_room(db, candidate.building, room)

    clash = find_conflict(db, candidate.building, room, day, interval)
    if clash:
        logger.info("Rejected %s %s/%s on %s: overlaps booking %s (%s)",
                    interval, candidate.building, room, day, clash.id, clash.time_slot)
        raise ConflictError()

    booking = models.BookingRequest(
        name=requester.name,
        email=requester.email,
        student_id=requester.student_id,
        department=requester.department,
        building=candidate.building,
        room=room,
        date=day,
        time_slot=str(interval),
        purpose=purpose,
        status=models.BookingStatus.PENDING.value,
    )
    booking.occupancy = [
        models.SlotOccupancy(building=candidate.building, room=room, date=day, slot_start=slot.start)
        for slot in split_into_base_slots(interval)
    ]
    db.add(booking)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("Concurrent submission already holds %s %s/%s on %s",
                       interval, candidate.building, room, day)
        raise ConflictError()

    db.refresh(booking)
    logger.info("Booking %s submitted by %s for %s/%s on %s %s",
                booking.id, booking.email, booking.building, booking.room, booking.date, booking.time_slot)
    return booking


def review(
    db: Session,
    request_id: int,
    decision: str,
    reviewer: models.User,
    notes: Optional[str] = None
) -> models.BookingRequest:
    """Approves or rejects a pending request. Decided requests stay decided."""
    if reviewer.role not in models.REVIEWER_ROLES:
        raise PermissionDeniedError("Only admin or faculty members can review booking requests")

    if decision not in DECISIONS:
        raise ValidationError("Status must be approved or rejected")

    reviewed_by = reviewer.name
    reviewed_at = models.utcnow()

    # Only a row still pending is claimed; a concurrent reviewer updates 0 rows
    claimed = db.query(models.BookingRequest).filter(
        models.BookingRequest.id == request_id,
        models.BookingRequest.status == models.BookingStatus.PENDING.value
    ).update({
        models.BookingRequest.status: decision,
        models.BookingRequest.reviewed_by: reviewed_by,
        models.BookingRequest.reviewed_at: reviewed_at,
        models.BookingRequest.review_notes: notes.strip() if notes else None,
    }, synchronize_session=False)

    if not claimed:
        db.rollback()
        current = db.query(models.BookingRequest.status).filter(
            models.BookingRequest.id == request_id
        ).scalar()
        if current is None:
            raise NotFoundError("Booking request not found")
        raise InvalidStateError(f"Booking request has already been {current}")

    if decision == models.BookingStatus.REJECTED.value:
        # Rejected requests do not hold their slots
        db.query(models.SlotOccupancy).filter(
            models.SlotOccupancy.booking_id == request_id
        ).delete(synchronize_session=False)

    db.commit()
    logger.info("Booking %s %s by %s", request_id, decision, reviewer.email)
    return get_booking(db, request_id)


def remove(db: Session, request_id: int, actor: models.User) -> None:
    booking = get_booking(db, request_id)

    if not actor.is_admin and booking.email != actor.email.lower():
        raise PermissionDeniedError("You can only delete your own booking requests")

    status = booking.status
    db.delete(booking)
    db.commit()
    logger.info("Booking %s (%s) deleted by %s", request_id, status, actor.email)


def get_booking(db: Session, request_id: int) -> models.BookingRequest:
    booking = db.query(models.BookingRequest).filter(models.BookingRequest.id == request_id).first()
    if not booking:
        raise NotFoundError("Booking request not found")
    return booking


def _newest_first(query):
    return query.order_by(models.BookingRequest.created_at.desc(), models.BookingRequest.id.desc())


def list_user_bookings(db: Session, email: str, status: Optional[str] = None, page: int = 1, limit: int = 20):
    query = db.query(models.BookingRequest).filter(models.BookingRequest.email == email.lower())
    if status:
        query = query.filter(models.BookingRequest.status == status)
    return paginate(_newest_first(query), page, limit)


def list_bookings(
    db: Session,
    status: Optional[str] = None,
    building: Optional[str] = None,
    page: int = 1,
    limit: int = 20
):
    query = db.query(models.BookingRequest)
    if status:
        query = query.filter(models.BookingRequest.status == status)
    if building:
        query = query.filter(models.BookingRequest.building == building)
    return paginate(_newest_first(query), page, limit)


def booking_stats(db: Session) -> dict:
    counts = dict(
        db.query(models.BookingRequest.status, func.count(models.BookingRequest.id))
        .group_by(models.BookingRequest.status)
        .all()
    )
    stats = {status.value: counts.get(status.value, 0) for status in models.BookingStatus}
    stats["total"] = sum(counts.values())
    return stats
