import datetime
import itertools

import pytest

from campusconnect import models, schemas
from campusconnect.exceptions import (
    ConflictError, InvalidStateError, NotFoundError, PermissionDeniedError, ValidationError,
)
from campusconnect.services import bookings as booking_service
from campusconnect.services.availability import get_availability
from campusconnect.slots import base_slots, overlaps, parse_interval

from conftest import FUTURE_DATE


def candidate(time_slot="09:00-10:00", **overrides):
    fields = dict(
        building="A Block",
        room="401",
        date=FUTURE_DATE,
        time_slot=time_slot,
        purpose="Club meeting",
    )
    fields.update(overrides)
    return schemas.BookingCreate(**fields)


def booked(db):
    return [str(i) for i in get_availability(db, "A Block", "401", FUTURE_DATE).booked_intervals]


def free(db):
    return [str(i) for i in get_availability(db, "A Block", "401", FUTURE_DATE).available_slots]


class TestSubmit:

    def test_first_request_is_admitted_as_pending(self, db, room, student):
        booking = booking_service.submit(db, candidate(), student)

        assert booking.id is not None
        assert booking.status == "pending"
        assert booking.time_slot == "09:00-10:00"
        assert booking.created_at is not None
        assert booking.name == "Riya Sharma"
        assert booking.email == "riya@campus.edu"
        assert booking.student_id == student.student_id
        assert booking.department == "Computer Science"
        assert len(booking.occupancy) == 2

    def test_same_interval_conflicts(self, db, room, student, other_student):
        booking_service.submit(db, candidate(), student)

        with pytest.raises(ConflictError, match="room already booked for this time slot"):
            booking_service.submit(db, candidate(), other_student)

    def test_partial_overlap_conflicts(self, db, room, student):
        booking_service.submit(db, candidate("17:00-19:00"), student)

        with pytest.raises(ConflictError):
            booking_service.submit(db, candidate("18:30-19:30"), student)
        with pytest.raises(ConflictError):
            booking_service.submit(db, candidate("16:30-17:30"), student)

    def test_adjacent_interval_is_admitted(self, db, room, student):
        booking_service.submit(db, candidate("09:00-10:00"), student)
        adjacent = booking_service.submit(db, candidate("10:00-11:00"), student)

        assert adjacent.status == "pending"
        assert booked(db) == ["09:00-10:00", "10:00-11:00"]

    def test_other_date_is_independent(self, db, room, student):
        booking_service.submit(db, candidate(), student)
        next_day = booking_service.submit(
            db, candidate(date=FUTURE_DATE + datetime.timedelta(days=1)), student
        )

        assert next_day.status == "pending"

    def test_time_slot_is_stored_in_canonical_form(self, db, room, student):
        booking = booking_service.submit(db, candidate(" 9:00 - 9:30 "), student)

        assert booking.time_slot == "09:00-09:30"

    def test_today_is_allowed(self, db, room, student):
        booking = booking_service.submit(db, candidate("20:30-21:00", date=datetime.date.today()), student)

        assert booking.date == datetime.date.today()

    def test_past_date_is_rejected(self, db, room, student):
        yesterday = datetime.date.today() - datetime.timedelta(days=1)

        with pytest.raises(ValidationError):
            booking_service.submit(db, candidate(date=yesterday), student)

    @pytest.mark.parametrize("time_slot", ["09:15-10:00", "09:00-11:30", "08:00-09:00", "10:00-09:00", "noon"])
    def test_invalid_span_is_rejected(self, db, room, student, time_slot):
        with pytest.raises(ValidationError):
            booking_service.submit(db, candidate(time_slot), student)

    def test_unknown_building_is_rejected(self, db, room, student):
        with pytest.raises(ValidationError, match="Invalid building"):
            booking_service.submit(db, candidate(building="B Block"), student)

    def test_blank_purpose_is_rejected(self, db, room, student):
        with pytest.raises(ValidationError, match="Purpose"):
            booking_service.submit(db, candidate(purpose="   "), student)

    def test_unknown_room_is_not_found(self, db, room, student):
        with pytest.raises(NotFoundError):
            booking_service.submit(db, candidate(room="999"), student)

    def test_inactive_room_is_not_found(self, db, room, student):
        room.is_active = False
        db.commit()

        with pytest.raises(NotFoundError):
            booking_service.submit(db, candidate(), student)

    def test_occupancy_constraint_catches_a_write_past_the_pre_check(self, db, room, student, other_student, monkeypatch):
        booking_service.submit(db, candidate("09:00-10:00"), student)

        # Simulates a concurrent writer whose overlap query ran before the first commit
        monkeypatch.setattr(booking_service, "find_conflict", lambda *args, **kwargs: None)

        with pytest.raises(ConflictError):
            booking_service.submit(db, candidate("09:30-10:30"), other_student)

        assert db.query(models.BookingRequest).count() == 1
        assert booked(db) == ["09:00-10:00"]

    def test_admitted_requests_never_overlap(self, db, room, student):
        spans = [
            f"{slots[0].start:%H:%M}-{slots[-1].end:%H:%M}"
            for length in (3, 1, 4, 2)
            for slots in (base_slots()[i:i + length] for i in range(0, 25 - length + 1, 2))
        ]
        for span in spans:
            try:
                booking_service.submit(db, candidate(span), student)
            except ConflictError:
                pass

        admitted = [
            parse_interval(b.time_slot)
            for b in db.query(models.BookingRequest).filter(
                models.BookingRequest.status.in_(models.ADMITTED_STATUSES)
            )
        ]
        assert admitted
        for a, b in itertools.combinations(admitted, 2):
            assert not overlaps(a, b)


class TestReview:

    def test_admin_approval_keeps_slot_booked(self, db, room, student, admin):
        booking = booking_service.submit(db, candidate(), student)

        reviewed = booking_service.review(db, booking.id, "approved", admin, "Enjoy the session")

        assert reviewed.status == "approved"
        assert reviewed.reviewed_by == "Mehak M"
        assert reviewed.reviewed_at is not None
        assert reviewed.review_notes == "Enjoy the session"
        assert booked(db) == ["09:00-10:00"]
        assert "09:00-09:30" not in free(db)

    def test_rejection_frees_the_slot(self, db, room, student, other_student, admin):
        booking = booking_service.submit(db, candidate(), student)

        booking_service.review(db, booking.id, "rejected", admin)

        assert booked(db) == []
        assert "09:00-09:30" in free(db)
        assert "09:30-10:00" in free(db)
        rebooked = booking_service.submit(db, candidate(), other_student)
        assert rebooked.status == "pending"

    def test_faculty_can_review(self, db, room, student, faculty):
        booking = booking_service.submit(db, candidate(), student)

        reviewed = booking_service.review(db, booking.id, "approved", faculty)

        assert reviewed.reviewed_by == "Prof. Rao"

    def test_student_cannot_review(self, db, room, student, other_student):
        booking = booking_service.submit(db, candidate(), student)

        with pytest.raises(PermissionDeniedError):
            booking_service.review(db, booking.id, "approved", other_student)

        db.refresh(booking)
        assert booking.status == "pending"
        assert booking.reviewed_at is None

    def test_decided_request_cannot_be_reviewed_again(self, db, room, student, admin):
        booking = booking_service.submit(db, candidate(), student)
        booking_service.review(db, booking.id, "approved", admin)

        with pytest.raises(InvalidStateError):
            booking_service.review(db, booking.id, "rejected", admin)

        assert booking_service.get_booking(db, booking.id).status == "approved"

    def test_unknown_decision_is_rejected(self, db, room, student, admin):
        booking = booking_service.submit(db, candidate(), student)

        with pytest.raises(ValidationError):
            booking_service.review(db, booking.id, "pending", admin)

    def test_missing_request_is_not_found(self, db, admin):
        with pytest.raises(NotFoundError):
            booking_service.review(db, 4242, "approved", admin)


class TestRemove:

    def test_owner_can_delete_and_slot_is_freed(self, db, room, student):
        booking = booking_service.submit(db, candidate(), student)

        booking_service.remove(db, booking.id, student)

        assert db.query(models.BookingRequest).count() == 0
        assert db.query(models.SlotOccupancy).count() == 0
        assert booked(db) == []

    def test_admin_can_delete_an_approved_request(self, db, room, student, admin):
        booking = booking_service.submit(db, candidate(), student)
        booking_service.review(db, booking.id, "approved", admin)

        booking_service.remove(db, booking.id, admin)

        assert db.query(models.BookingRequest).count() == 0

    def test_other_user_cannot_delete(self, db, room, student, other_student):
        booking = booking_service.submit(db, candidate(), student)

        with pytest.raises(PermissionDeniedError):
            booking_service.remove(db, booking.id, other_student)

        assert db.query(models.BookingRequest).count() == 1

    def test_faculty_cannot_delete_someone_elses_request(self, db, room, student, faculty):
        booking = booking_service.submit(db, candidate(), student)

        with pytest.raises(PermissionDeniedError):
            booking_service.remove(db, booking.id, faculty)

    def test_missing_request_is_not_found(self, db, admin):
        with pytest.raises(NotFoundError):
            booking_service.remove(db, 4242, admin)


def test_listing_and_stats(db, room, student, other_student, admin):
    first = booking_service.submit(db, candidate("09:00-10:00"), student)
    booking_service.submit(db, candidate("10:00-11:00"), other_student)
    booking_service.submit(db, candidate("11:00-12:00"), student)
    booking_service.review(db, first.id, "rejected", admin)

    mine, total = booking_service.list_user_bookings(db, "RIYA@campus.edu")
    assert total == 2
    assert {b.time_slot for b in mine} == {"09:00-10:00", "11:00-12:00"}

    pending_mine, total = booking_service.list_user_bookings(db, student.email, status="pending")
    assert total == 1

    page, total = booking_service.list_bookings(db, building="A Block", page=2, limit=2)
    assert total == 3
    assert len(page) == 1

    assert booking_service.booking_stats(db) == {"total": 3, "pending": 2, "approved": 0, "rejected": 1}
