# campusconnect/routes/bookings.py
import math
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from campusconnect import models, database, schemas, auth
from campusconnect.services import bookings as booking_service
from campusconnect.services.availability import get_availability

router = APIRouter(
    prefix="/bookings",
    tags=["Bookings"]
)


def _page(items, total, page, limit):
    return {
        "data": items,
        "pagination": {
            "current": page,
            "pages": math.ceil(total / limit),
            "total": total
        }
    }

# Free base slots and booked intervals for a room on a date
@router.get("/availability", response_model=schemas.AvailabilityOut)
def check_availability(
    building: str,
    room: str,
    date: str,
    db: Session = Depends(database.get_db),
    current_user: models.User = Depends(auth.get_current_user)
):
    availability = get_availability(db, building, room, date)
    return schemas.AvailabilityOut(
        building=availability.building,
        room=availability.room,
        date=availability.date,
        available_slots=[str(slot) for slot in availability.available_slots],
        booked_intervals=[str(interval) for interval in availability.booked_intervals],
    )

# Current user's own booking requests
@router.get("/my-bookings", response_model=schemas.BookingPage)
def list_my_bookings(
    status: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(database.get_db),
    current_user: models.User = Depends(auth.get_current_user)
):
    items, total = booking_service.list_user_bookings(db, current_user.email, status, page, limit)
    return _page(items, total, page, limit)

# Admin/Faculty - Booking counts per status
@router.get("/stats", response_model=schemas.BookingStats, dependencies=[Depends(auth.verify_reviewer)])
def booking_stats(db: Session = Depends(database.get_db)):
    return booking_service.booking_stats(db)

# Admin/Faculty - All booking requests
@router.get("/", response_model=schemas.BookingPage, dependencies=[Depends(auth.verify_reviewer)])
def list_all_bookings(
    status: Optional[str] = None,
    building: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(database.get_db)
):
    items, total = booking_service.list_bookings(db, status, building, page, limit)
    return _page(items, total, page, limit)

@router.get("/{booking_id}", response_model=schemas.BookingOut)
def get_booking(
    booking_id: int,
    db: Session = Depends(database.get_db),
    current_user: models.User = Depends(auth.get_current_user)
):
    return booking_service.get_booking(db, booking_id)

# Submit a booking request (pending until reviewed)
@router.post("/", response_model=schemas.BookingOut, status_code=status.HTTP_201_CREATED)
def create_booking(
    booking: schemas.BookingCreate,
    db: Session = Depends(database.get_db),
    current_user: models.User = Depends(auth.get_current_user)
):
    return booking_service.submit(db, booking, current_user)

# Admin/Faculty - Approve or reject a pending request
@router.patch("/{booking_id}/status", response_model=schemas.BookingOut)
def update_booking_status(
    booking_id: int,
    update: schemas.BookingStatusUpdate,
    db: Session = Depends(database.get_db),
    current_user: models.User = Depends(auth.verify_reviewer)
):
    return booking_service.review(db, booking_id, update.status, current_user, update.review_notes)

# Owner or Admin - Delete a booking request in any state
@router.delete("/{booking_id}")
def delete_booking(
    booking_id: int,
    db: Session = Depends(database.get_db),
    current_user: models.User = Depends(auth.get_current_user)
):
    booking_service.remove(db, booking_id, current_user)
    return {"message": "Booking request deleted successfully"}
