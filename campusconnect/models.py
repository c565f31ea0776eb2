# campusconnect/models.py
import datetime
import enum

from sqlalchemy import (
    JSON, Boolean, Column, Date, DateTime, ForeignKey, Index, Integer, String, Text, Time,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from campusconnect.database import Base


def utcnow():
    return datetime.datetime.now(datetime.timezone.utc)


class Building(str, enum.Enum):
    A_BLOCK = "A Block"
    C_BLOCK = "C Block"
    MAIN_AUDITORIUM = "Main Auditorium"


class Amenity(str, enum.Enum):
    PROJECTOR = "Projector"
    WIFI = "WiFi"
    WHITEBOARD = "Whiteboard"
    AC = "AC"
    SOUND_SYSTEM = "Sound System"
    SMART_BOARD = "Smart Board"
    VIDEO_CONFERENCING = "Video Conferencing"


class Role(str, enum.Enum):
    STUDENT = "student"
    FACULTY = "faculty"
    ADMIN = "admin"


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# Statuses that hold their interval against other requests
ADMITTED_STATUSES = (BookingStatus.PENDING.value, BookingStatus.APPROVED.value)
REVIEWER_ROLES = (Role.ADMIN.value, Role.FACULTY.value)


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)
    student_id = Column(String, nullable=False)
    department = Column(String, nullable=False)
    role = Column(String, default=Role.STUDENT.value, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    @property
    def is_admin(self):
        return self.role == Role.ADMIN.value


class Room(Base):
    __tablename__ = "rooms"
    __table_args__ = (
        UniqueConstraint("building", "room_number", name="uq_room_building_number"),
    )

    id = Column(Integer, primary_key=True, index=True)
    building = Column(String, nullable=False)
    room_number = Column(String, nullable=False)
    capacity = Column(Integer, nullable=False)
    amenities = Column(JSON, default=list)
    is_active = Column(Boolean, default=True, nullable=False)
    location = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class BookingRequest(Base):
    __tablename__ = "booking_requests"
    __table_args__ = (
        Index("ix_booking_requests_room_date", "building", "room", "date"),
    )

    id = Column(Integer, primary_key=True, index=True)

    # Requester snapshot, captured at submission time
    name = Column(String, nullable=False)
    email = Column(String, index=True, nullable=False)
    student_id = Column(String, nullable=False)
    department = Column(String, nullable=False)

    building = Column(String, nullable=False)
    room = Column(String, nullable=False)
    date = Column(Date, nullable=False)
    time_slot = Column(String, nullable=False)
    purpose = Column(Text, nullable=False)

    status = Column(String, default=BookingStatus.PENDING.value, index=True, nullable=False)
    request_date = Column(DateTime(timezone=True), default=utcnow)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    reviewed_by = Column(String, nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    review_notes = Column(Text, nullable=True)

    occupancy = relationship(
        "SlotOccupancy", back_populates="booking", cascade="all, delete-orphan"
    )


class SlotOccupancy(Base):
    """One row per base slot held by an admitted booking request."""
    __tablename__ = "slot_occupancy"
    __table_args__ = (
        # Two admitted requests can never hold the same base slot
        UniqueConstraint("building", "room", "date", "slot_start", name="uq_slot_occupancy"),
    )

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(
        Integer, ForeignKey("booking_requests.id", ondelete="CASCADE"), nullable=False, index=True
    )
    building = Column(String, nullable=False)
    room = Column(String, nullable=False)
    date = Column(Date, nullable=False)
    slot_start = Column(Time, nullable=False)

    booking = relationship("BookingRequest", back_populates="occupancy")
