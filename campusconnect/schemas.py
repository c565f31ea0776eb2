# campusconnect/schemas.py
import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from campusconnect.models import Amenity, Building, Role


class CamelModel(BaseModel):
    # JSON keys stay camelCase (studentId, timeSlot, reviewNotes, ...)
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class UserCreate(CamelModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    student_id: str = Field(min_length=1)
    department: str = Field(min_length=1)

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class UserOut(CamelModel):
    id: int
    name: str
    email: str
    student_id: str
    department: str
    role: str
    is_active: bool
    created_at: Optional[dt.datetime] = None

class RoleUpdate(BaseModel):
    role: Role


class RoomCreate(CamelModel):
    building: Building
    room_number: str = Field(min_length=1)
    capacity: int = Field(gt=0)
    amenities: List[Amenity] = []
    is_active: bool = True
    location: str = Field(min_length=1)

class RoomOut(CamelModel):
    id: int
    building: str
    room_number: str
    capacity: int
    amenities: List[str] = []
    is_active: bool
    location: str


class BookingCreate(CamelModel):
    building: str
    room: str
    date: dt.date
    time_slot: str
    purpose: str

class BookingStatusUpdate(CamelModel):
    status: str
    review_notes: Optional[str] = None

class BookingOut(CamelModel):
    id: int
    name: str
    email: str
    student_id: str
    department: str
    building: str
    room: str
    date: dt.date
    time_slot: str
    purpose: str
    status: str
    request_date: Optional[dt.datetime] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[dt.datetime] = None
    review_notes: Optional[str] = None


class Pagination(BaseModel):
    current: int
    pages: int
    total: int

class BookingPage(BaseModel):
    data: List[BookingOut]
    pagination: Pagination

class UserPage(BaseModel):
    data: List[UserOut]
    pagination: Pagination


class AvailabilityOut(CamelModel):
    building: str
    room: str
    date: dt.date
    available_slots: List[str]
    booked_intervals: List[str]

class BookingStats(BaseModel):
    total: int
    pending: int
    approved: int
    rejected: int

class DepartmentCount(BaseModel):
    department: str
    count: int

class UserStats(CamelModel):
    total_users: int
    total_students: int
    total_faculty: int
    total_admins: int
    inactive_users: int
    departments: List[DepartmentCount]
