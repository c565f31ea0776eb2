# campusconnect/seed.py
# Run: python -m campusconnect.seed
# Creates missing tables, then inserts campus rooms and the default admin if absent.
import logging

from sqlalchemy.orm import Session

from campusconnect import auth, models
from campusconnect.config import settings
from campusconnect.database import Base, SessionLocal, engine

logger = logging.getLogger(__name__)

CLASSROOM_AMENITIES = ["Projector", "WiFi", "Whiteboard", "AC"]
HALL_AMENITIES = ["Projector", "WiFi", "Sound System", "AC", "Smart Board"]


def campus_rooms():
    """(building, room number, capacity, location, amenities) for every bookable room."""
    rooms = []

    a_block = ["303", "304"] + [str(n) for n in range(401, 412)] + [str(n) for n in range(501, 509)]
    for number in a_block:
        rooms.append(("A Block", number, 120, "Academic Building A", CLASSROOM_AMENITIES))
    rooms.append(("A Block", "314", 150, "Academic Building A - Mini Auditorium", HALL_AMENITIES))

    for number in ("101", "102", "201", "202", "301", "302"):
        rooms.append(("C Block", number, 120, "Academic Building C", CLASSROOM_AMENITIES))

    rooms.append((
        "Main Auditorium", "Auditorium", 350, "Central Campus - Main Auditorium",
        HALL_AMENITIES + ["Video Conferencing"]
    ))
    return rooms


def seed_rooms(db: Session) -> int:
    added = 0
    for building, number, capacity, location, amenities in campus_rooms():
        exists = db.query(models.Room).filter(
            models.Room.building == building,
            models.Room.room_number == number
        ).first()
        if exists:
            continue
        db.add(models.Room(
            building=building,
            room_number=number,
            capacity=capacity,
            location=location,
            amenities=list(amenities)
        ))
        added += 1
    db.commit()
    return added


def seed_admin(db: Session) -> bool:
    email = settings.SEED_ADMIN_EMAIL.lower()
    if db.query(models.User).filter(models.User.email == email).first():
        return False
    db.add(models.User(
        name="Administrator",
        email=email,
        password=auth.get_password_hash(settings.SEED_ADMIN_PASSWORD),
        student_id="ADMIN001",
        department="Administration",
        role=models.Role.ADMIN.value
    ))
    db.commit()
    return True


def seed_database():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        rooms_added = seed_rooms(db)
        admin_added = seed_admin(db)
    finally:
        db.close()
    logger.info("Seeded %d rooms%s", rooms_added, " and the default admin" if admin_added else "")


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    seed_database()
