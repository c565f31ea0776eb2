# campusconnect/routes/rooms.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from campusconnect import models, database, schemas, auth
from campusconnect.exceptions import ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/rooms",
    tags=["Rooms"]
)

# Public - List Rooms (active only unless asked otherwise)
@router.get("/", response_model=List[schemas.RoomOut])
def list_rooms(
    building: Optional[models.Building] = None,
    is_active: bool = True,
    db: Session = Depends(database.get_db)
):
    query = db.query(models.Room).filter(models.Room.is_active.is_(is_active))
    if building:
        query = query.filter(models.Room.building == building.value)
    return query.order_by(models.Room.building, models.Room.room_number).all()

# Public - Active Rooms of one Building
@router.get("/building/{building}", response_model=List[schemas.RoomOut])
def list_building_rooms(building: models.Building, db: Session = Depends(database.get_db)):
    return db.query(models.Room).filter(
        models.Room.building == building.value,
        models.Room.is_active.is_(True)
    ).order_by(models.Room.room_number).all()

@router.get("/{room_id}", response_model=schemas.RoomOut)
def get_room(room_id: int, db: Session = Depends(database.get_db)):
    room = db.query(models.Room).filter(models.Room.id == room_id).first()
    if not room:
        raise HTTPException(status_code=404, detail="Room not found")
    return room

# Admin Only - Create a Room
@router.post("/", response_model=schemas.RoomOut, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(auth.verify_admin_user)])
def create_room(room: schemas.RoomCreate, db: Session = Depends(database.get_db)):
    existing_room = db.query(models.Room).filter(
        models.Room.building == room.building.value,
        models.Room.room_number == room.room_number
    ).first()
    if existing_room:
        raise HTTPException(status_code=400, detail="Room already exists in this building")

    new_room = models.Room(
        building=room.building.value,
        room_number=room.room_number,
        capacity=room.capacity,
        amenities=[a.value for a in room.amenities],
        is_active=room.is_active,
        location=room.location
    )
    db.add(new_room)
    db.commit()
    db.refresh(new_room)
    logger.info("Room %s/%s created", new_room.building, new_room.room_number)
    return new_room

# Admin Only - Update a Room (building and number are fixed once created)
@router.put("/{room_id}", response_model=schemas.RoomOut, dependencies=[Depends(auth.verify_admin_user)])
def update_room(room_id: int, room: schemas.RoomCreate, db: Session = Depends(database.get_db)):
    room_to_update = db.query(models.Room).filter(models.Room.id == room_id).first()
    if not room_to_update:
        raise HTTPException(status_code=404, detail="Room not found")

    if room_to_update.building != room.building.value or room_to_update.room_number != room.room_number:
        raise ValidationError("Building and room number cannot change; create a new room instead")

    room_to_update.capacity = room.capacity
    room_to_update.amenities = [a.value for a in room.amenities]
    room_to_update.is_active = room.is_active
    room_to_update.location = room.location

    db.commit()
    db.refresh(room_to_update)
    return room_to_update

# Admin Only - Delete a Room
@router.delete("/{room_id}", dependencies=[Depends(auth.verify_admin_user)])
def delete_room(room_id: int, db: Session = Depends(database.get_db)):
    room_to_delete = db.query(models.Room).filter(models.Room.id == room_id).first()
    if not room_to_delete:
        raise HTTPException(status_code=404, detail="Room not found")

    db.delete(room_to_delete)
    db.commit()
    logger.info("Room %s deleted", room_id)
    return {"message": "Room deleted successfully"}
