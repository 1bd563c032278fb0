"""
Room routes
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from hotelpms.database import get_db
from hotelpms.models.ontology import Employee, RoomStatus
from hotelpms.models.schemas import (
    RoomCreate, RoomUpdate, RoomResponse, RoomStatusUpdate, RoomCleaned, RoomMaintenance
)
from hotelpms.routers.errors import service_errors
from hotelpms.security.auth import get_current_user, require_manager, require_permission
from hotelpms.security.permissions import MANAGE_ROOMS
from hotelpms.services.room_service import RoomService

router = APIRouter(prefix="/rooms", tags=["Rooms"])


@router.get("", response_model=List[RoomResponse])
def list_rooms(
    status: Optional[RoomStatus] = None,
    floor: Optional[int] = None,
    is_active: Optional[bool] = True,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    service = RoomService(db)
    rooms = service.get_rooms(status, floor, is_active)
    return [RoomResponse(**service.get_room_detail(room)) for room in rooms]


@router.get("/available", response_model=List[RoomResponse])
def get_available_rooms(
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    """Rooms that can take a new booking now"""
    service = RoomService(db)
    return [RoomResponse(**service.get_room_detail(room)) for room in service.get_available_rooms()]


@router.get("/{room_id}", response_model=RoomResponse)
def get_room(
    room_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    service = RoomService(db)
    room = service.get_room(room_id)
    if not room:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    return RoomResponse(**service.get_room_detail(room))


@router.post("", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
def create_room(
    data: RoomCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_manager)
):
    service = RoomService(db)
    with service_errors():
        room = service.create_room(data, current_user.id)
    return RoomResponse(**service.get_room_detail(room))


@router.put("/{room_id}", response_model=RoomResponse)
def update_room(
    room_id: int,
    data: RoomUpdate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_manager)
):
    service = RoomService(db)
    with service_errors():
        room = service.update_room(room_id, data)
    return RoomResponse(**service.get_room_detail(room))


@router.patch("/{room_id}/status", response_model=RoomResponse)
def update_room_status(
    room_id: int,
    data: RoomStatusUpdate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_permission(MANAGE_ROOMS))
):
    """Set any room status directly"""
    service = RoomService(db)
    with service_errors():
        room = service.update_room_status(room_id, data.status, current_user.id)
    return RoomResponse(**service.get_room_detail(room))


@router.post("/{room_id}/clean", response_model=RoomResponse)
def mark_room_cleaned(
    room_id: int,
    data: RoomCleaned,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_permission(MANAGE_ROOMS))
):
    service = RoomService(db)
    with service_errors():
        room = service.mark_cleaned(room_id, current_user.id, data.notes)
    return RoomResponse(**service.get_room_detail(room))


@router.post("/{room_id}/maintenance", response_model=RoomResponse)
def flag_room_maintenance(
    room_id: int,
    data: RoomMaintenance,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_permission(MANAGE_ROOMS))
):
    service = RoomService(db)
    with service_errors():
        room = service.flag_maintenance(room_id, current_user.id, data.notes)
    return RoomResponse(**service.get_room_detail(room))


@router.post("/{room_id}/maintenance/complete", response_model=RoomResponse)
def complete_room_maintenance(
    room_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_permission(MANAGE_ROOMS))
):
    """Room goes back to dirty and needs cleaning before sale"""
    service = RoomService(db)
    with service_errors():
        room = service.complete_maintenance(room_id, current_user.id)
    return RoomResponse(**service.get_room_detail(room))


@router.post("/{room_id}/deactivate", response_model=RoomResponse)
def deactivate_room(
    room_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_manager)
):
    service = RoomService(db)
    with service_errors():
        room = service.deactivate_room(room_id)
    return RoomResponse(**service.get_room_detail(room))
