"""
Guest routes
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from hotelpms.database import get_db
from hotelpms.models.ontology import Employee, GuestTier
from hotelpms.models.schemas import GuestCreate, GuestUpdate, GuestResponse, LoyaltyPointsAdd
from hotelpms.routers.errors import service_errors
from hotelpms.security.auth import get_current_user, require_permission
from hotelpms.security.permissions import MANAGE_GUESTS
from hotelpms.services.guest_service import GuestService

router = APIRouter(prefix="/guests", tags=["Guests"])


@router.get("", response_model=List[GuestResponse])
def list_guests(
    search: Optional[str] = None,
    tier: Optional[GuestTier] = None,
    is_blacklisted: Optional[bool] = None,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    """List guests, optionally matching name, email or phone"""
    service = GuestService(db)
    return service.get_guests(search, tier, is_blacklisted, limit)


@router.get("/{guest_id}", response_model=GuestResponse)
def get_guest(
    guest_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    guest = GuestService(db).get_guest(guest_id)
    if not guest:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Guest not found")
    return guest


@router.post("", response_model=GuestResponse, status_code=status.HTTP_201_CREATED)
def create_guest(
    data: GuestCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_permission(MANAGE_GUESTS))
):
    with service_errors():
        return GuestService(db).create_guest(data)


@router.put("/{guest_id}", response_model=GuestResponse)
def update_guest(
    guest_id: int,
    data: GuestUpdate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_permission(MANAGE_GUESTS))
):
    with service_errors():
        return GuestService(db).update_guest(guest_id, data)


@router.post("/{guest_id}/loyalty", response_model=GuestResponse)
def add_loyalty_points(
    guest_id: int,
    data: LoyaltyPointsAdd,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_permission(MANAGE_GUESTS))
):
    """Credit loyalty points; the tier upgrades when a threshold is crossed"""
    with service_errors():
        return GuestService(db).add_loyalty_points(guest_id, data.points)
