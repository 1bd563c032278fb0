"""
POS routes - item catalogue and charges to guest folios
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from hotelpms.database import get_db
from hotelpms.models.ontology import Employee, LineItemCategory
from hotelpms.models.schemas import (
    InvoiceResponse, PosCharge, PosItemCreate, PosItemResponse, PosItemUpdate
)
from hotelpms.routers.errors import service_errors
from hotelpms.security.auth import get_current_user, require_permission
from hotelpms.security.permissions import MANAGE_BILLING, MANAGE_POS
from hotelpms.services.pos_service import PosService

router = APIRouter(prefix="/pos", tags=["POS"])


def _item_response(service: PosService, item) -> PosItemResponse:
    return PosItemResponse(**service.get_item_detail(item))


@router.get("/items", response_model=List[PosItemResponse])
def list_items(
    category: Optional[LineItemCategory] = None,
    is_active: Optional[bool] = True,
    is_available: Optional[bool] = None,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    service = PosService(db)
    return [_item_response(service, item) for item in service.get_items(category, is_active, is_available)]


@router.get("/items/{item_id}", response_model=PosItemResponse)
def get_item(
    item_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    service = PosService(db)
    item = service.get_item(item_id)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="POS item not found")
    return _item_response(service, item)


@router.post("/items", response_model=PosItemResponse, status_code=status.HTTP_201_CREATED)
def create_item(
    data: PosItemCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_permission(MANAGE_POS))
):
    service = PosService(db)
    with service_errors():
        item = service.create_item(data, current_user.id)
    return _item_response(service, item)


@router.put("/items/{item_id}", response_model=PosItemResponse)
def update_item(
    item_id: int,
    data: PosItemUpdate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_permission(MANAGE_POS))
):
    service = PosService(db)
    with service_errors():
        item = service.update_item(item_id, data)
    return _item_response(service, item)


@router.delete("/items/{item_id}", response_model=PosItemResponse)
def deactivate_item(
    item_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_permission(MANAGE_POS))
):
    service = PosService(db)
    with service_errors():
        item = service.deactivate_item(item_id)
    return _item_response(service, item)


@router.post("/charges", response_model=InvoiceResponse)
def charge_to_folio(
    data: PosCharge,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_permission(MANAGE_POS, MANAGE_BILLING))
):
    """Post an item to a guest folio; returns the updated invoice"""
    service = PosService(db)
    with service_errors():
        invoice = service.charge_to_folio(data, current_user.id)
    return InvoiceResponse(**service.billing.get_invoice_detail(invoice))
