"""
Employee management routes - admin only
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from hotelpms.database import get_db
from hotelpms.models.ontology import Employee, EmployeeRole
from hotelpms.models.schemas import EmployeeCreate, EmployeeUpdate, PasswordReset, EmployeeResponse
from hotelpms.routers.auth import employee_response
from hotelpms.routers.errors import service_errors
from hotelpms.security.auth import require_permission
from hotelpms.security.permissions import MANAGE_USERS
from hotelpms.services.employee_service import EmployeeService

router = APIRouter(prefix="/employees", tags=["Employees"])


@router.get("", response_model=List[EmployeeResponse])
def list_employees(
    role: Optional[EmployeeRole] = None,
    is_active: Optional[bool] = None,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_permission(MANAGE_USERS))
):
    service = EmployeeService(db)
    return [employee_response(e) for e in service.get_employees(role, is_active)]


@router.get("/{employee_id}", response_model=EmployeeResponse)
def get_employee(
    employee_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_permission(MANAGE_USERS))
):
    service = EmployeeService(db)
    employee = service.get_employee(employee_id)
    if not employee:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")
    return employee_response(employee)


@router.post("", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
def create_employee(
    data: EmployeeCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_permission(MANAGE_USERS))
):
    service = EmployeeService(db)
    with service_errors():
        employee = service.create_employee(data)
    return employee_response(employee)


@router.put("/{employee_id}", response_model=EmployeeResponse)
def update_employee(
    employee_id: int,
    data: EmployeeUpdate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_permission(MANAGE_USERS))
):
    """Change name, phone, role or active flag"""
    service = EmployeeService(db)
    with service_errors():
        employee = service.update_employee(employee_id, data, operator=current_user)
    return employee_response(employee)


@router.post("/{employee_id}/reset-password")
def reset_password(
    employee_id: int,
    data: PasswordReset,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_permission(MANAGE_USERS))
):
    service = EmployeeService(db)
    with service_errors():
        service.reset_password(employee_id, data)
    return {"message": "Password reset"}


@router.delete("/{employee_id}", response_model=EmployeeResponse)
def deactivate_employee(
    employee_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_permission(MANAGE_USERS))
):
    """Deactivate an account; staff records are never deleted"""
    service = EmployeeService(db)
    with service_errors():
        employee = service.deactivate_employee(employee_id, operator=current_user)
    return employee_response(employee)
