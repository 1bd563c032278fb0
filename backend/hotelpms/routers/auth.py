"""
Authentication routes
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from hotelpms.database import get_db
from hotelpms.models.ontology import Employee
from hotelpms.models.schemas import EmployeeResponse, LoginRequest, LoginResponse
from hotelpms.security.auth import authenticate, create_access_token, get_current_user
from hotelpms.security.permissions import permissions_for

router = APIRouter(prefix="/auth", tags=["Auth"])


def employee_response(employee: Employee) -> EmployeeResponse:
    return EmployeeResponse(
        id=employee.id,
        username=employee.username,
        name=employee.name,
        phone=employee.phone,
        role=employee.role,
        is_active=bool(employee.is_active),
        created_at=employee.created_at,
        permissions=sorted(permissions_for(employee.role)),
    )


@router.post("/login", response_model=LoginResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    employee = authenticate(db, data.username, data.password)
    if not employee:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password"
        )
    if not employee.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is deactivated"
        )
    return LoginResponse(
        access_token=create_access_token(employee.id, employee.role),
        employee=employee_response(employee),
    )


@router.get("/me", response_model=EmployeeResponse)
def get_current_user_info(current_user: Employee = Depends(get_current_user)):
    return employee_response(current_user)
