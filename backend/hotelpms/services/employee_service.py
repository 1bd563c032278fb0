"""
Employee service - staff accounts
"""
from typing import List, Optional
import logging

from sqlalchemy.orm import Session

from hotelpms.database import transaction
from hotelpms.models.ontology import Employee, EmployeeRole
from hotelpms.models.schemas import EmployeeCreate, EmployeeUpdate, PasswordReset
from hotelpms.security.auth import get_password_hash
from hotelpms.services.errors import NotFoundError

logger = logging.getLogger(__name__)


class EmployeeService:
    """Employee service"""

    def __init__(self, db: Session):
        self.db = db

    def get_employees(self, role: Optional[EmployeeRole] = None,
                      is_active: Optional[bool] = None) -> List[Employee]:
        query = self.db.query(Employee)

        if role:
            query = query.filter(Employee.role == role)
        if is_active is not None:
            query = query.filter(Employee.is_active == is_active)

        return query.order_by(Employee.created_at.desc(), Employee.id.desc()).all()

    def get_employee(self, employee_id: int) -> Optional[Employee]:
        return self.db.query(Employee).filter(Employee.id == employee_id).first()

    def get_employee_by_username(self, username: str) -> Optional[Employee]:
        return self.db.query(Employee).filter(Employee.username == username).first()

    def require_employee(self, employee_id: int) -> Employee:
        employee = self.get_employee(employee_id)
        if not employee:
            raise NotFoundError("Employee", employee_id)
        return employee

    def _active_admin_count(self) -> int:
        return self.db.query(Employee).filter(
            Employee.role == EmployeeRole.ADMIN,
            Employee.is_active == True  # noqa: E712
        ).count()

    def _ensure_not_last_admin(self, employee: Employee) -> None:
        """At least one active admin must remain to manage accounts"""
        if EmployeeRole(employee.role) == EmployeeRole.ADMIN and employee.is_active:
            if self._active_admin_count() <= 1:
                raise ValueError("At least one active admin account is required")

    def create_employee(self, data: EmployeeCreate) -> Employee:
        if self.get_employee_by_username(data.username):
            raise ValueError(f"Username '{data.username}' already exists")

        employee = Employee(
            username=data.username,
            password_hash=get_password_hash(data.password),
            name=data.name,
            phone=data.phone,
            role=data.role,
            is_active=True,
        )
        with transaction(self.db):
            self.db.add(employee)
        self.db.refresh(employee)
        logger.info(f"Employee {employee.username} created with role {EmployeeRole(employee.role).value}")
        return employee

    def update_employee(self, employee_id: int, data: EmployeeUpdate,
                        operator: Optional[Employee] = None) -> Employee:
        """
        Update name, phone, role or active flag

        Raises:
            NotFoundError: unknown employee
            ValueError: demoting or deactivating the last active admin, or
                an operator deactivating their own account
        """
        employee = self.require_employee(employee_id)
        update_data = data.model_dump(exclude_unset=True)

        if update_data.get("role") not in (None, EmployeeRole.ADMIN):
            self._ensure_not_last_admin(employee)
        if update_data.get("is_active") is False:
            if operator is not None and operator.id == employee.id:
                raise ValueError("Cannot deactivate your own account")
            self._ensure_not_last_admin(employee)

        with transaction(self.db):
            for key, value in update_data.items():
                if value is None and key in ("name", "role", "is_active"):
                    continue
                setattr(employee, key, value)
        self.db.refresh(employee)
        logger.info(f"Employee {employee.username} updated: {sorted(update_data)}")
        return employee

    def reset_password(self, employee_id: int, data: PasswordReset) -> Employee:
        employee = self.require_employee(employee_id)
        with transaction(self.db):
            employee.password_hash = get_password_hash(data.new_password)
        logger.info(f"Password reset for employee {employee.username}")
        return employee

    def deactivate_employee(self, employee_id: int, operator: Optional[Employee] = None) -> Employee:
        """Accounts are never deleted, only deactivated"""
        employee = self.require_employee(employee_id)
        if operator is not None and operator.id == employee.id:
            raise ValueError("Cannot deactivate your own account")
        self._ensure_not_last_admin(employee)

        with transaction(self.db):
            employee.is_active = False
        self.db.refresh(employee)
        logger.info(f"Employee {employee.username} deactivated")
        return employee
