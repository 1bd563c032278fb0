"""
Authentication and authorization
JWT bearer tokens, bcrypt password hashes, permission-code checks.
"""
import bcrypt
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.orm import Session
from hotelpms.config import settings
from hotelpms.database import get_db
from hotelpms.models.ontology import Employee, EmployeeRole
from hotelpms.security.permissions import has_permission

logger = logging.getLogger(__name__)

security = HTTPBearer()


def get_password_hash(password: str) -> str:
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))


def create_access_token(employee_id: int, role: EmployeeRole,
                        expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {
        "sub": str(employee_id),
        "role": role.value if isinstance(role, EmployeeRole) else str(role),
        "exp": expire
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials"
        )


def authenticate(db: Session, username: str, password: str) -> Optional[Employee]:
    """Return the employee for valid credentials, otherwise None"""
    employee = db.query(Employee).filter(Employee.username == username).first()
    if not employee or not verify_password(password, employee.password_hash):
        logger.warning(f"Failed login for {username}")
        return None
    return employee


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> Employee:
    payload = decode_token(credentials.credentials)

    try:
        employee_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials"
        )
    employee = db.query(Employee).filter(Employee.id == employee_id).first()

    if not employee:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )

    if not employee.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is deactivated"
        )

    return employee


def require_permission(*permission_codes: str):
    """Dependency: the current user must hold any one of ``permission_codes``"""
    async def permission_checker(current_user: Employee = Depends(get_current_user)):
        if any(has_permission(current_user.role, code) for code in permission_codes):
            return current_user
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Missing permission: {', '.join(permission_codes)}"
        )
    return permission_checker


def require_role(allowed_roles: List[EmployeeRole]):
    """Dependency: the current user must have one of ``allowed_roles``"""
    async def role_checker(current_user: Employee = Depends(get_current_user)):
        if current_user.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient role"
            )
        return current_user
    return role_checker


require_manager = require_role([EmployeeRole.ADMIN, EmployeeRole.MANAGER])
