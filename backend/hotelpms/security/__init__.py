# Security module
from hotelpms.security.auth import (
    get_current_user, require_permission, require_role, require_manager,
    create_access_token, get_password_hash, verify_password
)

__all__ = [
    "get_current_user", "require_permission", "require_role", "require_manager",
    "create_access_token", "get_password_hash", "verify_password",
]
