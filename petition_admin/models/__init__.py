# Petition Admin Models
from petition_admin.models.admin_user import (
    LOCKOUT_THRESHOLD,
    MIN_PASSWORD_LENGTH,
    PASSWORD_MAX_AGE_MONTHS,
    ROLE_CAPABILITIES,
    AdminRole,
    AdminUser,
    Capability,
)
from petition_admin.models.base import BaseModel

__all__ = [
    "AdminRole",
    "AdminUser",
    "BaseModel",
    "Capability",
    "LOCKOUT_THRESHOLD",
    "MIN_PASSWORD_LENGTH",
    "PASSWORD_MAX_AGE_MONTHS",
    "ROLE_CAPABILITIES",
]
