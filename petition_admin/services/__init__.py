# Petition Admin Services
from petition_admin.services.admin_user import AdminUserService
from petition_admin.services.auth import (
    AccountDisabledError,
    AuthError,
    AuthService,
    InvalidCredentialsError,
    login,
)
from petition_admin.services.policy import (
    AdminUserValidationError,
    ErrorReason,
    FieldError,
    validate,
)

__all__ = [
    "AccountDisabledError",
    "AdminUserService",
    "AdminUserValidationError",
    "AuthError",
    "AuthService",
    "ErrorReason",
    "FieldError",
    "InvalidCredentialsError",
    "login",
    "validate",
]
