"""Field validation for admin users.

Validators are plain functions taking an ``AdminUser`` and returning a list
of ``FieldError``. ``validate`` runs them in a fixed order and collects every
error so a caller can report all problems at once.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from petition_admin.models.admin_user import MIN_PASSWORD_LENGTH, AdminRole, AdminUser

# local-part "@" domain containing at least one dot, no whitespace
EMAIL_PATTERN = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")


class ErrorReason(StrEnum):
    """Why a field failed validation."""

    BLANK = "blank"
    TOO_SHORT = "too_short"
    WEAK = "weak"
    MISMATCH = "mismatch"
    INCLUSION = "inclusion"
    TAKEN = "taken"
    INVALID_FORMAT = "invalid_format"


@dataclass(frozen=True)
class FieldError:
    field: str
    reason: ErrorReason

    def __str__(self) -> str:
        return f"{self.field} {self.reason}"


class AdminUserValidationError(Exception):
    """Raised when an admin user fails validation; nothing is persisted."""

    def __init__(self, errors: list[FieldError]):
        self.errors = list(errors)
        super().__init__("Invalid admin user: " + ", ".join(str(e) for e in self.errors))

    def as_dict(self) -> dict[str, list[str]]:
        """Group reasons by field, preserving validation order."""
        grouped: dict[str, list[str]] = {}
        for error in self.errors:
            grouped.setdefault(error.field, []).append(error.reason.value)
        return grouped


def _is_blank(value: str | None) -> bool:
    return value is None or not str(value).strip()


def password_is_complex(password: str) -> bool:
    """Digit, lowercase, uppercase and a non-alphanumeric character are all present."""
    return (
        any(c.isdigit() for c in password)
        and any(c.islower() for c in password)
        and any(c.isupper() for c in password)
        and any(not c.isalnum() for c in password)
    )


def validate_email(user: AdminUser, email_taken: bool = False) -> list[FieldError]:
    if _is_blank(user.email):
        return [FieldError("email", ErrorReason.BLANK)]
    errors = []
    if not EMAIL_PATTERN.fullmatch(user.email):
        errors.append(FieldError("email", ErrorReason.INVALID_FORMAT))
    if email_taken:
        errors.append(FieldError("email", ErrorReason.TAKEN))
    return errors


def validate_password(user: AdminUser, require_password: bool = True) -> list[FieldError]:
    password = user.password
    if not password:
        if require_password:
            return [FieldError("password", ErrorReason.BLANK)]
        return []
    errors = []
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(FieldError("password", ErrorReason.TOO_SHORT))
    if not password_is_complex(password):
        errors.append(FieldError("password", ErrorReason.WEAK))
    return errors


def validate_password_confirmation(user: AdminUser) -> list[FieldError]:
    if user.password_confirmation is None or not user.password:
        return []
    if user.password_confirmation != user.password:
        return [FieldError("password_confirmation", ErrorReason.MISMATCH)]
    return []


def validate_first_name(user: AdminUser) -> list[FieldError]:
    if _is_blank(user.first_name):
        return [FieldError("first_name", ErrorReason.BLANK)]
    return []


def validate_last_name(user: AdminUser) -> list[FieldError]:
    if _is_blank(user.last_name):
        return [FieldError("last_name", ErrorReason.BLANK)]
    return []


def validate_role(user: AdminUser) -> list[FieldError]:
    if user.role not in {role.value for role in AdminRole}:
        return [FieldError("role", ErrorReason.INCLUSION)]
    return []


def validate_failed_login_count(user: AdminUser) -> list[FieldError]:
    if user.failed_login_count is not None and user.failed_login_count < 0:
        return [FieldError("failed_login_count", ErrorReason.INVALID_FORMAT)]
    return []


# Validators that need no context beyond the record, in reporting order
RECORD_VALIDATORS: tuple[Callable[[AdminUser], list[FieldError]], ...] = (
    validate_password_confirmation,
    validate_first_name,
    validate_last_name,
    validate_role,
    validate_failed_login_count,
)


def validate(
    user: AdminUser,
    *,
    email_taken: bool = False,
    require_password: bool = True,
) -> list[FieldError]:
    """Run every validator against ``user``. An empty list means valid.

    Args:
        user: The record to check, with any new plaintext password set on
            its transient ``password`` attribute.
        email_taken: Whether another record already uses this email,
            ignoring case. The caller looks this up.
        require_password: Whether a password must be supplied, i.e. the
            record is new or its password is being changed.
    """
    errors = validate_email(user, email_taken=email_taken)
    errors.extend(validate_password(user, require_password=require_password))
    for validator in RECORD_VALIDATORS:
        errors.extend(validator(user))
    return errors
