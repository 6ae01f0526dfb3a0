"""Admin user model: credentials, role and lockout state."""

import calendar
from datetime import UTC, datetime
from enum import StrEnum

from sqlalchemy import Boolean, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from petition_admin.models.base import BaseModel, UTCDateTime

MIN_PASSWORD_LENGTH = 8
PASSWORD_MAX_AGE_MONTHS = 9
LOCKOUT_THRESHOLD = 5


class AdminRole(StrEnum):
    """Roles an admin user can hold."""

    SYSADMIN = "sysadmin"
    MODERATOR = "moderator"


class Capability(StrEnum):
    """Permissions granted through a role."""

    TAKE_CONTENT_DOWN = "take_content_down"
    MANAGE_ROLES = "manage_roles"


ROLE_CAPABILITIES: dict[AdminRole, frozenset[Capability]] = {
    AdminRole.SYSADMIN: frozenset({Capability.TAKE_CONTENT_DOWN, Capability.MANAGE_ROLES}),
    AdminRole.MODERATOR: frozenset({Capability.TAKE_CONTENT_DOWN}),
}


def months_before(moment: datetime, months: int) -> datetime:
    """Return ``moment`` shifted back by calendar months.

    The day is clamped to the end of the target month, so 31 May minus
    three months lands on the last day of February.
    """
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def _as_utc(moment: datetime) -> datetime:
    # Naive values are taken to be UTC, matching UTCDateTime
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment


class AdminUser(BaseModel):
    """Administrative user of the petitions site.

    ``password`` and ``password_confirmation`` are transient: they hold the
    plaintext only until the service validates and hashes it. Only
    ``password_hash`` is persisted.
    """

    __tablename__ = "admin_users"

    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    password_changed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    # Lockout: consecutive failed logins since the last successful one
    failed_login_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    force_password_reset: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    last_login_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    password = None
    password_confirmation = None

    def __init__(self, **kwargs):
        # Column defaults only apply at INSERT; new instances need them up front
        kwargs.setdefault("force_password_reset", True)
        kwargs.setdefault("failed_login_count", 0)
        super().__init__(**kwargs)

    @property
    def name(self) -> str:
        """Listing name, e.g. ``"Public, Jo"``."""
        return f"{self.last_name}, {self.first_name}"

    @property
    def admin_role(self) -> AdminRole | None:
        """The role as an AdminRole, or None for an unrecognised value."""
        try:
            return AdminRole(self.role)
        except ValueError:
            return None

    def is_sysadmin(self) -> bool:
        return self.admin_role is AdminRole.SYSADMIN

    def is_moderator(self) -> bool:
        return self.admin_role is AdminRole.MODERATOR

    def has_capability(self, capability: Capability) -> bool:
        role = self.admin_role
        if role is None:
            return False
        return capability in ROLE_CAPABILITIES[role]

    def can_take_content_down(self) -> bool:
        return self.has_capability(Capability.TAKE_CONTENT_DOWN)

    def can_manage_roles(self) -> bool:
        return self.has_capability(Capability.MANAGE_ROLES)

    def must_change_password(
        self,
        now: datetime | None = None,
        max_age_months: int = PASSWORD_MAX_AGE_MONTHS,
    ) -> bool:
        """True when a reset is forced or the password is older than the max age."""
        if self.force_password_reset:
            return True
        if self.password_changed_at is None:
            return True
        now = _as_utc(now or datetime.now(UTC))
        return _as_utc(self.password_changed_at) < months_before(now, max_age_months)

    @property
    def account_disabled(self) -> bool:
        return self.failed_login_count >= LOCKOUT_THRESHOLD

    @account_disabled.setter
    def account_disabled(self, disabled: bool) -> None:
        # Always exactly the threshold, never a preserved higher count
        self.failed_login_count = LOCKOUT_THRESHOLD if disabled else 0

    def __repr__(self) -> str:
        return f"<AdminUser {self.email}>"


# Authoritative case-insensitive uniqueness; the service check is only a pre-flight
Index("ix_admin_users_email_lower", func.lower(AdminUser.email), unique=True)
