"""Admin user service - provisioning, updates, listings and lockout."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from petition_admin.core.logging import get_logger
from petition_admin.models.admin_user import AdminRole, AdminUser
from petition_admin.models.base import utcnow
from petition_admin.schemas.admin_user import AdminUserCreate, AdminUserUpdate
from petition_admin.services import policy
from petition_admin.services.passwords import hash_password
from petition_admin.services.policy import AdminUserValidationError, ErrorReason, FieldError

logger = get_logger("services.admin_user")

# Persisted fields an update may change directly
EDITABLE_FIELDS = ("email", "first_name", "last_name", "role", "force_password_reset")


class AdminUserService:
    """Service for managing admin users."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: UUID) -> AdminUser | None:
        """Get an admin user by ID."""
        result = await self.session.execute(select(AdminUser).where(AdminUser.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> AdminUser | None:
        """Get an admin user by email, ignoring case."""
        result = await self.session.execute(
            select(AdminUser).where(func.lower(AdminUser.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def count(self) -> int:
        result = await self.session.execute(select(func.count(AdminUser.id)))
        return result.scalar() or 0

    async def email_taken(self, email: str, exclude_id: UUID | None = None) -> bool:
        """Check whether another admin user already has this email, ignoring case."""
        query = select(AdminUser.id).where(func.lower(AdminUser.email) == email.strip().lower())
        if exclude_id is not None:
            query = query.where(AdminUser.id != exclude_id)
        result = await self.session.execute(query.limit(1))
        return result.first() is not None

    async def validate(
        self, user: AdminUser, *, require_password: bool | None = None
    ) -> list[policy.FieldError]:
        """Validate ``user`` including the email uniqueness lookup.

        ``require_password`` defaults to True for a record without a stored
        hash, or one carrying a new plaintext password.
        """
        if require_password is None:
            require_password = user.password_hash is None or user.password is not None
        taken = False
        if user.email and user.email.strip():
            taken = await self.email_taken(user.email, exclude_id=user.id)
        return policy.validate(user, email_taken=taken, require_password=require_password)

    async def create(self, data: AdminUserCreate) -> AdminUser:
        """Provision a new admin user.

        Raises AdminUserValidationError with every problem found; nothing
        is added to the session in that case.
        """
        user = AdminUser(
            email=data.email.strip(),
            first_name=data.first_name,
            last_name=data.last_name,
            role=data.role,
            force_password_reset=data.force_password_reset,
            password_changed_at=data.password_changed_at or utcnow(),
            password=data.password,
            password_confirmation=data.password_confirmation,
        )

        errors = await self.validate(user, require_password=True)
        if errors:
            logger.info(f"Rejected admin user {user.email!r}: {AdminUserValidationError(errors)}")
            raise AdminUserValidationError(errors)

        user.password_hash = hash_password(user.password)
        _clear_plaintext(user)

        async with self._savepoint():
            self.session.add(user)
        await self.session.refresh(user)

        logger.info(f"Created admin user: {user.email} ({user.role})")
        return user

    async def update(self, user: AdminUser, data: AdminUserUpdate) -> AdminUser:
        """Apply a partial update to ``user``.

        A supplied password is validated and re-hashed, stamps
        ``password_changed_at`` and clears ``force_password_reset`` unless
        the update sets that flag itself.
        """
        changes = data.model_dump(exclude_unset=True)
        password = changes.pop("password", None)
        confirmation = changes.pop("password_confirmation", None)
        if "email" in changes and changes["email"] is not None:
            changes["email"] = changes["email"].strip()
        # None means "leave unchanged" for the remaining fields
        changes = {k: v for k, v in changes.items() if v is not None}

        # Validate a detached copy so invalid values never reach the session
        fields = {name: getattr(user, name) for name in EDITABLE_FIELDS}
        fields.update(changes)
        candidate = AdminUser(
            id=user.id,
            password_hash=user.password_hash,
            password_changed_at=user.password_changed_at,
            failed_login_count=user.failed_login_count,
            password=password,
            password_confirmation=confirmation,
            **fields,
        )
        errors = await self.validate(candidate, require_password=password is not None)
        if errors:
            logger.info(f"Rejected update for {user.email}: {AdminUserValidationError(errors)}")
            raise AdminUserValidationError(errors)

        previous_role = user.role
        async with self._savepoint():
            for name, value in changes.items():
                setattr(user, name, value)
            if password is not None:
                user.password_hash = hash_password(password)
                user.password_changed_at = utcnow()
                if "force_password_reset" not in changes:
                    user.force_password_reset = False

        if user.role != previous_role:
            logger.info(f"Role changed for {user.email}: {previous_role} -> {user.role}")
        if password is not None:
            logger.info(f"Password changed for admin user: {user.email}")
        await self.session.refresh(user)
        return user

    async def list_by_name(self) -> list[AdminUser]:
        """All admin users ordered by last name then first name, ignoring case."""
        result = await self.session.execute(
            select(AdminUser).order_by(
                func.lower(AdminUser.last_name),
                func.lower(AdminUser.first_name),
                AdminUser.created_at,
            )
        )
        return list(result.scalars().all())

    async def list_by_role(self, role: AdminRole | str) -> list[AdminUser]:
        """Admin users holding ``role``, oldest first."""
        result = await self.session.execute(
            select(AdminUser).where(AdminUser.role == str(role)).order_by(AdminUser.created_at)
        )
        return list(result.scalars().all())

    async def set_account_disabled(self, user: AdminUser, disabled: bool) -> AdminUser:
        """Lock or unlock an account and persist the new failed-login count."""
        user.account_disabled = disabled
        await self.session.flush()
        if disabled:
            logger.warning(f"Admin user account disabled: {user.email}")
        else:
            logger.info(f"Admin user account re-enabled: {user.email}")
        return user

    @asynccontextmanager
    async def _savepoint(self) -> AsyncIterator[None]:
        """Run writes in a SAVEPOINT flushed on exit.

        The unique index on lower(email) settles races the pre-flight check
        cannot; on a violation only the writes made inside are undone and the
        caller's transaction carries on.
        """
        try:
            async with self.session.begin_nested():
                yield
        except IntegrityError as e:
            logger.warning(f"Email uniqueness violated at flush: {e.orig}")
            raise AdminUserValidationError([FieldError("email", ErrorReason.TAKEN)]) from e


def _clear_plaintext(user: AdminUser) -> None:
    user.password = None
    user.password_confirmation = None
