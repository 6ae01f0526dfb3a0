"""Authentication service for admin users, with failed-login lockout."""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from petition_admin.core.database import session_scope
from petition_admin.core.logging import get_logger
from petition_admin.models.admin_user import AdminUser
from petition_admin.models.base import utcnow
from petition_admin.schemas.admin_user import AdminUserUpdate
from petition_admin.services.admin_user import AdminUserService
from petition_admin.services.passwords import hash_password, needs_rehash, verify_password

logger = get_logger("services.auth")


class AuthError(Exception):
    """Base authentication error."""


class InvalidCredentialsError(AuthError):
    """Invalid email or password."""


class AccountDisabledError(AuthError):
    """Account is locked after too many failed logins."""


class AuthService:
    """Service for authentication operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = AdminUserService(session)

    async def authenticate(self, email: str, password: str) -> AdminUser:
        """Authenticate an admin user and return the user object.

        Raises InvalidCredentialsError for both "user not found" and
        "wrong password" to prevent user enumeration. A wrong password
        counts towards the lockout threshold; a locked account is refused
        before the password is checked.

        Commits the session, as the outcome of a login attempt must be kept
        whether or not it succeeds.
        """
        user = await self.users.get_by_email(email)

        if user is None:
            # Perform a dummy hash to prevent timing attacks
            verify_password(password, hash_password("dummy"))
            raise InvalidCredentialsError("Invalid email or password")

        if user.account_disabled:
            logger.warning(f"Login refused for disabled account: {user.email}")
            raise AccountDisabledError("Account is disabled")

        if not verify_password(password, user.password_hash):
            user.failed_login_count += 1
            # Committed before raising so a rolled-back request scope keeps the count
            await self.session.commit()
            if user.account_disabled:
                logger.warning(
                    f"Admin user {user.email} locked after {user.failed_login_count} failed logins"
                )
            else:
                logger.info(f"Failed login for {user.email} ({user.failed_login_count})")
            raise InvalidCredentialsError("Invalid email or password")

        user.failed_login_count = 0
        user.last_login_at = utcnow()
        if needs_rehash(user.password_hash):
            user.password_hash = hash_password(password)
        await self.session.commit()

        return user

    async def change_password(
        self,
        user: AdminUser,
        current_password: str,
        new_password: str,
        password_confirmation: str | None = None,
    ) -> AdminUser:
        """Change a user's own password after checking the current one.

        Policy violations raise AdminUserValidationError.
        """
        if not verify_password(current_password, user.password_hash):
            raise InvalidCredentialsError("Current password is incorrect")

        return await self.users.update(
            user,
            AdminUserUpdate(password=new_password, password_confirmation=password_confirmation),
        )


async def login(
    email: str,
    password: str,
    session_maker: async_sessionmaker[AsyncSession] | None = None,
) -> AdminUser:
    """Authenticate in a unit of work of its own."""
    async with session_scope(session_maker) as session:
        return await AuthService(session).authenticate(email, password)
