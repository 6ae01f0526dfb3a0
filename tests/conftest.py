"""Pytest configuration and fixtures.

Database tests run against an in-memory SQLite database (aiosqlite), created
fresh for every test.
"""

import os
from collections.abc import AsyncGenerator
from typing import Any
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
# Cheap Argon2 parameters keep hashing fast in tests
os.environ["ARGON2_TIME_COST"] = "1"
os.environ["ARGON2_MEMORY_COST"] = "1024"
os.environ["ARGON2_PARALLELISM"] = "1"

TEST_PASSWORD = "Letmein1!"


def admin_user_data(**overrides: Any) -> dict[str, Any]:
    """Valid attributes for a moderator, with a unique email."""
    data = {
        "email": f"moderator-{uuid4().hex[:8]}@example.com",
        "password": TEST_PASSWORD,
        "password_confirmation": TEST_PASSWORD,
        "first_name": "Jo",
        "last_name": "Public",
        "role": "moderator",
    }
    data.update(overrides)
    return data


def build_admin_user(**overrides: Any):
    """Build an unsaved admin user with valid attributes."""
    from petition_admin.models.admin_user import AdminUser

    return AdminUser(**admin_user_data(**overrides))


# --- Database Fixtures ---


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create an in-memory database engine with all tables."""
    from petition_admin.core.database import build_engine
    from petition_admin.models.base import BaseModel

    engine = build_engine("sqlite+aiosqlite://", poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for testing."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest.fixture
def session_maker(db_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory on the test engine, for code that opens its own unit of work."""
    from petition_admin.core.database import build_session_maker

    return build_session_maker(db_engine)


# --- Test Factories ---


@pytest.fixture
def admin_user_factory(db_session):
    """Factory for creating saved admin users through the service."""
    from petition_admin.schemas.admin_user import AdminUserCreate
    from petition_admin.services.admin_user import AdminUserService

    async def _create_admin_user(**overrides: Any):
        service = AdminUserService(db_session)
        return await service.create(AdminUserCreate(**admin_user_data(**overrides)))

    return _create_admin_user


@pytest_asyncio.fixture
async def moderator_user(admin_user_factory):
    """Create a moderator admin user."""
    return await admin_user_factory(role="moderator")


@pytest_asyncio.fixture
async def sysadmin_user(admin_user_factory):
    """Create a sysadmin admin user."""
    return await admin_user_factory(
        email=f"sysadmin-{uuid4().hex[:8]}@example.com",
        role="sysadmin",
    )


# --- Pytest Hooks for Auto-Marking ---


def pytest_collection_modifyitems(config, items):
    """Mark tests using database fixtures as 'integration', the rest as 'unit'."""
    integration_fixtures = {"db_session", "db_engine", "session_maker"}

    for item in items:
        if any(mark.name in ("unit", "integration") for mark in item.iter_markers()):
            continue

        if integration_fixtures & set(getattr(item, "fixturenames", ())):
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
