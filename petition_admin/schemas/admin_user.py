"""Pydantic schemas for admin users.

Field rules live in ``petition_admin.services.policy`` so that every problem
is reported together with its reason; these schemas only carry types.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class AdminUserCreate(BaseModel):
    """Request to provision a new admin user."""

    email: str = ""
    password: str = Field(default="", repr=False)
    password_confirmation: str | None = Field(default=None, repr=False)
    first_name: str = ""
    last_name: str = ""
    role: str = ""
    force_password_reset: bool = True
    password_changed_at: datetime | None = None


class AdminUserUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    email: str | None = None
    password: str | None = Field(default=None, repr=False)
    password_confirmation: str | None = Field(default=None, repr=False)
    first_name: str | None = None
    last_name: str | None = None
    role: str | None = None
    force_password_reset: bool | None = None


class AdminUserResponse(BaseModel):
    """Admin user as shown in administrative listings."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    first_name: str
    last_name: str
    name: str
    role: str
    account_disabled: bool
    force_password_reset: bool
    password_changed_at: datetime | None
    last_login_at: datetime | None
    created_at: datetime
