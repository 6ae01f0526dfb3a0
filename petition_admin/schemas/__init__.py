# Petition Admin Schemas
from petition_admin.schemas.admin_user import (
    AdminUserCreate,
    AdminUserResponse,
    AdminUserUpdate,
)

__all__ = [
    "AdminUserCreate",
    "AdminUserResponse",
    "AdminUserUpdate",
]
