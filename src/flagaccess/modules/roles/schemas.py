"""Role schemas."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from flagaccess.core.constants import MAX_DESCRIPTION_LENGTH, MAX_ROLE_NAME_LENGTH
from flagaccess.core.permissions.models import RoleType
from flagaccess.core.permissions.registry import Permission
from flagaccess.modules.users.schemas import UserRead


class RoleCreate(BaseModel):
    """Definition of a custom role."""

    name: str = Field(..., min_length=1, max_length=MAX_ROLE_NAME_LENGTH)
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Role name cannot be blank")
        return v


class RoleRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    type: RoleType
    description: str | None = None


class RoleWithUsers(BaseModel):
    """A role and every user holding it under any project scope."""

    role: RoleRead
    users: list[UserRead]


class RoleData(BaseModel):
    """A role, the distinct permissions bound to it, and its users."""

    role: RoleRead
    permissions: list[Permission]
    users: list[UserRead]
