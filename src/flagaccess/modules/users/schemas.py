"""User schemas."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr


class UserCreate(BaseModel):
    """Identity attributes for a new user."""

    name: str | None = None
    email: EmailStr | None = None


class UserRead(BaseModel):
    """A user as listed on a role."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str | None = None
    email: str | None = None
