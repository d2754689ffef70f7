"""User database model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from flagaccess.core.constants import MAX_EMAIL_LENGTH, MAX_NAME_LENGTH
from flagaccess.core.database.base import Base, TimestampMixin, UUIDMixin


class User(Base, UUIDMixin, TimestampMixin):
    """A principal that roles are assigned to.

    Identity attributes are owned by the user-management layer; the access
    core only ever reads them.

    Attributes:
        email: Email address
        name: Display name
    """

    __tablename__ = "users"

    email: Mapped[str | None] = mapped_column(
        String(MAX_EMAIL_LENGTH),
        nullable=True,
        unique=True,
        index=True,
    )
    name: Mapped[str | None] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
