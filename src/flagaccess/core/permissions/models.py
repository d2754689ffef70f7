"""Role, binding, and assignment database models."""

from enum import StrEnum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from flagaccess.core.constants import (
    MAX_DESCRIPTION_LENGTH,
    MAX_ENVIRONMENT_LENGTH,
    MAX_PERMISSION_NAME_LENGTH,
    MAX_PROJECT_ID_LENGTH,
    MAX_ROLE_NAME_LENGTH,
    MAX_ROLE_TYPE_LENGTH,
)
from flagaccess.core.database.base import Base, TimestampMixin, UUIDMixin
from flagaccess.core.permissions.scopes import Scope, from_column


if TYPE_CHECKING:
    from flagaccess.modules.users.models import User


class RoleType(StrEnum):
    ROOT = "root"
    PROJECT = "project"
    CUSTOM = "custom"


class RoleName(StrEnum):
    """Names of the built-in roles."""

    ADMIN = "Admin"
    EDITOR = "Editor"
    VIEWER = "Viewer"
    OWNER = "Owner"
    MEMBER = "Member"


class Role(Base, UUIDMixin, TimestampMixin):
    """A named set of permission bindings.

    Root roles (Admin, Editor, Viewer) exist once each. Project roles
    (Owner, Member) are templates whose bindings are added per project.
    Custom roles are defined by administrators.

    Attributes:
        name: Unique role name
        type: One of root, project, custom
        description: Free-form description
    """

    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(
        String(MAX_ROLE_NAME_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    type: Mapped[RoleType] = mapped_column(
        String(MAX_ROLE_TYPE_LENGTH),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        String(MAX_DESCRIPTION_LENGTH),
        nullable=True,
    )

    @property
    def is_root(self) -> bool:
        return RoleType(self.type) is RoleType.ROOT

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name={self.name}, type={self.type})>"


class RolePermissionBinding(Base, UUIDMixin, TimestampMixin):
    """A permission attached to a role.

    A NULL ``project`` is the all-projects wildcard and a NULL
    ``environment`` is the all-environments wildcard. Root permissions
    ignore both columns.
    """

    __tablename__ = "role_permission"
    __table_args__ = (
        Index("ix_role_permission_role_permission", "role_id", "permission"),
    )

    role_id: Mapped[UUID] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
    )
    permission: Mapped[str] = mapped_column(
        String(MAX_PERMISSION_NAME_LENGTH),
        nullable=False,
    )
    project: Mapped[str | None] = mapped_column(
        String(MAX_PROJECT_ID_LENGTH),
        nullable=True,
    )
    environment: Mapped[str | None] = mapped_column(
        String(MAX_ENVIRONMENT_LENGTH),
        nullable=True,
    )

    @property
    def project_scope(self) -> Scope:
        return from_column(self.project)

    @property
    def environment_scope(self) -> Scope:
        return from_column(self.environment)

    def __repr__(self) -> str:
        return (
            f"<RolePermissionBinding(role_id={self.role_id}, permission={self.permission}, "
            f"project={self.project}, environment={self.environment})>"
        )


class UserRoleAssignment(Base, UUIDMixin, TimestampMixin):
    """A role held by a user, optionally limited to one project.

    A NULL ``project`` is the all-projects wildcard.
    """

    __tablename__ = "role_user"
    __table_args__ = (Index("ix_role_user_user_role", "user_id", "role_id"),)

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    role_id: Mapped[UUID] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    project: Mapped[str | None] = mapped_column(
        String(MAX_PROJECT_ID_LENGTH),
        nullable=True,
    )

    role: Mapped[Role] = relationship(
        "Role",
        lazy="selectin",
    )
    user: Mapped["User"] = relationship(
        "User",
        lazy="selectin",
    )

    @property
    def project_scope(self) -> Scope:
        return from_column(self.project)

    def __repr__(self) -> str:
        return (
            f"<UserRoleAssignment(user_id={self.user_id}, role_id={self.role_id}, "
            f"project={self.project})>"
        )
