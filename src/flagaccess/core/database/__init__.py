"""Database layer - session management, base models, and mixins."""

from flagaccess.core.database.base import Base, TimestampMixin, UUIDMixin
from flagaccess.core.database.session import (
    get_db,
    get_engine,
    get_session_factory,
    session_scope,
)


__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "get_db",
    "get_engine",
    "get_session_factory",
    "session_scope",
]
