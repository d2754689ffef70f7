"""Unit tests for the statements the access repository issues."""

from uuid import uuid4

import pytest
from sqlalchemy.dialects import postgresql, sqlite

from flagaccess.modules.access.repos import lock_user


pytestmark = pytest.mark.unit


class TestLockUser:
    def test_locks_user_row_on_postgresql(self):
        sql = str(lock_user(uuid4()).compile(dialect=postgresql.dialect()))

        assert "FROM users" in sql
        assert sql.rstrip().endswith("FOR UPDATE")

    def test_sqlite_omits_row_lock(self):
        sql = str(lock_user(uuid4()).compile(dialect=sqlite.dialect()))

        assert "FOR UPDATE" not in sql
