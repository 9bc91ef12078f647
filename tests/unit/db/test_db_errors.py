"""Unit tests for database error classification."""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError, OperationalError

from keyward.db.errors import is_duplicate_error


class _DriverError(Exception):
    """Stand-in for a DBAPI exception with driver-specific attributes."""

    def __init__(self, *args, sqlstate=None, pgcode=None):  # noqa: ANN001
        super().__init__(*args)
        self.sqlstate = sqlstate
        self.pgcode = pgcode


def _integrity(orig: Exception) -> IntegrityError:
    return IntegrityError("INSERT INTO api_keys ...", {}, orig)


class TestIsDuplicateError:
    def test_sqlite_unique(self):
        exc = _integrity(_DriverError("UNIQUE constraint failed: api_keys.name"))
        assert is_duplicate_error(exc) is True

    def test_postgres_sqlstate(self):
        exc = _integrity(_DriverError("boom", sqlstate="23505"))
        assert is_duplicate_error(exc) is True

    def test_postgres_pgcode(self):
        exc = _integrity(_DriverError("boom", pgcode="23505"))
        assert is_duplicate_error(exc) is True

    def test_mysql_errno(self):
        exc = _integrity(_DriverError(1062, "Duplicate entry 'k1' for key 'name'"))
        assert is_duplicate_error(exc) is True

    def test_not_null_violation_is_not_duplicate(self):
        exc = _integrity(_DriverError("NOT NULL constraint failed: api_keys.key_hash"))
        assert is_duplicate_error(exc) is False

    def test_other_errors_are_not_duplicate(self):
        exc = OperationalError("SELECT 1", {}, _DriverError("database is locked"))
        assert is_duplicate_error(exc) is False
        assert is_duplicate_error(ValueError("UNIQUE constraint failed")) is False
