"""Classification of database driver errors."""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError

# Unique violation markers per backend:
# SQLite "UNIQUE constraint failed", PostgreSQL SQLSTATE 23505,
# MySQL errno 1062 "Duplicate entry".
_DUPLICATE_MARKERS = (
    "unique constraint failed",
    "duplicate key value violates unique constraint",
    "duplicate entry",
)
_DUPLICATE_SQLSTATE = "23505"
_DUPLICATE_MYSQL_ERRNO = 1062


def is_duplicate_error(exc: BaseException) -> bool:
    """Return True if ``exc`` is a unique constraint violation."""
    if not isinstance(exc, IntegrityError):
        return False

    orig = exc.orig
    if getattr(orig, "sqlstate", None) == _DUPLICATE_SQLSTATE:
        return True
    if getattr(orig, "pgcode", None) == _DUPLICATE_SQLSTATE:
        return True
    args = getattr(orig, "args", ())
    if args and args[0] == _DUPLICATE_MYSQL_ERRNO:
        return True

    text = str(orig).lower()
    return any(marker in text for marker in _DUPLICATE_MARKERS)
