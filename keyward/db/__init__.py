"""Database layer."""

from keyward.db.errors import is_duplicate_error
from keyward.db.session import (
    close_db,
    get_async_session,
    get_session_factory,
    init_db,
    session_scope,
)

__all__ = [
    "close_db",
    "get_async_session",
    "get_session_factory",
    "init_db",
    "is_duplicate_error",
    "session_scope",
]
