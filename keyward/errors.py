"""Keyward error types.

Error codes are stable strings for programmatic handling. ``status_code``
is the HTTP status a web layer should map the error to.
"""

from __future__ import annotations

from typing import Any


class KeywardError(Exception):
    """Base error for all Keyward exceptions."""

    code: str = "internal_error"
    message: str = "An internal error occurred"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.__class__.message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self, request_id: str | None = None) -> dict[str, Any]:
        """Render the error envelope returned to API clients."""
        error: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }
        if request_id:
            error["request_id"] = request_id
        return {"error": error}


class ConfigurationError(KeywardError):
    """Required configuration is missing or invalid (500).

    Raised at construction time; the host decides whether to abort startup.
    """

    code = "configuration_error"
    message = "Invalid configuration"


class ValidationError(KeywardError):
    """Request validation error (400)."""

    code = "validation_error"
    message = "Validation error"
    status_code = 400


class InvalidPatternError(ValidationError):
    """allowed_path is not a valid regular expression (400)."""

    code = "invalid_pattern"
    message = "Invalid allowed path pattern"


class DuplicateNameError(ValidationError):
    """An API key with the same name already exists (400)."""

    code = "duplicate_name"
    message = "API key name already exists"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"An api key with name [{name}] already exists",
            details={"name": name},
        )


class NotFoundError(KeywardError):
    """Resource not found (404)."""

    code = "not_found"
    message = "Resource not found"
    status_code = 404


class RandomSourceError(KeywardError):
    """The OS entropy source failed (500)."""

    code = "random_source_error"
    message = "Random source failure"


class DigestError(KeywardError):
    """The HMAC primitive failed (500)."""

    code = "digest_error"
    message = "Token digest failure"


class PersistenceError(KeywardError):
    """Database operation failed (500)."""

    code = "persistence_error"
    message = "Database operation failed"
