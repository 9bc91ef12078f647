"""Keyed digest of API key tokens.

Stored keys are HMAC-SHA256 digests keyed by the server-wide
``ENCRYPTION_SECRET``. The authentication path recomputes the digest of a
presented token and compares it with the stored one.
"""

from __future__ import annotations

import hashlib
import hmac

import structlog

from keyward.config import ENCRYPTION_SECRET_ENV, Settings
from keyward.errors import ConfigurationError, DigestError

logger = structlog.get_logger()


class TokenDigester:
    """HMAC-SHA256 digester bound to one server secret."""

    __slots__ = ("_key",)

    def __init__(self, encryption_secret: str | None) -> None:
        secret = (encryption_secret or "").strip()
        if not secret:
            raise ConfigurationError(
                f"{ENCRYPTION_SECRET_ENV} must be set in environment variable or .env file",
                details={"setting": ENCRYPTION_SECRET_ENV},
            )
        self._key = secret.encode()

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenDigester:
        return cls(settings.encryption_secret)

    def digest(self, token: str) -> str:
        """Return the hex HMAC-SHA256 digest of ``token``.

        Raises:
            DigestError: If the token cannot be hashed
        """
        try:
            mac = hmac.new(self._key, token.encode(), hashlib.sha256)
        except (TypeError, ValueError) as exc:
            logger.error("api_key.digest.failed", error_type=type(exc).__name__)
            raise DigestError(f"hmac write token: {exc}") from exc
        return mac.hexdigest()

    def matches(self, token: str, key_hash: str) -> bool:
        """Constant-time check of ``token`` against a stored digest."""
        return hmac.compare_digest(self.digest(token), key_hash)

    def __repr__(self) -> str:
        return "TokenDigester(<redacted>)"
