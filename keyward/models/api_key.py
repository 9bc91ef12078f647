"""API key data models.

Stores HMAC digests of API keys. Plaintext keys are never stored; they are
returned exactly once, wrapped in ``IssuedApiKey``, by the operation that
generated them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, SecretStr
from sqlmodel import Field, SQLModel

from keyward.models.types import UTCDateTime
from keyward.utils.datetime import utcnow

# Type tag prefix for keys issued on behalf of a plugin
PLUGIN_TYPE_PREFIX = "plugin:"


def plugin_api_key_type(plugin_name: str) -> str:
    """Return the type tag for keys issued by ``plugin_name``."""
    return f"{PLUGIN_TYPE_PREFIX}{plugin_name}"


class ApiKey(SQLModel, table=True):
    """Stored API key record."""

    __tablename__ = "api_keys"

    id: Optional[int] = Field(default=None, primary_key=True)

    name: str = Field(unique=True, index=True)
    key_hash: str = Field()  # HMAC-SHA256 hex digest
    expired_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)  # None = never expires
    allowed_path: str = Field(default="")  # Regular expression
    type: str = Field(default="", index=True)  # e.g. "plugin:webhook"
    extra: str = Field(default="", index=True)  # e.g. webhook id

    # Provenance
    creator: Optional[str] = Field(default=None)
    creator_email: Optional[str] = Field(default=None)
    updater: Optional[str] = Field(default=None)
    updater_email: Optional[str] = Field(default=None)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class IssuedApiKey(BaseModel):
    """An API key as returned right after creation or rotation.

    ``api_key`` is the plaintext. It is not stored anywhere and cannot be
    fetched again.
    """

    id: int
    name: str
    api_key: SecretStr
    expired_at: Optional[datetime] = None
    allowed_path: str
    type: str
    extra: str
    creator: Optional[str] = None
    creator_email: Optional[str] = None
    updater: Optional[str] = None
    updater_email: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: ApiKey, plaintext: str) -> "IssuedApiKey":
        """Build the one-time response from a stored record."""
        return cls(
            id=record.id,
            name=record.name,
            api_key=SecretStr(plaintext),
            expired_at=record.expired_at,
            allowed_path=record.allowed_path,
            type=record.type,
            extra=record.extra,
            creator=record.creator,
            creator_email=record.creator_email,
            updater=record.updater,
            updater_email=record.updater_email,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
