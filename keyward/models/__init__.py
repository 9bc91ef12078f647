"""SQLModel data models."""

from keyward.models.api_key import (
    PLUGIN_TYPE_PREFIX,
    ApiKey,
    IssuedApiKey,
    plugin_api_key_type,
)
from keyward.models.user import User

__all__ = [
    "PLUGIN_TYPE_PREFIX",
    "ApiKey",
    "IssuedApiKey",
    "User",
    "plugin_api_key_type",
]
