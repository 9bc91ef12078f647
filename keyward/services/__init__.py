"""Keyward services layer."""

from keyward.services.api_key import ApiKeyService, TokenDigester

__all__ = ["ApiKeyService", "TokenDigester"]
