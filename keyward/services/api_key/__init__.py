"""API key issuance, digesting and lifecycle."""

from keyward.services.api_key.digest import TokenDigester
from keyward.services.api_key.generator import API_KEY_LENGTH, generate_secret
from keyward.services.api_key.service import ApiKeyService

__all__ = ["API_KEY_LENGTH", "ApiKeyService", "TokenDigester", "generate_secret"]
