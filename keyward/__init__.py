"""Keyward - API key issuance, rotation and revocation."""

__version__ = "0.1.0"
