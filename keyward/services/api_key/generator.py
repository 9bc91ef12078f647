"""Plaintext API key generation."""

from __future__ import annotations

import secrets
import string

from keyward.errors import RandomSourceError

API_KEY_LENGTH = 128

_ALPHABET = string.ascii_letters


def generate_secret(length: int = API_KEY_LENGTH) -> str:
    """Generate a random key of ``length`` ASCII letters.

    Uses the OS CSPRNG through :mod:`secrets`.

    Raises:
        ValueError: If length is not positive
        RandomSourceError: If the entropy source fails
    """
    if length <= 0:
        raise ValueError(f"length must be positive, got {length}")
    try:
        return "".join(secrets.choice(_ALPHABET) for _ in range(length))
    except (OSError, NotImplementedError) as exc:
        raise RandomSourceError(
            f"random letters: {exc}",
            details={"length": length},
        ) from exc
