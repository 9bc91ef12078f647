"""Acting user identity.

Supplied by the caller's auth layer; used only to stamp creator/updater
columns on API key records.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class User:
    """Identity of the user performing an operation."""

    name: str
    email: str = ""
