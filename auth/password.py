"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting and configurable work factor.
"""

from __future__ import annotations

import bcrypt

# bcrypt silently ignores everything past the first 72 bytes.
MAX_PASSWORD_BYTES = 72
DEFAULT_ROUNDS = 10


class PasswordHasher:
    """bcrypt hasher with a fixed work factor."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a password (auto-salted, so two calls never match)."""
        raw = password.encode()
        if len(raw) > MAX_PASSWORD_BYTES:
            raise ValueError("password_too_long")
        return bcrypt.hashpw(raw, bcrypt.gensalt(rounds=self.rounds)).decode()

    def verify(self, password: str, password_hash: str) -> bool:
        """Constant-time comparison against a bcrypt hash."""
        if not password_hash:
            return False
        try:
            raw = password.encode()
            if len(raw) > MAX_PASSWORD_BYTES:
                return False
            return bcrypt.checkpw(raw, password_hash.encode())
        except (ValueError, TypeError, AttributeError):
            return False
