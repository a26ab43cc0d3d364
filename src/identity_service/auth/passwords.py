"""
identity_service.auth.passwords

One-way password hashing (bcrypt).
"""

from __future__ import annotations

import secrets
from functools import cached_property

import bcrypt


class PasswordHasher:
    def __init__(self, *, rounds: int = 10) -> None:
        self._rounds = rounds

    def hash(self, secret: str) -> str:
        return bcrypt.hashpw(secret.encode("utf-8"), bcrypt.gensalt(rounds=self._rounds)).decode(
            "utf-8"
        )

    def verify(self, secret: str, secret_hash: str) -> bool:
        try:
            return bcrypt.checkpw(secret.encode("utf-8"), secret_hash.encode("utf-8"))
        except ValueError:
            # Unparseable stored hash or over-long secret: never a match.
            return False

    @cached_property
    def dummy_hash(self) -> str:
        """
        A hash of a random value at the configured cost. Verifying against it costs
        the same as a real check and never matches.
        """

        return self.hash(secrets.token_urlsafe(32))
