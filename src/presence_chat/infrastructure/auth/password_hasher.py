"""Salted, iterated password hashing (PBKDF2-HMAC-SHA256)."""
from __future__ import annotations

import hashlib
import hmac
import secrets

ALGORITHM = "pbkdf2_sha256"


class Pbkdf2PasswordHasher:
    """Encodes hashes as ``pbkdf2_sha256$<iterations>$<salt>$<hex digest>``."""

    def __init__(self, iterations: int = 200_000, salt_bytes: int = 16) -> None:
        self._iterations = iterations
        self._salt_bytes = salt_bytes

    def _digest(self, password: str, salt: str, iterations: int) -> str:
        return hashlib.pbkdf2_hmac(
            "sha256",
            password.encode(),
            salt.encode(),
            iterations,
        ).hex()

    def hash(self, password: str) -> str:
        salt = secrets.token_hex(self._salt_bytes)
        digest = self._digest(password, salt, self._iterations)
        return f"{ALGORITHM}${self._iterations}${salt}${digest}"

    def verify(self, password: str, encoded: str) -> bool:
        try:
            algorithm, iterations_raw, salt, expected = encoded.split("$", 3)
            iterations = int(iterations_raw)
        except ValueError:
            return False
        if algorithm != ALGORITHM:
            return False
        actual = self._digest(password, salt, iterations)
        return hmac.compare_digest(actual, expected)
