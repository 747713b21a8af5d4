"""
Token Hasher - One-way hashing for passwords and verification tokens.

bcrypt comparisons are constant-time; bcrypt also caps input at 72 bytes,
which is exactly the length of a 36-byte hex verification token.
"""

import bcrypt

from .exceptions import InvalidInput

BCRYPT_MAX_BYTES = 72


class BcryptHasher:
    """hash/compare pair backed by bcrypt."""

    def __init__(self, rounds: int = 10) -> None:
        self._rounds = rounds
        # Used when there is no stored digest to compare against, so a
        # bcrypt comparison still runs (timing oracle prevention).
        self._dummy_digest = self.hash("dummy_password_for_timing_safety")

    def hash(self, plaintext: str) -> str:
        encoded = plaintext.encode()
        if len(encoded) > BCRYPT_MAX_BYTES:
            raise InvalidInput(f"Value must be at most {BCRYPT_MAX_BYTES} bytes")
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self._rounds)).decode()

    def compare(self, plaintext: str, digest: str) -> bool:
        """Return True if ``plaintext`` matches ``digest``. Never raises."""
        encoded = plaintext.encode()
        if len(encoded) > BCRYPT_MAX_BYTES:
            # Still burn a comparison so oversized input is not faster.
            bcrypt.checkpw(b"", self._dummy_digest.encode())
            return False
        try:
            return bcrypt.checkpw(encoded, digest.encode())
        except ValueError:
            return False

    def dummy_digest(self) -> str:
        return self._dummy_digest
