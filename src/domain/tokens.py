"""
Token Issuer - Signed access/refresh token pairs.

Tokens are HS256 JWTs carrying the user id in ``sub`` and a ``type``
claim. Access tokens expire; refresh tokens carry no expiry and are
only valid while present in the owner's stored token set.
"""

import logging
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from .exceptions import InvalidSignature, TokenExpired
from .models import TokenPair

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"


class TokenIssuer:
    """Mints and validates signed tokens."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(minutes=15),
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._access_ttl = access_ttl

    def sign(self, payload: dict[str, Any], ttl: timedelta | None = None) -> str:
        """
        Sign a payload.

        ``iat`` and a random ``jti`` are always added so that two tokens for
        the same user minted in the same second never collide. ``exp`` is
        only added when ``ttl`` is given.
        """
        now = datetime.now(UTC)
        claims = {**payload, "iat": now, "jti": uuid.uuid4().hex}
        if ttl is not None:
            claims["exp"] = now + ttl
        return jwt.encode(claims, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str) -> dict[str, Any]:
        """
        Verify a token and return its payload.

        Raises:
            TokenExpired: Signature valid but ``exp`` has passed
            InvalidSignature: Any other decoding failure
        """
        try:
            return jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError:
            logger.debug("Token expired")
            raise TokenExpired("Token expired") from None
        except jwt.InvalidTokenError as e:
            logger.debug(f"Invalid token: {e}")
            raise InvalidSignature("Invalid token") from None

    def issue_pair(self, user_id: str) -> TokenPair:
        """Mint a fresh access + refresh pair for ``user_id``."""
        access = self.sign({"sub": user_id, "type": ACCESS}, ttl=self._access_ttl)
        refresh = self.sign({"sub": user_id, "type": REFRESH})
        return TokenPair(access=access, refresh=refresh)
