"""
Domain exceptions - Semantic error types for authentication.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
The HTTP layer maps each kind to a status code and a safe message.
"""


class AuthError(Exception):
    """Base class for authentication domain errors."""

    pass


class InvalidInput(AuthError):
    """Missing or malformed request field."""

    pass


class Conflict(AuthError):
    """Email address already owns an account."""

    pass


class Unauthorized(AuthError):
    """Bad, expired or replayed token, or signature failure."""

    pass


class Forbidden(AuthError):
    """Credential mismatch. Message is intentionally generic."""

    pass


class TokenError(Exception):
    """Base class for Token Issuer verification failures."""

    pass


class InvalidSignature(TokenError):
    """Token is malformed or its signature does not match."""

    pass


class TokenExpired(TokenError):
    """Token signature is valid but its expiry has passed."""

    pass
