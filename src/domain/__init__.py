"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core logic for account authentication: the
email verification flow and the refresh token lifecycle. It defines its
own port interfaces for infrastructure abstraction, ensuring true
hexagonal architecture decoupling.
"""

from .auth import AuthService
from .exceptions import (
    AuthError,
    Conflict,
    Forbidden,
    InvalidInput,
    InvalidSignature,
    TokenError,
    TokenExpired,
    Unauthorized,
)
from .hashing import BcryptHasher
from .models import (
    PublicProfile,
    SignInResult,
    TokenPair,
    User,
    VerificationToken,
    add_token,
    rotate_token,
)
from .ports import EmailSender, UserRepository, VerificationTokenRepository
from .tokens import TokenIssuer

__all__ = [
    "AuthError",
    "AuthService",
    "BcryptHasher",
    "Conflict",
    "EmailSender",
    "Forbidden",
    "InvalidInput",
    "InvalidSignature",
    "PublicProfile",
    "SignInResult",
    "TokenError",
    "TokenExpired",
    "TokenIssuer",
    "TokenPair",
    "Unauthorized",
    "User",
    "UserRepository",
    "VerificationToken",
    "VerificationTokenRepository",
    "add_token",
    "rotate_token",
]
