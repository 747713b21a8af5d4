"""
Domain models - Plain records shared by the service and its ports.

Records are frozen dataclasses; state changes go through the repository
ports. The refresh token set is an ordered tuple, and the helpers below
return a new tuple rather than mutating in place.
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class User:
    """Persisted account record."""

    id: str
    email: str
    name: str
    password_hash: str
    verified: bool = False
    tokens: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class VerificationToken:
    """One-time email verification token, stored as a hash only."""

    id: str
    owner: str
    token_hash: str
    created_at: datetime


@dataclass(frozen=True)
class TokenPair:
    """Access + refresh token pair returned by sign-in and refresh."""

    access: str
    refresh: str


@dataclass(frozen=True)
class PublicProfile:
    """User fields safe to return to clients."""

    id: str
    email: str
    name: str
    verified: bool

    @classmethod
    def from_user(cls, user: User) -> "PublicProfile":
        return cls(id=user.id, email=user.email, name=user.name, verified=user.verified)


@dataclass(frozen=True)
class SignInResult:
    """Profile and tokens of a successful sign-in."""

    profile: PublicProfile
    tokens: TokenPair


def add_token(tokens: tuple[str, ...] | None, new: str) -> tuple[str, ...]:
    """Return ``tokens`` with ``new`` appended (``None`` means an empty set)."""
    current = tuple(tokens or ())
    if new in current:
        return current
    return current + (new,)


def rotate_token(tokens: tuple[str, ...] | None, old: str, new: str) -> tuple[str, ...]:
    """Return ``tokens`` without ``old`` and with ``new`` appended."""
    remaining = tuple(t for t in (tokens or ()) if t != old)
    return add_token(remaining, new)
