"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from typing import Protocol

from .models import User, VerificationToken


class UserRepository(Protocol):
    """Port interface for the credential store."""

    def find_by_email(self, email: str) -> User | None:
        """Return the user owning a normalized email address, if any."""
        ...

    def find_by_id(self, user_id: str) -> User | None:
        """Return the user with the given id, if any."""
        ...

    def create(self, name: str, email: str, password_hash: str) -> User | None:
        """
        Atomically create an unverified user with an empty token set.

        Args:
            name: Display name
            email: Normalized email address
            password_hash: bcrypt hashed password

        Returns:
            The new User, or None if the email is already taken
        """
        ...

    def update_verified(self, user_id: str, verified: bool) -> None:
        """Set the verification flag."""
        ...

    def update_tokens(self, user_id: str, tokens: tuple[str, ...]) -> None:
        """
        Replace the user's stored refresh token set.

        Must be a single atomic write of the whole set for one record.
        """
        ...


class VerificationTokenRepository(Protocol):
    """Port interface for pending email verification tokens."""

    def find_by_owner(self, owner: str) -> VerificationToken | None:
        """Return the owner's live verification token, if any."""
        ...

    def create(self, owner: str, token_hash: str) -> VerificationToken:
        """Store a hashed token bound to ``owner``."""
        ...

    def delete_by_owner(self, owner: str) -> None:
        """Delete every token owned by ``owner``. No-op if none exist."""
        ...

    def delete_by_id(self, token_id: str) -> None:
        """Delete a single token record. No-op if it does not exist."""
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    def send_verification(self, email: str, link: str) -> None:
        """
        Send a verification link to an email address.

        Args:
            email: Recipient email address
            link: Verification link embedding the user id and plaintext token
        """
        ...
