"""
Auth domain service - Verification flow and token lifecycle.

This module contains the core business logic for registration, email
verification, sign-in and refresh-token rotation.

Verification Flow
=================

    register          -> user(verified=False) + one hashed token, link mailed
    reissue           -> prior token deleted, new hashed token, link mailed
    verify (match)    -> verified=True, token deleted
    verify (no token) -> success if already verified, else Unauthorized

At most one unconsumed verification token exists per owner. The
plaintext token only ever travels inside the emailed link.

Refresh Rotation
================

A refresh token is valid only while it is a member of its owner's stored
token set. Each refresh consumes the presented token and appends a new one.
A correctly signed token that is no longer in the set is a replay: the
owner's whole set is cleared, forcing re-authentication on every device.

Note: two concurrent rotations for the same user both read the same token
set and the last write wins. There is no locking here; the store only has
to provide atomic per-record updates.
"""

import logging
import secrets
from dataclasses import dataclass
from urllib.parse import urlencode

from .exceptions import Conflict, Forbidden, InvalidInput, TokenError, Unauthorized
from .hashing import BCRYPT_MAX_BYTES, BcryptHasher
from .models import PublicProfile, SignInResult, TokenPair, User, add_token, rotate_token
from .ports import EmailSender, UserRepository, VerificationTokenRepository
from .tokens import ACCESS, REFRESH, TokenIssuer

logger = logging.getLogger(__name__)

CHECK_INBOX = "Please check your inbox."
EMAIL_VERIFIED = "Your email is verified."
CREDENTIAL_MISMATCH = "Email/Password mismatch!"
INVALID_VERIFICATION = "Invalid verification request"
UNAUTHORIZED_REQUEST = "Unauthorized request"

# Hex encoding doubles the length; the result must fit bcrypt's input limit
VERIFICATION_TOKEN_BYTES = BCRYPT_MAX_BYTES // 2


@dataclass
class AuthService:
    """
    Domain service for account authentication.

    Orchestrates the credential store, verification token store,
    hasher, token issuer and mailer.
    """

    users: UserRepository
    verification_tokens: VerificationTokenRepository
    email_sender: EmailSender
    hasher: BcryptHasher
    issuer: TokenIssuer
    verification_url: str

    def register(self, name: str, email: str, password: str) -> str:
        """
        Create an unverified account and email a verification link.

        The token hash is stored before the email is sent. A mailer error
        propagates without rolling back the account; re-issuing the link
        is the recovery path.

        Raises:
            InvalidInput: A field is missing or blank
            Conflict: The email already owns an account
        """
        self._require(name=name, email=email, password=password)
        normalized_email = self._normalize_email(email)

        if self.users.find_by_email(normalized_email) is not None:
            raise Conflict("Email is already in use")

        user = self.users.create(name.strip(), normalized_email, self.hasher.hash(password))
        if user is None:
            raise Conflict("Email is already in use")

        logger.info("Registered user %s", user.id)
        self._issue_verification(user)
        return CHECK_INBOX

    def verify_email(self, user_id: str, token: str) -> str:
        """
        Complete email verification with the token from the link.

        "No pending token" and "wrong token" raise the same error.

        Raises:
            InvalidInput: A field is missing or blank
            Unauthorized: No matching pending verification
        """
        self._require(id=user_id, token=token)

        stored = self.verification_tokens.find_by_owner(user_id)
        if stored is None:
            user = self.users.find_by_id(user_id)
            if user is not None and user.verified:
                # Already completed; a repeated link click is a no-op.
                return EMAIL_VERIFIED
            raise Unauthorized(INVALID_VERIFICATION)

        if not self.hasher.compare(token, stored.token_hash):
            raise Unauthorized(INVALID_VERIFICATION)

        self.users.update_verified(user_id, True)
        self.verification_tokens.delete_by_id(stored.id)
        logger.info("Verified email for user %s", user_id)
        return EMAIL_VERIFIED

    def reissue_verification(self, caller: User) -> str:
        """Replace the caller's verification token and email a new link."""
        self._issue_verification(caller)
        return CHECK_INBOX

    def sign_in(self, email: str, password: str) -> SignInResult:
        """
        Check credentials and issue a fresh token pair.

        Unknown email and wrong password raise the same Forbidden error,
        and both paths run a bcrypt comparison.

        Raises:
            InvalidInput: A field is missing or blank
            Forbidden: Email/password mismatch
        """
        self._require(email=email, password=password)

        user = self.users.find_by_email(self._normalize_email(email))
        digest = user.password_hash if user is not None else self.hasher.dummy_digest()
        password_valid = self.hasher.compare(password, digest)
        if user is None or not password_valid:
            raise Forbidden(CREDENTIAL_MISMATCH)

        tokens = self.issuer.issue_pair(user.id)
        self.users.update_tokens(user.id, add_token(user.tokens, tokens.refresh))
        logger.info("User %s signed in", user.id)
        return SignInResult(profile=PublicProfile.from_user(user), tokens=tokens)

    def refresh(self, refresh_token: str) -> TokenPair:
        """
        Rotate a refresh token.

        Raises:
            Forbidden: No token presented
            Unauthorized: Invalid, expired, wrong-type or replayed token
        """
        if not refresh_token or not refresh_token.strip():
            raise Forbidden(UNAUTHORIZED_REQUEST)

        user_id = self._subject(refresh_token, REFRESH)
        user = self.users.find_by_id(user_id)
        if user is None:
            raise Unauthorized(UNAUTHORIZED_REQUEST)

        if refresh_token not in user.tokens:
            # Well-signed but already rotated out: treat as compromised.
            logger.warning("Refresh token replay detected for user %s, revoking all tokens", user.id)
            self.users.update_tokens(user.id, ())
            raise Unauthorized(UNAUTHORIZED_REQUEST)

        tokens = self.issuer.issue_pair(user.id)
        self.users.update_tokens(user.id, rotate_token(user.tokens, refresh_token, tokens.refresh))
        return tokens

    def profile(self, caller: User) -> PublicProfile:
        """Public profile of the already-authenticated caller."""
        return PublicProfile.from_user(caller)

    def authenticate(self, access_token: str) -> User:
        """
        Resolve the caller identity from an access token.

        Raises:
            Unauthorized: Invalid, expired or wrong-type token, or unknown user
        """
        user_id = self._subject(access_token, ACCESS)
        user = self.users.find_by_id(user_id)
        if user is None:
            raise Unauthorized(UNAUTHORIZED_REQUEST)
        return user

    def _issue_verification(self, user: User) -> None:
        """Replace any live token for ``user``, store the new hash, mail the link."""
        token = secrets.token_hex(VERIFICATION_TOKEN_BYTES)

        self.verification_tokens.delete_by_owner(user.id)
        self.verification_tokens.create(user.id, self.hasher.hash(token))

        link = f"{self.verification_url}?{urlencode({'id': user.id, 'token': token})}"
        self.email_sender.send_verification(user.email, link)

    def _subject(self, token: str, expected_type: str) -> str:
        """Verify ``token`` and return its user id, or raise Unauthorized."""
        try:
            payload = self.issuer.verify(token)
        except TokenError:
            raise Unauthorized(UNAUTHORIZED_REQUEST) from None

        user_id = payload.get("sub")
        if not user_id or payload.get("type") != expected_type:
            raise Unauthorized(UNAUTHORIZED_REQUEST)
        return str(user_id)

    def _require(self, **fields: str | None) -> None:
        """Raise InvalidInput naming the first missing or blank field."""
        for field_name, value in fields.items():
            if value is None or not str(value).strip():
                raise InvalidInput(f"{field_name.capitalize()} is missing!")

    def _normalize_email(self, email: str) -> str:
        """
        Normalize email address for consistent storage and lookup.

        Applies: strip whitespace + lowercase
        """
        return email.strip().lower()
