"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- In-memory stores and a mocked email sender
- A fast bcrypt hasher and a token issuer with a test secret
- A wired AuthService
"""

from datetime import timedelta
from unittest.mock import Mock

import pytest

from src.adapters.repository.memory import (
    InMemoryUserRepository,
    InMemoryVerificationTokenRepository,
)
from src.domain.auth import AuthService
from src.domain.hashing import BcryptHasher
from src.domain.tokens import TokenIssuer
from tests.helpers import TEST_SECRET, VERIFICATION_URL


@pytest.fixture
def hasher() -> BcryptHasher:
    """bcrypt hasher at the minimum cost factor to keep tests fast."""
    return BcryptHasher(rounds=4)


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer(secret_key=TEST_SECRET, access_ttl=timedelta(minutes=15))


@pytest.fixture
def users() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def verification_tokens() -> InMemoryVerificationTokenRepository:
    return InMemoryVerificationTokenRepository()


@pytest.fixture
def sender() -> Mock:
    return Mock()


@pytest.fixture
def service(
    users: InMemoryUserRepository,
    verification_tokens: InMemoryVerificationTokenRepository,
    sender: Mock,
    hasher: BcryptHasher,
    issuer: TokenIssuer,
) -> AuthService:
    return AuthService(
        users=users,
        verification_tokens=verification_tokens,
        email_sender=sender,
        hasher=hasher,
        issuer=issuer,
        verification_url=VERIFICATION_URL,
    )
