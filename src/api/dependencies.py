"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from datetime import timedelta
from functools import lru_cache

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.adapters.smtp.console import ConsoleEmailSender
from src.config.settings import get_settings
from src.domain.auth import AuthService
from src.domain.exceptions import Unauthorized
from src.domain.hashing import BcryptHasher
from src.domain.models import User
from src.domain.ports import UserRepository, VerificationTokenRepository
from src.domain.tokens import TokenIssuer

# Module-level singleton - ConsoleEmailSender is stateless
_email_sender = ConsoleEmailSender()


def get_user_repository(request: Request) -> UserRepository:
    """
    Get the credential store from app state.

    The repositories are created during app lifespan startup.
    """
    return request.app.state.users


def get_verification_token_repository(request: Request) -> VerificationTokenRepository:
    """Get the verification token store from app state."""
    return request.app.state.verification_tokens


def get_email_sender() -> ConsoleEmailSender:
    """Get console email sender (singleton)."""
    return _email_sender


@lru_cache
def get_hasher() -> BcryptHasher:
    """bcrypt hasher (cached: building it computes the dummy digest)."""
    return BcryptHasher(rounds=get_settings().bcrypt_cost)


@lru_cache
def get_token_issuer() -> TokenIssuer:
    """Token issuer configured from settings."""
    settings = get_settings()
    return TokenIssuer(
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        access_ttl=timedelta(seconds=settings.access_token_ttl_seconds),
    )


def get_auth_service(request: Request) -> AuthService:
    """
    Create auth service with injected dependencies.

    Wires together the stores, hasher, issuer and email sender.
    """
    return AuthService(
        users=get_user_repository(request),
        verification_tokens=get_verification_token_repository(request),
        email_sender=get_email_sender(),
        hasher=get_hasher(),
        issuer=get_token_issuer(),
        verification_url=get_settings().verification_url,
    )


# Bearer security scheme for OpenAPI documentation. auto_error is off so a
# missing header yields the same 401 as a bad token.
http_bearer = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    service: AuthService = Depends(get_auth_service),
) -> User:
    """
    Resolve the authenticated caller from the Bearer access token.

    The resulting User is passed explicitly to the service operations
    that act on behalf of the caller.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized request",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return service.authenticate(credentials.credentials)
    except Unauthorized:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized request",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
