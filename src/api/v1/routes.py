"""
API v1 routes.

Defines REST endpoints for account authentication under /v1/auth.
Routes are plain ``def`` so FastAPI runs the blocking store and bcrypt
calls in its threadpool.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.dependencies import get_auth_service, get_current_user
from src.api.models import (
    ErrorResponse,
    MessageResponse,
    ProfileModel,
    ProfileResponse,
    RefreshRequest,
    RefreshResponse,
    SignInRequest,
    SignInResponse,
    SignUpRequest,
    TokensModel,
    VerifyEmailRequest,
)
from src.domain.auth import AuthService
from src.domain.exceptions import AuthError, Conflict, Forbidden, InvalidInput, Unauthorized
from src.domain.models import User

router = APIRouter(prefix="/auth", tags=["v1"])


def _http_error(exc: AuthError) -> HTTPException:
    """Map a domain error kind to a status code with a non-leaking message."""
    if isinstance(exc, InvalidInput):
        return HTTPException(status_code=422, detail=str(exc))
    if isinstance(exc, Conflict):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email is already in use")
    if isinstance(exc, Forbidden):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    if isinstance(exc, Unauthorized):
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized request",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Request failed")


@router.post(
    "/sign-up",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {"model": ErrorResponse, "description": "Email already in use"},
        422: {"description": "Validation error"},
    },
    summary="Register a new user",
    description="Create an unverified account. A verification link is sent to the email.",
)
def sign_up(
    request_data: SignUpRequest,
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """
    Register a new user and send a verification link.

    - **name**: Display name
    - **email**: Valid email address to register
    - **password**: Password
    """
    try:
        message = service.register(request_data.name, request_data.email, request_data.password)
    except AuthError as exc:
        raise _http_error(exc) from None
    return MessageResponse(message=message)


@router.post(
    "/verify",
    response_model=MessageResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid verification request"},
        422: {"description": "Validation error"},
    },
    summary="Verify email address",
    description="Submit the user id and token from the verification link.",
)
def verify_email(
    request_data: VerifyEmailRequest,
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Complete email verification. Repeating a successful call is a no-op."""
    try:
        message = service.verify_email(request_data.id, request_data.token)
    except AuthError as exc:
        # Missing token and wrong token are indistinguishable to the caller
        raise _http_error(exc) from None
    return MessageResponse(message=message)


@router.post(
    "/verify-token",
    response_model=MessageResponse,
    responses={401: {"model": ErrorResponse, "description": "Not authenticated"}},
    summary="Re-issue verification link",
    description="Invalidate any pending verification link and email a new one.",
)
def reissue_verification(
    user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    return MessageResponse(message=service.reissue_verification(user))


@router.post(
    "/sign-in",
    response_model=SignInResponse,
    responses={
        403: {"model": ErrorResponse, "description": "Email/Password mismatch"},
        422: {"description": "Validation error"},
    },
    summary="Sign in with email and password",
    description="Returns the public profile with a fresh access and refresh token.",
)
def sign_in(
    request_data: SignInRequest,
    service: AuthService = Depends(get_auth_service),
) -> SignInResponse:
    """
    Sign in.

    Unknown email and wrong password return the same 403 response.
    """
    try:
        result = service.sign_in(request_data.email, request_data.password)
    except AuthError as exc:
        raise _http_error(exc) from None
    return SignInResponse(
        profile=ProfileModel.from_domain(result.profile),
        tokens=TokensModel.from_domain(result.tokens),
    )


@router.post(
    "/refresh-token",
    response_model=RefreshResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid, expired or replayed token"},
        403: {"model": ErrorResponse, "description": "Missing token"},
    },
    summary="Rotate refresh token",
    description="Exchange a refresh token for a new token pair. Each refresh token "
    "is single-use; replaying a consumed token revokes every session of its owner.",
)
def refresh_token(
    request_data: RefreshRequest | None = None,
    service: AuthService = Depends(get_auth_service),
) -> RefreshResponse:
    presented = request_data.refresh_token if request_data else None
    try:
        tokens = service.refresh(presented or "")
    except AuthError as exc:
        raise _http_error(exc) from None
    return RefreshResponse(tokens=TokensModel.from_domain(tokens))


@router.get(
    "/profile",
    response_model=ProfileResponse,
    responses={401: {"model": ErrorResponse, "description": "Not authenticated"}},
    summary="Get own profile",
)
def profile(
    user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
) -> ProfileResponse:
    return ProfileResponse(profile=ProfileModel.from_domain(service.profile(user)))
