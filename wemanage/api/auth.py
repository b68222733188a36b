"""Authentication API endpoints."""

import logging
import secrets
from typing import Annotated
from urllib.parse import urlencode

import redis
from fastapi import APIRouter, Depends, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.orm import Session

from wemanage.api.dependencies import get_current_user, get_password_reset_service
from wemanage.config import get_settings
from wemanage.database import get_db
from wemanage.exceptions import FederatedLoginError, NotFound
from wemanage.models.user import User
from wemanage.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    MessageResponse,
    ResetPasswordRequest,
    UserLogin,
    UserRegister,
    UserResponse,
)
from wemanage.services.auth import authenticate_user, create_user, get_user_by_id
from wemanage.services.federated import FederatedIdentityReconciler
from wemanage.services.oauth import GoogleOAuthClient, get_google_client
from wemanage.services.password_reset import PasswordResetService
from wemanage.services.sessions import RedisSessionStore, get_session_store
from wemanage.services.tokens import TokenService, get_token_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

OAUTH_STATE_COOKIE = "oauth_state"
OAUTH_STATE_MAX_AGE = 600

FORGOT_PASSWORD_MESSAGE = "If an account exists, a reset link has been sent."


def build_auth_response(user: User, tokens: TokenService) -> AuthResponse:
    return AuthResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        avatar_url=user.avatar_url,
        role=user.role,
        token=tokens.issue(user.id),
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserRegister,
    db: Annotated[Session, Depends(get_db)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
):
    """Register a new user."""
    user = create_user(db, user_data.email, user_data.password, user_data.name)
    return build_auth_response(user, tokens)


@router.post("/login", response_model=AuthResponse)
def login(
    credentials: UserLogin,
    db: Annotated[Session, Depends(get_db)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
):
    """Login with email and password."""
    user = authenticate_user(db, credentials.email, credentials.password)
    return build_auth_response(user, tokens)


@router.get("/me", response_model=UserResponse)
def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get current user information."""
    user = get_user_by_id(db, current_user.id)
    if user is None:
        raise NotFound("User not found")
    return user


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    sessions: Annotated[RedisSessionStore, Depends(get_session_store)],
):
    """End the cookie session, if any. Bearer tokens simply expire."""
    settings = get_settings()
    session_id = request.cookies.get(settings.session_cookie_name)
    if session_id:
        try:
            sessions.delete(session_id)
        except redis.RedisError as e:
            logger.error(f"Could not delete session on logout: {e}")
    response = JSONResponse({"message": "Logged out successfully"})
    response.delete_cookie(settings.session_cookie_name)
    return response


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    body: ForgotPasswordRequest,
    reset_service: Annotated[PasswordResetService, Depends(get_password_reset_service)],
):
    """Email a reset link. The answer is the same whether or not the account exists."""
    reset_service.request_reset(body.email)
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.put("/reset-password/{token}", response_model=MessageResponse)
def reset_password(
    token: str,
    body: ResetPasswordRequest,
    reset_service: Annotated[PasswordResetService, Depends(get_password_reset_service)],
):
    """Set a new password using an emailed reset token."""
    reset_service.reset_password(token, body.password)
    return MessageResponse(message="Password reset successful.")


def login_error_redirect(code: str) -> RedirectResponse:
    """Send the browser back to the frontend login page with an error code."""
    settings = get_settings()
    query = urlencode({"error": code})
    response = RedirectResponse(
        f"{settings.frontend_url}/login?{query}", status_code=status.HTTP_302_FOUND
    )
    response.delete_cookie(OAUTH_STATE_COOKIE)
    return response


@router.get("/google")
def google_login(
    google: Annotated[GoogleOAuthClient, Depends(get_google_client)],
):
    """Redirect to Google's consent screen."""
    settings = get_settings()
    state = secrets.token_urlsafe(32)
    response = RedirectResponse(
        google.authorization_url(state), status_code=status.HTTP_302_FOUND
    )
    response.set_cookie(
        OAUTH_STATE_COOKIE,
        state,
        max_age=OAUTH_STATE_MAX_AGE,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    return response


@router.get("/google/callback")
async def google_callback(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    google: Annotated[GoogleOAuthClient, Depends(get_google_client)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
    sessions: Annotated[RedisSessionStore, Depends(get_session_store)],
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
):
    """Finish a Google login: resolve the account, open a session, hand over a token."""
    settings = get_settings()

    if error or not code:
        logger.warning(f"Google login did not return a code: {error}")
        return login_error_redirect("google-failed")

    expected_state = request.cookies.get(OAUTH_STATE_COOKIE)
    if not state or not expected_state or not secrets.compare_digest(state, expected_state):
        logger.warning("Google login state mismatch")
        return login_error_redirect("invalid-state")

    try:
        profile = await google.fetch_profile(code)
        # Database and Redis calls are blocking; keep them off the event loop
        result = await run_in_threadpool(FederatedIdentityReconciler(db).reconcile, profile)
    except FederatedLoginError as e:
        logger.error(f"Google login failed: {e}")
        return login_error_redirect("google-auth-error")

    user = result.user
    try:
        session_id = await run_in_threadpool(sessions.create, user.id)
    except redis.RedisError as e:
        logger.error(f"Could not store session for user {user.id}: {e}")
        return login_error_redirect("session-error")

    query = urlencode({"token": tokens.issue(user.id)})
    response = RedirectResponse(
        f"{settings.frontend_url}/auth/callback?{query}", status_code=status.HTTP_302_FOUND
    )
    response.set_cookie(
        settings.session_cookie_name,
        session_id,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    response.delete_cookie(OAUTH_STATE_COOKIE)
    return response
