"""FastAPI dependencies for authentication and database.

A request proves its identity either with an ``Authorization: Bearer``
header or, after a Google login, with the session cookie. Both paths end in
the same ``Identity`` value, built once per request by ``get_identity``;
route handlers only ever see the ``User`` returned by ``get_current_user``.
"""

import logging
from dataclasses import dataclass
from typing import Annotated

import redis
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from wemanage.config import get_settings
from wemanage.database import get_db
from wemanage.exceptions import Forbidden, Unauthorized, UnauthorizedReason
from wemanage.models.user import User
from wemanage.services.auth import get_user_by_id
from wemanage.services.email import Mailer, get_mailer
from wemanage.services.password_reset import PasswordResetService
from wemanage.services.sessions import RedisSessionStore, get_session_store
from wemanage.services.tokens import TokenRejected, TokenRejection, TokenService, get_token_service

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class ResolvedIdentity:
    user: User


@dataclass(frozen=True)
class UnresolvedIdentity:
    reason: UnauthorizedReason


Identity = ResolvedIdentity | UnresolvedIdentity


def resolve_bearer_token(db: Session, tokens: TokenService, token: str) -> Identity:
    """Verify a bearer token and load the user it names."""
    try:
        user_id = tokens.verify(token)
    except TokenRejected as e:
        logger.debug(f"Bearer token rejected: {e.reason}")
        if e.reason == TokenRejection.EXPIRED:
            return UnresolvedIdentity(UnauthorizedReason.EXPIRED)
        return UnresolvedIdentity(UnauthorizedReason.INVALID_TOKEN)

    user = get_user_by_id(db, user_id)
    if user is None:
        return UnresolvedIdentity(UnauthorizedReason.USER_NOT_FOUND)
    return ResolvedIdentity(user)


def resolve_session(db: Session, sessions: RedisSessionStore, session_id: str) -> Identity:
    """Load the user behind a cookie session.

    A session whose user has since been deleted is destroyed rather than
    trusted.
    """
    try:
        user_id = sessions.get_user_id(session_id)
    except redis.RedisError as e:
        logger.error(f"Session store unavailable: {e}")
        return UnresolvedIdentity(UnauthorizedReason.SESSION_INVALID)

    if user_id is None:
        return UnresolvedIdentity(UnauthorizedReason.SESSION_INVALID)

    user = get_user_by_id(db, user_id)
    if user is None:
        logger.warning(f"Session refers to missing user {user_id}, clearing it")
        try:
            sessions.delete(session_id)
        except redis.RedisError as e:
            logger.error(f"Could not delete stale session: {e}")
        return UnresolvedIdentity(UnauthorizedReason.SESSION_INVALID)
    return ResolvedIdentity(user)


def get_identity(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
    sessions: Annotated[RedisSessionStore, Depends(get_session_store)],
) -> Identity:
    """Work out who is making the request, without failing."""
    if "authorization" in request.headers:
        if credentials is None:
            return UnresolvedIdentity(UnauthorizedReason.NO_TOKEN)
        return resolve_bearer_token(db, tokens, credentials.credentials)

    session_id = request.cookies.get(get_settings().session_cookie_name)
    if session_id:
        return resolve_session(db, sessions, session_id)

    return UnresolvedIdentity(UnauthorizedReason.NO_TOKEN)


def get_current_user(identity: Annotated[Identity, Depends(get_identity)]) -> User:
    """Get the current authenticated user, or 401 with the reason."""
    if isinstance(identity, UnresolvedIdentity):
        raise Unauthorized(identity.reason)
    return identity.user


def require_admin(current_user: Annotated[User, Depends(get_current_user)]) -> User:
    """Require an authenticated administrator."""
    if not current_user.is_admin:
        raise Forbidden("Forbidden: Admin access required")
    return current_user


def get_password_reset_service(
    db: Annotated[Session, Depends(get_db)],
    mailer: Annotated[Mailer, Depends(get_mailer)],
) -> PasswordResetService:
    """Get password reset service with dependencies."""
    return PasswordResetService(db, mailer, get_settings())
