"""Local account registration and credential login."""

import logging
from urllib.parse import quote

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from wemanage.exceptions import Conflict, ValidationError
from wemanage.models.user import User
from wemanage.services.passwords import dummy_verify, get_password_hash, verify_password

logger = logging.getLogger(__name__)

AVATAR_PLACEHOLDER_URL = "https://api.dicebear.com/8.x/bottts-neutral/svg?seed={seed}"

INVALID_CREDENTIALS = "Invalid credentials"


def default_avatar_url(email: str) -> str:
    """Deterministic placeholder avatar keyed by the email address."""
    return AVATAR_PLACEHOLDER_URL.format(seed=quote(email, safe="!*'()"))


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get a user by email."""
    return db.query(User).filter(User.email == email).first()


def get_user_by_id(db: Session, user_id: int) -> User | None:
    """Get a user by id."""
    return db.query(User).filter(User.id == user_id).first()


def authenticate_user(db: Session, email: str, password: str) -> User:
    """Authenticate a user by email and password.

    Unknown email, wrong password and Google-only accounts all fail with the
    same error.
    """
    user = get_user_by_email(db, email)
    if not user or user.password_hash is None:
        dummy_verify()
        raise ValidationError(INVALID_CREDENTIALS)
    if not verify_password(password, user.password_hash):
        raise ValidationError(INVALID_CREDENTIALS)
    return user


def create_user(db: Session, email: str, password: str, name: str) -> User:
    """Create a new local-password user."""
    if get_user_by_email(db, email):
        raise ValidationError("User already exists")

    user = User(
        email=email,
        name=name,
        password_hash=get_password_hash(password),
        avatar_url=default_avatar_url(email),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        db.rollback()
        raise Conflict("User already exists") from None
    db.refresh(user)
    logger.info(f"Registered user {user.id}")
    return user
