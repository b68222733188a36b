"""Forgot-password / reset-password flow.

A user is either idle (no reset token stored) or has one pending reset
token. Only the SHA-256 hash of the token is stored; the plaintext exists in
memory and in the one email that carries it. Expiry is checked against the
stored timestamp when the token is used, so there is nothing to sweep.
"""

import hashlib
import logging
import secrets
from datetime import UTC, datetime, timedelta

from sqlalchemy.orm import Session

from wemanage.config import Settings
from wemanage.exceptions import InvalidResetTokenError, ResetEmailDeliveryError, ValidationError
from wemanage.models.user import User
from wemanage.services.auth import get_user_by_email
from wemanage.services.email import Mailer
from wemanage.services.passwords import get_password_hash

logger = logging.getLogger(__name__)

RESET_TOKEN_BYTES = 32  # 256 bits

RESET_EMAIL_SUBJECT = "Your WeManage Password Reset Link"
RESET_EMAIL_BODY = """You requested a password reset.
Click the following link (valid for {minutes} minutes):
{url}
If you did not request this, ignore this email.
"""


def hash_reset_token(token: str) -> str:
    """One-way hash used to store and look up reset tokens."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class PasswordResetService:
    """Issues, delivers and consumes password reset tokens."""

    def __init__(self, db: Session, mailer: Mailer, settings: Settings) -> None:
        self.db = db
        self.mailer = mailer
        self.settings = settings

    @property
    def token_lifetime(self) -> timedelta:
        return timedelta(minutes=self.settings.password_reset_token_minutes)

    def request_reset(self, email: str) -> None:
        """Issue a reset token for ``email`` and mail it.

        Does nothing for unknown emails; callers answer both cases the same way.

        Raises:
            ResetEmailDeliveryError: The email could not be sent. The stored
                token has been cleared again.
        """
        user = get_user_by_email(self.db, email)
        if user is None:
            logger.info("Password reset requested for an unknown email")
            return

        token = secrets.token_hex(RESET_TOKEN_BYTES)
        # Overwrites any earlier token, so at most one is live per user
        user.password_reset_token = hash_reset_token(token)
        user.password_reset_expires = datetime.now(UTC) + self.token_lifetime
        self.db.commit()
        logger.info(f"Password reset token issued for user {user.id}")

        reset_url = f"{self.settings.frontend_url}/reset-password/{token}"
        body = RESET_EMAIL_BODY.format(
            minutes=self.settings.password_reset_token_minutes, url=reset_url
        )
        delivered = False
        try:
            delivered = self.mailer.send(user.email, RESET_EMAIL_SUBJECT, body)
        finally:
            # Also runs when the mailer raises, so no undeliverable token stays live
            if not delivered:
                logger.error(f"Reset email for user {user.id} not delivered, clearing token")
                user.password_reset_token = None
                user.password_reset_expires = None
                self.db.commit()
        if not delivered:
            raise ResetEmailDeliveryError()

    def reset_password(self, token: str, new_password: str) -> User:
        """Consume ``token`` and set ``new_password``.

        Raises:
            ValidationError: Password below the minimum length.
            InvalidResetTokenError: Token unknown, already used, or expired.
        """
        if len(new_password) < self.settings.password_min_length:
            raise ValidationError(
                f"Password must be at least {self.settings.password_min_length} characters"
            )

        token_hash = hash_reset_token(token)
        user = (
            self.db.query(User)
            .filter(
                User.password_reset_token == token_hash,
                User.password_reset_expires > datetime.now(UTC),
            )
            .first()
        )
        if user is None:
            raise InvalidResetTokenError()

        # Conditional on the token still being stored: one write sets the
        # password and clears both reset fields, and only one caller wins.
        updated = (
            self.db.query(User)
            .filter(User.id == user.id, User.password_reset_token == token_hash)
            .update(
                {
                    User.password_hash: get_password_hash(new_password),
                    User.password_reset_token: None,
                    User.password_reset_expires: None,
                },
                synchronize_session="fetch",
            )
        )
        self.db.commit()
        if updated != 1:
            raise InvalidResetTokenError()

        self.db.refresh(user)
        logger.info(f"Password reset completed for user {user.id}")
        return user
