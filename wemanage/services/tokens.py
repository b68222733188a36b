"""Bearer token issuing and verification (HS256 JWT)."""

import logging
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from functools import lru_cache

from jose import ExpiredSignatureError, JWTError, jwt

from wemanage.config import Settings, get_settings
from wemanage.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class TokenRejection(StrEnum):
    """Why a bearer token was not accepted."""

    MALFORMED = "malformed"
    INVALID_SIGNATURE = "invalid_signature"
    EXPIRED = "expired"


class TokenRejected(Exception):
    """Raised by TokenService.verify; never carries a partially trusted payload."""

    def __init__(self, reason: TokenRejection):
        self.reason = reason
        super().__init__(f"Token rejected: {reason}")


class TokenService:
    """Signs and verifies stateless tokens carrying ``{"id": user_id}``."""

    def __init__(self, secret: str | None, algorithm: str = "HS256", lifetime: timedelta | None = None):
        if not secret or not secret.strip():
            raise ConfigurationError("JWT_SECRET must be set to sign bearer tokens")
        self._secret = secret
        self.algorithm = algorithm
        self.lifetime = lifetime if lifetime is not None else timedelta(days=30)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            lifetime=timedelta(days=settings.jwt_expiration_days),
        )

    def issue(self, user_id: int) -> str:
        """Create a signed token for ``user_id`` expiring after ``lifetime``."""
        now = datetime.now(UTC)
        payload = {
            "id": user_id,
            "iat": now,
            "exp": now + self.lifetime,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> int:
        """Return the user id embedded in a valid, unexpired token.

        Raises:
            TokenRejected: malformed token, bad signature, or expired.
        """
        try:
            jwt.get_unverified_header(token)
        except JWTError:
            raise TokenRejected(TokenRejection.MALFORMED) from None

        try:
            payload = jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise TokenRejected(TokenRejection.EXPIRED) from None
        except JWTError as e:
            logger.debug(f"Token signature check failed: {e}")
            raise TokenRejected(TokenRejection.INVALID_SIGNATURE) from None

        user_id = payload.get("id")
        if isinstance(user_id, bool) or not isinstance(user_id, int):
            raise TokenRejected(TokenRejection.MALFORMED)
        return user_id


@lru_cache
def get_token_service() -> TokenService:
    """Build the token service once from settings.

    Called during application startup so a missing secret stops the app.
    """
    return TokenService.from_settings(get_settings())
