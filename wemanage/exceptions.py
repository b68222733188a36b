"""Exception taxonomy shared by services and routers.

Every exception carries the HTTP status it maps to; ``wemanage.main`` renders
them as ``{"detail": message}``.
"""

from enum import StrEnum

from fastapi import status


class UnauthorizedReason(StrEnum):
    """Why a request could not be tied to a user."""

    NO_TOKEN = "no_token"
    INVALID_TOKEN = "invalid_token"
    EXPIRED = "expired"
    USER_NOT_FOUND = "user_not_found"
    SESSION_INVALID = "session_invalid"


UNAUTHORIZED_MESSAGES = {
    UnauthorizedReason.NO_TOKEN: "Not authorized, no token",
    UnauthorizedReason.INVALID_TOKEN: "Not authorized, invalid token",
    UnauthorizedReason.EXPIRED: "Not authorized, token expired",
    UnauthorizedReason.USER_NOT_FOUND: "Not authorized, user not found",
    UnauthorizedReason.SESSION_INVALID: "Not authorized, session expired",
}


class WeManageError(Exception):
    """Base exception for the application."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(WeManageError):
    """Missing or malformed input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class Unauthorized(WeManageError):
    """No identity proof, or one that does not check out."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, reason: UnauthorizedReason = UnauthorizedReason.NO_TOKEN):
        self.reason = reason
        super().__init__(UNAUTHORIZED_MESSAGES[reason])


class Forbidden(WeManageError):
    """Valid identity, insufficient privilege."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFound(WeManageError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(WeManageError):
    """Duplicate unique key."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Already exists"


class ServerError(WeManageError):
    """Unexpected failure in a dependency."""


class ServiceUnavailable(WeManageError):
    """A feature that is switched off by configuration."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Service unavailable"


class ConfigurationError(WeManageError):
    """Raised at startup when required configuration is missing."""


class SelfTargetError(ValidationError):
    """An administrator pointed an admin operation at their own account."""


class InvalidResetTokenError(ValidationError):
    default_message = "Reset token invalid or expired"


class ResetEmailDeliveryError(ServerError):
    default_message = "Error sending reset email"


class FederatedLoginError(WeManageError):
    """The identity provider profile could not be mapped to a user."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Federated login failed"


class MissingEmailFromProviderError(FederatedLoginError):
    default_message = "Identity provider did not return an email address"
