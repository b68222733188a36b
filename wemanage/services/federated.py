"""Maps an identity provider profile onto exactly one local user.

Matching is tried in a fixed order and the first hit wins:

1. provider linked: a user already carries this provider id.
2. email linked: a local-password user has the profile's email; the
   provider id is attached to that account (local absorbs federated, never
   the reverse).
3. created: nobody matches, a password-less user is created.

Unique constraints on ``email`` and ``(provider, provider_id)`` settle races
between two first-time logins for the same identity: the loser rolls back
and runs the match again, which then finds the winner's row.
"""

import logging
from dataclasses import dataclass
from enum import StrEnum

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from wemanage.exceptions import FederatedLoginError, MissingEmailFromProviderError
from wemanage.models.user import User
from wemanage.services.auth import default_avatar_url, get_user_by_email
from wemanage.services.oauth import GOOGLE_PROVIDER, ProviderProfile

logger = logging.getLogger(__name__)


class ReconcileBranch(StrEnum):
    """Which matching rule resolved the profile."""

    PROVIDER_LINKED = "provider_linked"
    EMAIL_LINKED = "email_linked"
    CREATED = "created"


@dataclass
class ReconcileResult:
    user: User
    branch: ReconcileBranch


def email_local_part(email: str) -> str:
    return email.split("@")[0]


class FederatedIdentityReconciler:
    """Resolves provider profiles to users for one provider."""

    def __init__(self, db: Session, provider: str = GOOGLE_PROVIDER) -> None:
        self.db = db
        self.provider = provider

    def reconcile(self, profile: ProviderProfile) -> ReconcileResult:
        """Return the single user for ``profile``, linking or creating as needed.

        Raises:
            MissingEmailFromProviderError: No provider link and no email to match on.
            FederatedLoginError: The email belongs to an account linked to a
                different provider identity, or the database failed.
        """
        try:
            return self._resolve(profile)
        except IntegrityError:
            self.db.rollback()
            logger.info(f"Concurrent {self.provider} login for the same identity, retrying lookup")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error during {self.provider} login: {e}")
            raise FederatedLoginError("Database error during federated login") from e

        try:
            return self._resolve(profile)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Retry of {self.provider} login failed: {e}")
            raise FederatedLoginError("Database error during federated login") from e

    def _resolve(self, profile: ProviderProfile) -> ReconcileResult:
        branch, user = self.classify(profile)
        if branch == ReconcileBranch.PROVIDER_LINKED:
            result = ReconcileResult(user, branch)
        elif branch == ReconcileBranch.EMAIL_LINKED:
            result = ReconcileResult(self.link_by_email(user, profile), branch)
        else:
            result = ReconcileResult(self.create_user(profile), branch)
        logger.info(f"{self.provider} login resolved user {result.user.id} ({result.branch})")
        return result

    def classify(self, profile: ProviderProfile) -> tuple[ReconcileBranch, User | None]:
        """Pick the matching rule for ``profile`` without changing anything."""
        user = self.find_linked_user(profile.provider_user_id)
        if user is not None:
            return ReconcileBranch.PROVIDER_LINKED, user

        if not profile.email:
            raise MissingEmailFromProviderError()

        user = get_user_by_email(self.db, profile.email)
        if user is not None:
            return ReconcileBranch.EMAIL_LINKED, user

        return ReconcileBranch.CREATED, None

    def find_linked_user(self, provider_user_id: str) -> User | None:
        return (
            self.db.query(User)
            .filter(User.provider == self.provider, User.provider_id == provider_user_id)
            .first()
        )

    def link_by_email(self, user: User, profile: ProviderProfile) -> User:
        """Attach the provider identity to an existing account with the same email.

        Name and avatar are only filled in where the account has none (None or
        empty string); values the user set themselves are kept.
        """
        if user.provider is not None:
            raise FederatedLoginError(
                "This email is already linked to a different sign-in account"
            )

        email = profile.email
        user.provider = self.provider
        user.provider_id = profile.provider_user_id
        user.name = user.name or profile.display_name or email_local_part(email)
        user.avatar_url = user.avatar_url or profile.avatar_url or default_avatar_url(email)
        self.db.commit()
        self.db.refresh(user)
        return user

    def create_user(self, profile: ProviderProfile) -> User:
        """Create a password-less account for a first-time provider login."""
        email = profile.email
        user = User(
            email=email,
            name=profile.display_name or email_local_part(email),
            provider=self.provider,
            provider_id=profile.provider_user_id,
            password_hash=None,
            avatar_url=profile.avatar_url or default_avatar_url(email),
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user
