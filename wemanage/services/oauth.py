"""Google OAuth 2.0 authorization-code client."""

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

import httpx

from wemanage.config import Settings, get_settings
from wemanage.exceptions import FederatedLoginError, ServiceUnavailable

logger = logging.getLogger(__name__)

GOOGLE_PROVIDER = "google"
GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
GOOGLE_SCOPES = "openid profile email"


@dataclass(frozen=True)
class ProviderProfile:
    """The parts of an identity provider profile used for account matching."""

    provider_user_id: str
    email: str | None
    display_name: str | None = None
    avatar_url: str | None = None


def profile_from_userinfo(data: dict[str, Any]) -> ProviderProfile:
    """Build a profile from Google's OpenID Connect userinfo response."""
    subject = data.get("sub")
    if not subject:
        raise FederatedLoginError("Google profile is missing a subject id")
    return ProviderProfile(
        provider_user_id=str(subject),
        email=data.get("email") or None,
        display_name=data.get("name") or None,
        avatar_url=data.get("picture") or None,
    )


class GoogleOAuthClient:
    """Builds the consent redirect and exchanges the callback code for a profile."""

    def __init__(self, settings: Settings) -> None:
        self.client_id = settings.google_client_id
        self.client_secret = settings.google_client_secret
        self.redirect_uri = settings.google_redirect_uri
        self.timeout = settings.oauth_request_timeout

    def authorization_url(self, state: str) -> str:
        """URL of Google's consent screen for this app."""
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": GOOGLE_SCOPES,
            "state": state,
        }
        return f"{GOOGLE_AUTHORIZE_URL}?{urlencode(params)}"

    async def fetch_profile(self, code: str) -> ProviderProfile:
        """Exchange an authorization code for the user's profile.

        Raises:
            FederatedLoginError: Google rejected the code or returned an
                unusable response.
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                token_response = await client.post(
                    GOOGLE_TOKEN_URL,
                    data={
                        "code": code,
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "redirect_uri": self.redirect_uri,
                        "grant_type": "authorization_code",
                    },
                )
                token_response.raise_for_status()
                access_token = token_response.json()["access_token"]

                userinfo_response = await client.get(
                    GOOGLE_USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                userinfo_response.raise_for_status()
                userinfo = userinfo_response.json()
        except httpx.HTTPError as e:
            logger.error(f"Google token exchange failed: {e}")
            raise FederatedLoginError("Google token exchange failed") from e
        except (KeyError, ValueError) as e:
            logger.error(f"Unexpected response from Google: {e}")
            raise FederatedLoginError("Unexpected response from Google") from e

        return profile_from_userinfo(userinfo)


def get_google_client() -> GoogleOAuthClient:
    """Get the Google client, or 503 when Google login is not configured."""
    settings = get_settings()
    if not settings.google_oauth_enabled:
        raise ServiceUnavailable("Google login is not configured")
    return GoogleOAuthClient(settings)
