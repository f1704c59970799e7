"""Sign-in session resolution."""

import logging
from dataclasses import dataclass
from typing import Protocol

from grocery_tracker.domain.models import UserProfile

logger = logging.getLogger(__name__)

AUTH_ERROR_MESSAGES: dict[str, str] = {
    "missing_token": "Please sign in to continue.",
    "bad_jwt": "Your sign-in token is invalid. Please sign in again.",
    "session_expired": "Your session has expired. Please sign in again.",
    "session_not_found": "Your session has expired. Please sign in again.",
    "user_not_found": "No account matches this sign-in.",
    "user_banned": "This account has been disabled.",
    "provider_disabled": (
        "Google sign-in is not enabled. Enable the Google provider under "
        "Authentication > Providers."
    ),
    "not_allowed": "This account is not allowed to use the tracker.",
}


class AuthError(Exception):
    """Raised when the identity provider rejects a token."""

    def __init__(self, code: str | None, message: str | None = None) -> None:
        super().__init__(message or code or "authentication failed")
        self.code = code


class AuthClient(Protocol):
    """Interface for the identity provider."""

    def get_user(self, access_token: str) -> UserProfile | None:
        """Return the profile for a valid access token."""

    def sign_out(self, access_token: str) -> None:
        """Revoke the session behind an access token."""


@dataclass
class AuthService:
    """Service that resolves bearer tokens and gates access."""

    client: AuthClient
    allowed_emails: set[str] | None = None

    def resolve(self, access_token: str | None) -> UserProfile:
        """Return the signed-in user or raise ``AuthError``."""
        if not access_token:
            raise AuthError("missing_token")
        profile = self.client.get_user(access_token)
        if profile is None:
            raise AuthError("user_not_found")
        if not self.is_allowed(profile):
            raise AuthError("not_allowed")
        return profile

    def is_allowed(self, profile: UserProfile) -> bool:
        """Return true when the allow-list admits the user."""
        if self.allowed_emails is None:
            return True
        return (profile.email or "").lower() in self.allowed_emails

    def sign_out(self, access_token: str) -> None:
        """Revoke the session, logging provider failures."""
        try:
            self.client.sign_out(access_token)
        except Exception:
            logger.exception("Sign-out failed")


def describe_auth_error(code: str | None) -> str:
    """Return user-facing copy for a provider error code."""
    if code and code in AUTH_ERROR_MESSAGES:
        return AUTH_ERROR_MESSAGES[code]
    return f"Failed to sign in. ({code or 'unknown error'})"
