"""Supabase Auth client for resolving access tokens."""

from dataclasses import dataclass

from supabase import Client

from grocery_tracker.domain.models import UserProfile
from grocery_tracker.services.auth import AuthClient, AuthError


@dataclass
class SupabaseAuthClient(AuthClient):
    """Supabase implementation of the identity provider."""

    client: Client

    def get_user(self, access_token: str) -> UserProfile | None:
        """Return the profile that owns the access token."""
        try:
            response = self.client.auth.get_user(access_token)
        except Exception as exc:
            raise AuthError(getattr(exc, "code", None), str(exc)) from exc
        if response is None or response.user is None:
            return None
        return _parse_user(response.user)

    def sign_out(self, access_token: str) -> None:
        """Revoke every session of the token's user."""
        self.client.auth.admin.sign_out(access_token)


def _parse_user(user: object) -> UserProfile:
    metadata = getattr(user, "user_metadata", None) or {}
    display_name = metadata.get("full_name") or metadata.get("name")
    photo_url = metadata.get("avatar_url") or metadata.get("picture")
    return UserProfile(
        id=str(getattr(user, "id", "")),
        display_name=display_name,
        email=getattr(user, "email", None),
        photo_url=photo_url,
    )
