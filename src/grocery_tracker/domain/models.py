"""Domain models for the grocery tracker."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UserProfile:
    """Signed-in user as reported by the identity provider."""

    id: str
    display_name: str | None
    email: str | None
    photo_url: str | None
