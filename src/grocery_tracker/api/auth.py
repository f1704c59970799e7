"""Bearer-token authentication and session endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from grocery_tracker.domain.models import UserProfile
from grocery_tracker.services.auth import AuthError, describe_auth_error

if TYPE_CHECKING:
    from grocery_tracker.containers import AppContainer

router = APIRouter(tags=["auth"])

_BEARER_PREFIX = "bearer "


def bearer_token(authorization: str | None = Header(default=None)) -> str | None:
    """Extract the access token from an Authorization header."""
    if not authorization or not authorization.lower().startswith(_BEARER_PREFIX):
        return None
    token = authorization[len(_BEARER_PREFIX) :].strip()
    return token or None


async def require_user(
    request: Request, token: str | None = Depends(bearer_token)
) -> UserProfile:
    """Resolve the signed-in user or reject the request."""
    container: AppContainer = request.app.state.container
    try:
        return container.auth_service.resolve(token)
    except AuthError as exc:
        status_code = (
            status.HTTP_403_FORBIDDEN
            if exc.code == "not_allowed"
            else status.HTTP_401_UNAUTHORIZED
        )
        raise HTTPException(
            status_code=status_code,
            detail=_auth_error_detail(container, exc),
        ) from exc


@router.get("/me")
async def me(user: UserProfile = Depends(require_user)) -> dict[str, object]:
    """Return the signed-in user's profile."""
    return {
        "id": user.id,
        "display_name": user.display_name,
        "email": user.email,
        "photo_url": user.photo_url,
    }


@router.post("/auth/sign-out")
async def sign_out(
    request: Request,
    user: UserProfile = Depends(require_user),
    token: str | None = Depends(bearer_token),
) -> dict[str, str]:
    """Revoke the session and drop the user's in-memory state."""
    container: AppContainer = request.app.state.container
    if token:
        container.auth_service.sign_out(token)
    container.purchase_service.forget(user.id)
    container.chat_service.reset(user.id)
    return {"status": "signed_out"}


def _auth_error_detail(container: AppContainer, exc: AuthError) -> str:
    """Return mapped copy, with provider detail in the local environment."""
    message = describe_auth_error(exc.code)
    if container.settings.environment == "local" and str(exc) != exc.code:
        return f"{message} (debug: {exc})"
    return message
