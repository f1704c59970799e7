"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import date

from fastapi import Depends, FastAPI, HTTPException, Request, status

from grocery_tracker.api.auth import require_user
from grocery_tracker.api.auth import router as auth_router
from grocery_tracker.api.models import (
    ChatMessageCreate,
    InsightsRequest,
    PurchaseCreate,
    PurchaseUpdate,
)
from grocery_tracker.app_logging import configure_logging
from grocery_tracker.containers import AppContainer
from grocery_tracker.domain.catalog import DEFAULT_ITEMS, DEFAULT_STORES
from grocery_tracker.domain.chat import ChatMessage
from grocery_tracker.domain.models import UserProfile
from grocery_tracker.domain.purchases import IntakeResult, Purchase, PurchaseDraft
from grocery_tracker.services import aggregation
from grocery_tracker.services.chat import (
    ChatMessageNotFoundError,
    NoPendingPurchaseError,
)
from grocery_tracker.services.purchases import (
    InvalidPurchaseError,
    PurchaseNotFoundError,
)

UNPROCESSABLE_STATUS = 422


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        try:
            await app.state.container.close_resources()
        except Exception:
            logger.exception("Failed to close client resources")

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(auth_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/catalog")
    async def catalog() -> dict[str, object]:
        """Return the reference items and stores for entry forms."""
        return {
            "items": [asdict(item) for item in DEFAULT_ITEMS],
            "stores": [asdict(store) for store in DEFAULT_STORES],
        }

    @app.get("/purchases")
    async def list_purchases(
        request: Request, user: UserProfile = Depends(require_user)
    ) -> dict[str, object]:
        """Return every purchase of the signed-in user."""
        state_container: AppContainer = request.app.state.container
        ledger = state_container.purchase_service.ledger(user.id)
        return {
            "purchases": [_serialize_purchase(p) for p in ledger.snapshot()],
            "unsynced": sorted(ledger.unsynced),
        }

    @app.get("/purchases/recent")
    async def recent_purchases(
        request: Request, limit: int = 5, user: UserProfile = Depends(require_user)
    ) -> dict[str, object]:
        """Return the most recent purchases."""
        state_container: AppContainer = request.app.state.container
        purchases = state_container.purchase_service.list_purchases(user.id)
        recent = aggregation.recent_purchases(purchases, limit)
        return {"purchases": [_serialize_purchase(p) for p in recent]}

    @app.post("/purchases", status_code=status.HTTP_201_CREATED)
    async def create_purchase(
        payload: PurchaseCreate,
        request: Request,
        user: UserProfile = Depends(require_user),
    ) -> dict[str, object]:
        """Record a manually entered purchase."""
        state_container: AppContainer = request.app.state.container
        try:
            result = state_container.purchase_service.record_purchase(
                user.id, PurchaseDraft(**payload.model_dump())
            )
        except InvalidPurchaseError as exc:
            raise HTTPException(
                status_code=UNPROCESSABLE_STATUS, detail=str(exc)
            ) from exc
        return _serialize_intake(result)

    @app.put("/purchases/{purchase_id}")
    async def update_purchase(
        purchase_id: str,
        payload: PurchaseUpdate,
        request: Request,
        user: UserProfile = Depends(require_user),
    ) -> dict[str, object]:
        """Replace a purchase with edited store, date, price or quantity."""
        state_container: AppContainer = request.app.state.container
        try:
            result = state_container.purchase_service.update_purchase(
                user.id, purchase_id, PurchaseDraft(**payload.model_dump())
            )
        except PurchaseNotFoundError as exc:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Purchase not found"
            ) from exc
        except InvalidPurchaseError as exc:
            raise HTTPException(
                status_code=UNPROCESSABLE_STATUS, detail=str(exc)
            ) from exc
        return _serialize_intake(result)

    @app.get("/items/{item_id}/history")
    async def item_history(
        item_id: str, request: Request, user: UserProfile = Depends(require_user)
    ) -> dict[str, object]:
        """Return every purchase of one item."""
        state_container: AppContainer = request.app.state.container
        purchases = state_container.purchase_service.list_purchases(user.id)
        history = aggregation.item_history(purchases, item_id)
        return {"purchases": [_serialize_purchase(p) for p in history]}

    @app.get("/favorites")
    async def favorites(
        request: Request, user: UserProfile = Depends(require_user)
    ) -> dict[str, object]:
        """Return the most frequently bought items."""
        state_container: AppContainer = request.app.state.container
        purchases = state_container.purchase_service.list_purchases(user.id)
        return {"favorites": [asdict(f) for f in aggregation.favorites(purchases)]}

    @app.post(
        "/favorites/{item_name}/purchases", status_code=status.HTTP_201_CREATED
    )
    async def quick_add(
        item_name: str,
        payload: PurchaseUpdate,
        request: Request,
        user: UserProfile = Depends(require_user),
    ) -> dict[str, object]:
        """Record a repeat purchase of a favorite item."""
        state_container: AppContainer = request.app.state.container
        try:
            result = state_container.purchase_service.quick_add(
                user.id, item_name, PurchaseDraft(**payload.model_dump())
            )
        except PurchaseNotFoundError as exc:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No earlier purchase of this item",
            ) from exc
        except InvalidPurchaseError as exc:
            raise HTTPException(
                status_code=UNPROCESSABLE_STATUS, detail=str(exc)
            ) from exc
        return _serialize_intake(result)

    @app.get("/dashboard")
    async def dashboard(
        request: Request, user: UserProfile = Depends(require_user)
    ) -> dict[str, object]:
        """Return headline spend, recent purchases, chart and favorites."""
        state_container: AppContainer = request.app.state.container
        purchases = state_container.purchase_service.list_purchases(user.id)
        return asdict(state_container.report_service.dashboard(purchases))

    @app.get("/compare")
    async def compare(
        request: Request, user: UserProfile = Depends(require_user)
    ) -> dict[str, object]:
        """Return price comparisons for repeat purchases."""
        state_container: AppContainer = request.app.state.container
        purchases = state_container.purchase_service.list_purchases(user.id)
        comparisons = state_container.report_service.compare(purchases)
        return {"items": [asdict(entry) for entry in comparisons]}

    @app.get("/reports")
    async def report(
        request: Request,
        start: date | None = None,
        end: date | None = None,
        user: UserProfile = Depends(require_user),
    ) -> dict[str, object]:
        """Return the year-over-year spending report for a date range."""
        state_container: AppContainer = request.app.state.container
        purchases = state_container.purchase_service.list_purchases(user.id)
        view = state_container.report_service.report(purchases, start, end)
        return asdict(view)

    @app.post("/reports/insights")
    async def insights(
        payload: InsightsRequest,
        request: Request,
        user: UserProfile = Depends(require_user),
    ) -> dict[str, str]:
        """Return model-written saving tips for a date range."""
        state_container: AppContainer = request.app.state.container
        purchases = state_container.purchase_service.list_purchases(user.id)
        text = await state_container.report_service.insights(
            purchases, payload.start, payload.end
        )
        return {"insights": text}

    @app.get("/chat/messages")
    async def chat_messages(
        request: Request, user: UserProfile = Depends(require_user)
    ) -> dict[str, object]:
        """Return the chat session of the signed-in user."""
        state_container: AppContainer = request.app.state.container
        session = state_container.chat_service.session(user.id)
        return {"messages": [_serialize_message(m) for m in session.messages]}

    @app.post("/chat/messages")
    async def send_chat_message(
        payload: ChatMessageCreate,
        request: Request,
        user: UserProfile = Depends(require_user),
    ) -> dict[str, object]:
        """Send chat text and return the user message and the reply."""
        state_container: AppContainer = request.app.state.container
        added = await state_container.chat_service.send(user.id, payload.text)
        return {"messages": [_serialize_message(m) for m in added]}

    @app.post("/chat/messages/{message_id}/confirm")
    async def confirm_chat_purchase(
        message_id: str, request: Request, user: UserProfile = Depends(require_user)
    ) -> dict[str, object]:
        """Save the purchase proposed in a chat message."""
        state_container: AppContainer = request.app.state.container
        try:
            result = state_container.chat_service.confirm(user.id, message_id)
        except ChatMessageNotFoundError as exc:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Message not found"
            ) from exc
        except NoPendingPurchaseError as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Message has no purchase to confirm",
            ) from exc
        except InvalidPurchaseError as exc:
            raise HTTPException(
                status_code=UNPROCESSABLE_STATUS, detail=str(exc)
            ) from exc
        return _serialize_intake(result)

    @app.post("/chat/messages/{message_id}/dismiss")
    async def dismiss_chat_purchase(
        message_id: str, request: Request, user: UserProfile = Depends(require_user)
    ) -> dict[str, object]:
        """Discard the purchase proposed in a chat message."""
        state_container: AppContainer = request.app.state.container
        try:
            message = state_container.chat_service.dismiss(user.id, message_id)
        except ChatMessageNotFoundError as exc:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Message not found"
            ) from exc
        except NoPendingPurchaseError as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Message has no purchase to dismiss",
            ) from exc
        return _serialize_message(message)

    return app


def _serialize_purchase(purchase: Purchase) -> dict[str, object]:
    return asdict(purchase)


def _serialize_intake(result: IntakeResult) -> dict[str, object]:
    return {"purchase": _serialize_purchase(result.purchase), "synced": result.synced}


def _serialize_message(message: ChatMessage) -> dict[str, object]:
    """Serialize a chat message with its role tag."""
    payload = asdict(message)
    pending = payload.get("pending_purchase")
    if pending is not None:
        pending["total"] = pending["price"] * pending["quantity"]
    return payload
