"""Purchase intake and the per-user purchase ledger."""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Protocol, TypeVar
from uuid import uuid4

from grocery_tracker.domain.purchases import IntakeResult, Purchase, PurchaseDraft

logger = logging.getLogger(__name__)

UNKNOWN_ITEM_ID = "unknown-item"
UNKNOWN_STORE_ID = "unknown-store"
DEFAULT_STORE_NAME = "Unknown Store"
DEFAULT_UNIT = "unit"
DEFAULT_QUANTITY = 1.0

_WHITESPACE = re.compile(r"\s")

T = TypeVar("T")


class PurchaseRepository(Protocol):
    """Persistence interface for purchase records."""

    def list_purchases(self, user_id: str) -> list[Purchase]:
        """Return every purchase stored for the user."""

    def upsert_purchase(self, user_id: str, purchase: Purchase) -> None:
        """Insert or replace a purchase by id."""


class InvalidPurchaseError(ValueError):
    """Raised when intake input cannot become a purchase."""


class PurchaseNotFoundError(LookupError):
    """Raised when a purchase or favorite item is not in the ledger."""


@dataclass
class PurchaseLedger:
    """In-memory purchases of one signed-in user, newest entries first.

    Only ``PurchaseService`` intake operations mutate a ledger.
    """

    user_id: str
    purchases: list[Purchase] = field(default_factory=list)
    unsynced: set[str] = field(default_factory=set)

    def snapshot(self) -> list[Purchase]:
        """Return a copy of the purchase list for aggregation."""
        return list(self.purchases)

    def find(self, purchase_id: str) -> Purchase | None:
        """Return the purchase with the given id, if present."""
        for purchase in self.purchases:
            if purchase.id == purchase_id:
                return purchase
        return None

    def latest_for_item(self, item_name: str) -> Purchase | None:
        """Return the most recent purchase of an item name."""
        latest = None
        for purchase in self.purchases:
            if purchase.item_name != item_name:
                continue
            if latest is None or purchase.date > latest.date:
                latest = purchase
        return latest

    def prepend(self, purchase: Purchase) -> None:
        """Insert a new purchase at the head of the list."""
        self.purchases.insert(0, purchase)

    def replace(self, purchase: Purchase) -> None:
        """Swap in an edited purchase with the same id."""
        self.purchases = [
            purchase if existing.id == purchase.id else existing
            for existing in self.purchases
        ]


@dataclass
class PurchaseService:
    """Service that owns user ledgers and writes purchases through."""

    repository: PurchaseRepository
    today: Callable[[], date] = date.today
    _ledgers: dict[str, PurchaseLedger] = field(default_factory=dict)

    def ledger(self, user_id: str) -> PurchaseLedger:
        """Return the user's ledger, loading it from storage on first use."""
        existing = self._ledgers.get(user_id)
        if existing is not None:
            return existing
        try:
            stored = self.repository.list_purchases(user_id)
        except Exception:
            logger.exception("Failed to load purchases", extra={"user_id": user_id})
            stored = []
        ledger = PurchaseLedger(user_id=user_id, purchases=list(stored))
        self._ledgers[user_id] = ledger
        return ledger

    def list_purchases(self, user_id: str) -> list[Purchase]:
        """Return a snapshot of the user's purchases."""
        return self.ledger(user_id).snapshot()

    def record_purchase(self, user_id: str, draft: PurchaseDraft) -> IntakeResult:
        """Create a purchase from partial input and persist it."""
        purchase = build_purchase(draft, self.today())
        ledger = self.ledger(user_id)
        ledger.prepend(purchase)
        return self._persist(ledger, purchase)

    def update_purchase(
        self, user_id: str, purchase_id: str, changes: PurchaseDraft
    ) -> IntakeResult:
        """Replace an existing purchase with edited fields."""
        ledger = self.ledger(user_id)
        current = ledger.find(purchase_id)
        if current is None:
            raise PurchaseNotFoundError(purchase_id)
        updated = apply_changes(current, changes)
        ledger.replace(updated)
        return self._persist(ledger, updated)

    def quick_add(
        self, user_id: str, item_name: str, changes: PurchaseDraft
    ) -> IntakeResult:
        """Record a repeat purchase seeded from the item's latest purchase."""
        ledger = self.ledger(user_id)
        template = ledger.latest_for_item(item_name)
        if template is None:
            raise PurchaseNotFoundError(item_name)
        draft = PurchaseDraft(
            item_name=template.item_name,
            store_name=_pick(changes.store_name, template.store_name),
            price=_pick(changes.price, template.price),
            quantity=_pick(changes.quantity, template.quantity),
            unit=_pick(changes.unit, template.unit),
            date=changes.date or self.today().isoformat(),
        )
        purchase = replace(
            build_purchase(draft, self.today()), item_id=template.item_id
        )
        ledger.prepend(purchase)
        return self._persist(ledger, purchase)

    def forget(self, user_id: str) -> None:
        """Drop the cached ledger unless it holds unsynced purchases."""
        ledger = self._ledgers.get(user_id)
        if ledger is not None and ledger.unsynced:
            logger.warning(
                "Keeping ledger with unsynced purchases",
                extra={"user_id": user_id, "unsynced": len(ledger.unsynced)},
            )
            return
        self._ledgers.pop(user_id, None)

    def _persist(self, ledger: PurchaseLedger, purchase: Purchase) -> IntakeResult:
        try:
            self.repository.upsert_purchase(ledger.user_id, purchase)
        except Exception:
            logger.exception(
                "Failed to persist purchase",
                extra={"user_id": ledger.user_id, "purchase_id": purchase.id},
            )
            ledger.unsynced.add(purchase.id)
            return IntakeResult(purchase=purchase, synced=False)
        ledger.unsynced.discard(purchase.id)
        return IntakeResult(purchase=purchase, synced=True)


def slugify(name: str | None, fallback: str) -> str:
    """Return a lowercase, hyphenated id for a display name."""
    if not name or not name.strip():
        return fallback
    return _WHITESPACE.sub("-", name.strip().lower())


def build_purchase(draft: PurchaseDraft, today: date) -> Purchase:
    """Validate partial input and fill in every derived field."""
    item_name = (draft.item_name or "").strip()
    if not item_name:
        raise InvalidPurchaseError("Item name is required")
    if draft.price is None:
        raise InvalidPurchaseError("Price is required")
    quantity = DEFAULT_QUANTITY if draft.quantity is None else draft.quantity
    _check_amounts(draft.price, quantity)
    store_name = (draft.store_name or "").strip()
    return Purchase(
        id=str(uuid4()),
        item_id=slugify(item_name, UNKNOWN_ITEM_ID),
        item_name=item_name,
        store_id=slugify(store_name, UNKNOWN_STORE_ID),
        store_name=store_name or DEFAULT_STORE_NAME,
        date=draft.date or today.isoformat(),
        price=draft.price,
        quantity=quantity,
        unit=(draft.unit or "").strip() or DEFAULT_UNIT,
        total=draft.price * quantity,
    )


def apply_changes(current: Purchase, changes: PurchaseDraft) -> Purchase:
    """Return ``current`` with edits applied and its total recomputed."""
    price = _pick(changes.price, current.price)
    quantity = _pick(changes.quantity, current.quantity)
    _check_amounts(price, quantity)
    store_name = current.store_name
    store_id = current.store_id
    if changes.store_name is not None and changes.store_name.strip():
        store_name = changes.store_name.strip()
        store_id = slugify(store_name, UNKNOWN_STORE_ID)
    return replace(
        current,
        store_id=store_id,
        store_name=store_name,
        date=changes.date or current.date,
        price=price,
        quantity=quantity,
        unit=(changes.unit or "").strip() or current.unit,
        total=price * quantity,
    )


def _check_amounts(price: float, quantity: float) -> None:
    if price < 0:
        raise InvalidPurchaseError("Price cannot be negative")
    if quantity <= 0:
        raise InvalidPurchaseError("Quantity must be positive")


def _pick(value: T | None, fallback: T) -> T:
    return fallback if value is None else value
