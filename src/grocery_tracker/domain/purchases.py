"""Domain models for logged purchases."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Purchase:
    """A single grocery purchase owned by a user.

    ``total`` is fixed at creation or edit time as ``price * quantity``.
    ``date`` is an ISO date string; it may carry a time component.
    """

    id: str
    item_id: str
    item_name: str
    store_id: str
    store_name: str
    date: str
    price: float
    quantity: float
    unit: str
    total: float

    @property
    def day(self) -> str:
        """Return the YYYY-MM-DD part of the purchase date."""
        return self.date[:10]


@dataclass(frozen=True)
class PurchaseDraft:
    """Partial purchase input awaiting validation and derived fields."""

    item_name: str | None = None
    store_name: str | None = None
    price: float | None = None
    quantity: float | None = None
    unit: str | None = None
    date: str | None = None


@dataclass(frozen=True)
class IntakeResult:
    """Outcome of recording or editing a purchase."""

    purchase: Purchase
    synced: bool
