"""Supabase repository for purchases."""

from dataclasses import dataclass

from supabase import Client

from grocery_tracker.domain.purchases import Purchase
from grocery_tracker.services.purchases import PurchaseRepository

_COLUMNS = (
    "id, item_id, item_name, store_id, store_name, purchased_on, price, quantity, "
    "unit, total"
)


@dataclass
class SupabasePurchaseRepository(PurchaseRepository):
    """Supabase implementation for purchase records."""

    client: Client

    def list_purchases(self, user_id: str) -> list[Purchase]:
        """Return a user's purchases, newest first."""
        response = (
            self.client.table("purchases")
            .select(_COLUMNS)
            .eq("user_id", user_id)
            .order("purchased_on", desc=True)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]

    def upsert_purchase(self, user_id: str, purchase: Purchase) -> None:
        """Insert or replace a purchase row by id."""
        self.client.table("purchases").upsert(
            {
                "id": purchase.id,
                "user_id": user_id,
                "item_id": purchase.item_id,
                "item_name": purchase.item_name,
                "store_id": purchase.store_id,
                "store_name": purchase.store_name,
                "purchased_on": purchase.date,
                "price": purchase.price,
                "quantity": purchase.quantity,
                "unit": purchase.unit,
                "total": purchase.total,
            },
            on_conflict="id",
        ).execute()


def _parse_row(row: dict[str, object]) -> Purchase:
    price = float(row.get("price") or 0.0)
    quantity = float(row.get("quantity") or 1.0)
    total = row.get("total")
    return Purchase(
        id=str(row["id"]),
        item_id=str(row.get("item_id") or "unknown-item"),
        item_name=str(row.get("item_name") or ""),
        store_id=str(row.get("store_id") or "unknown-store"),
        store_name=str(row.get("store_name") or ""),
        date=str(row.get("purchased_on") or ""),
        price=price,
        quantity=quantity,
        unit=str(row.get("unit") or "unit"),
        total=float(total) if total is not None else price * quantity,
    )
