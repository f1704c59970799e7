"""Static reference catalog of items and stores."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Item:
    """Catalog item used to seed entry forms."""

    id: str
    name: str
    category: str
    default_unit: str


@dataclass(frozen=True)
class Store:
    """Catalog store."""

    id: str
    name: str


DEFAULT_ITEMS: tuple[Item, ...] = (
    Item(id="1", name="Milk", category="Dairy", default_unit="gallon"),
    Item(id="2", name="Eggs", category="Dairy", default_unit="dozen"),
    Item(id="3", name="Rice", category="Pantry", default_unit="kg"),
    Item(id="4", name="Chicken Breast", category="Meat", default_unit="lb"),
    Item(id="5", name="Bananas", category="Produce", default_unit="lb"),
)

DEFAULT_STORES: tuple[Store, ...] = (
    Store(id="s1", name="Walmart"),
    Store(id="s2", name="Target"),
    Store(id="s3", name="Whole Foods"),
    Store(id="s4", name="Costco"),
    Store(id="s5", name="Kroger"),
)
