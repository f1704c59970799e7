"""Domain models for aggregated purchase views."""

from dataclasses import dataclass

from grocery_tracker.domain.purchases import Purchase


@dataclass(frozen=True)
class DailyTotal:
    """Spend on one calendar day."""

    day: str
    amount: float


@dataclass(frozen=True)
class TrendPoint:
    """Spend on a day and on the same calendar day one year earlier."""

    day: str
    previous_day: str
    current: float
    previous: float


@dataclass(frozen=True)
class ItemPriceComparison:
    """Price history for an item bought at least twice."""

    item_name: str
    best_price: float
    store_count: int
    history: list[Purchase]


@dataclass(frozen=True)
class CategoryTotal:
    """Spend attributed to one item name within a date range."""

    name: str
    amount: float


@dataclass(frozen=True)
class Favorite:
    """Frequently bought item with its latest purchase as a template."""

    item_name: str
    count: int
    latest: Purchase


@dataclass(frozen=True)
class DashboardView:
    """Headline numbers and lists for the home screen."""

    total_spent: float
    recent: list[Purchase]
    last_7_days: list[DailyTotal]
    favorites: list[Favorite]


@dataclass(frozen=True)
class ReportView:
    """Spending report for an inclusive date range."""

    start: str
    end: str
    trend: list[TrendPoint]
    period_total: float
    previous_total: float
    change_percent: float
    top_categories: list[CategoryTotal]
    headline: str
