"""Aggregations over a user's in-memory purchase list.

Every function here is pure and accepts the list in any order, including an
empty list. Day matching is done on the ``YYYY-MM-DD`` prefix of
``Purchase.date`` so timestamps and bare dates aggregate together.
"""

from collections import Counter, defaultdict
from datetime import date, timedelta

from grocery_tracker.domain.purchases import Purchase
from grocery_tracker.domain.reports import (
    CategoryTotal,
    DailyTotal,
    Favorite,
    ItemPriceComparison,
    TrendPoint,
)

MIN_COMPARABLE_RECORDS = 2
TOP_CATEGORY_LIMIT = 5
FAVORITES_LIMIT = 4
FEBRUARY = 2
LEAP_DAY = 29


def running_total(purchases: list[Purchase]) -> float:
    """Return the summed spend across all purchases."""
    return sum((purchase.total for purchase in purchases), 0.0)


def recent_purchases(purchases: list[Purchase], limit: int) -> list[Purchase]:
    """Return the ``limit`` most recent purchases, newest first.

    The sort is stable, so purchases sharing a date keep their input order.
    """
    if limit <= 0:
        return []
    ordered = sorted(purchases, key=lambda purchase: purchase.date, reverse=True)
    return ordered[:limit]


def item_history(purchases: list[Purchase], item_id: str) -> list[Purchase]:
    """Return purchases of a catalog item in input order."""
    return [purchase for purchase in purchases if purchase.item_id == item_id]


def compare_prices(purchases: list[Purchase]) -> list[ItemPriceComparison]:
    """Group purchases by item name and report the best price per item.

    Items bought fewer than twice have nothing to compare against and are
    left out.
    """
    groups: dict[str, list[Purchase]] = defaultdict(list)
    for purchase in purchases:
        groups[purchase.item_name].append(purchase)

    comparisons = []
    for item_name, history in groups.items():
        if len(history) < MIN_COMPARABLE_RECORDS:
            continue
        comparisons.append(
            ItemPriceComparison(
                item_name=item_name,
                best_price=min(purchase.price for purchase in history),
                store_count=len({purchase.store_name for purchase in history}),
                history=history,
            )
        )
    return comparisons


def last_n_days(today: date, days: int) -> list[str]:
    """Return ascending day keys for the ``days`` days ending on ``today``."""
    return [
        (today - timedelta(days=offset)).isoformat()
        for offset in range(days - 1, -1, -1)
    ]


def daily_totals(purchases: list[Purchase], days: list[str]) -> list[DailyTotal]:
    """Sum spend for each requested day key, defaulting to zero."""
    by_day = _totals_by_day(purchases)
    return [DailyTotal(day=day, amount=by_day.get(day, 0.0)) for day in days]


def year_over_year_trend(
    purchases: list[Purchase], start: date, end: date
) -> list[TrendPoint]:
    """Return one point per day in ``[start, end]`` with last year's spend.

    Feb 29 is compared with Feb 28 of the preceding non-leap year.
    """
    by_day = _totals_by_day(purchases)
    points = []
    current = start
    while current <= end:
        previous = one_year_earlier(current)
        points.append(
            TrendPoint(
                day=current.isoformat(),
                previous_day=previous.isoformat(),
                current=by_day.get(current.isoformat(), 0.0),
                previous=by_day.get(previous.isoformat(), 0.0),
            )
        )
        current += timedelta(days=1)
    return points


def one_year_earlier(day: date) -> date:
    """Return the same calendar day in the previous year."""
    if day.month == FEBRUARY and day.day == LEAP_DAY:
        return date(day.year - 1, FEBRUARY, 28)
    return day.replace(year=day.year - 1)


def filter_by_range(
    purchases: list[Purchase], start: date, end: date
) -> list[Purchase]:
    """Return purchases whose day lies within the inclusive range."""
    start_key = start.isoformat()
    end_key = end.isoformat()
    return [
        purchase for purchase in purchases if start_key <= purchase.day <= end_key
    ]


def top_categories(
    purchases: list[Purchase],
    start: date,
    end: date,
    limit: int = TOP_CATEGORY_LIMIT,
) -> list[CategoryTotal]:
    """Return the biggest spends per item name within the date range."""
    totals: dict[str, float] = defaultdict(float)
    for purchase in filter_by_range(purchases, start, end):
        totals[purchase.item_name] += purchase.total
    ranked = sorted(totals.items(), key=lambda entry: entry[1], reverse=True)
    return [CategoryTotal(name=name, amount=amount) for name, amount in ranked[:limit]]


def favorites(
    purchases: list[Purchase], limit: int = FAVORITES_LIMIT
) -> list[Favorite]:
    """Return the most frequently bought items with their latest purchase.

    Items with equal counts keep the order in which they were first seen.
    """
    counts: Counter[str] = Counter()
    latest: dict[str, Purchase] = {}
    for purchase in purchases:
        counts[purchase.item_name] += 1
        current = latest.get(purchase.item_name)
        if current is None or purchase.date > current.date:
            latest[purchase.item_name] = purchase

    ranked = sorted(counts, key=lambda name: counts[name], reverse=True)
    return [
        Favorite(item_name=name, count=counts[name], latest=latest[name])
        for name in ranked[:limit]
    ]


def percent_change(current: float, previous: float) -> float:
    """Return the change from ``previous`` to ``current`` in percent."""
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / previous * 100


def _totals_by_day(purchases: list[Purchase]) -> dict[str, float]:
    totals: dict[str, float] = defaultdict(float)
    for purchase in purchases:
        totals[purchase.day] += purchase.total
    return totals
