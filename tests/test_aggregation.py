"""Tests for purchase aggregations."""

from datetime import date

import pytest

from grocery_tracker.services import aggregation
from tests.conftest import make_purchase


def test_empty_list_is_handled_everywhere() -> None:
    start, end = date(2024, 1, 1), date(2024, 1, 3)

    assert aggregation.running_total([]) == 0
    assert aggregation.recent_purchases([], 5) == []
    assert aggregation.compare_prices([]) == []
    assert aggregation.favorites([]) == []
    assert aggregation.top_categories([], start, end) == []
    assert [d.amount for d in aggregation.daily_totals([], ["2024-01-01"])] == [0]
    assert len(aggregation.year_over_year_trend([], start, end)) == 3


def test_milk_scenario() -> None:
    purchases = [
        make_purchase("Milk", price=3, quantity=2, day="2024-01-01"),
        make_purchase("Milk", price=4, day="2024-02-01", store_name="Target"),
    ]

    comparisons = aggregation.compare_prices(purchases)
    trend = aggregation.year_over_year_trend(
        purchases, date(2024, 1, 1), date(2024, 2, 1)
    )

    assert aggregation.running_total(purchases) == 10
    assert len(comparisons) == 1
    assert comparisons[0].item_name == "Milk"
    assert comparisons[0].best_price == 3
    assert comparisons[0].store_count == 2
    assert len(trend) == 32
    assert trend[0].current == 6
    assert trend[-1].current == 4


def test_recent_purchases_returns_newest_first() -> None:
    purchases = [
        make_purchase("Item", price=1, day=f"2024-01-0{day}") for day in range(1, 8)
    ]

    recent = aggregation.recent_purchases(purchases, 5)

    assert [p.date for p in recent] == [
        "2024-01-07",
        "2024-01-06",
        "2024-01-05",
        "2024-01-04",
        "2024-01-03",
    ]


def test_recent_purchases_keeps_input_order_for_same_date() -> None:
    first = make_purchase("Eggs", price=2, day="2024-01-02")
    second = make_purchase("Rice", price=3, day="2024-01-02")
    older = make_purchase("Milk", price=1, day="2024-01-01")

    recent = aggregation.recent_purchases([older, first, second], 3)

    assert recent == [first, second, older]


def test_compare_prices_excludes_single_purchases() -> None:
    purchases = [
        make_purchase("Milk", price=3.5, store_name="Walmart"),
        make_purchase("Milk", price=2.9, store_name="Walmart", day="2024-01-05"),
        make_purchase("Eggs", price=4),
        make_purchase("milk", price=1),
    ]

    comparisons = aggregation.compare_prices(purchases)

    assert [c.item_name for c in comparisons] == ["Milk"]
    assert comparisons[0].best_price == 2.9
    assert comparisons[0].store_count == 1
    assert len(comparisons[0].history) == 2


def test_daily_totals_match_timestamps_by_day_prefix() -> None:
    purchases = [
        make_purchase("Milk", price=3, day="2024-01-02T09:30:00.000Z"),
        make_purchase("Eggs", price=2, quantity=2, day="2024-01-02"),
        make_purchase("Rice", price=5, day="2024-01-03"),
    ]

    totals = aggregation.daily_totals(purchases, ["2024-01-01", "2024-01-02"])

    assert [(t.day, t.amount) for t in totals] == [
        ("2024-01-01", 0),
        ("2024-01-02", 7),
    ]


def test_last_n_days_crosses_year_boundary() -> None:
    days = aggregation.last_n_days(date(2024, 1, 2), 4)

    assert days == ["2023-12-30", "2023-12-31", "2024-01-01", "2024-01-02"]


def test_trend_pairs_each_day_with_previous_year() -> None:
    purchases = [
        make_purchase("Milk", price=5, day="2023-03-01"),
        make_purchase("Milk", price=7, day="2024-03-01"),
    ]

    trend = aggregation.year_over_year_trend(
        purchases, date(2024, 2, 27), date(2024, 3, 1)
    )

    assert [p.day for p in trend] == [
        "2024-02-27",
        "2024-02-28",
        "2024-02-29",
        "2024-03-01",
    ]
    assert trend[2].previous_day == "2023-02-28"
    assert trend[3].previous_day == "2023-03-01"
    assert trend[3].current == 7
    assert trend[3].previous == 5


def test_trend_leap_day_reads_feb_28_spend() -> None:
    purchases = [make_purchase("Rice", price=9, day="2023-02-28")]

    trend = aggregation.year_over_year_trend(
        purchases, date(2024, 2, 29), date(2024, 2, 29)
    )

    assert len(trend) == 1
    assert trend[0].previous == 9


def test_trend_is_empty_for_inverted_range() -> None:
    trend = aggregation.year_over_year_trend([], date(2024, 2, 1), date(2024, 1, 1))

    assert trend == []


def test_trend_across_new_year() -> None:
    trend = aggregation.year_over_year_trend([], date(2023, 12, 30), date(2024, 1, 2))

    assert [p.day for p in trend] == [
        "2023-12-30",
        "2023-12-31",
        "2024-01-01",
        "2024-01-02",
    ]
    assert trend[1].previous_day == "2022-12-31"


def test_top_categories_limits_to_range_and_top_five() -> None:
    purchases = [
        make_purchase(name, price=price, day="2024-01-10")
        for name, price in [
            ("A", 1),
            ("B", 6),
            ("C", 3),
            ("D", 5),
            ("E", 4),
            ("F", 2),
        ]
    ]
    purchases.append(make_purchase("A", price=100, day="2024-02-10"))
    purchases.append(make_purchase("C", price=10, day="2024-01-31T23:00:00Z"))

    top = aggregation.top_categories(purchases, date(2024, 1, 1), date(2024, 1, 31))

    assert [(c.name, c.amount) for c in top] == [
        ("C", 13),
        ("B", 6),
        ("D", 5),
        ("E", 4),
        ("F", 2),
    ]


def test_favorites_rank_by_count_with_first_seen_ties() -> None:
    purchases = []
    purchases += [make_purchase("Soap", price=1, day="2024-01-01")]
    purchases += [make_purchase("Eggs", price=2, day=f"2024-01-0{d}") for d in "123"]
    purchases += [make_purchase("Rice", price=3, day=f"2024-01-0{d}") for d in "456"]
    purchases += [
        make_purchase("Milk", price=4, day=f"2024-02-0{d}") for d in (1, 2, 3, 4, 5)
    ]

    ranked = aggregation.favorites(purchases)

    assert [(f.item_name, f.count) for f in ranked] == [
        ("Milk", 5),
        ("Eggs", 3),
        ("Rice", 3),
        ("Soap", 1),
    ]
    assert ranked[0].latest.date == "2024-02-05"
    assert ranked[1].latest.date == "2024-01-03"


def test_favorites_returns_at_most_four() -> None:
    purchases = [make_purchase(name, price=1) for name in "ABCDEF"]

    assert [f.item_name for f in aggregation.favorites(purchases)] == list("ABCD")


def test_item_history_filters_by_item_id() -> None:
    purchases = [
        make_purchase("Chicken Breast", price=8),
        make_purchase("Rice", price=2),
        make_purchase("Chicken Breast", price=7, day="2024-01-09"),
    ]

    history = aggregation.item_history(purchases, "chicken-breast")

    assert [p.price for p in history] == [8, 7]


@pytest.mark.parametrize(
    ("current", "previous", "expected"),
    [(150, 100, 50), (50, 100, -50), (10, 0, 100), (0, 0, 0)],
)
def test_percent_change(current: float, previous: float, expected: float) -> None:
    assert aggregation.percent_change(current, previous) == expected
