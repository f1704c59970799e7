"""Dashboard and report views built from a purchase snapshot."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

from grocery_tracker.domain.purchases import Purchase
from grocery_tracker.domain.reports import (
    DashboardView,
    ItemPriceComparison,
    ReportView,
)
from grocery_tracker.services import aggregation
from grocery_tracker.services.assistant import AssistantService

RECENT_LIMIT = 5
CHART_DAYS = 7

NOT_ENOUGH_DATA_TEXT = (
    "Not enough transaction data in this period to generate insights. "
    "Try adding more purchases or changing the date range."
)


@dataclass
class ReportService:
    """Service composing aggregations into screen-sized views."""

    assistant: AssistantService
    today: Callable[[], date] = date.today

    def dashboard(self, purchases: list[Purchase]) -> DashboardView:
        """Return headline spend, recent purchases, the 7-day chart and favorites."""
        days = aggregation.last_n_days(self.today(), CHART_DAYS)
        return DashboardView(
            total_spent=aggregation.running_total(purchases),
            recent=aggregation.recent_purchases(purchases, RECENT_LIMIT),
            last_7_days=aggregation.daily_totals(purchases, days),
            favorites=aggregation.favorites(purchases),
        )

    def compare(self, purchases: list[Purchase]) -> list[ItemPriceComparison]:
        """Return price comparisons for items bought more than once."""
        return aggregation.compare_prices(purchases)

    def default_range(self) -> tuple[date, date]:
        """Return the first day of the current month through today."""
        today = self.today()
        return today.replace(day=1), today

    def report(
        self,
        purchases: list[Purchase],
        start: date | None = None,
        end: date | None = None,
    ) -> ReportView:
        """Return the year-over-year trend and top spends for a range."""
        default_start, default_end = self.default_range()
        start = start or default_start
        end = end or default_end
        trend = aggregation.year_over_year_trend(purchases, start, end)
        period_total = sum((point.current for point in trend), 0.0)
        previous_total = sum((point.previous for point in trend), 0.0)
        change = aggregation.percent_change(period_total, previous_total)
        top = aggregation.top_categories(purchases, start, end)
        headline = (
            f"Based on the selected period ({start.isoformat()} to "
            f"{end.isoformat()}), your spending is "
            f"{'higher' if change > 0 else 'lower'} than last year."
        )
        if top:
            headline += f" Your top expense was {top[0].name}."
        return ReportView(
            start=start.isoformat(),
            end=end.isoformat(),
            trend=trend,
            period_total=period_total,
            previous_total=previous_total,
            change_percent=change,
            top_categories=top,
            headline=headline,
        )

    async def insights(
        self,
        purchases: list[Purchase],
        start: date | None = None,
        end: date | None = None,
    ) -> str:
        """Return model-written saving tips for purchases in the range."""
        default_start, default_end = self.default_range()
        in_range = aggregation.filter_by_range(
            purchases, start or default_start, end or default_end
        )
        if not in_range:
            return NOT_ENOUGH_DATA_TEXT
        return await self.assistant.insights(in_range)
