"""Period comparisons, yearly reports, savings overviews and CSV export."""

import calendar
import csv
import io
import logging
from collections import defaultdict
from collections.abc import Callable
from datetime import date, datetime, timedelta

from .data_store import DataStoreProtocol
from .models import (
    UNCATEGORIZED,
    Category,
    DashboardSummary,
    MonthlyData,
    PeriodComparison,
    PeriodStats,
    SavingsBucket,
    SavingsOverview,
    TrackingEfficiency,
    WishlistItem,
    YearlyReport,
)

logger = logging.getLogger(__name__)

CSV_HEADER = [
    "Name",
    "Original Price",
    "Current Price",
    "Desired Price",
    "Drop %",
    "Savings",
    "Target Reached",
    "Category",
    "Date Added",
]


def percent_change(current: float, previous: float) -> float:
    """Relative change in percent; a zero baseline counts as no change."""
    if previous == 0:
        return 0.0
    return round((current - previous) / previous * 100, 1)


def _csv_text(value: str) -> str:
    return value.replace(",", ";")


class ReportBuilder:
    """Builds aggregate reports over wishlist items.

    Every report accepts an explicit item list; when omitted, the
    non-archived items are loaded from the data store.
    """

    def __init__(self, data_store: DataStoreProtocol):
        self.data_store = data_store

    def _items(self, items: list[WishlistItem] | None) -> list[WishlistItem]:
        if items is not None:
            return items
        return self.data_store.load_items(include_archived=False)

    # --- Period comparison ---

    def period_stats(
        self, start: datetime, end: datetime, items: list[WishlistItem] | None = None
    ) -> PeriodStats:
        """Aggregate items added within ``[start, end]``."""
        selected = [i for i in self._items(items) if start <= i.date_added <= end]
        return PeriodStats(
            start=start,
            end=end,
            total_savings=round(sum(i.savings for i in selected), 2),
            total_items=len(selected),
            total_updates=sum(len(i.price_updates) for i in selected),
            targets_reached=sum(1 for i in selected if i.reached_target),
            average_drop=(
                sum(i.drop_percentage for i in selected) / len(selected) if selected else 0.0
            ),
        )

    def compare_periods(
        self,
        current_start: datetime,
        current_end: datetime,
        previous_start: datetime,
        previous_end: datetime,
        items: list[WishlistItem] | None = None,
    ) -> PeriodComparison:
        """Compare a current date range with a baseline range.

        Raises:
            ValueError: If a range is reversed or the two ranges overlap
        """
        if current_start > current_end or previous_start > previous_end:
            raise ValueError("Period start must not be after its end")
        if current_start <= previous_end and previous_start <= current_end:
            raise ValueError("Compared periods must not overlap")

        items = self._items(items)
        current = self.period_stats(current_start, current_end, items)
        previous = self.period_stats(previous_start, previous_end, items)

        return PeriodComparison(
            current=current,
            previous=previous,
            savings_change=round(current.total_savings - previous.total_savings, 2),
            savings_change_percent=percent_change(
                current.total_savings, previous.total_savings
            ),
            items_change=current.total_items - previous.total_items,
            items_change_percent=percent_change(current.total_items, previous.total_items),
            updates_change=current.total_updates - previous.total_updates,
            targets_change=current.targets_reached - previous.targets_reached,
        )

    def compare_recent(
        self, days: int = 30, now: datetime | None = None, items: list[WishlistItem] | None = None
    ) -> PeriodComparison:
        """Compare the last ``days`` days with the ``days`` before them."""
        now = now or datetime.now()
        current_start = now - timedelta(days=days)
        previous_end = current_start - timedelta(microseconds=1)
        previous_start = current_start - timedelta(days=days)
        return self.compare_periods(current_start, now, previous_start, previous_end, items)

    # --- Yearly report ---

    def yearly_report(self, year: int, items: list[WishlistItem] | None = None) -> YearlyReport:
        """Break a calendar year into monthly buckets by date added.

        The best month is the one with the highest savings; earlier months win
        ties and a year without savings has no best month.
        """
        year_items = [i for i in self._items(items) if i.date_added.year == year]

        by_month: dict[int, list[WishlistItem]] = defaultdict(list)
        for item in year_items:
            by_month[item.date_added.month].append(item)

        monthly = [
            MonthlyData(
                month=month,
                month_name=calendar.month_name[month],
                total_savings=round(sum(i.savings for i in by_month[month]), 2),
                items_added=len(by_month[month]),
                targets_reached=sum(1 for i in by_month[month] if i.reached_target),
            )
            for month in range(1, 13)
        ]

        best = max(monthly, key=lambda m: m.total_savings)
        return YearlyReport(
            year=year,
            total_savings=round(sum(i.savings for i in year_items), 2),
            total_items=len(year_items),
            total_targets_reached=sum(1 for i in year_items if i.reached_target),
            best_month=best if best.total_savings > 0 else None,
            monthly_data=monthly,
        )

    # --- Tracking efficiency ---

    def tracking_efficiency(self, items: list[WishlistItem] | None = None) -> TrackingEfficiency:
        """Single pass over non-archived items measuring tracking habits."""
        total = with_updates = with_targets = reached = update_count = 0
        days_to_target = 0

        for item in self._items(items):
            if item.is_archived:
                continue
            total += 1

            if item.price_updates:
                with_updates += 1
                update_count += len(item.price_updates)

            if item.desired_price > 0:
                with_targets += 1
                if item.reached_target:
                    reached += 1
                    history = item.history
                    if history:
                        days_to_target += (history[-1].date - history[0].date).days

        return TrackingEfficiency(
            total_items=total,
            items_with_updates=with_updates,
            items_with_targets=with_targets,
            items_reached_targets=reached,
            average_updates_per_item=update_count / total if total else 0.0,
            update_coverage=with_updates / total if total else 0.0,
            target_reach_rate=reached / with_targets if with_targets else 0.0,
            average_days_to_target=days_to_target / reached if reached else 0.0,
        )

    # --- Overview ---

    def savings_overview(
        self,
        items: list[WishlistItem] | None = None,
        categories: list[Category] | None = None,
    ) -> SavingsOverview:
        """Savings by day, week, month and year added, plus category breakdown."""
        items = self._items(items)
        if categories is None:
            categories = self.data_store.load_categories()
        names = {c.id: c.name for c in categories}

        by_category: dict[str, float] = defaultdict(float)
        for item in items:
            by_category[names.get(item.category_id, UNCATEGORIZED)] += item.savings

        return SavingsOverview(
            daily=self._bucket_savings(items, lambda d: d),
            weekly=self._bucket_savings(items, lambda d: d - timedelta(days=d.weekday())),
            monthly=self._bucket_savings(items, lambda d: d.replace(day=1)),
            yearly=self._bucket_savings(items, lambda d: d.replace(month=1, day=1)),
            by_category={
                name: round(total, 2)
                for name, total in sorted(by_category.items(), key=lambda kv: kv[1], reverse=True)
            },
            biggest_saving=max(items, key=lambda i: i.savings).name if items else None,
            most_improved=max(items, key=lambda i: i.drop_percentage).name if items else None,
        )

    @staticmethod
    def _bucket_savings(
        items: list[WishlistItem], key: Callable[[date], date]
    ) -> list[SavingsBucket]:
        totals: dict[date, float] = defaultdict(float)
        for item in items:
            totals[key(item.date_added.date())] += item.savings
        return [
            SavingsBucket(start=start, total_savings=round(total, 2))
            for start, total in sorted(totals.items())
        ]

    def dashboard_summary(self, items: list[WishlistItem] | None = None) -> DashboardSummary:
        items = self._items(items)
        return DashboardSummary(
            total_items=len(items),
            total_saved=round(sum(i.savings for i in items), 2),
            estimated_value=round(sum(i.current_price for i in items), 2),
            average_drop=(
                sum(i.drop_percentage for i in items) / len(items) if items else 0.0
            ),
        )

    # --- Export ---

    def export_csv(
        self,
        items: list[WishlistItem] | None = None,
        categories: list[Category] | None = None,
    ) -> str:
        """Render items as CSV, one row per item after a header row.

        Commas in names and category names are replaced with semicolons so
        every row keeps the same column count.
        """
        items = self._items(items)
        if categories is None:
            categories = self.data_store.load_categories()
        names = {c.id: c.name for c in categories}

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for item in items:
            writer.writerow(
                [
                    _csv_text(item.name),
                    item.original_price,
                    item.current_price,
                    item.desired_price,
                    item.drop_percentage * 100,
                    item.savings,
                    "true" if item.reached_target else "false",
                    _csv_text(names.get(item.category_id, UNCATEGORIZED)),
                    item.date_added.strftime("%Y-%m-%d"),
                ]
            )

        logger.debug("Exported %d items to CSV", len(items))
        return buffer.getvalue()
