"""Recurring price-drop patterns across the wishlist."""

import calendar
from collections import defaultdict
from collections.abc import Iterator
from datetime import date
from uuid import UUID

from .models import (
    UNCATEGORIZED,
    Category,
    CategorySeasonality,
    DayPattern,
    MonthPattern,
    PriceUpdate,
    PurchaseRecommendation,
    RecommendationType,
    WishlistItem,
)

PRIORITY_MEDIUM = 2
PRIORITY_HIGH = 3


def iter_price_drops(item: WishlistItem) -> Iterator[tuple[PriceUpdate, float]]:
    """Yield (later update, drop amount) for each consecutive decrease."""
    updates = item.history
    for prev, cur in zip(updates, updates[1:]):
        if cur.price < prev.price:
            yield cur, prev.price - cur.price


class PatternAnalyzer:
    """Groups historical price drops by weekday, month and category."""

    def best_days_of_week(self, items: list[WishlistItem]) -> list[DayPattern]:
        """Drop counts per weekday, most drops first."""
        stats = self._bucket(items, lambda update: update.date.weekday())
        return [
            DayPattern(
                day_of_week=day,
                day_name=calendar.day_name[day],
                drop_count=count,
                total_drop=round(total, 2),
            )
            for day, (count, total) in self._ranked(stats)
        ]

    def best_months(self, items: list[WishlistItem]) -> list[MonthPattern]:
        """Drop counts per calendar month, most drops first."""
        stats = self._bucket(items, lambda update: update.date.month)
        return [
            MonthPattern(
                month=month,
                month_name=calendar.month_name[month],
                drop_count=count,
                total_drop=round(total, 2),
            )
            for month, (count, total) in self._ranked(stats)
        ]

    def seasonality_by_category(
        self, items: list[WishlistItem], categories: list[Category]
    ) -> list[CategorySeasonality]:
        """Best month for drops within each category that saw any drop."""
        names: dict[UUID, str] = {c.id: c.name for c in categories}
        by_category: dict[str, list[WishlistItem]] = defaultdict(list)
        for item in items:
            by_category[names.get(item.category_id, UNCATEGORIZED)].append(item)

        result = []
        for name, category_items in by_category.items():
            stats = self._bucket(category_items, lambda update: update.date.month)
            if not stats:
                continue
            best_month, _ = self._ranked(stats)[0]
            result.append(
                CategorySeasonality(
                    category_name=name,
                    best_month=best_month,
                    best_month_name=calendar.month_name[best_month],
                    total_drops=sum(count for count, _ in stats.values()),
                )
            )

        return sorted(result, key=lambda s: (-s.total_drops, s.category_name))

    def recommendations(
        self, items: list[WishlistItem], today: date | None = None
    ) -> list[PurchaseRecommendation]:
        """Buying tips derived from the drop patterns, highest priority first."""
        today = today or date.today()
        recommendations = []

        best_days = self.best_days_of_week(items)
        if best_days:
            best_day = best_days[0]
            recommendations.append(
                PurchaseRecommendation(
                    type=RecommendationType.BEST_DAY,
                    title="Best Day to Check Prices",
                    message=(
                        f"Based on your history, {best_day.day_name} is the best day "
                        "for price drops"
                    ),
                    priority=PRIORITY_MEDIUM,
                )
            )

        best_months = self.best_months(items)
        if best_months and best_months[0].month == today.month:
            recommendations.append(
                PurchaseRecommendation(
                    type=RecommendationType.SEASONAL,
                    title="Seasonal Opportunity",
                    message=(
                        f"{best_months[0].month_name} is historically your best month "
                        "for deals"
                    ),
                    priority=PRIORITY_HIGH,
                )
            )

        near_target = next((item for item in items if self._is_near_target(item)), None)
        if near_target:
            distance = near_target.current_price - near_target.desired_price
            recommendations.append(
                PurchaseRecommendation(
                    type=RecommendationType.ITEM_NEAR_TARGET,
                    title="Close to Target",
                    message=f"{near_target.name} is only {distance:.2f} away from your target",
                    priority=PRIORITY_HIGH,
                    item_id=near_target.id,
                )
            )

        return sorted(recommendations, key=lambda r: r.priority, reverse=True)

    @staticmethod
    def _is_near_target(item: WishlistItem) -> bool:
        if item.desired_price <= 0:
            return False
        distance = item.current_price - item.desired_price
        return 0 < distance <= item.current_price * 0.1

    @staticmethod
    def _bucket(items: list[WishlistItem], key) -> dict[int, tuple[int, float]]:
        stats: dict[int, tuple[int, float]] = {}
        for item in items:
            for update, drop in iter_price_drops(item):
                count, total = stats.get(key(update), (0, 0.0))
                stats[key(update)] = (count + 1, total + drop)
        return stats

    @staticmethod
    def _ranked(stats: dict[int, tuple[int, float]]) -> list[tuple[int, tuple[int, float]]]:
        return sorted(stats.items(), key=lambda kv: (-kv[1][0], kv[0]))
