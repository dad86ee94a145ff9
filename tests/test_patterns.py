"""Tests for price-drop pattern analysis."""

from datetime import date, datetime, timedelta

import pytest

from wishlist_tracker.models import Category, RecommendationType
from wishlist_tracker.patterns import PatternAnalyzer, iter_price_drops


@pytest.fixture
def analyzer():
    return PatternAnalyzer()


class TestIterPriceDrops:
    """Tests for drop detection."""

    def test_only_decreases(self, make_item):
        """Increases and flat steps are not drops."""
        item = make_item(prices=[100.0, 90.0, 95.0, 95.0, 80.0])
        assert [drop for _, drop in iter_price_drops(item)] == [10.0, 15.0]


class TestDayPatterns:
    """Tests for weekday grouping."""

    def test_ties_break_by_weekday(self, analyzer, sample_item):
        """With equal counts, Monday ranks ahead of the weekend."""
        days = analyzer.best_days_of_week([sample_item])

        assert [d.day_name for d in days] == ["Monday", "Saturday", "Sunday"]
        assert all(d.drop_count == 1 for d in days)

    def test_most_drops_first(self, analyzer, make_item):
        """Days with more drops rank first."""
        wednesdays = make_item(
            prices=[100.0, 90.0, 80.0], start=datetime(2025, 2, 26), step=timedelta(weeks=1)
        )
        friday = make_item(prices=[50.0, 45.0], start=datetime(2025, 3, 6))

        days = analyzer.best_days_of_week([wednesdays, friday])
        assert days[0].day_name == "Wednesday"
        assert days[0].drop_count == 2
        assert days[0].total_drop == 20.0
        assert days[0].average_drop == 10.0

    def test_no_history(self, analyzer, make_item):
        """Items without drops produce no patterns."""
        assert analyzer.best_days_of_week([make_item(prices=[10.0, 12.0])]) == []


class TestMonthPatterns:
    """Tests for month grouping and category seasonality."""

    def test_best_months(self, analyzer, make_item):
        """Months rank by drop count."""
        november = make_item(
            prices=[100.0, 90.0, 80.0], start=datetime(2024, 11, 1), step=timedelta(days=7)
        )
        june = make_item(prices=[60.0, 50.0], start=datetime(2024, 6, 1))

        months = analyzer.best_months([november, june])
        assert [m.month_name for m in months] == ["November", "June"]

    def test_seasonality_by_category(self, analyzer, make_item):
        """Each category reports its own best month; categories without drops are skipped."""
        audio = Category(name="Audio")
        books = Category(name="Books")
        item = make_item(prices=[100.0, 80.0], start=datetime(2024, 11, 3), category_id=audio.id)
        flat = make_item(prices=[10.0, 10.0], category_id=books.id)
        loose = make_item(prices=[30.0, 20.0, 10.0], start=datetime(2024, 7, 1))

        seasons = analyzer.seasonality_by_category([item, flat, loose], [audio, books])
        assert [(s.category_name, s.best_month_name) for s in seasons] == [
            ("Uncategorized", "July"),
            ("Audio", "November"),
        ]


class TestRecommendations:
    """Tests for purchase recommendations."""

    def test_best_day_tip(self, analyzer, sample_item):
        """The best weekday becomes a medium-priority tip."""
        recs = analyzer.recommendations([sample_item], today=date(2025, 6, 1))

        best_day = next(r for r in recs if r.type == RecommendationType.BEST_DAY)
        assert "Monday" in best_day.message
        assert best_day.priority == 2

    def test_seasonal_tip_in_best_month(self, analyzer, sample_item):
        """A seasonal tip appears when today is the best month."""
        recs = analyzer.recommendations([sample_item], today=date(2025, 3, 20))
        assert recs[0].type == RecommendationType.SEASONAL

    def test_near_target_tip(self, analyzer, make_item):
        """Items within 10% of their target get a high-priority tip."""
        item = make_item(name="Lamp", prices=[100.0], desired_price=95.0)
        recs = analyzer.recommendations([item], today=date(2025, 6, 1))

        assert len(recs) == 1
        assert recs[0].type == RecommendationType.ITEM_NEAR_TARGET
        assert recs[0].item_id == item.id
        assert recs[0].priority == 3

    def test_no_target_no_tip(self, analyzer, make_item):
        """Items without a target never count as near it."""
        item = make_item(prices=[100.0], desired_price=0.0)
        assert analyzer.recommendations([item], today=date(2025, 6, 1)) == []
