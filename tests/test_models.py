"""Tests for data models."""

from datetime import datetime, timedelta
from uuid import UUID, uuid4

import pytest
from pydantic import ValidationError

from wishlist_tracker.models import (
    AlertPriority,
    DayPattern,
    Goal,
    GoalPeriod,
    GoalType,
    PriceUpdate,
    PurchaseRecord,
    WishlistItem,
)


class TestWishlistItem:
    """Tests for WishlistItem model."""

    def test_create_minimal(self):
        """Create item with only required fields."""
        item = WishlistItem(name="Camera", original_price=500, current_price=500)
        assert isinstance(item.id, UUID)
        assert item.desired_price == 0.0
        assert item.price_updates == []
        assert item.is_archived is False
        assert item.is_bought is False

    def test_negative_price_rejected(self):
        """Prices must not be negative."""
        with pytest.raises(ValidationError):
            WishlistItem(name="Camera", original_price=-1, current_price=0)

    def test_savings_and_drop(self):
        """Savings and drop percentage follow original vs current price."""
        item = WishlistItem(name="Camera", original_price=200, current_price=150)
        assert item.savings == 50
        assert item.drop_percentage == pytest.approx(0.25)

    def test_price_increase_has_no_savings(self):
        """A price above the original saves nothing."""
        item = WishlistItem(name="Camera", original_price=100, current_price=120)
        assert item.savings == 0.0
        assert item.drop_percentage == 0.0

    def test_zero_original_price(self):
        """Drop percentage is zero when the original price is zero."""
        item = WishlistItem(name="Freebie", original_price=0, current_price=0)
        assert item.drop_percentage == 0.0

    def test_reached_target(self):
        """Target is reached once current price is at or below desired."""
        item = WishlistItem(
            name="Camera", original_price=100, current_price=80, desired_price=80
        )
        assert item.reached_target is True
        item.current_price = 80.01
        assert item.reached_target is False

    def test_history_is_chronological(self, make_item):
        """History sorts updates by date regardless of insertion order."""
        item = make_item(prices=[10.0, 9.0, 8.0])
        item.price_updates.reverse()
        assert [u.price for u in item.history] == [10.0, 9.0, 8.0]

    def test_minimum_price_seen(self, make_item):
        """Minimum price comes from the history, or the current price."""
        item = make_item(prices=[10.0, 7.0, 9.0])
        assert item.minimum_price_seen == 7.0
        bare = WishlistItem(name="Bare", original_price=5, current_price=4)
        assert bare.minimum_price_seen == 4


class TestPurchaseRecord:
    """Tests for PurchaseRecord model."""

    def test_savings_figures(self):
        """Missed and total savings derive from the captured prices."""
        record = PurchaseRecord(
            item_id=uuid4(), purchase_price=80, original_price=100, minimum_price_seen=70
        )
        assert record.total_savings == 20
        assert record.missed_savings == 10
        assert record.could_have_saved_more is True

    def test_bought_at_minimum(self):
        """Buying at the lowest price misses nothing."""
        record = PurchaseRecord(
            item_id=uuid4(), purchase_price=70, original_price=100, minimum_price_seen=70
        )
        assert record.missed_savings == 0
        assert record.could_have_saved_more is False


class TestGoal:
    """Tests for Goal model."""

    def _goal(self, **kwargs):
        start = datetime(2025, 1, 1)
        defaults = dict(
            title="Save",
            type=GoalType.SAVINGS,
            target_value=100,
            start_date=start,
            end_date=start + timedelta(days=30),
        )
        return Goal(**{**defaults, **kwargs})

    def test_target_must_be_positive(self):
        """A goal needs a positive target."""
        with pytest.raises(ValidationError):
            self._goal(target_value=0)

    def test_progress_is_clamped(self):
        """Progress never exceeds 1."""
        assert self._goal(current_value=50).progress == 0.5
        assert self._goal(current_value=250).progress == 1.0

    def test_is_active_window(self):
        """Goals are active only inside their window and while incomplete."""
        goal = self._goal()
        assert goal.is_active(datetime(2025, 1, 15)) is True
        assert goal.is_active(datetime(2025, 3, 1)) is False
        goal.is_completed = True
        assert goal.is_active(datetime(2025, 1, 15)) is False

    def test_days_remaining(self):
        """Days remaining counts down to zero."""
        goal = self._goal()
        assert goal.days_remaining(datetime(2025, 1, 21)) == 10
        assert goal.days_remaining(datetime(2025, 6, 1)) == 0

    def test_default_period(self):
        """Goals default to a monthly period."""
        assert self._goal().period == GoalPeriod.MONTHLY

    def test_display_name(self):
        """Goal types have display names."""
        assert GoalType.TARGETS.display_name == "Targets Reached"


class TestAnalyticsModels:
    """Tests for analytics result models."""

    def test_day_pattern_average(self):
        """Average drop divides total by count."""
        pattern = DayPattern(day_of_week=0, day_name="Monday", drop_count=4, total_drop=20)
        assert pattern.average_drop == 5
        empty = DayPattern(day_of_week=0, day_name="Monday", drop_count=0, total_drop=0)
        assert empty.average_drop == 0.0

    def test_alert_priority_ordering(self):
        """Alert priorities compare numerically."""
        assert AlertPriority.CRITICAL > AlertPriority.HIGH > AlertPriority.LOW

    def test_price_update_requires_item(self):
        """A price update belongs to an item."""
        with pytest.raises(ValidationError):
            PriceUpdate(price=10)
