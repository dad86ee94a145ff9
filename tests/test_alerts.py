"""Tests for smart alerts."""

from datetime import date, datetime

from wishlist_tracker.alerts import (
    generate_alerts,
    group_alerts,
    price_stabilized,
    rapid_price_drop,
    seasonal_sale,
    target_proximity,
)
from wishlist_tracker.models import AlertGroup, AlertPriority, AlertType

TODAY = date(2025, 3, 10)


class TestAlertRules:
    """Tests for individual alert rules."""

    def test_rapid_drop(self, sample_item):
        """Ten per day on a price of 70 is a rapid drop."""
        alert = rapid_price_drop(sample_item, TODAY)
        assert alert.type == AlertType.RAPID_PRICE_DROP
        assert alert.priority == AlertPriority.HIGH

    def test_slow_drop_no_alert(self, make_item):
        """Drops under 1% of the price per day do not alert."""
        item = make_item(prices=[100.0, 99.9, 99.8])
        assert rapid_price_drop(item, TODAY) is None

    def test_near_target(self, make_item):
        """Within 5% of target is a high-priority alert."""
        item = make_item(prices=[100.0], desired_price=96.0)
        alert = target_proximity(item, TODAY)
        assert alert.type == AlertType.NEAR_TARGET
        assert alert.priority == AlertPriority.HIGH

    def test_target_reached(self, make_item):
        """Reaching the target is critical."""
        item = make_item(prices=[100.0, 50.0], desired_price=60.0)
        alert = target_proximity(item, TODAY)
        assert alert.type == AlertType.TARGET_REACHED
        assert alert.priority == AlertPriority.CRITICAL

    def test_no_target(self, make_item):
        """Items without a target never alert on proximity."""
        assert target_proximity(make_item(prices=[10.0]), TODAY) is None

    def test_price_stabilized(self, make_item):
        """A drop followed by a flat step means the price settled."""
        item = make_item(prices=[100.0, 80.0, 80.0])
        alert = price_stabilized(item, TODAY)
        assert alert.type == AlertType.PRICE_STABILIZED
        assert alert.priority == AlertPriority.MEDIUM

    def test_still_falling_not_stabilized(self, sample_item):
        assert price_stabilized(sample_item, TODAY) is None

    def test_seasonal_sale(self, make_item):
        """November alerts for items older than 30 days."""
        item = make_item(start=datetime(2025, 9, 1))
        assert seasonal_sale(item, date(2025, 11, 15)).type == AlertType.SEASONAL_SALE
        assert seasonal_sale(item, date(2025, 10, 15)) is None

        fresh = make_item(start=datetime(2025, 11, 1))
        assert seasonal_sale(fresh, date(2025, 11, 15)) is None


class TestGenerateAlerts:
    """Tests for generate_alerts."""

    def test_sorted_by_priority(self, make_item):
        """Critical alerts come first."""
        reached = make_item(prices=[100.0, 80.0, 50.0], desired_price=60.0)
        alerts = generate_alerts([reached], today=TODAY)

        assert alerts[0].priority == AlertPriority.CRITICAL
        assert [a.priority for a in alerts] == sorted(
            (a.priority for a in alerts), reverse=True
        )

    def test_skips_archived_and_bought(self, make_item):
        """Archived and bought items produce no alerts."""
        archived = make_item(prices=[100.0, 50.0], desired_price=60.0, is_archived=True)
        bought = make_item(prices=[100.0, 50.0], desired_price=60.0, is_bought=True)
        assert generate_alerts([archived, bought], today=TODAY) == []

    def test_custom_rules(self, sample_item):
        """The rule table can be replaced."""
        alerts = generate_alerts([sample_item], today=TODAY, rules=(rapid_price_drop,))
        assert [a.type for a in alerts] == [AlertType.RAPID_PRICE_DROP]


class TestGroupAlerts:
    """Tests for alert grouping."""

    def test_groups(self, make_item):
        """Items land in exactly one group."""
        reached = make_item(name="Reached", prices=[100.0, 50.0], desired_price=60.0)
        dropped = make_item(name="Dropped", prices=[100.0, 70.0], desired_price=10.0)
        closer = make_item(name="Closer", prices=[100.0, 95.0], desired_price=10.0)
        hidden = make_item(name="Hidden", is_archived=True)

        groups = group_alerts([reached, dropped, closer, hidden])
        assert [i.name for i in groups[AlertGroup.REACHED_TARGET]] == ["Reached"]
        assert [i.name for i in groups[AlertGroup.SIGNIFICANT_DROP]] == ["Dropped"]
        assert [i.name for i in groups[AlertGroup.GETTING_CLOSER]] == ["Closer"]

    def test_empty_groups_present(self):
        """Every group key exists even with no items."""
        assert set(group_alerts([])) == set(AlertGroup)
