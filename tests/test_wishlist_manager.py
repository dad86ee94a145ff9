"""Tests for WishlistManager."""

from datetime import datetime
from uuid import uuid4

import pytest
from pydantic import ValidationError

from wishlist_tracker.wishlist_manager import (
    CategoryNotFoundError,
    ItemNotFoundError,
    TagNotFoundError,
)


@pytest.fixture
def item_id(manager):
    """ID of an item added at 100 with a target of 80."""
    result = manager.add_item(
        "Headphones", 100.0, desired_price=80.0, date_added=datetime(2025, 3, 1)
    )
    return result["data"]["item"]["id"]


class TestAddItem:
    """Tests for adding items."""

    def test_add_item(self, manager):
        """Adding returns the stored item with one price update."""
        result = manager.add_item("Camera", 500.0, desired_price=400.0)

        assert result["success"] is True
        item = result["data"]["item"]
        assert item["name"] == "Camera"
        assert item["current_price"] == 500.0
        assert len(item["price_updates"]) == 1

    def test_current_price_override(self, manager):
        """An explicit current price differs from the original."""
        result = manager.add_item("Camera", 500.0, current_price=450.0)
        assert result["data"]["item"]["current_price"] == 450.0
        assert result["data"]["item"]["price_updates"][0]["price"] == 450.0

    def test_unknown_category(self, manager):
        """Referencing a missing category fails."""
        with pytest.raises(CategoryNotFoundError):
            manager.add_item("Camera", 500.0, category_id=uuid4())

    def test_negative_price(self, manager):
        """Negative prices are rejected."""
        with pytest.raises(ValidationError):
            manager.add_item("Camera", -5.0)


class TestItemQueries:
    """Tests for fetching and listing items."""

    def test_get_missing(self, manager):
        """Unknown ids raise ItemNotFoundError."""
        with pytest.raises(ItemNotFoundError):
            manager.get_item(uuid4())

    def test_get_by_string_id(self, manager, item_id):
        """String ids are accepted."""
        assert manager.get_item(item_id).name == "Headphones"

    def test_list_hides_archived(self, manager, item_id):
        """Archived items are hidden unless requested."""
        manager.archive_item(item_id)

        assert manager.list_items()["data"]["total_items"] == 0
        assert manager.list_items(include_archived=True)["data"]["total_items"] == 1

    def test_list_by_category_and_tag(self, manager, item_id):
        """Listing filters by category and tag."""
        category = manager.add_category("Audio")["data"]["category"]
        tag = manager.add_tag("gift")["data"]["tag"]
        manager.add_item("Speaker", 50.0, category_id=category["id"])
        manager.tag_item(item_id, tag["id"])

        by_category = manager.list_items(category_id=category["id"])["data"]["items"]
        by_tag = manager.list_items(tag_id=tag["id"])["data"]["items"]
        assert [i["name"] for i in by_category] == ["Speaker"]
        assert [i["name"] for i in by_tag] == ["Headphones"]


class TestItemUpdates:
    """Tests for changing items."""

    def test_record_price(self, manager, item_id):
        """Recording a price appends history and sets the current price."""
        manager.record_price(item_id, 85.0, when=datetime(2025, 3, 2))

        item = manager.get_item(item_id)
        assert item.current_price == 85.0
        assert [u.price for u in item.history] == [100.0, 85.0]

    def test_update_item(self, manager, item_id):
        """Editable fields can be changed; None leaves a field alone."""
        manager.update_item(item_id, name="Better Headphones", desired_price=None)

        item = manager.get_item(item_id)
        assert item.name == "Better Headphones"
        assert item.desired_price == 80.0

    def test_update_rejects_unknown_field(self, manager, item_id):
        """Only editable fields may be updated."""
        with pytest.raises(ValueError):
            manager.update_item(item_id, current_price=1.0)

    def test_archive_and_restore(self, manager, item_id):
        """Archiving is reversible."""
        manager.archive_item(item_id)
        assert manager.get_item(item_id).is_archived is True
        manager.unarchive_item(item_id)
        assert manager.get_item(item_id).is_archived is False

    def test_delete_item(self, manager, item_id):
        """Deleted items are gone."""
        manager.delete_item(item_id)
        with pytest.raises(ItemNotFoundError):
            manager.get_item(item_id)


class TestPurchases:
    """Tests for recording purchases."""

    def test_purchase_captures_minimum(self, manager, item_id):
        """The lowest seen price and its date are captured."""
        manager.record_price(item_id, 70.0, when=datetime(2025, 3, 2))
        manager.record_price(item_id, 75.0, when=datetime(2025, 3, 3))
        result = manager.record_purchase(item_id, 75.0, when=datetime(2025, 3, 4))

        purchase = result["data"]["purchase"]
        assert purchase["minimum_price_seen"] == 70.0
        assert purchase["minimum_price_date"].startswith("2025-03-02")
        assert purchase["original_price"] == 100.0
        assert manager.get_item(item_id).is_bought is True

    def test_repeat_purchase_overwrites(self, manager, item_id):
        """Buying again replaces price and notes but keeps the captured minimum."""
        manager.record_purchase(item_id, 90.0, notes="first")
        manager.record_price(item_id, 50.0)
        manager.record_purchase(item_id, 85.0, notes="second")

        purchase = manager.get_item(item_id).purchase
        assert purchase.purchase_price == 85.0
        assert purchase.notes == "second"
        assert purchase.minimum_price_seen == 100.0


class TestCategoriesAndTags:
    """Tests for category and tag management."""

    def test_categories_get_increasing_order(self, manager):
        """New categories sort after existing ones."""
        manager.add_category("First")
        manager.add_category("Second")

        categories = manager.data_store.load_categories()
        assert [c.name for c in categories] == ["First", "Second"]
        assert categories[1].sort_order == categories[0].sort_order + 1

    def test_reorder_categories(self, manager):
        """Listed categories move to the front; the rest keep their order."""
        ids = [manager.add_category(name)["data"]["category"]["id"] for name in "ABC"]

        manager.reorder_categories([ids[2]])

        categories = manager.data_store.load_categories()
        assert [c.name for c in categories] == ["C", "A", "B"]
        assert [c.sort_order for c in categories] == [0, 1, 2]

    def test_reorder_unknown_category(self, manager):
        manager.add_category("A")
        with pytest.raises(CategoryNotFoundError):
            manager.reorder_categories([uuid4()])

    def test_delete_missing_category(self, manager):
        """Deleting an unknown category raises."""
        with pytest.raises(CategoryNotFoundError):
            manager.delete_category(uuid4())

    def test_tag_is_idempotent(self, manager, item_id):
        """Tagging twice stores the tag once; untagging removes it."""
        tag_id = manager.add_tag("gift")["data"]["tag"]["id"]
        manager.tag_item(item_id, tag_id)
        manager.tag_item(item_id, tag_id)
        assert len(manager.get_item(item_id).tag_ids) == 1

        manager.untag_item(item_id, tag_id)
        assert manager.get_item(item_id).tag_ids == []

    def test_unknown_tag(self, manager, item_id):
        """Tagging with an unknown tag raises."""
        with pytest.raises(TagNotFoundError):
            manager.tag_item(item_id, uuid4())
