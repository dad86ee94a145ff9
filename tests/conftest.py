"""Shared test fixtures for Wishlist Tracker."""

from datetime import datetime, timedelta

import pytest

from wishlist_tracker.data_store import DataStore
from wishlist_tracker.models import PriceUpdate, WishlistItem
from wishlist_tracker.preferences import PreferenceStore
from wishlist_tracker.sqlite_store import SQLiteStore
from wishlist_tracker.wishlist_manager import WishlistManager

NOW = datetime(2025, 3, 10, 12, 0, 0)  # a Monday


@pytest.fixture
def temp_data_dir(tmp_path):
    """Create a temporary data directory."""
    data_dir = tmp_path / "test_data"
    data_dir.mkdir()
    return data_dir


@pytest.fixture
def data_store(temp_data_dir):
    """Create a DataStore with temporary directory."""
    return DataStore(data_dir=temp_data_dir)


@pytest.fixture
def sqlite_store(tmp_path):
    """Create a SQLiteStore with a temporary database."""
    return SQLiteStore(db_path=tmp_path / "test.db")


@pytest.fixture
def manager(data_store):
    """Create a WishlistManager with temporary storage."""
    return WishlistManager(data_store=data_store)


@pytest.fixture
def preferences(temp_data_dir):
    """Create a PreferenceStore in the temporary directory."""
    return PreferenceStore(temp_data_dir / "preferences.json")


def _make_item(
    name: str = "Headphones",
    prices: list[float] | None = None,
    original_price: float | None = None,
    desired_price: float = 0.0,
    start: datetime = NOW - timedelta(days=3),
    step: timedelta = timedelta(days=1),
    **kwargs,
) -> WishlistItem:
    """Build an item whose price history is ``prices`` spaced by ``step``.

    The current price is the last price and the original price defaults to
    the first one.
    """
    prices = prices or [100.0]
    item = WishlistItem(
        name=name,
        original_price=prices[0] if original_price is None else original_price,
        current_price=prices[-1],
        desired_price=desired_price,
        date_added=start,
        **kwargs,
    )
    item.price_updates = [
        PriceUpdate(item_id=item.id, price=price, date=start + step * i)
        for i, price in enumerate(prices)
    ]
    return item


@pytest.fixture
def now():
    """Fixed evaluation time (a Monday)."""
    return NOW


@pytest.fixture
def make_item():
    """Factory building items with a spaced price history."""
    return _make_item


@pytest.fixture
def sample_item():
    """Item dropping 100 -> 70 over four days."""
    return _make_item(prices=[100.0, 90.0, 80.0, 70.0], desired_price=60.0)
