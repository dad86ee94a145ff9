"""Data persistence for Wishlist Tracker.

This module provides data persistence with support for JSON (default) or SQLite backends.
Use create_data_store() to get the appropriate backend based on configuration.

Both backends follow the same failure rules: a failed read is logged and yields
an empty result, a failed write is logged and leaves the stored data unchanged.
Only failing to initialize the store is raised to the caller.
"""

import functools
import json
import logging
import sqlite3
from collections.abc import Callable
from datetime import date, datetime, time
from enum import Enum
from pathlib import Path
from typing import Any, Protocol
from uuid import UUID

from .models import Category, Goal, PurchaseRecord, Tag, WishlistItem

logger = logging.getLogger(__name__)

# json errors and pydantic ValidationError both derive from ValueError
STORE_ERRORS = (OSError, ValueError, sqlite3.Error)


class StoreInitializationError(Exception):
    """Raised when the persistent store cannot be opened or created."""

    def __init__(self, location: Path, reason: Exception):
        self.location = location
        super().__init__(f"Could not initialize data store at '{location}': {reason}")


class BackendType(str, Enum):
    """Data storage backend types."""

    JSON = "json"
    SQLITE = "sqlite"


def guarded_read(fallback: Callable[[], Any]):
    """Log read failures and return ``fallback()`` instead of raising."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except STORE_ERRORS:
                logger.exception("Store read failed in %s", func.__name__)
                return fallback()

        return wrapper

    return decorator


def guarded_write(fallback: Any = None):
    """Log write failures and return ``fallback`` instead of raising."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except STORE_ERRORS:
                logger.exception("Store write failed in %s", func.__name__)
                return fallback

        return wrapper

    return decorator


class DataStoreProtocol(Protocol):
    """Protocol defining the data store interface."""

    def load_items(self, include_archived: bool = True) -> list[WishlistItem]: ...
    def get_item(self, item_id: UUID) -> WishlistItem | None: ...
    def save_item(self, item: WishlistItem) -> None: ...
    def delete_item(self, item_id: UUID) -> bool: ...
    def load_categories(self) -> list[Category]: ...
    def save_category(self, category: Category) -> None: ...
    def delete_category(self, category_id: UUID) -> bool: ...
    def load_tags(self) -> list[Tag]: ...
    def save_tag(self, tag: Tag) -> None: ...
    def delete_tag(self, tag_id: UUID) -> bool: ...
    def load_goals(self) -> list[Goal]: ...
    def save_goal(self, goal: Goal) -> None: ...
    def save_goals(self, goals: list[Goal]) -> None: ...
    def delete_goal(self, goal_id: UUID) -> bool: ...
    def load_purchases(self) -> list[PurchaseRecord]: ...


class JSONEncoder(json.JSONEncoder):
    """Custom JSON encoder for our data types."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, UUID):
            return str(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, date):
            return obj.isoformat()
        if isinstance(obj, time):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


class DataStore:
    """Manages JSON file persistence for wishlist data."""

    FILE_VERSION = "1.0"
    COLLECTIONS = ("items", "categories", "tags", "goals")

    def __init__(self, data_dir: Path | None = None):
        """Initialize data store.

        Args:
            data_dir: Directory for data files. Defaults to ./data

        Raises:
            StoreInitializationError: If the data directory cannot be created
        """
        self.data_dir = data_dir or Path.cwd() / "data"
        try:
            self._ensure_directories()
        except OSError as e:
            raise StoreInitializationError(self.data_dir, e) from e

    def _ensure_directories(self) -> None:
        """Create necessary directories if they don't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _wishlist_path(self) -> Path:
        """Path to the wishlist document."""
        return self.data_dir / "wishlist.json"

    def _read_document(self) -> dict[str, Any]:
        path = self._wishlist_path()
        if not path.exists():
            return {}

        with open(path) as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{path} does not contain a JSON object")
        for key in self.COLLECTIONS:
            records = data.get(key, [])
            if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
                raise ValueError(f"{path}: '{key}' is not a list of objects")
        return data

    def _write_document(self, data: dict[str, Any]) -> None:
        data["version"] = self.FILE_VERSION
        data["last_updated"] = datetime.now()
        path = self._wishlist_path()
        tmp_path = path.with_suffix(".json.tmp")

        with open(tmp_path, "w") as f:
            json.dump(data, f, cls=JSONEncoder, indent=2)
        tmp_path.replace(path)

    # --- Item Operations ---

    @guarded_read(list)
    def load_items(self, include_archived: bool = True) -> list[WishlistItem]:
        """Load wishlist items, newest first.

        Args:
            include_archived: Whether archived items are returned

        Returns:
            List of items with price updates in chronological order
        """
        data = self._read_document()
        items = [WishlistItem.model_validate(raw) for raw in data.get("items", [])]
        if not include_archived:
            items = [item for item in items if not item.is_archived]
        for item in items:
            item.price_updates.sort(key=lambda u: u.date)
        return sorted(items, key=lambda i: i.date_added, reverse=True)

    @guarded_read(lambda: None)
    def get_item(self, item_id: UUID) -> WishlistItem | None:
        """Get a specific item by ID.

        Args:
            item_id: UUID of the item

        Returns:
            WishlistItem if found, None otherwise
        """
        for item in self.load_items():
            if item.id == item_id:
                return item
        return None

    @guarded_write()
    def save_item(self, item: WishlistItem) -> None:
        """Insert or replace an item together with its updates and purchase.

        Args:
            item: Item to save
        """
        data = self._read_document()
        items = [raw for raw in data.get("items", []) if raw.get("id") != str(item.id)]
        items.append(item.model_dump())
        data["items"] = items
        self._write_document(data)

    @guarded_write(False)
    def delete_item(self, item_id: UUID) -> bool:
        """Delete an item; its price updates and purchase record go with it.

        Returns:
            True if an item was removed
        """
        data = self._read_document()
        items = data.get("items", [])
        remaining = [raw for raw in items if raw.get("id") != str(item_id)]
        if len(remaining) == len(items):
            return False
        data["items"] = remaining
        self._write_document(data)
        return True

    # --- Category Operations ---

    @guarded_read(list)
    def load_categories(self) -> list[Category]:
        """Load categories ordered by sort order then name."""
        data = self._read_document()
        categories = [Category.model_validate(raw) for raw in data.get("categories", [])]
        return sorted(categories, key=lambda c: (c.sort_order, c.name))

    @guarded_write()
    def save_category(self, category: Category) -> None:
        data = self._read_document()
        categories = [
            raw for raw in data.get("categories", []) if raw.get("id") != str(category.id)
        ]
        categories.append(category.model_dump())
        data["categories"] = categories
        self._write_document(data)

    @guarded_write(False)
    def delete_category(self, category_id: UUID) -> bool:
        """Delete a category and clear it from every item that referenced it."""
        data = self._read_document()
        categories = data.get("categories", [])
        remaining = [raw for raw in categories if raw.get("id") != str(category_id)]
        if len(remaining) == len(categories):
            return False

        data["categories"] = remaining
        for raw in data.get("items", []):
            if raw.get("category_id") == str(category_id):
                raw["category_id"] = None
        self._write_document(data)
        return True

    # --- Tag Operations ---

    @guarded_read(list)
    def load_tags(self) -> list[Tag]:
        """Load tags ordered by name."""
        data = self._read_document()
        tags = [Tag.model_validate(raw) for raw in data.get("tags", [])]
        return sorted(tags, key=lambda t: t.name.lower())

    @guarded_write()
    def save_tag(self, tag: Tag) -> None:
        data = self._read_document()
        tags = [raw for raw in data.get("tags", []) if raw.get("id") != str(tag.id)]
        tags.append(tag.model_dump())
        data["tags"] = tags
        self._write_document(data)

    @guarded_write(False)
    def delete_tag(self, tag_id: UUID) -> bool:
        """Delete a tag and detach it from all items."""
        data = self._read_document()
        tags = data.get("tags", [])
        remaining = [raw for raw in tags if raw.get("id") != str(tag_id)]
        if len(remaining) == len(tags):
            return False

        data["tags"] = remaining
        for raw in data.get("items", []):
            raw["tag_ids"] = [t for t in raw.get("tag_ids", []) if t != str(tag_id)]
        self._write_document(data)
        return True

    # --- Goal Operations ---

    @guarded_read(list)
    def load_goals(self) -> list[Goal]:
        """Load goals, most recently created first."""
        data = self._read_document()
        goals = [Goal.model_validate(raw) for raw in data.get("goals", [])]
        return sorted(goals, key=lambda g: g.created_at, reverse=True)

    def save_goal(self, goal: Goal) -> None:
        self.save_goals([goal])

    @guarded_write()
    def save_goals(self, goals: list[Goal]) -> None:
        """Insert or replace several goals in one write."""
        data = self._read_document()
        ids = {str(goal.id) for goal in goals}
        stored = [raw for raw in data.get("goals", []) if raw.get("id") not in ids]
        stored.extend(goal.model_dump() for goal in goals)
        data["goals"] = stored
        self._write_document(data)

    @guarded_write(False)
    def delete_goal(self, goal_id: UUID) -> bool:
        data = self._read_document()
        goals = data.get("goals", [])
        remaining = [raw for raw in goals if raw.get("id") != str(goal_id)]
        if len(remaining) == len(goals):
            return False
        data["goals"] = remaining
        self._write_document(data)
        return True

    # --- Purchase Operations ---

    @guarded_read(list)
    def load_purchases(self) -> list[PurchaseRecord]:
        """Load purchase records, most recent first."""
        purchases = [item.purchase for item in self.load_items() if item.purchase]
        return sorted(purchases, key=lambda p: p.purchase_date, reverse=True)


def create_data_store(
    backend: BackendType = BackendType.JSON,
    data_dir: Path | None = None,
    db_path: Path | None = None,
) -> DataStoreProtocol:
    """Create a data store with the specified backend.

    Args:
        backend: Which backend to use (json or sqlite)
        data_dir: Directory for data files (used by JSON backend, also used
                  as base path for SQLite if db_path not specified)
        db_path: Path to SQLite database file (only used by SQLite backend)

    Returns:
        A DataStore or SQLiteStore instance

    Raises:
        StoreInitializationError: If the backend cannot be opened

    Example:
        # Use JSON backend (default)
        store = create_data_store()

        # Use SQLite with custom path
        store = create_data_store(
            BackendType.SQLITE,
            db_path=Path("./my_data/wishlist.db")
        )
    """
    if backend == BackendType.SQLITE:
        from .sqlite_store import SQLiteStore

        if db_path is None and data_dir is not None:
            db_path = data_dir / "wishlist.db"

        return SQLiteStore(db_path=db_path)
    else:
        return DataStore(data_dir=data_dir)
