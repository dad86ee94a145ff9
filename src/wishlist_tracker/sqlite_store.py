"""SQLite-based data persistence for Wishlist Tracker.

This module provides SQLite database storage as an alternative to JSON files.
It implements the same interface as DataStore for seamless switching.
"""

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from uuid import UUID

from .data_store import StoreInitializationError, guarded_read, guarded_write
from .models import (
    Category,
    Goal,
    GoalPeriod,
    GoalType,
    PriceUpdate,
    PurchaseRecord,
    Tag,
    WishlistItem,
)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class SQLiteStore:
    """Manages SQLite database persistence for wishlist data."""

    SCHEMA_VERSION = 1

    def __init__(self, db_path: Path | None = None):
        """Initialize SQLite store.

        Args:
            db_path: Path to the SQLite database file. Defaults to ./data/wishlist.db

        Raises:
            StoreInitializationError: If the database cannot be created or opened
        """
        if db_path is None:
            db_path = Path.cwd() / "data" / "wishlist.db"
        self.db_path = db_path
        try:
            self._ensure_directories()
            self._init_database()
        except (OSError, sqlite3.Error) as e:
            raise StoreInitializationError(self.db_path, e) from e

    def _ensure_directories(self) -> None:
        """Create necessary directories if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def _get_connection(self):
        """Get a database connection with proper cleanup."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_database(self) -> None:
        """Initialize database schema if not exists."""
        with self._get_connection() as conn:
            conn.executescript("""
                -- Schema version tracking
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY
                );

                CREATE TABLE IF NOT EXISTS categories (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    icon_name TEXT NOT NULL DEFAULT 'tag',
                    sort_order INTEGER NOT NULL DEFAULT 0
                );

                CREATE TABLE IF NOT EXISTS tags (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    color TEXT NOT NULL DEFAULT '#8EC5FC',
                    icon_name TEXT NOT NULL DEFAULT 'tag.fill',
                    created_at TEXT NOT NULL
                );

                -- Wishlist items; categories are referenced, not owned
                CREATE TABLE IF NOT EXISTS items (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    original_price REAL NOT NULL CHECK (original_price >= 0),
                    current_price REAL NOT NULL CHECK (current_price >= 0),
                    desired_price REAL NOT NULL DEFAULT 0.0,
                    store_note TEXT,
                    note TEXT,
                    date_added TEXT NOT NULL,
                    is_archived INTEGER NOT NULL DEFAULT 0,
                    is_bought INTEGER NOT NULL DEFAULT 0,
                    category_id TEXT REFERENCES categories(id) ON DELETE SET NULL
                );

                CREATE TABLE IF NOT EXISTS price_updates (
                    id TEXT PRIMARY KEY,
                    item_id TEXT NOT NULL REFERENCES items(id) ON DELETE CASCADE,
                    price REAL NOT NULL,
                    date TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_price_updates_item
                    ON price_updates(item_id, date);

                CREATE TABLE IF NOT EXISTS item_tags (
                    item_id TEXT NOT NULL REFERENCES items(id) ON DELETE CASCADE,
                    tag_id TEXT NOT NULL REFERENCES tags(id) ON DELETE CASCADE,
                    PRIMARY KEY (item_id, tag_id)
                );

                CREATE TABLE IF NOT EXISTS purchases (
                    id TEXT PRIMARY KEY,
                    item_id TEXT NOT NULL UNIQUE REFERENCES items(id) ON DELETE CASCADE,
                    purchase_price REAL NOT NULL,
                    purchase_date TEXT NOT NULL,
                    original_price REAL NOT NULL,
                    minimum_price_seen REAL NOT NULL,
                    minimum_price_date TEXT,
                    notes TEXT
                );

                CREATE TABLE IF NOT EXISTS goals (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    type TEXT NOT NULL,
                    target_value REAL NOT NULL,
                    current_value REAL NOT NULL DEFAULT 0.0,
                    period TEXT NOT NULL,
                    start_date TEXT NOT NULL,
                    end_date TEXT NOT NULL,
                    is_completed INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL
                );

                -- Record schema version
                INSERT OR IGNORE INTO schema_version (version) VALUES (1);
            """)

    # --- Item Operations ---

    @guarded_read(list)
    def load_items(self, include_archived: bool = True) -> list[WishlistItem]:
        """Load wishlist items, newest first.

        Args:
            include_archived: Whether archived items are returned

        Returns:
            List of items with price updates in chronological order
        """
        query = "SELECT * FROM items"
        if not include_archived:
            query += " WHERE is_archived = 0"
        query += " ORDER BY date_added DESC"

        with self._get_connection() as conn:
            rows = conn.execute(query).fetchall()
            return [self._row_to_item(conn, row) for row in rows]

    @guarded_read(lambda: None)
    def get_item(self, item_id: UUID) -> WishlistItem | None:
        """Get a specific item by ID.

        Args:
            item_id: UUID of the item

        Returns:
            WishlistItem if found, None otherwise
        """
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM items WHERE id = ?", (str(item_id),)
            ).fetchone()
            if not row:
                return None
            return self._row_to_item(conn, row)

    def _row_to_item(self, conn: sqlite3.Connection, row: sqlite3.Row) -> WishlistItem:
        item_id = row["id"]
        update_rows = conn.execute(
            "SELECT * FROM price_updates WHERE item_id = ? ORDER BY date ASC",
            (item_id,),
        ).fetchall()
        tag_rows = conn.execute(
            "SELECT tag_id FROM item_tags WHERE item_id = ?", (item_id,)
        ).fetchall()
        purchase_row = conn.execute(
            "SELECT * FROM purchases WHERE item_id = ?", (item_id,)
        ).fetchone()

        return WishlistItem(
            id=UUID(item_id),
            name=row["name"],
            original_price=row["original_price"],
            current_price=row["current_price"],
            desired_price=row["desired_price"],
            store_note=row["store_note"],
            note=row["note"],
            date_added=datetime.fromisoformat(row["date_added"]),
            is_archived=bool(row["is_archived"]),
            is_bought=bool(row["is_bought"]),
            category_id=UUID(row["category_id"]) if row["category_id"] else None,
            tag_ids=[UUID(r["tag_id"]) for r in tag_rows],
            price_updates=[
                PriceUpdate(
                    id=UUID(r["id"]),
                    item_id=UUID(r["item_id"]),
                    price=r["price"],
                    date=datetime.fromisoformat(r["date"]),
                )
                for r in update_rows
            ],
            purchase=self._row_to_purchase(purchase_row) if purchase_row else None,
        )

    @staticmethod
    def _row_to_purchase(row: sqlite3.Row) -> PurchaseRecord:
        return PurchaseRecord(
            id=UUID(row["id"]),
            item_id=UUID(row["item_id"]),
            purchase_price=row["purchase_price"],
            purchase_date=datetime.fromisoformat(row["purchase_date"]),
            original_price=row["original_price"],
            minimum_price_seen=row["minimum_price_seen"],
            minimum_price_date=_parse_dt(row["minimum_price_date"]),
            notes=row["notes"],
        )

    @guarded_write()
    def save_item(self, item: WishlistItem) -> None:
        """Insert or replace an item together with its updates, tags and purchase.

        Args:
            item: Item to save
        """
        item_id = str(item.id)
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO items
                (id, name, original_price, current_price, desired_price, store_note,
                 note, date_added, is_archived, is_bought, category_id)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    original_price = excluded.original_price,
                    current_price = excluded.current_price,
                    desired_price = excluded.desired_price,
                    store_note = excluded.store_note,
                    note = excluded.note,
                    date_added = excluded.date_added,
                    is_archived = excluded.is_archived,
                    is_bought = excluded.is_bought,
                    category_id = excluded.category_id
                """,
                (
                    item_id,
                    item.name,
                    item.original_price,
                    item.current_price,
                    item.desired_price,
                    item.store_note,
                    item.note,
                    item.date_added.isoformat(),
                    int(item.is_archived),
                    int(item.is_bought),
                    str(item.category_id) if item.category_id else None,
                ),
            )

            # Price updates are immutable, so only new ones are inserted
            conn.executemany(
                "INSERT OR IGNORE INTO price_updates (id, item_id, price, date) VALUES (?, ?, ?, ?)",
                [
                    (str(u.id), item_id, u.price, u.date.isoformat())
                    for u in item.price_updates
                ],
            )

            conn.execute("DELETE FROM item_tags WHERE item_id = ?", (item_id,))
            conn.executemany(
                "INSERT INTO item_tags (item_id, tag_id) VALUES (?, ?)",
                [(item_id, str(tag_id)) for tag_id in dict.fromkeys(item.tag_ids)],
            )

            conn.execute("DELETE FROM purchases WHERE item_id = ?", (item_id,))
            if item.purchase:
                p = item.purchase
                conn.execute(
                    """
                    INSERT INTO purchases
                    (id, item_id, purchase_price, purchase_date, original_price,
                     minimum_price_seen, minimum_price_date, notes)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        str(p.id),
                        item_id,
                        p.purchase_price,
                        p.purchase_date.isoformat(),
                        p.original_price,
                        p.minimum_price_seen,
                        _iso(p.minimum_price_date),
                        p.notes,
                    ),
                )

    @guarded_write(False)
    def delete_item(self, item_id: UUID) -> bool:
        """Delete an item; foreign keys cascade to updates, tags and purchase."""
        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM items WHERE id = ?", (str(item_id),))
            return cursor.rowcount > 0

    # --- Category Operations ---

    @guarded_read(list)
    def load_categories(self) -> list[Category]:
        """Load categories ordered by sort order then name."""
        with self._get_connection() as conn:
            rows = conn.execute(
                "SELECT * FROM categories ORDER BY sort_order, name"
            ).fetchall()
        return [
            Category(
                id=UUID(row["id"]),
                name=row["name"],
                icon_name=row["icon_name"],
                sort_order=row["sort_order"],
            )
            for row in rows
        ]

    @guarded_write()
    def save_category(self, category: Category) -> None:
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO categories (id, name, icon_name, sort_order)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    icon_name = excluded.icon_name,
                    sort_order = excluded.sort_order
                """,
                (str(category.id), category.name, category.icon_name, category.sort_order),
            )

    @guarded_write(False)
    def delete_category(self, category_id: UUID) -> bool:
        """Delete a category; items referencing it have the reference cleared."""
        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM categories WHERE id = ?", (str(category_id),))
            return cursor.rowcount > 0

    # --- Tag Operations ---

    @guarded_read(list)
    def load_tags(self) -> list[Tag]:
        """Load tags ordered by name."""
        with self._get_connection() as conn:
            rows = conn.execute("SELECT * FROM tags ORDER BY name COLLATE NOCASE").fetchall()
        return [
            Tag(
                id=UUID(row["id"]),
                name=row["name"],
                color=row["color"],
                icon_name=row["icon_name"],
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in rows
        ]

    @guarded_write()
    def save_tag(self, tag: Tag) -> None:
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO tags (id, name, color, icon_name, created_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    color = excluded.color,
                    icon_name = excluded.icon_name
                """,
                (str(tag.id), tag.name, tag.color, tag.icon_name, tag.created_at.isoformat()),
            )

    @guarded_write(False)
    def delete_tag(self, tag_id: UUID) -> bool:
        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM tags WHERE id = ?", (str(tag_id),))
            return cursor.rowcount > 0

    # --- Goal Operations ---

    @guarded_read(list)
    def load_goals(self) -> list[Goal]:
        """Load goals, most recently created first."""
        with self._get_connection() as conn:
            rows = conn.execute("SELECT * FROM goals ORDER BY created_at DESC").fetchall()
        return [
            Goal(
                id=UUID(row["id"]),
                title=row["title"],
                type=GoalType(row["type"]),
                target_value=row["target_value"],
                current_value=row["current_value"],
                period=GoalPeriod(row["period"]),
                start_date=datetime.fromisoformat(row["start_date"]),
                end_date=datetime.fromisoformat(row["end_date"]),
                is_completed=bool(row["is_completed"]),
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in rows
        ]

    def save_goal(self, goal: Goal) -> None:
        self.save_goals([goal])

    @guarded_write()
    def save_goals(self, goals: list[Goal]) -> None:
        """Insert or replace several goals in one transaction."""
        with self._get_connection() as conn:
            conn.executemany(
                """
                INSERT OR REPLACE INTO goals
                (id, title, type, target_value, current_value, period,
                 start_date, end_date, is_completed, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        str(goal.id),
                        goal.title,
                        goal.type.value,
                        goal.target_value,
                        goal.current_value,
                        goal.period.value,
                        goal.start_date.isoformat(),
                        goal.end_date.isoformat(),
                        int(goal.is_completed),
                        goal.created_at.isoformat(),
                    )
                    for goal in goals
                ],
            )

    @guarded_write(False)
    def delete_goal(self, goal_id: UUID) -> bool:
        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM goals WHERE id = ?", (str(goal_id),))
            return cursor.rowcount > 0

    # --- Purchase Operations ---

    @guarded_read(list)
    def load_purchases(self) -> list[PurchaseRecord]:
        """Load purchase records, most recent first."""
        with self._get_connection() as conn:
            rows = conn.execute(
                "SELECT * FROM purchases ORDER BY purchase_date DESC"
            ).fetchall()
        return [self._row_to_purchase(row) for row in rows]
