"""Wishlist item, category, tag and purchase operations."""

import logging
from datetime import datetime
from uuid import UUID

from .data_store import DataStore, DataStoreProtocol
from .models import Category, PriceUpdate, PurchaseRecord, Tag, WishlistItem

logger = logging.getLogger(__name__)


class ItemNotFoundError(Exception):
    """Raised when an item is not found."""

    def __init__(self, item_id: UUID | str):
        self.item_id = item_id
        super().__init__(f"Item with ID '{item_id}' not found")


class CategoryNotFoundError(Exception):
    """Raised when a category is not found."""

    def __init__(self, category_id: UUID | str):
        self.category_id = category_id
        super().__init__(f"Category with ID '{category_id}' not found")


class TagNotFoundError(Exception):
    """Raised when a tag is not found."""

    def __init__(self, tag_id: UUID | str):
        self.tag_id = tag_id
        super().__init__(f"Tag with ID '{tag_id}' not found")


def _as_uuid(value: UUID | str) -> UUID:
    return value if isinstance(value, UUID) else UUID(value)


class WishlistManager:
    """Manages wishlist mutations."""

    EDITABLE_FIELDS = (
        "name",
        "original_price",
        "desired_price",
        "store_note",
        "note",
        "category_id",
    )

    def __init__(self, data_store: DataStoreProtocol | None = None):
        """Initialize wishlist manager.

        Args:
            data_store: Store instance. Creates a JSON DataStore if not provided.
        """
        self.data_store = data_store or DataStore()

    def add_item(
        self,
        name: str,
        original_price: float,
        current_price: float | None = None,
        desired_price: float = 0.0,
        store_note: str | None = None,
        note: str | None = None,
        category_id: UUID | str | None = None,
        date_added: datetime | None = None,
    ) -> dict:
        """Add an item to the wishlist.

        The item starts with one price update at its current price.

        Args:
            name: Item name
            original_price: Price when first seen
            current_price: Current price, defaults to the original price
            desired_price: Target price to wait for
            store_note: Store name, URL or free text with a price
            note: Additional notes
            category_id: Optional category reference
            date_added: When the item was added, defaults to now

        Returns:
            Dict with success status and item data

        Raises:
            CategoryNotFoundError: If the category does not exist
        """
        if category_id is not None:
            category_id = self._require_category(category_id).id

        now = date_added or datetime.now()
        price = original_price if current_price is None else current_price
        item = WishlistItem(
            name=name,
            original_price=original_price,
            current_price=price,
            desired_price=desired_price,
            store_note=store_note or None,
            note=note or None,
            date_added=now,
            category_id=category_id,
        )
        item.price_updates.append(PriceUpdate(item_id=item.id, price=price, date=now))

        self.data_store.save_item(item)
        logger.info("Added item %s (%s)", item.name, item.id)

        return {
            "success": True,
            "message": f"Added {name} to wishlist",
            "data": {"item": item.model_dump(mode="json")},
        }

    def get_item(self, item_id: UUID | str) -> WishlistItem:
        """Get a specific item by ID.

        Raises:
            ItemNotFoundError: If item not found
        """
        item_id = _as_uuid(item_id)
        item = self.data_store.get_item(item_id)
        if not item:
            raise ItemNotFoundError(item_id)
        return item

    def list_items(
        self,
        include_archived: bool = False,
        category_id: UUID | str | None = None,
        tag_id: UUID | str | None = None,
    ) -> dict:
        """Get the wishlist with optional filtering.

        Args:
            include_archived: Include archived items
            category_id: Only items in this category
            tag_id: Only items carrying this tag

        Returns:
            Dict with list data
        """
        items = self.data_store.load_items(include_archived=include_archived)

        if category_id:
            category_id = _as_uuid(category_id)
            items = [i for i in items if i.category_id == category_id]

        if tag_id:
            tag_id = _as_uuid(tag_id)
            items = [i for i in items if tag_id in i.tag_ids]

        return {
            "success": True,
            "data": {
                "items": [item.model_dump(mode="json") for item in items],
                "total_items": len(items),
            },
        }

    def update_item(self, item_id: UUID | str, **fields) -> dict:
        """Edit scalar fields of an item.

        Args:
            item_id: Item ID
            **fields: Any of EDITABLE_FIELDS; None values are ignored

        Raises:
            ItemNotFoundError: If item not found
            ValueError: If an unknown field is given
        """
        item = self.get_item(item_id)
        unknown = set(fields) - set(self.EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        if fields.get("category_id") is not None:
            fields["category_id"] = self._require_category(fields["category_id"]).id

        changes = {key: value for key, value in fields.items() if value is not None}
        item = WishlistItem.model_validate({**item.model_dump(), **changes})
        self.data_store.save_item(item)

        return {
            "success": True,
            "message": f"Updated {item.name}",
            "data": {"item": item.model_dump(mode="json")},
        }

    def record_price(
        self, item_id: UUID | str, price: float, when: datetime | None = None
    ) -> dict:
        """Record a new observed price for an item.

        Raises:
            ItemNotFoundError: If item not found
        """
        item = self.get_item(item_id)
        update = PriceUpdate(item_id=item.id, price=price, date=when or datetime.now())
        old_price = item.current_price
        item.price_updates.append(update)
        item.current_price = price
        self.data_store.save_item(item)
        logger.info("Price updated for %s: %.2f -> %.2f", item.name, old_price, price)

        return {
            "success": True,
            "message": f"Recorded price {price:.2f} for {item.name}",
            "data": {
                "item": item.model_dump(mode="json"),
                "price_update": update.model_dump(mode="json"),
            },
        }

    def archive_item(self, item_id: UUID | str, archived: bool = True) -> dict:
        item = self.get_item(item_id)
        item.is_archived = archived
        self.data_store.save_item(item)
        verb = "Archived" if archived else "Restored"
        return {
            "success": True,
            "message": f"{verb} {item.name}",
            "data": {"item": item.model_dump(mode="json")},
        }

    def unarchive_item(self, item_id: UUID | str) -> dict:
        return self.archive_item(item_id, archived=False)

    def delete_item(self, item_id: UUID | str) -> dict:
        """Delete an item along with its price history and purchase record.

        Raises:
            ItemNotFoundError: If item not found
        """
        item = self.get_item(item_id)
        self.data_store.delete_item(item.id)
        return {
            "success": True,
            "message": f"Deleted {item.name}",
            "data": {"item": item.model_dump(mode="json")},
        }

    def record_purchase(
        self,
        item_id: UUID | str,
        purchase_price: float,
        notes: str | None = None,
        when: datetime | None = None,
    ) -> dict:
        """Mark an item bought and capture its purchase details.

        A repeated purchase overwrites price, date and notes but keeps the
        original price and minimum-price figures captured the first time.

        Raises:
            ItemNotFoundError: If item not found
        """
        item = self.get_item(item_id)
        purchase_date = when or datetime.now()

        if item.purchase:
            item.purchase = item.purchase.model_copy(
                update={
                    "purchase_price": purchase_price,
                    "purchase_date": purchase_date,
                    "notes": notes,
                }
            )
        else:
            minimum = item.minimum_price_seen
            minimum_date = next(
                (u.date for u in item.history if u.price == minimum), None
            )
            item.purchase = PurchaseRecord(
                item_id=item.id,
                purchase_price=purchase_price,
                purchase_date=purchase_date,
                original_price=item.original_price,
                minimum_price_seen=minimum,
                minimum_price_date=minimum_date,
                notes=notes,
            )

        item.is_bought = True
        self.data_store.save_item(item)

        return {
            "success": True,
            "message": f"Recorded purchase of {item.name} at {purchase_price:.2f}",
            "data": {"purchase": item.purchase.model_dump(mode="json")},
        }

    # --- Categories ---

    def add_category(self, name: str, icon_name: str = "tag") -> dict:
        categories = self.data_store.load_categories()
        sort_order = max((c.sort_order for c in categories), default=-1) + 1
        category = Category(name=name, icon_name=icon_name, sort_order=sort_order)
        self.data_store.save_category(category)
        return {
            "success": True,
            "message": f"Added category {name}",
            "data": {"category": category.model_dump(mode="json")},
        }

    def delete_category(self, category_id: UUID | str) -> dict:
        """Delete a category; its items become uncategorized.

        Raises:
            CategoryNotFoundError: If the category does not exist
        """
        category = self._require_category(category_id)
        self.data_store.delete_category(category.id)
        return {
            "success": True,
            "message": f"Deleted category {category.name}",
            "data": {"category": category.model_dump(mode="json")},
        }

    def reorder_categories(self, category_ids: list[UUID | str]) -> dict:
        """Move the given categories to the front, in the given order.

        Categories not listed keep their relative order after them. Every
        category's sort_order is rewritten to its new position.

        Raises:
            CategoryNotFoundError: If an ID does not match a category
        """
        categories = self.data_store.load_categories()
        by_id = {c.id: c for c in categories}

        front = []
        for raw_id in category_ids:
            category_id = _as_uuid(raw_id)
            if category_id not in by_id:
                raise CategoryNotFoundError(category_id)
            if by_id[category_id] not in front:
                front.append(by_id[category_id])

        ordered = front + [c for c in categories if c not in front]
        for position, category in enumerate(ordered):
            if category.sort_order != position:
                category.sort_order = position
                self.data_store.save_category(category)

        return {
            "success": True,
            "message": "Reordered categories",
            "data": {"categories": [c.model_dump(mode="json") for c in ordered]},
        }

    def _require_category(self, category_id: UUID | str) -> Category:
        category_id = _as_uuid(category_id)
        for category in self.data_store.load_categories():
            if category.id == category_id:
                return category
        raise CategoryNotFoundError(category_id)

    # --- Tags ---

    def add_tag(self, name: str, color: str = "#8EC5FC", icon_name: str = "tag.fill") -> dict:
        tag = Tag(name=name, color=color, icon_name=icon_name)
        self.data_store.save_tag(tag)
        return {
            "success": True,
            "message": f"Added tag {name}",
            "data": {"tag": tag.model_dump(mode="json")},
        }

    def delete_tag(self, tag_id: UUID | str) -> dict:
        tag = self._require_tag(tag_id)
        self.data_store.delete_tag(tag.id)
        return {
            "success": True,
            "message": f"Deleted tag {tag.name}",
            "data": {"tag": tag.model_dump(mode="json")},
        }

    def tag_item(self, item_id: UUID | str, tag_id: UUID | str) -> dict:
        item = self.get_item(item_id)
        tag = self._require_tag(tag_id)
        if tag.id not in item.tag_ids:
            item.tag_ids.append(tag.id)
            self.data_store.save_item(item)
        return {
            "success": True,
            "message": f"Tagged {item.name} with {tag.name}",
            "data": {"item": item.model_dump(mode="json")},
        }

    def untag_item(self, item_id: UUID | str, tag_id: UUID | str) -> dict:
        item = self.get_item(item_id)
        tag_id = _as_uuid(tag_id)
        if tag_id in item.tag_ids:
            item.tag_ids.remove(tag_id)
            self.data_store.save_item(item)
        return {
            "success": True,
            "message": f"Removed tag from {item.name}",
            "data": {"item": item.model_dump(mode="json")},
        }

    def _require_tag(self, tag_id: UUID | str) -> Tag:
        tag_id = _as_uuid(tag_id)
        for tag in self.data_store.load_tags():
            if tag.id == tag_id:
                return tag
        raise TagNotFoundError(tag_id)
