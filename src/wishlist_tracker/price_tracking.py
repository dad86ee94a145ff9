"""Periodic price checks for active wishlist items."""

import logging
import re
import threading
from collections.abc import Callable
from datetime import datetime
from urllib.parse import urlparse

from .data_store import DataStoreProtocol
from .models import PriceUpdate, WishlistItem
from .preferences import PreferenceStore

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 3600.0
MIN_PRICE_CHANGE = 0.01

PRICE_PATTERN = re.compile(r"(\$|€|£|¥|₽|USD|EUR|GBP|JPY|RUB)?\s*(\d+[.,]\d{2})")

PriceFetcher = Callable[[WishlistItem], float | None]


def extract_price_from_text(text: str) -> float | None:
    """First price-looking number in ``text``, e.g. "now $19,99" -> 19.99.

    Thousands separators are not understood: "1,299.99" reads as 1.29.
    """
    match = PRICE_PATTERN.search(text)
    if not match:
        return None
    return float(match.group(2).replace(",", "."))


def is_amazon_url(url: str) -> bool:
    return "amazon" in (urlparse(url).hostname or "")


def extract_asin(url: str) -> str | None:
    """First ten-character path segment of an Amazon product URL."""
    for segment in urlparse(url).path.split("/"):
        if len(segment) == 10:
            return segment
    return None


def _is_url(text: str) -> bool:
    return bool(urlparse(text).scheme)


def fetch_price(item: WishlistItem) -> float | None:
    """Default price source: the item's store note.

    URLs are not fetched, so an item whose note is a link reports no price.
    Otherwise a price is read from the note text.
    """
    note = item.store_note
    if not note:
        return None
    if _is_url(note):
        logger.debug("No remote price source configured for %s", note)
        return None
    return extract_price_from_text(note)


class PriceTracker:
    """Sweeps active items for new prices, once or on a recurring timer."""

    def __init__(
        self,
        data_store: DataStoreProtocol,
        preferences: PreferenceStore,
        fetcher: PriceFetcher | None = None,
        min_change: float = MIN_PRICE_CHANGE,
    ):
        self.data_store = data_store
        self.preferences = preferences
        self.fetcher = fetcher or fetch_price
        self.min_change = min_change
        self._timer: threading.Timer | None = None
        self._generation = 0
        self._active = False

    @property
    def is_tracking(self) -> bool:
        return self._active

    @property
    def last_check(self) -> datetime | None:
        return self.preferences.last_price_check

    def check_all_prices(self, now: datetime | None = None) -> int:
        """Check every non-archived, non-bought item one at a time.

        Args:
            now: Timestamp for recorded updates, defaults to the current time

        Returns:
            Number of items whose price changed
        """
        now = now or datetime.now()
        items = [
            item
            for item in self.data_store.load_items(include_archived=False)
            if not item.is_bought
        ]

        updated = 0
        for item in items:
            try:
                new_price = self.fetcher(item)
            except Exception:
                logger.exception("Price fetch failed for %s", item.name)
                continue

            if new_price is None or abs(new_price - item.current_price) <= self.min_change:
                continue

            old_price = item.current_price
            item.price_updates.append(PriceUpdate(item_id=item.id, price=new_price, date=now))
            item.current_price = new_price
            self.data_store.save_item(item)
            updated += 1
            logger.info("Price updated for %s: %.2f -> %.2f", item.name, old_price, new_price)

        self.preferences.last_price_check = now
        if updated:
            logger.info("Price check updated %d of %d items", updated, len(items))
        return updated

    def start(self, interval: float = DEFAULT_INTERVAL) -> None:
        """Run a check now and then every ``interval`` seconds.

        Starting again replaces the previous schedule.
        """
        self.stop()
        self._active = True
        generation = self._generation
        self.check_all_prices()
        self._schedule(interval, generation)

    def stop(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None
        self._active = False
        self._generation += 1

    def _schedule(self, interval: float, generation: int) -> None:
        if generation != self._generation:
            return
        timer = threading.Timer(interval, self._tick, args=(interval, generation))
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _tick(self, interval: float, generation: int) -> None:
        if generation != self._generation:
            return
        try:
            self.check_all_prices()
        except Exception:
            logger.exception("Scheduled price check failed")
        finally:
            self._schedule(interval, generation)
