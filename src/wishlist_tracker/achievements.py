"""One-time milestone badges evaluated from a rule table."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from .data_store import DataStoreProtocol
from .models import Achievement, WishlistItem
from .preferences import PreferenceStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AchievementSnapshot:
    """Aggregate facts the rules are evaluated against."""

    item_count: int
    targets_reached: int
    total_savings: float
    update_streak: int

    @classmethod
    def from_items(cls, items: list[WishlistItem], today: date) -> "AchievementSnapshot":
        return cls(
            item_count=len(items),
            targets_reached=sum(1 for item in items if item.reached_target),
            total_savings=sum(item.savings for item in items),
            update_streak=update_streak(items, today),
        )


@dataclass(frozen=True)
class AchievementRule:
    id: str
    title: str
    description: str
    icon: str
    condition: Callable[[AchievementSnapshot], bool]

    def unlock(self, when: datetime) -> Achievement:
        return Achievement(
            id=self.id,
            title=self.title,
            description=self.description,
            icon=self.icon,
            unlocked_at=when,
        )


RULES: tuple[AchievementRule, ...] = (
    AchievementRule(
        "first_item",
        "Getting Started",
        "Added your first item to wishlist",
        "star.fill",
        lambda s: s.item_count >= 1,
    ),
    AchievementRule(
        "ten_items",
        "Wishlist Master",
        "Added 10 items to your wishlist",
        "star.circle.fill",
        lambda s: s.item_count >= 10,
    ),
    AchievementRule(
        "first_target",
        "Target Achieved",
        "Reached your first target price",
        "target",
        lambda s: s.targets_reached >= 1,
    ),
    AchievementRule(
        "savings_100",
        "Smart Saver",
        "Saved $100 or more",
        "dollarsign.circle.fill",
        lambda s: s.total_savings >= 100,
    ),
    AchievementRule(
        "savings_500",
        "Savings Champion",
        "Saved $500 or more",
        "crown.fill",
        lambda s: s.total_savings >= 500,
    ),
    AchievementRule(
        "streak_7",
        "Consistent Tracker",
        "Updated prices for 7 days in a row",
        "flame.fill",
        lambda s: s.update_streak >= 7,
    ),
)


def update_streak(items: list[WishlistItem], today: date) -> int:
    """Consecutive days, ending today, with at least one price update.

    The walk stops at the first day without an update, so a day without
    updates today yields 0.
    """
    days = {update.date.date() for item in items for update in item.price_updates}
    streak = 0
    day = today
    while day in days:
        streak += 1
        day -= timedelta(days=1)
    return streak


class AchievementEngine:
    """Unlocks achievements whose rule holds and that are not yet unlocked."""

    def __init__(
        self,
        data_store: DataStoreProtocol,
        preferences: PreferenceStore,
        rules: tuple[AchievementRule, ...] = RULES,
    ):
        self.data_store = data_store
        self.preferences = preferences
        self.rules = rules

    def unlocked(self) -> list[Achievement]:
        return self.preferences.load_achievements()

    def evaluate(self, now: datetime | None = None) -> list[Achievement]:
        """Run every rule once and persist newly unlocked achievements.

        Args:
            now: Evaluation time, defaults to the current time

        Returns:
            Achievements unlocked by this evaluation, in rule order
        """
        now = now or datetime.now()
        unlocked = self.unlocked()
        unlocked_ids = {a.id for a in unlocked}

        items = self.data_store.load_items(include_archived=False)
        snapshot = AchievementSnapshot.from_items(items, now.date())

        new = [
            rule.unlock(now)
            for rule in self.rules
            if rule.id not in unlocked_ids and rule.condition(snapshot)
        ]
        if new:
            self.preferences.save_achievements(unlocked + new)
            logger.info("Unlocked achievements: %s", ", ".join(a.id for a in new))
        return new
