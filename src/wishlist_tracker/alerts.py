"""Smart alerts and alert grouping for wishlist items."""

from collections.abc import Callable
from datetime import date

from .models import AlertGroup, AlertPriority, AlertType, SmartAlert, WishlistItem

SIGNIFICANT_DROP = 0.25
SALE_SEASON_MONTH = 11

AlertRule = Callable[[WishlistItem, date], SmartAlert | None]


def _alert(
    item: WishlistItem, alert_type: AlertType, title: str, message: str, priority: AlertPriority
) -> SmartAlert:
    return SmartAlert(
        type=alert_type,
        item_id=item.id,
        item_name=item.name,
        title=title,
        message=message,
        priority=priority,
    )


def rapid_price_drop(item: WishlistItem, today: date) -> SmartAlert | None:
    """Price falling faster than 1% of the current price per day."""
    recent = item.history[-3:]
    if len(recent) < 2:
        return None

    total_drop = total_days = 0.0
    for prev, cur in zip(recent, recent[1:]):
        days = (cur.date - prev.date).total_seconds() / 86400
        if days > 0:
            total_drop += prev.price - cur.price
            total_days += days

    if total_days <= 0:
        return None
    daily_rate = total_drop / total_days
    if daily_rate <= item.current_price * 0.01:
        return None
    return _alert(
        item,
        AlertType.RAPID_PRICE_DROP,
        "Rapid Price Drop Detected",
        f"Price is dropping fast at {daily_rate:.2f} per day. Consider waiting.",
        AlertPriority.HIGH,
    )


def target_proximity(item: WishlistItem, today: date) -> SmartAlert | None:
    """Near-target (within 5%) or target-reached alert."""
    if item.desired_price <= 0:
        return None

    distance = item.current_price - item.desired_price
    if item.current_price > 0 and 0 < distance / item.current_price * 100 <= 5:
        return _alert(
            item,
            AlertType.NEAR_TARGET,
            "Almost at Target Price",
            f"Only {distance:.2f} away from your target. Great time to buy!",
            AlertPriority.HIGH,
        )

    if item.reached_target:
        return _alert(
            item,
            AlertType.TARGET_REACHED,
            "Target Price Reached!",
            f"Price has reached your target of {item.desired_price:.2f}. Time to celebrate!",
            AlertPriority.CRITICAL,
        )
    return None


def price_stabilized(item: WishlistItem, today: date) -> SmartAlert | None:
    """A drop followed by a change smaller than 1% of the current price."""
    recent = item.history[-3:]
    if len(recent) < 3:
        return None

    first_drop = recent[0].price - recent[1].price
    second_drop = recent[1].price - recent[2].price
    if first_drop > 0 and abs(second_drop) < item.current_price * 0.01:
        return _alert(
            item,
            AlertType.PRICE_STABILIZED,
            "Price Stabilized After Drop",
            "Price has stabilized after recent drop. Good time to consider buying.",
            AlertPriority.MEDIUM,
        )
    return None


def seasonal_sale(item: WishlistItem, today: date) -> SmartAlert | None:
    """November sale season for items tracked longer than 30 days."""
    if today.month != SALE_SEASON_MONTH:
        return None
    if (today - item.date_added.date()).days <= 30:
        return None
    return _alert(
        item,
        AlertType.SEASONAL_SALE,
        "Seasonal Sale Period",
        "We're in sale season. Prices may drop further. Monitor closely.",
        AlertPriority.MEDIUM,
    )


ALERT_RULES: tuple[AlertRule, ...] = (
    rapid_price_drop,
    target_proximity,
    price_stabilized,
    seasonal_sale,
)


def generate_alerts(
    items: list[WishlistItem],
    today: date | None = None,
    rules: tuple[AlertRule, ...] = ALERT_RULES,
) -> list[SmartAlert]:
    """Evaluate alert rules for active items, highest priority first."""
    today = today or date.today()
    alerts = []
    for item in items:
        if item.is_archived or item.is_bought:
            continue
        for rule in rules:
            alert = rule(item, today)
            if alert is not None:
                alerts.append(alert)
    return sorted(alerts, key=lambda a: a.priority, reverse=True)


def group_for(item: WishlistItem) -> AlertGroup:
    if item.reached_target:
        return AlertGroup.REACHED_TARGET
    if item.drop_percentage > SIGNIFICANT_DROP:
        return AlertGroup.SIGNIFICANT_DROP
    return AlertGroup.GETTING_CLOSER


def group_alerts(items: list[WishlistItem]) -> dict[AlertGroup, list[WishlistItem]]:
    """Bucket non-archived items into alert groups."""
    groups: dict[AlertGroup, list[WishlistItem]] = {group: [] for group in AlertGroup}
    for item in items:
        if not item.is_archived:
            groups[group_for(item)].append(item)
    return groups
