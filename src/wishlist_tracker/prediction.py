"""Linear price trend estimation."""

from .models import PricePrediction, PriceUpdate, WishlistItem

SECONDS_PER_DAY = 86400

RECOMMEND_TARGET_SOON = (
    "Great news! Price is predicted to reach your target soon. Consider waiting."
)
RECOMMEND_HIGH_DROP = "High probability of price drop. Wait a bit longer."
RECOMMEND_MODERATE_DROP = "Moderate chance of price drop. Monitor closely."
RECOMMEND_SLIGHT_DROP = "Price may drop slightly. Consider waiting."
RECOMMEND_BUY = "Price trend is stable or rising. Consider buying now if it fits your budget."


def calculate_trend(updates: list[PriceUpdate]) -> float:
    """Least-squares slope of price over time, in price change per day.

    Timestamps are centred on their mean before fitting so that epoch-sized
    values do not lose precision. Returns 0 when all timestamps coincide.
    """
    if len(updates) < 2:
        return 0.0

    xs = [u.date.timestamp() for u in updates]
    ys = [u.price for u in updates]
    mean_x = sum(xs) / len(xs)
    mean_y = sum(ys) / len(ys)

    denominator = sum((x - mean_x) ** 2 for x in xs)
    if denominator == 0:
        return 0.0

    numerator = sum((x - mean_x) * (y - mean_y) for x, y in zip(xs, ys))
    return numerator / denominator * SECONDS_PER_DAY


def calculate_drop_probability(updates: list[PriceUpdate], trend: float) -> float:
    """Share of consecutive drops, nudged by the trend direction, in [0, 1]."""
    if len(updates) < 2:
        return 0.5

    drops = sum(1 for prev, cur in zip(updates, updates[1:]) if cur.price < prev.price)
    ratio = drops / (len(updates) - 1)
    trend_factor = 0.3 if trend < 0 else -0.1
    return min(1.0, max(0.0, ratio + trend_factor))


def recommend(
    current_price: float,
    predicted_price: float,
    desired_price: float,
    drop_probability: float,
) -> str:
    if predicted_price <= desired_price:
        return RECOMMEND_TARGET_SOON
    if drop_probability > 0.7:
        return RECOMMEND_HIGH_DROP
    if drop_probability > 0.4:
        return RECOMMEND_MODERATE_DROP
    if predicted_price < current_price:
        return RECOMMEND_SLIGHT_DROP
    return RECOMMEND_BUY


class PricePredictor:
    """Projects an item's price from its history."""

    def __init__(self, days_ahead: int = 7):
        self.days_ahead = days_ahead

    def predict(
        self, item: WishlistItem, days_ahead: int | None = None
    ) -> PricePrediction | None:
        """Predict the price ``days_ahead`` days from now.

        Args:
            item: Item with its price updates
            days_ahead: Horizon in days, defaults to the predictor's horizon

        Returns:
            PricePrediction, or None if fewer than two price updates exist
        """
        horizon = self.days_ahead if days_ahead is None else days_ahead
        updates = item.history
        if len(updates) < 2:
            return None

        trend = calculate_trend(updates)
        projected = item.current_price + trend * horizon
        probability = calculate_drop_probability(updates, trend)

        return PricePrediction(
            predicted_price=max(0.0, projected),
            days_ahead=horizon,
            trend=trend,
            drop_probability=probability,
            recommendation=recommend(
                item.current_price, projected, item.desired_price, probability
            ),
        )
