"""Core data models for Wishlist Tracker."""

from datetime import date, datetime
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

UNCATEGORIZED = "Uncategorized"


class Category(BaseModel):
    """A user-defined item category."""

    id: UUID = Field(default_factory=uuid4)
    name: str
    icon_name: str = "tag"
    sort_order: int = 0


class Tag(BaseModel):
    """A free-form label attached to items."""

    id: UUID = Field(default_factory=uuid4)
    name: str
    color: str = "#8EC5FC"
    icon_name: str = "tag.fill"
    created_at: datetime = Field(default_factory=datetime.now)


class PriceUpdate(BaseModel):
    """A timestamped price observation for an item."""

    id: UUID = Field(default_factory=uuid4)
    item_id: UUID
    price: float = Field(ge=0)
    date: datetime = Field(default_factory=datetime.now)


class PurchaseRecord(BaseModel):
    """Purchase details captured when an item is marked bought."""

    id: UUID = Field(default_factory=uuid4)
    item_id: UUID
    purchase_price: float = Field(ge=0)
    purchase_date: datetime = Field(default_factory=datetime.now)
    original_price: float = Field(ge=0)
    minimum_price_seen: float = Field(ge=0)
    minimum_price_date: datetime | None = None
    notes: str | None = None

    @property
    def missed_savings(self) -> float:
        """Amount that could have been saved by buying at the lowest price."""
        return max(0.0, self.purchase_price - self.minimum_price_seen)

    @property
    def total_savings(self) -> float:
        """Amount saved against the original price."""
        return max(0.0, self.original_price - self.purchase_price)

    @property
    def could_have_saved_more(self) -> bool:
        return self.minimum_price_seen < self.purchase_price


class WishlistItem(BaseModel):
    """A tracked wishlist product with its price history."""

    id: UUID = Field(default_factory=uuid4)
    name: str
    original_price: float = Field(ge=0)
    current_price: float = Field(ge=0)
    desired_price: float = Field(default=0.0, ge=0)
    store_note: str | None = None
    note: str | None = None
    date_added: datetime = Field(default_factory=datetime.now)
    is_archived: bool = False
    is_bought: bool = False
    category_id: UUID | None = None
    tag_ids: list[UUID] = Field(default_factory=list)
    price_updates: list[PriceUpdate] = Field(default_factory=list)
    purchase: PurchaseRecord | None = None

    @property
    def history(self) -> list[PriceUpdate]:
        """Price updates in chronological order."""
        return sorted(self.price_updates, key=lambda u: u.date)

    @property
    def savings(self) -> float:
        return max(0.0, self.original_price - self.current_price)

    @property
    def drop_percentage(self) -> float:
        """Fractional discount from original to current price, in [0, 1]."""
        if self.original_price <= 0:
            return 0.0
        drop = (self.original_price - self.current_price) / self.original_price
        return max(0.0, min(1.0, drop))

    @property
    def reached_target(self) -> bool:
        return self.current_price <= self.desired_price

    @property
    def minimum_price_seen(self) -> float:
        """Lowest observed price, falling back to the current price."""
        if not self.price_updates:
            return self.current_price
        return min(u.price for u in self.price_updates)


class GoalType(str, Enum):
    """What a goal measures."""

    SAVINGS = "savings"
    UPDATES = "updates"
    TARGETS = "targets"

    @property
    def display_name(self) -> str:
        return {
            GoalType.SAVINGS: "Savings Goal",
            GoalType.UPDATES: "Updates Goal",
            GoalType.TARGETS: "Targets Reached",
        }[self]


class GoalPeriod(str, Enum):
    """Length of a goal window."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Goal(BaseModel):
    """A user-defined numeric target over a fixed time window."""

    id: UUID = Field(default_factory=uuid4)
    title: str
    type: GoalType
    target_value: float = Field(gt=0)
    current_value: float = 0.0
    period: GoalPeriod = GoalPeriod.MONTHLY
    start_date: datetime
    end_date: datetime
    is_completed: bool = False
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def progress(self) -> float:
        """Completion ratio clamped to [0, 1]."""
        if self.target_value <= 0:
            return 0.0
        return min(1.0, max(0.0, self.current_value / self.target_value))

    def is_active(self, now: datetime | None = None) -> bool:
        now = now or datetime.now()
        return self.start_date <= now <= self.end_date and not self.is_completed

    def days_remaining(self, now: datetime | None = None) -> int:
        now = now or datetime.now()
        return max(0, (self.end_date - now).days)


class Achievement(BaseModel):
    """A one-time unlockable milestone badge."""

    id: str
    title: str
    description: str
    icon: str = "star.fill"
    unlocked_at: datetime = Field(default_factory=datetime.now)


# --- Analytics results ---


class PricePrediction(BaseModel):
    """Linear trend projection for an item."""

    predicted_price: float
    days_ahead: int
    trend: float  # price change per day
    drop_probability: float = Field(ge=0, le=1)
    recommendation: str


class DayPattern(BaseModel):
    """Price drops grouped by day of week (0 = Monday)."""

    day_of_week: int = Field(ge=0, le=6)
    day_name: str
    drop_count: int
    total_drop: float

    @property
    def average_drop(self) -> float:
        return self.total_drop / self.drop_count if self.drop_count else 0.0


class MonthPattern(BaseModel):
    """Price drops grouped by calendar month (1-12)."""

    month: int = Field(ge=1, le=12)
    month_name: str
    drop_count: int
    total_drop: float

    @property
    def average_drop(self) -> float:
        return self.total_drop / self.drop_count if self.drop_count else 0.0


class CategorySeasonality(BaseModel):
    """Best month for price drops within one category."""

    category_name: str
    best_month: int = Field(ge=1, le=12)
    best_month_name: str
    total_drops: int


class RecommendationType(str, Enum):
    BEST_DAY = "best_day"
    SEASONAL = "seasonal"
    ITEM_NEAR_TARGET = "item_near_target"


class PurchaseRecommendation(BaseModel):
    """A pattern-derived buying tip."""

    type: RecommendationType
    title: str
    message: str
    priority: int = 2  # 1 low, 2 medium, 3 high
    item_id: UUID | None = None


class PeriodStats(BaseModel):
    """Aggregate figures for one date range."""

    start: datetime
    end: datetime
    total_savings: float = 0.0
    total_items: int = 0
    total_updates: int = 0
    targets_reached: int = 0
    average_drop: float = 0.0


class PeriodComparison(BaseModel):
    """Current period measured against a baseline period."""

    current: PeriodStats
    previous: PeriodStats
    savings_change: float
    savings_change_percent: float
    items_change: int
    items_change_percent: float
    updates_change: int
    targets_change: int


class MonthlyData(BaseModel):
    month: int = Field(ge=1, le=12)
    month_name: str
    total_savings: float = 0.0
    items_added: int = 0
    targets_reached: int = 0


class YearlyReport(BaseModel):
    """Twelve-month breakdown of a calendar year."""

    year: int
    total_savings: float
    total_items: int
    total_targets_reached: int
    best_month: MonthlyData | None = None
    monthly_data: list[MonthlyData] = Field(default_factory=list)


class TrackingEfficiency(BaseModel):
    """How thoroughly the wishlist is being tracked."""

    total_items: int = 0
    items_with_updates: int = 0
    items_with_targets: int = 0
    items_reached_targets: int = 0
    average_updates_per_item: float = 0.0
    update_coverage: float = 0.0
    target_reach_rate: float = 0.0
    average_days_to_target: float = 0.0


class SavingsBucket(BaseModel):
    start: date
    total_savings: float


class SavingsOverview(BaseModel):
    """Savings grouped by the date items were added, plus highlights."""

    daily: list[SavingsBucket] = Field(default_factory=list)
    weekly: list[SavingsBucket] = Field(default_factory=list)
    monthly: list[SavingsBucket] = Field(default_factory=list)
    yearly: list[SavingsBucket] = Field(default_factory=list)
    by_category: dict[str, float] = Field(default_factory=dict)
    biggest_saving: str | None = None
    most_improved: str | None = None


class DashboardSummary(BaseModel):
    total_items: int = 0
    total_saved: float = 0.0
    estimated_value: float = 0.0
    average_drop: float = 0.0


class AlertType(str, Enum):
    RAPID_PRICE_DROP = "rapid_price_drop"
    NEAR_TARGET = "near_target"
    TARGET_REACHED = "target_reached"
    PRICE_STABILIZED = "price_stabilized"
    SEASONAL_SALE = "seasonal_sale"


class AlertPriority(int, Enum):
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4


class SmartAlert(BaseModel):
    """An item-level alert produced by the alert rules."""

    type: AlertType
    item_id: UUID
    item_name: str
    title: str
    message: str
    priority: AlertPriority = AlertPriority.MEDIUM


class AlertGroup(str, Enum):
    REACHED_TARGET = "Reached target"
    SIGNIFICANT_DROP = "Significant drop"
    GETTING_CLOSER = "Getting closer"


class MissedOpportunities(BaseModel):
    total_missed_savings: float = 0.0
    items_with_missed_savings: int = 0
    average_missed_savings: float = 0.0
    biggest_miss: PurchaseRecord | None = None
    biggest_miss_amount: float = 0.0


class PurchaseComparison(BaseModel):
    total_purchases: int = 0
    total_spent: float = 0.0
    total_original_value: float = 0.0
    total_savings: float = 0.0
    total_missed_savings: float = 0.0
    average_savings_per_purchase: float = 0.0
    best_purchase: PurchaseRecord | None = None
    worst_purchase: PurchaseRecord | None = None


class PurchaseStatistics(BaseModel):
    total_purchases: int = 0
    this_month_purchases: int = 0
    total_spent: float = 0.0
    this_month_spent: float = 0.0
    total_savings: float = 0.0
    this_month_savings: float = 0.0
