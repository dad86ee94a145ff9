"""Wishlist Tracker - Price-drop wishlist tracking and analytics."""

from .achievements import AchievementEngine
from .alerts import generate_alerts, group_alerts
from .config import ConfigManager
from .data_store import (
    BackendType,
    DataStore,
    StoreInitializationError,
    create_data_store,
)
from .goals import GoalNotFoundError, GoalTracker
from .models import (
    Achievement,
    AlertGroup,
    AlertPriority,
    AlertType,
    Category,
    Goal,
    GoalPeriod,
    GoalType,
    PricePrediction,
    PriceUpdate,
    PurchaseRecord,
    SmartAlert,
    Tag,
    WishlistItem,
)
from .output_formatter import OutputFormatter
from .patterns import PatternAnalyzer
from .prediction import PricePredictor
from .preferences import PreferenceStore
from .price_tracking import PriceTracker
from .reports import ReportBuilder
from .sqlite_store import SQLiteStore
from .wishlist_manager import (
    CategoryNotFoundError,
    ItemNotFoundError,
    TagNotFoundError,
    WishlistManager,
)

__version__ = "0.1.0"

__all__ = [
    "Achievement",
    "AchievementEngine",
    "AlertGroup",
    "AlertPriority",
    "AlertType",
    "BackendType",
    "Category",
    "CategoryNotFoundError",
    "ConfigManager",
    "create_data_store",
    "DataStore",
    "generate_alerts",
    "Goal",
    "GoalNotFoundError",
    "GoalPeriod",
    "GoalTracker",
    "GoalType",
    "group_alerts",
    "ItemNotFoundError",
    "OutputFormatter",
    "PatternAnalyzer",
    "PreferenceStore",
    "PricePrediction",
    "PricePredictor",
    "PriceTracker",
    "PriceUpdate",
    "PurchaseRecord",
    "ReportBuilder",
    "SmartAlert",
    "SQLiteStore",
    "StoreInitializationError",
    "Tag",
    "TagNotFoundError",
    "WishlistItem",
    "WishlistManager",
]
