"""Key-value preference storage kept beside the main record store."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from .data_store import JSONEncoder
from .models import Achievement

logger = logging.getLogger(__name__)

THEME_KEY = "theme"
CURRENCY_KEY = "currency_code"
LAST_PRICE_CHECK_KEY = "last_price_check"
ACHIEVEMENTS_KEY = "achievements"

_achievement_list = TypeAdapter(list[Achievement])


class PreferenceStore:
    """Small JSON-backed store for scalar settings and unlocked achievements."""

    def __init__(self, path: Path, defaults: dict[str, Any] | None = None):
        """Initialize preference store.

        Args:
            path: JSON file holding the preferences
            defaults: Values returned for keys that were never set
        """
        self.path = path
        self.defaults = defaults or {}

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path) as f:
                data = json.load(f)
        except (OSError, ValueError):
            logger.exception("Could not read preferences from %s", self.path)
            return {}
        if not isinstance(data, dict):
            logger.error("Ignoring malformed preferences file %s", self.path)
            return {}
        return data

    def _save(self, data: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w") as f:
                json.dump(data, f, cls=JSONEncoder, indent=2)
        except OSError:
            logger.exception("Could not write preferences to %s", self.path)

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, self.defaults.get(key, default))

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def all(self) -> dict[str, Any]:
        """All scalar settings, with defaults filled in."""
        data = {**self.defaults, **self._load()}
        data.pop(ACHIEVEMENTS_KEY, None)
        return data

    @property
    def theme(self) -> str:
        return self.get(THEME_KEY, "default")

    @theme.setter
    def theme(self, value: str) -> None:
        self.set(THEME_KEY, value)

    @property
    def currency_code(self) -> str:
        return self.get(CURRENCY_KEY, "USD")

    @currency_code.setter
    def currency_code(self, value: str) -> None:
        self.set(CURRENCY_KEY, value.upper())

    @property
    def last_price_check(self) -> datetime | None:
        raw = self.get(LAST_PRICE_CHECK_KEY)
        if not raw:
            return None
        try:
            return datetime.fromisoformat(raw)
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed %s value %r", LAST_PRICE_CHECK_KEY, raw)
            return None

    @last_price_check.setter
    def last_price_check(self, value: datetime) -> None:
        self.set(LAST_PRICE_CHECK_KEY, value.isoformat())

    def load_achievements(self) -> list[Achievement]:
        """Load the unlocked achievement list; malformed data yields an empty list."""
        raw = self._load().get(ACHIEVEMENTS_KEY, [])
        try:
            return _achievement_list.validate_python(raw)
        except ValidationError:
            logger.exception("Discarding malformed achievement list")
            return []

    def save_achievements(self, achievements: list[Achievement]) -> None:
        self.set(ACHIEVEMENTS_KEY, [a.model_dump() for a in achievements])
