"""Tests for the preference store."""

from datetime import datetime

from wishlist_tracker.models import Achievement
from wishlist_tracker.preferences import PreferenceStore


class TestPreferenceStore:
    """Tests for scalar preferences."""

    def test_defaults(self, temp_data_dir):
        """Unset keys fall back to configured defaults."""
        prefs = PreferenceStore(temp_data_dir / "prefs.json", defaults={"currency_code": "EUR"})
        assert prefs.currency_code == "EUR"
        assert prefs.theme == "default"
        assert prefs.last_price_check is None

    def test_set_and_get(self, preferences):
        """Values persist across instances."""
        preferences.set("custom", 42)
        assert PreferenceStore(preferences.path).get("custom") == 42

    def test_currency_is_upper_cased(self, preferences):
        """Currency codes are stored upper case."""
        preferences.currency_code = "gbp"
        assert preferences.currency_code == "GBP"

    def test_last_price_check(self, preferences):
        """Last check time round-trips as a datetime."""
        moment = datetime(2025, 3, 10, 8, 30)
        preferences.last_price_check = moment
        assert preferences.last_price_check == moment

    def test_all_excludes_achievements(self, preferences):
        """The settings view hides the achievement list."""
        preferences.theme = "dark"
        preferences.save_achievements([Achievement(id="a", title="A", description="d")])

        settings = preferences.all()
        assert settings["theme"] == "dark"
        assert "achievements" not in settings

    def test_malformed_file(self, preferences):
        """A malformed file reads as empty."""
        preferences.path.write_text("not json")
        assert preferences.get("theme", "fallback") == "fallback"


class TestAchievementStorage:
    """Tests for the persisted achievement list."""

    def test_round_trip(self, preferences):
        """Saved achievements load back intact."""
        unlocked = Achievement(
            id="first_item",
            title="Getting Started",
            description="Added your first item to wishlist",
            unlocked_at=datetime(2025, 3, 10),
        )
        preferences.save_achievements([unlocked])

        loaded = preferences.load_achievements()
        assert len(loaded) == 1
        assert loaded[0].id == "first_item"
        assert loaded[0].unlocked_at == datetime(2025, 3, 10)

    def test_malformed_list(self, preferences):
        """An invalid achievement list yields an empty list."""
        preferences.set("achievements", [{"id": 1}])
        assert preferences.load_achievements() == []
