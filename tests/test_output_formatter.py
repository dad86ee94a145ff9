"""Tests for output formatting."""

import json
import re
from datetime import datetime
from io import StringIO

import pytest
from rich.console import Console

from wishlist_tracker.models import AlertPriority, AlertType, SmartAlert
from wishlist_tracker.output_formatter import OutputFormatter
from wishlist_tracker.prediction import PricePredictor
from wishlist_tracker.reports import ReportBuilder


def strip_ansi(text: str) -> str:
    """Remove ANSI escape codes from text."""
    ansi_escape = re.compile(r"\x1b\[[0-9;]*m")
    return ansi_escape.sub("", text)


@pytest.fixture
def rich_formatter():
    """Rich-mode formatter writing to a string buffer."""
    formatter = OutputFormatter(json_mode=False, currency="EUR")
    formatter.console = Console(file=StringIO(), force_terminal=True, width=120)
    return formatter


def rendered(formatter: OutputFormatter) -> str:
    return strip_ansi(formatter.console.file.getvalue())


class TestOutputFormatterJSON:
    """Tests for JSON output mode."""

    def test_json_mode_output(self, capsys):
        """JSON mode outputs valid JSON."""
        formatter = OutputFormatter(json_mode=True)
        formatter.output({"success": True, "data": {"test": "value"}})
        data = json.loads(capsys.readouterr().out)
        assert data["data"]["test"] == "value"

    def test_json_error(self, capsys):
        """JSON error output carries the error code."""
        formatter = OutputFormatter(json_mode=True)
        formatter.error("Something went wrong", error_code="TEST_ERROR")
        data = json.loads(capsys.readouterr().out)
        assert data["success"] is False
        assert data["error"] == "Something went wrong"
        assert data["error_code"] == "TEST_ERROR"

    def test_json_success_with_models(self, capsys, sample_item):
        """Model dumps with UUIDs and datetimes serialize."""
        formatter = OutputFormatter(json_mode=True)
        formatter.success("Saved", data={"item": sample_item.model_dump()})
        data = json.loads(capsys.readouterr().out)
        assert data["data"]["item"]["id"] == str(sample_item.id)

    def test_json_warning(self, capsys):
        formatter = OutputFormatter(json_mode=True)
        formatter.warning("Careful")
        assert json.loads(capsys.readouterr().out)["warning"] == "Careful"


class TestOutputFormatterRich:
    """Tests for Rich output mode."""

    def test_money(self, rich_formatter):
        """Amounts are shown with the currency code."""
        assert rich_formatter.money(1234.5) == "1,234.50 EUR"
        assert rich_formatter.money(None) == "-"

    def test_message_and_error(self, rich_formatter):
        rich_formatter.output({"success": True, "data": {}}, "All good")
        rich_formatter.error("Broken")
        output = rendered(rich_formatter)
        assert "All good" in output
        assert "Broken" in output

    def test_render_items(self, rich_formatter, sample_item):
        """Item tables show names and prices."""
        rich_formatter.output(
            {"success": True, "data": {"items": [sample_item.model_dump(mode="json")]}}
        )
        output = rendered(rich_formatter)
        assert "Headphones" in output
        assert "70.00 EUR" in output
        assert "Total items: 1" in output

    def test_render_empty_items(self, rich_formatter):
        rich_formatter.output({"success": True, "data": {"items": []}})
        assert "No items" in rendered(rich_formatter)

    def test_render_prediction(self, rich_formatter, sample_item):
        prediction = PricePredictor().predict(sample_item)
        rich_formatter.output({"success": True, "data": {"prediction": prediction.model_dump()}})
        output = rendered(rich_formatter)
        assert "Predicted in 7 days" in output
        assert "-10.00" in output

    def test_render_missing_prediction(self, rich_formatter):
        rich_formatter.output({"success": True, "data": {"prediction": None}})
        assert "Not enough price history" in rendered(rich_formatter)

    def test_render_yearly_report(self, rich_formatter, data_store, make_item):
        items = [make_item(prices=[100.0, 60.0], start=datetime(2024, 3, 5))]
        report = ReportBuilder(data_store).yearly_report(2024, items=items)
        rich_formatter.output({"success": True, "data": {"yearly_report": report.model_dump()}})
        output = rendered(rich_formatter)
        assert "Report 2024" in output
        assert "Best month: March" in output

    def test_render_alerts_with_groups(self, rich_formatter, sample_item):
        alert = SmartAlert(
            type=AlertType.TARGET_REACHED,
            item_id=sample_item.id,
            item_name="Headphones",
            title="Target Price Reached!",
            message="Time to celebrate!",
            priority=AlertPriority.CRITICAL,
        )
        rich_formatter.output(
            {
                "success": True,
                "data": {
                    "alerts": [alert.model_dump(mode="json")],
                    "groups": {"Reached target": ["Headphones"], "Getting closer": []},
                },
            }
        )
        output = rendered(rich_formatter)
        assert "Target Price Reached!" in output
        assert "Reached target (1)" in output
        assert "Getting closer" not in output

    def test_render_settings(self, rich_formatter):
        rich_formatter.output(
            {"success": True, "data": {"settings": {"currency_code": "EUR"}}}
        )
        assert "currency_code: EUR" in rendered(rich_formatter)
