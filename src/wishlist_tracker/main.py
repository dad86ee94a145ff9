"""CLI entry point for Wishlist Tracker."""

import time
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer

from .achievements import AchievementEngine
from .alerts import generate_alerts, group_alerts
from .config import ConfigManager
from .data_store import (
    BackendType,
    DataStoreProtocol,
    StoreInitializationError,
    create_data_store,
)
from .goals import GoalNotFoundError, GoalTracker
from .log import setup_logging
from .models import GoalPeriod, GoalType
from .output_formatter import OutputFormatter
from .patterns import PatternAnalyzer
from .prediction import PricePredictor
from .preferences import PreferenceStore
from .price_tracking import PriceTracker
from .purchases import compare_purchases, missed_opportunities, purchase_statistics
from .reports import ReportBuilder
from .wishlist_manager import (
    CategoryNotFoundError,
    ItemNotFoundError,
    TagNotFoundError,
    WishlistManager,
)

app = typer.Typer(
    name="wishlist",
    help="Price-drop wishlist tracking and analytics",
    no_args_is_help=True,
)

# Global state (set by callback)
formatter: OutputFormatter = OutputFormatter()
config: ConfigManager | None = None
data_store: DataStoreProtocol | None = None
preferences: PreferenceStore | None = None

PREFERENCES_FILE = "preferences.json"


def get_config() -> ConfigManager:
    """Get or create ConfigManager instance."""
    global config
    if config is None:
        config = ConfigManager()
    return config


def get_data_store() -> DataStoreProtocol:
    """Get or create the data store using config values."""
    global data_store
    if data_store is None:
        cfg = get_config()
        data_store = create_data_store(
            backend=BackendType(cfg.data.backend), data_dir=cfg.data.storage_dir
        )
    return data_store


def get_preferences() -> PreferenceStore:
    """Get or create the preference store beside the data files."""
    global preferences
    if preferences is None:
        cfg = get_config()
        preferences = _preference_store(cfg, cfg.data.storage_dir)
    return preferences


def _preference_store(cfg: ConfigManager, data_dir: Path) -> PreferenceStore:
    return PreferenceStore(
        data_dir / PREFERENCES_FILE,
        defaults={
            "currency_code": cfg.display.currency_code,
            "theme": cfg.display.theme,
        },
    )


def get_manager() -> WishlistManager:
    return WishlistManager(get_data_store())


@app.callback()
def main(
    json_output: Annotated[
        bool, typer.Option("--json", help="Output as JSON for programmatic use")
    ] = False,
    data_dir: Annotated[Path | None, typer.Option("--data-dir", help="Data directory path")] = None,
) -> None:
    """Wishlist Tracker CLI - Watch prices drop and buy at the right time."""
    global formatter, config, data_store, preferences

    config = ConfigManager()
    setup_logging(level=config.logging.level, log_file=config.logging.file)

    # CLI --data-dir overrides config, which overrides default
    effective_data_dir = data_dir if data_dir else config.data.storage_dir
    preferences = _preference_store(config, effective_data_dir)
    formatter = OutputFormatter(json_mode=json_output, currency=preferences.currency_code)

    try:
        data_store = create_data_store(
            backend=BackendType(config.data.backend), data_dir=effective_data_dir
        )
    except StoreInitializationError as e:
        formatter.error(str(e), error_code="STORE_UNAVAILABLE")
        raise typer.Exit(code=1)


# --- Items ---
item_app = typer.Typer(help="Wishlist item commands")
app.add_typer(item_app, name="item")


@item_app.command("add")
def item_add(
    name: Annotated[str, typer.Argument(help="Item name")],
    original_price: Annotated[float, typer.Argument(help="Price when first seen")],
    current: Annotated[
        float | None, typer.Option("--current", "-c", help="Current price if different")
    ] = None,
    target: Annotated[float, typer.Option("--target", "-t", help="Desired price")] = 0.0,
    store: Annotated[
        str | None, typer.Option("--store", "-s", help="Store name, URL or price text")
    ] = None,
    note: Annotated[str | None, typer.Option("--note", "-n", help="Additional notes")] = None,
    category: Annotated[str | None, typer.Option("--category", help="Category ID")] = None,
) -> None:
    """Add an item to the wishlist."""
    try:
        result = get_manager().add_item(
            name=name,
            original_price=original_price,
            current_price=current,
            desired_price=target,
            store_note=store,
            note=note,
            category_id=category,
        )
        formatter.output(result, result["message"])
    except CategoryNotFoundError as e:
        formatter.error(str(e), error_code="CATEGORY_NOT_FOUND")
        raise typer.Exit(code=1)
    except ValueError as e:
        formatter.error(str(e), error_code="INVALID_INPUT")
        raise typer.Exit(code=1)


@item_app.command("list")
def item_list(
    archived: Annotated[
        bool, typer.Option("--archived", "-a", help="Include archived items")
    ] = False,
    category: Annotated[str | None, typer.Option("--category", help="Category ID")] = None,
    tag: Annotated[str | None, typer.Option("--tag", help="Tag ID")] = None,
) -> None:
    """List wishlist items."""
    try:
        result = get_manager().list_items(
            include_archived=archived, category_id=category, tag_id=tag
        )
        formatter.output(result)
    except ValueError as e:
        formatter.error(str(e), error_code="INVALID_INPUT")
        raise typer.Exit(code=1)


@item_app.command("show")
def item_show(
    item_id: Annotated[str, typer.Argument(help="Item ID")],
) -> None:
    """Show an item with its price history."""
    try:
        item = get_manager().get_item(item_id)
        formatter.output({"success": True, "data": {"item": item.model_dump(mode="json")}})
    except ItemNotFoundError as e:
        formatter.error(str(e), error_code="ITEM_NOT_FOUND")
        raise typer.Exit(code=1)
    except ValueError as e:
        formatter.error(str(e), error_code="INVALID_INPUT")
        raise typer.Exit(code=1)


@item_app.command("edit")
def item_edit(
    item_id: Annotated[str, typer.Argument(help="Item ID")],
    name: Annotated[str | None, typer.Option("--name", help="New name")] = None,
    original_price: Annotated[
        float | None, typer.Option("--original", help="New original price")
    ] = None,
    target: Annotated[float | None, typer.Option("--target", "-t", help="New target")] = None,
    store: Annotated[str | None, typer.Option("--store", "-s", help="New store note")] = None,
    note: Annotated[str | None, typer.Option("--note", "-n", help="New notes")] = None,
    category: Annotated[str | None, typer.Option("--category", help="Category ID")] = None,
) -> None:
    """Edit an item's details."""
    try:
        result = get_manager().update_item(
            item_id,
            name=name,
            original_price=original_price,
            desired_price=target,
            store_note=store,
            note=note,
            category_id=category,
        )
        formatter.output(result, result["message"])
    except ItemNotFoundError as e:
        formatter.error(str(e), error_code="ITEM_NOT_FOUND")
        raise typer.Exit(code=1)
    except CategoryNotFoundError as e:
        formatter.error(str(e), error_code="CATEGORY_NOT_FOUND")
        raise typer.Exit(code=1)
    except ValueError as e:
        formatter.error(str(e), error_code="INVALID_INPUT")
        raise typer.Exit(code=1)


@item_app.command("price")
def item_price(
    item_id: Annotated[str, typer.Argument(help="Item ID")],
    price: Annotated[float, typer.Argument(help="Newly observed price")],
) -> None:
    """Record a new price for an item."""
    try:
        result = get_manager().record_price(item_id, price)
        formatter.output(result, result["message"])
    except ItemNotFoundError as e:
        formatter.error(str(e), error_code="ITEM_NOT_FOUND")
        raise typer.Exit(code=1)
    except ValueError as e:
        formatter.error(str(e), error_code="INVALID_INPUT")
        raise typer.Exit(code=1)


@item_app.command("archive")
def item_archive(
    item_id: Annotated[str, typer.Argument(help="Item ID")],
    restore: Annotated[bool, typer.Option("--restore", help="Unarchive instead")] = False,
) -> None:
    """Archive an item, or restore it with --restore."""
    try:
        manager = get_manager()
        result = manager.unarchive_item(item_id) if restore else manager.archive_item(item_id)
        formatter.output(result, result["message"])
    except ItemNotFoundError as e:
        formatter.error(str(e), error_code="ITEM_NOT_FOUND")
        raise typer.Exit(code=1)
    except ValueError as e:
        formatter.error(str(e), error_code="INVALID_INPUT")
        raise typer.Exit(code=1)


@item_app.command("delete")
def item_delete(
    item_id: Annotated[str, typer.Argument(help="Item ID")],
) -> None:
    """Delete an item and its history."""
    try:
        result = get_manager().delete_item(item_id)
        formatter.success(result["message"])
    except ItemNotFoundError as e:
        formatter.error(str(e), error_code="ITEM_NOT_FOUND")
        raise typer.Exit(code=1)
    except ValueError as e:
        formatter.error(str(e), error_code="INVALID_INPUT")
        raise typer.Exit(code=1)


@item_app.command("buy")
def item_buy(
    item_id: Annotated[str, typer.Argument(help="Item ID")],
    price: Annotated[float, typer.Argument(help="Price paid")],
    notes: Annotated[str | None, typer.Option("--notes", "-n", help="Purchase notes")] = None,
) -> None:
    """Mark an item as bought."""
    try:
        result = get_manager().record_purchase(item_id, price, notes=notes)
        formatter.success(result["message"], result["data"])
    except ItemNotFoundError as e:
        formatter.error(str(e), error_code="ITEM_NOT_FOUND")
        raise typer.Exit(code=1)
    except ValueError as e:
        formatter.error(str(e), error_code="INVALID_INPUT")
        raise typer.Exit(code=1)


# --- Categories ---
category_app = typer.Typer(help="Category commands")
app.add_typer(category_app, name="category")


@category_app.command("add")
def category_add(
    name: Annotated[str, typer.Argument(help="Category name")],
    icon: Annotated[str, typer.Option("--icon", help="Icon name")] = "tag",
) -> None:
    """Add a category."""
    result = get_manager().add_category(name, icon_name=icon)
    formatter.success(result["message"], result["data"])


@category_app.command("list")
def category_list() -> None:
    """List categories."""
    categories = get_data_store().load_categories()
    formatter.output(
        {
            "success": True,
            "data": {"categories": [c.model_dump(mode="json") for c in categories]},
        }
    )


@category_app.command("reorder")
def category_reorder(
    category_ids: Annotated[list[str], typer.Argument(help="Category IDs in display order")],
) -> None:
    """Move categories to the front of the list in the given order."""
    try:
        result = get_manager().reorder_categories(category_ids)
        formatter.output(result, result["message"])
    except CategoryNotFoundError as e:
        formatter.error(str(e), error_code="CATEGORY_NOT_FOUND")
        raise typer.Exit(code=1)
    except ValueError as e:
        formatter.error(str(e), error_code="INVALID_INPUT")
        raise typer.Exit(code=1)


@category_app.command("delete")
def category_delete(
    category_id: Annotated[str, typer.Argument(help="Category ID")],
) -> None:
    """Delete a category; its items become uncategorized."""
    try:
        result = get_manager().delete_category(category_id)
        formatter.success(result["message"])
    except CategoryNotFoundError as e:
        formatter.error(str(e), error_code="CATEGORY_NOT_FOUND")
        raise typer.Exit(code=1)
    except ValueError as e:
        formatter.error(str(e), error_code="INVALID_INPUT")
        raise typer.Exit(code=1)


# --- Tags ---
tag_app = typer.Typer(help="Tag commands")
app.add_typer(tag_app, name="tag")


@tag_app.command("add")
def tag_add(
    name: Annotated[str, typer.Argument(help="Tag name")],
    color: Annotated[str, typer.Option("--color", help="Hex color")] = "#8EC5FC",
) -> None:
    """Add a tag."""
    result = get_manager().add_tag(name, color=color)
    formatter.success(result["message"], result["data"])


@tag_app.command("list")
def tag_list() -> None:
    """List tags."""
    tags = get_data_store().load_tags()
    formatter.output(
        {"success": True, "data": {"tags": [t.model_dump(mode="json") for t in tags]}}
    )


@tag_app.command("delete")
def tag_delete(
    tag_id: Annotated[str, typer.Argument(help="Tag ID")],
) -> None:
    """Delete a tag and remove it from every item."""
    try:
        result = get_manager().delete_tag(tag_id)
        formatter.success(result["message"])
    except TagNotFoundError as e:
        formatter.error(str(e), error_code="TAG_NOT_FOUND")
        raise typer.Exit(code=1)
    except ValueError as e:
        formatter.error(str(e), error_code="INVALID_INPUT")
        raise typer.Exit(code=1)


@tag_app.command("assign")
def tag_assign(
    item_id: Annotated[str, typer.Argument(help="Item ID")],
    tag_id: Annotated[str, typer.Argument(help="Tag ID")],
    remove: Annotated[bool, typer.Option("--remove", help="Remove the tag instead")] = False,
) -> None:
    """Attach a tag to an item, or detach it with --remove."""
    try:
        manager = get_manager()
        if remove:
            result = manager.untag_item(item_id, tag_id)
        else:
            result = manager.tag_item(item_id, tag_id)
        formatter.success(result["message"])
    except ItemNotFoundError as e:
        formatter.error(str(e), error_code="ITEM_NOT_FOUND")
        raise typer.Exit(code=1)
    except TagNotFoundError as e:
        formatter.error(str(e), error_code="TAG_NOT_FOUND")
        raise typer.Exit(code=1)
    except ValueError as e:
        formatter.error(str(e), error_code="INVALID_INPUT")
        raise typer.Exit(code=1)


# --- Analytics ---


@app.command()
def predict(
    item_id: Annotated[str, typer.Argument(help="Item ID")],
    days: Annotated[int | None, typer.Option("--days", "-d", help="Days ahead")] = None,
) -> None:
    """Project an item's price from its history."""
    try:
        item = get_manager().get_item(item_id)
        predictor = PricePredictor(days_ahead=get_config().prediction.days_ahead)
        prediction = predictor.predict(item, days_ahead=days)
        formatter.output(
            {
                "success": True,
                "data": {
                    "item_id": str(item.id),
                    "prediction": prediction.model_dump() if prediction else None,
                },
            },
            f"Prediction for {item.name}",
        )
    except ItemNotFoundError as e:
        formatter.error(str(e), error_code="ITEM_NOT_FOUND")
        raise typer.Exit(code=1)
    except ValueError as e:
        formatter.error(str(e), error_code="INVALID_INPUT")
        raise typer.Exit(code=1)


@app.command()
def patterns() -> None:
    """Show when prices tend to drop and buying tips."""
    ds = get_data_store()
    items = ds.load_items(include_archived=False)
    analyzer = PatternAnalyzer()

    formatter.output(
        {
            "success": True,
            "data": {
                "patterns": {
                    "days": [d.model_dump() for d in analyzer.best_days_of_week(items)],
                    "months": [m.model_dump() for m in analyzer.best_months(items)],
                    "categories": [
                        s.model_dump()
                        for s in analyzer.seasonality_by_category(items, ds.load_categories())
                    ],
                    "recommendations": [
                        r.model_dump(mode="json") for r in analyzer.recommendations(items)
                    ],
                }
            },
        }
    )


# --- Goals ---
goal_app = typer.Typer(help="Savings and tracking goals")
app.add_typer(goal_app, name="goal")


@goal_app.command("create")
def goal_create(
    title: Annotated[str, typer.Argument(help="Goal title")],
    goal_type: Annotated[GoalType, typer.Option("--type", help="What to measure")],
    target: Annotated[float, typer.Option("--target", "-t", help="Target value")],
    period: Annotated[
        GoalPeriod, typer.Option("--period", "-p", help="Goal window")
    ] = GoalPeriod.MONTHLY,
) -> None:
    """Create a goal starting now."""
    try:
        goal = GoalTracker(get_data_store()).create_goal(title, goal_type, target, period)
        formatter.success(
            f"Created goal {goal.title}", {"goal": goal.model_dump(mode="json")}
        )
    except ValueError as e:
        formatter.error(str(e), error_code="INVALID_INPUT")
        raise typer.Exit(code=1)


@goal_app.command("list")
def goal_list() -> None:
    """List goals."""
    goals = GoalTracker(get_data_store()).goals()
    formatter.output(
        {"success": True, "data": {"goals": [g.model_dump(mode="json") for g in goals]}}
    )


@goal_app.command("refresh")
def goal_refresh() -> None:
    """Recompute active goals from current wishlist data."""
    tracker = GoalTracker(get_data_store())
    completed = tracker.refresh()
    message = (
        f"Completed {len(completed)} goal(s)" if completed else "Goals are up to date"
    )
    formatter.output(
        {
            "success": True,
            "data": {
                "goals": [g.model_dump(mode="json") for g in tracker.goals()],
                "completed": [g.model_dump(mode="json") for g in completed],
            },
        },
        message,
    )


@goal_app.command("delete")
def goal_delete(
    goal_id: Annotated[str, typer.Argument(help="Goal ID")],
) -> None:
    """Delete a goal."""
    try:
        goal = GoalTracker(get_data_store()).delete_goal(goal_id)
        formatter.success(f"Deleted goal {goal.title}")
    except GoalNotFoundError as e:
        formatter.error(str(e), error_code="GOAL_NOT_FOUND")
        raise typer.Exit(code=1)
    except ValueError as e:
        formatter.error(str(e), error_code="INVALID_INPUT")
        raise typer.Exit(code=1)


@app.command()
def achievements() -> None:
    """Unlock any newly earned achievements and list them all."""
    engine = AchievementEngine(get_data_store(), get_preferences())
    new = engine.evaluate()
    message = f"Unlocked {len(new)} new achievement(s)" if new else ""
    formatter.output(
        {
            "success": True,
            "data": {
                "achievements": [a.model_dump(mode="json") for a in engine.unlocked()],
                "new": [a.id for a in new],
            },
        },
        message,
    )


# --- Reports ---
report_app = typer.Typer(help="Savings reports")
app.add_typer(report_app, name="report")


@report_app.command("compare")
def report_compare(
    days: Annotated[int, typer.Option("--days", "-d", help="Period length in days")] = 30,
) -> None:
    """Compare the last N days with the N days before them."""
    try:
        comparison = ReportBuilder(get_data_store()).compare_recent(days=days)
        formatter.output({"success": True, "data": {"comparison": comparison.model_dump()}})
    except ValueError as e:
        formatter.error(str(e), error_code="INVALID_INPUT")
        raise typer.Exit(code=1)


@report_app.command("yearly")
def report_yearly(
    year: Annotated[int | None, typer.Option("--year", "-y", help="Calendar year")] = None,
) -> None:
    """Month-by-month report for a year."""
    report = ReportBuilder(get_data_store()).yearly_report(year or datetime.now().year)
    formatter.output({"success": True, "data": {"yearly_report": report.model_dump()}})


@report_app.command("efficiency")
def report_efficiency() -> None:
    """How thoroughly prices are being tracked."""
    efficiency = ReportBuilder(get_data_store()).tracking_efficiency()
    formatter.output({"success": True, "data": {"efficiency": efficiency.model_dump()}})


@report_app.command("overview")
def report_overview(
    period: Annotated[
        str, typer.Option("--period", "-p", help="daily, weekly, monthly or yearly")
    ] = "monthly",
) -> None:
    """Savings grouped by period and category."""
    if period not in ("daily", "weekly", "monthly", "yearly"):
        formatter.error(f"Unknown period: {period}", error_code="INVALID_INPUT")
        raise typer.Exit(code=1)

    overview = ReportBuilder(get_data_store()).savings_overview()
    formatter.output(
        {
            "success": True,
            "data": {"overview": overview.model_dump(mode="json"), "period": period},
        }
    )


@report_app.command("dashboard")
def report_dashboard() -> None:
    """Headline figures for the wishlist."""
    summary = ReportBuilder(get_data_store()).dashboard_summary()
    formatter.output({"success": True, "data": {"dashboard": summary.model_dump()}})


@app.command()
def export(
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write CSV to this file")
    ] = None,
) -> None:
    """Export the wishlist as CSV."""
    csv_text = ReportBuilder(get_data_store()).export_csv()

    if output is None:
        if formatter.json_mode:
            formatter.output({"success": True, "data": {"csv": csv_text}})
        else:
            typer.echo(csv_text, nl=False)
        return

    try:
        output.write_text(csv_text)
    except OSError as e:
        formatter.error(str(e), error_code="EXPORT_FAILED")
        raise typer.Exit(code=1)
    formatter.success(f"Exported wishlist to {output}", {"path": str(output)})


@app.command()
def alerts() -> None:
    """Show smart alerts for active items."""
    items = get_data_store().load_items(include_archived=False)
    formatter.output(
        {
            "success": True,
            "data": {
                "alerts": [a.model_dump(mode="json") for a in generate_alerts(items)],
                "groups": {
                    group.value: [item.name for item in grouped]
                    for group, grouped in group_alerts(items).items()
                },
            },
        }
    )


@app.command()
def purchases() -> None:
    """Purchase history with savings and missed opportunities."""
    records = get_data_store().load_purchases()
    formatter.output(
        {
            "success": True,
            "data": {
                "purchases": [p.model_dump(mode="json") for p in records],
                "statistics": purchase_statistics(records).model_dump(),
                "missed": missed_opportunities(records).model_dump(mode="json"),
                "purchase_comparison": compare_purchases(records).model_dump(mode="json"),
            },
        }
    )


@app.command()
def track(
    watch: Annotated[
        bool, typer.Option("--watch", "-w", help="Keep checking on the configured interval")
    ] = False,
) -> None:
    """Check store notes for new prices."""
    cfg = get_config()
    tracker = PriceTracker(
        get_data_store(), get_preferences(), min_change=cfg.tracking.min_price_change
    )

    if not watch:
        updated = tracker.check_all_prices()
        formatter.output(
            {
                "success": True,
                "message": f"Updated {updated} item(s)",
                "data": {"tracking": {"updated": updated, "last_check": tracker.last_check}},
            },
            f"Updated {updated} item(s)",
        )
        return

    tracker.start(cfg.tracking.interval_seconds)
    formatter.success(f"Tracking prices every {cfg.tracking.interval_seconds:g}s (Ctrl+C to stop)")
    try:
        while tracker.is_tracking:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        tracker.stop()


@app.command()
def settings(
    currency: Annotated[
        str | None, typer.Option("--currency", help="Currency code, e.g. EUR")
    ] = None,
    theme: Annotated[str | None, typer.Option("--theme", help="Display theme")] = None,
) -> None:
    """Show settings, or change them with options."""
    prefs = get_preferences()
    if currency:
        prefs.currency_code = currency
    if theme:
        prefs.theme = theme

    message = "Settings updated" if currency or theme else ""
    formatter.output({"success": True, "data": {"settings": prefs.all()}}, message)


if __name__ == "__main__":
    app()
