"""Output formatting for CLI and programmatic use."""

import json
from typing import Any

from rich.console import Console
from rich.table import Table

from .data_store import JSONEncoder


class OutputFormatter:
    """Formats output for both Rich terminal and JSON modes."""

    def __init__(self, json_mode: bool = False, currency: str = "USD"):
        """Initialize formatter.

        Args:
            json_mode: If True, output JSON instead of Rich formatting
            currency: Currency code shown beside amounts
        """
        self.json_mode = json_mode
        self.currency = currency
        self.console = Console()

    def money(self, amount: float | None) -> str:
        if amount is None:
            return "-"
        return f"{amount:,.2f} {self.currency}"

    def output(self, data: dict[str, Any], message: str = "") -> None:
        """Output data in appropriate format.

        Args:
            data: Data to output
            message: Optional message for Rich mode
        """
        if self.json_mode:
            self._output_json(data)
        else:
            self._output_rich(data, message)

    def _output_json(self, data: dict[str, Any]) -> None:
        """Output as JSON to stdout."""
        print(json.dumps(data, cls=JSONEncoder, indent=2))

    def _output_rich(self, data: dict[str, Any], message: str) -> None:
        """Output with Rich formatting."""
        if message:
            self.console.print(f"[green]✓[/green] {message}")

        payload = data.get("data", {})
        renderers = [
            ("items", self._render_items),
            ("item", self._render_item),
            ("prediction", self._render_prediction),
            ("patterns", self._render_patterns),
            ("goals", self._render_goals),
            ("achievements", self._render_achievements),
            ("comparison", self._render_comparison),
            ("yearly_report", self._render_yearly_report),
            ("efficiency", self._render_efficiency),
            ("overview", self._render_overview),
            ("dashboard", self._render_dashboard),
            ("alerts", self._render_alerts),
            ("purchases", self._render_purchases),
            ("categories", self._render_named_list),
            ("tags", self._render_named_list),
            ("settings", self._render_settings),
        ]
        for key, render in renderers:
            if key in payload:
                render(payload, key)
                return

    def _render_items(self, payload: dict, key: str) -> None:
        items = payload["items"]
        if not items:
            self.console.print("[dim]No items on the wishlist[/dim]")
            return

        table = Table(title="Wishlist", show_header=True, header_style="bold cyan")
        table.add_column("ID", style="dim", no_wrap=True)
        table.add_column("Item", style="cyan")
        table.add_column("Original", justify="right")
        table.add_column("Current", style="magenta", justify="right")
        table.add_column("Target", justify="right")
        table.add_column("Status")

        for item in items:
            if item.get("is_bought"):
                status = "[blue]bought[/blue]"
            elif item["current_price"] <= item.get("desired_price", 0):
                status = "[green]✓ target[/green]"
            elif item.get("is_archived"):
                status = "[dim]archived[/dim]"
            else:
                status = "○"
            table.add_row(
                str(item["id"])[:8],
                item["name"],
                self.money(item["original_price"]),
                self.money(item["current_price"]),
                self.money(item.get("desired_price")),
                status,
            )

        self.console.print(table)
        self.console.print(f"\nTotal items: {len(items)}")

    def _render_item(self, payload: dict, key: str) -> None:
        item = payload["item"]
        self.console.print(f"\n[bold cyan]{item['name']}[/bold cyan]  [dim]{item['id']}[/dim]")
        self.console.print(f"Original: {self.money(item['original_price'])}")
        self.console.print(f"Current:  {self.money(item['current_price'])}")
        self.console.print(f"Target:   {self.money(item.get('desired_price'))}")
        if item.get("store_note"):
            self.console.print(f"Store:    {item['store_note']}")

        updates = item.get("price_updates", [])
        if updates:
            table = Table(title="Price history", show_header=True, header_style="bold")
            table.add_column("Date")
            table.add_column("Price", justify="right")
            for update in updates:
                table.add_row(str(update["date"])[:16], self.money(update["price"]))
            self.console.print(table)

    def _render_prediction(self, payload: dict, key: str) -> None:
        prediction = payload["prediction"]
        if prediction is None:
            self.console.print("[dim]Not enough price history for a prediction[/dim]")
            return

        trend = prediction["trend"]
        color = "green" if trend < 0 else "red" if trend > 0 else "white"
        self.console.print(
            f"Predicted in {prediction['days_ahead']} days: "
            f"[bold]{self.money(prediction['predicted_price'])}[/bold]"
        )
        self.console.print(f"Trend: [{color}]{trend:+.2f}[/{color}] per day")
        self.console.print(f"Drop probability: {prediction['drop_probability']:.0%}")
        self.console.print(f"\U0001f4a1 {prediction['recommendation']}")

    def _render_patterns(self, payload: dict, key: str) -> None:
        patterns = payload["patterns"]

        for title, rows, label in (
            ("Best days of week", patterns.get("days", []), "day_name"),
            ("Best months", patterns.get("months", []), "month_name"),
        ):
            if not rows:
                continue
            table = Table(title=title, show_header=True, header_style="bold")
            table.add_column("When")
            table.add_column("Drops", justify="right")
            table.add_column("Total drop", justify="right")
            for row in rows:
                table.add_row(row[label], str(row["drop_count"]), self.money(row["total_drop"]))
            self.console.print(table)

        for season in patterns.get("categories", []):
            self.console.print(
                f"  {season['category_name']}: best in {season['best_month_name']} "
                f"({season['total_drops']} drops)"
            )

        recommendations = patterns.get("recommendations", [])
        if recommendations:
            self.console.print("\n[bold yellow]Recommendations[/bold yellow]")
            for rec in recommendations:
                self.console.print(f"  \U0001f4a1 [bold]{rec['title']}[/bold]: {rec['message']}")
        elif not patterns.get("days"):
            self.console.print("[dim]Not enough price history to find patterns[/dim]")

    def _render_goals(self, payload: dict, key: str) -> None:
        goals = payload["goals"]
        if not goals:
            self.console.print("[dim]No goals yet[/dim]")
            return

        table = Table(title="Goals", show_header=True, header_style="bold cyan")
        table.add_column("ID", style="dim", no_wrap=True)
        table.add_column("Title")
        table.add_column("Type")
        table.add_column("Progress", justify="right")
        table.add_column("Ends")
        for goal in goals:
            done = "[green]✓[/green] " if goal["is_completed"] else ""
            table.add_row(
                str(goal["id"])[:8],
                goal["title"],
                goal["type"],
                f"{done}{goal['current_value']:g} / {goal['target_value']:g}",
                str(goal["end_date"])[:10],
            )
        self.console.print(table)

    def _render_achievements(self, payload: dict, key: str) -> None:
        achievements = payload["achievements"]
        if not achievements:
            self.console.print("[dim]No achievements unlocked yet[/dim]")
            return
        for achievement in achievements:
            self.console.print(
                f"\U0001f3c6 [bold]{achievement['title']}[/bold] - {achievement['description']} "
                f"[dim]({str(achievement['unlocked_at'])[:10]})[/dim]"
            )

    def _render_comparison(self, payload: dict, key: str) -> None:
        comparison = payload["comparison"]
        current, previous = comparison["current"], comparison["previous"]

        table = Table(title="Period comparison", show_header=True, header_style="bold")
        table.add_column("Metric")
        table.add_column("Previous", justify="right")
        table.add_column("Current", justify="right")
        table.add_row(
            "Savings", self.money(previous["total_savings"]), self.money(current["total_savings"])
        )
        table.add_row("Items", str(previous["total_items"]), str(current["total_items"]))
        table.add_row("Updates", str(previous["total_updates"]), str(current["total_updates"]))
        table.add_row(
            "Targets reached", str(previous["targets_reached"]), str(current["targets_reached"])
        )
        self.console.print(table)

        change = comparison["savings_change_percent"]
        color = "green" if change >= 0 else "red"
        self.console.print(f"Savings change: [{color}]{change:+.1f}%[/{color}]")

    def _render_yearly_report(self, payload: dict, key: str) -> None:
        report = payload["yearly_report"]

        table = Table(title=f"Report {report['year']}", show_header=True, header_style="bold")
        table.add_column("Month")
        table.add_column("Savings", justify="right")
        table.add_column("Added", justify="right")
        table.add_column("Targets", justify="right")
        for month in report["monthly_data"]:
            table.add_row(
                month["month_name"],
                self.money(month["total_savings"]),
                str(month["items_added"]),
                str(month["targets_reached"]),
            )
        self.console.print(table)

        self.console.print(f"Total savings: {self.money(report['total_savings'])}")
        if report.get("best_month"):
            self.console.print(f"Best month: [bold]{report['best_month']['month_name']}[/bold]")

    def _render_efficiency(self, payload: dict, key: str) -> None:
        eff = payload["efficiency"]
        self.console.print("\n[bold]Tracking efficiency[/bold]")
        self.console.print(f"Items tracked: {eff['total_items']}")
        self.console.print(f"Update coverage: {eff['update_coverage']:.0%}")
        self.console.print(f"Updates per item: {eff['average_updates_per_item']:.1f}")
        self.console.print(f"Target reach rate: {eff['target_reach_rate']:.0%}")
        self.console.print(f"Average days to target: {eff['average_days_to_target']:.1f}")

    def _render_overview(self, payload: dict, key: str) -> None:
        overview = payload["overview"]
        period = payload.get("period", "monthly")

        table = Table(title=f"Savings ({period})", show_header=True, header_style="bold")
        table.add_column("Period start")
        table.add_column("Savings", justify="right")
        for bucket in overview.get(period, []):
            table.add_row(str(bucket["start"]), self.money(bucket["total_savings"]))
        self.console.print(table)

        if overview.get("by_category"):
            self.console.print("\n[dim]By category:[/dim]")
            for name, total in overview["by_category"].items():
                self.console.print(f"  {name}: {self.money(total)}")

        self.console.print(f"\nBiggest saving: {overview.get('biggest_saving') or '-'}")
        self.console.print(f"Most improved: {overview.get('most_improved') or '-'}")

    def _render_dashboard(self, payload: dict, key: str) -> None:
        dashboard = payload["dashboard"]
        self.console.print(f"Items: {dashboard['total_items']}")
        self.console.print(f"Total saved: [green]{self.money(dashboard['total_saved'])}[/green]")
        self.console.print(f"Estimated value: {self.money(dashboard['estimated_value'])}")
        self.console.print(f"Average drop: {dashboard['average_drop']:.0%}")

    def _render_alerts(self, payload: dict, key: str) -> None:
        alerts = payload["alerts"]
        if not alerts:
            self.console.print("[dim]No alerts right now[/dim]")

        colors = {4: "bold red", 3: "red", 2: "yellow", 1: "white"}
        for alert in alerts:
            color = colors.get(alert["priority"], "white")
            self.console.print(
                f"[{color}]●[/{color}] [bold]{alert['item_name']}[/bold]: "
                f"{alert['title']} - {alert['message']}"
            )

        for group, names in payload.get("groups", {}).items():
            if names:
                self.console.print(f"\n[bold]{group}[/bold] ({len(names)})")
                for name in names:
                    self.console.print(f"  • {name}")

    def _render_purchases(self, payload: dict, key: str) -> None:
        purchases = payload["purchases"]
        stats = payload.get("statistics", {})
        missed = payload.get("missed", {})

        if not purchases:
            self.console.print("[dim]No purchases recorded[/dim]")
            return

        table = Table(title="Purchases", show_header=True, header_style="bold")
        table.add_column("Date")
        table.add_column("Paid", justify="right")
        table.add_column("Saved", justify="right")
        table.add_column("Missed", justify="right")
        for purchase in purchases:
            saved = max(0.0, purchase["original_price"] - purchase["purchase_price"])
            miss = max(0.0, purchase["purchase_price"] - purchase["minimum_price_seen"])
            table.add_row(
                str(purchase["purchase_date"])[:10],
                self.money(purchase["purchase_price"]),
                self.money(saved),
                self.money(miss),
            )
        self.console.print(table)

        if stats:
            self.console.print(f"This month: {stats['this_month_purchases']} purchases")
            self.console.print(f"Total savings: {self.money(stats['total_savings'])}")
        if missed:
            self.console.print(
                f"Missed savings: {self.money(missed['total_missed_savings'])}"
            )

    def _render_named_list(self, payload: dict, key: str) -> None:
        entries = payload[key]
        if not entries:
            self.console.print(f"[dim]No {key} yet[/dim]")
            return
        for entry in entries:
            self.console.print(f"  [dim]{str(entry['id'])[:8]}[/dim] {entry['name']}")

    def _render_settings(self, payload: dict, key: str) -> None:
        for name, value in payload["settings"].items():
            self.console.print(f"  {name}: {value}")

    def error(self, message: str, error_code: str | None = None) -> None:
        """Output error message.

        Args:
            message: Error message
            error_code: Optional error code
        """
        if self.json_mode:
            output = {"success": False, "error": message}
            if error_code:
                output["error_code"] = error_code
            print(json.dumps(output))
        else:
            self.console.print(f"[red]✗ Error:[/red] {message}")

    def success(self, message: str, data: dict | None = None) -> None:
        """Output success message."""
        if self.json_mode:
            output: dict[str, Any] = {"success": True, "message": message}
            if data:
                output["data"] = data
            print(json.dumps(output, cls=JSONEncoder))
        else:
            self.console.print(f"[green]✓[/green] {message}")

    def warning(self, message: str) -> None:
        """Output warning message."""
        if self.json_mode:
            print(json.dumps({"warning": message}))
        else:
            self.console.print(f"[yellow]⚠[/yellow] {message}")
