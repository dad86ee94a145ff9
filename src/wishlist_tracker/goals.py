"""User goals measured over fixed time windows."""

import calendar
import logging
from datetime import datetime, timedelta
from uuid import UUID

from .data_store import DataStoreProtocol
from .models import Goal, GoalPeriod, GoalType, WishlistItem

logger = logging.getLogger(__name__)


class GoalNotFoundError(Exception):
    """Raised when a goal is not found."""

    def __init__(self, goal_id: UUID | str):
        self.goal_id = goal_id
        super().__init__(f"Goal with ID '{goal_id}' not found")


def _add_months(moment: datetime, months: int) -> datetime:
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def period_end(start: datetime, period: GoalPeriod) -> datetime:
    """End of a goal window starting at ``start``."""
    if period == GoalPeriod.DAILY:
        return start + timedelta(days=1)
    if period == GoalPeriod.WEEKLY:
        return start + timedelta(weeks=1)
    if period == GoalPeriod.MONTHLY:
        return _add_months(start, 1)
    return _add_months(start, 12)


def measure_goal(goal: Goal, items: list[WishlistItem]) -> float:
    """Current value of a goal computed from items inside its window."""

    def in_window(moment: datetime) -> bool:
        return goal.start_date <= moment <= goal.end_date

    if goal.type == GoalType.UPDATES:
        return float(
            sum(1 for item in items for update in item.price_updates if in_window(update.date))
        )

    added = [item for item in items if in_window(item.date_added)]
    if goal.type == GoalType.SAVINGS:
        return sum(item.savings for item in added)
    return float(sum(1 for item in added if item.reached_target))


class GoalTracker:
    """Creates goals and advances their progress from wishlist data."""

    def __init__(self, data_store: DataStoreProtocol):
        self.data_store = data_store

    def goals(self) -> list[Goal]:
        return self.data_store.load_goals()

    def create_goal(
        self,
        title: str,
        goal_type: GoalType,
        target_value: float,
        period: GoalPeriod = GoalPeriod.MONTHLY,
        now: datetime | None = None,
    ) -> Goal:
        """Create a goal whose window starts now and never moves.

        Args:
            title: Display title
            goal_type: What the goal measures
            target_value: Value at which the goal completes
            period: Window length
            now: Window start, defaults to the current time

        Returns:
            The stored goal
        """
        start = now or datetime.now()
        goal = Goal(
            title=title,
            type=goal_type,
            target_value=target_value,
            period=period,
            start_date=start,
            end_date=period_end(start, period),
            created_at=start,
        )
        self.data_store.save_goal(goal)
        logger.info("Created %s goal %s ending %s", goal.type.value, goal.id, goal.end_date)
        return goal

    def delete_goal(self, goal_id: UUID | str) -> Goal:
        """Delete a goal on explicit request.

        Raises:
            GoalNotFoundError: If the goal does not exist
        """
        goal_id = goal_id if isinstance(goal_id, UUID) else UUID(goal_id)
        for goal in self.data_store.load_goals():
            if goal.id == goal_id:
                self.data_store.delete_goal(goal_id)
                return goal
        raise GoalNotFoundError(goal_id)

    def refresh(self, now: datetime | None = None) -> list[Goal]:
        """Recompute active goals and complete those that reached their target.

        Completed and out-of-window goals are left untouched.

        Args:
            now: Evaluation time, defaults to the current time

        Returns:
            Goals that completed during this pass
        """
        now = now or datetime.now()
        active = [goal for goal in self.data_store.load_goals() if goal.is_active(now)]
        if not active:
            return []

        items = self.data_store.load_items(include_archived=False)
        completed = []
        for goal in active:
            goal.current_value = measure_goal(goal, items)
            if goal.current_value >= goal.target_value:
                goal.is_completed = True
                completed.append(goal)
                logger.info("Goal %s completed", goal.id)

        self.data_store.save_goals(active)
        return completed
