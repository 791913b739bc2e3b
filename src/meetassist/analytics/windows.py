"""Date-window and ratio helpers for the dashboard."""

from __future__ import annotations

from datetime import datetime, timedelta

from src.meetassist.analytics.schemas import DateRange


def resolve_date_range(date_range: DateRange, now: datetime) -> tuple[datetime, datetime]:
    """Return the (start, end) window for a preset, ending at now.

    week: the trailing seven days.
    month: midnight on the first of the current month.
    quarter: midnight on the first day of the current calendar quarter.
    """
    if date_range == DateRange.WEEK:
        return now - timedelta(days=7), now
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if date_range == DateRange.QUARTER:
        first_month = (now.month - 1) // 3 * 3 + 1
        return midnight.replace(month=first_month, day=1), now
    return midnight.replace(day=1), now


def completion_rate(total: int, completed: int) -> float:
    """Percentage of completed items, 0.0 when there are none."""
    if total <= 0:
        return 0.0
    return round(completed / total * 100, 2)
