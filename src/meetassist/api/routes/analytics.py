"""Analytics endpoints: stored per-period rows and the live dashboard."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, Query, Request

from src.meetassist.analytics.schemas import (
    AnalyticsFilter,
    AnalyticsList,
    AnalyticsSortField,
    Dashboard,
    DateRange,
)
from src.meetassist.analytics.windows import resolve_date_range
from src.meetassist.api.deps import get_current_user, get_state
from src.meetassist.schemas.common import SortOrder, UtcDatetime
from src.meetassist.users.schemas import User

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


def _get_analytics_repository(request: Request) -> Any:
    return get_state(request, "analytics_repository", "Analytics repository")


def analytics_filter(
    period_start: UtcDatetime | None = None,
    period_end: UtcDatetime | None = None,
    limit: int = Query(20, gt=0, le=500),
    offset: int = Query(0, ge=0),
    sort_by: AnalyticsSortField = AnalyticsSortField.PERIOD_START,
    sort_order: SortOrder = SortOrder.DESC,
) -> AnalyticsFilter:
    return AnalyticsFilter(
        period_start=period_start,
        period_end=period_end,
        limit=limit,
        offset=offset,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get("/meetings", response_model=AnalyticsList)
async def list_meeting_analytics(
    request: Request,
    filters: AnalyticsFilter = Depends(analytics_filter),
    user: User = Depends(get_current_user),
):
    rows, total = await _get_analytics_repository(request).list_analytics(user.id, filters)
    return AnalyticsList(analytics=rows, total_count=total)


@router.get("/dashboard", response_model=Dashboard)
async def get_dashboard(
    request: Request,
    date_range: DateRange = DateRange.MONTH,
    user: User = Depends(get_current_user),
):
    now = datetime.now(timezone.utc)
    start, end = resolve_date_range(date_range, now)
    return await _get_analytics_repository(request).get_dashboard(
        user.id, date_range, start, end, now
    )
