"""Analytics repository -- stored analytics rows and dashboard aggregation.

Dashboard figures are computed live from meetings, action items, and
agent assignments rather than read from meeting_analytics.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator, Callable
from datetime import datetime

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.meetassist.action_items.models import ActionItemModel
from src.meetassist.action_items.repository import _model_to_action_item
from src.meetassist.action_items.schemas import ActionItemStatus
from src.meetassist.agents.models import AgentModel
from src.meetassist.analytics.models import MeetingAnalyticsModel
from src.meetassist.analytics.schemas import (
    AgentUsage,
    AnalyticsFilter,
    Dashboard,
    DateRange,
    MeetingAnalytics,
)
from src.meetassist.analytics.windows import completion_rate
from src.meetassist.core.query import apply_paging, count_rows
from src.meetassist.meetings.models import MeetingAgentModel, MeetingModel
from src.meetassist.meetings.repository import _model_to_meeting
from src.meetassist.meetings.schemas import MeetingStatus

UPCOMING_LIMIT = 5
RECENT_ACTION_ITEMS_LIMIT = 10


def _model_to_analytics(model: MeetingAnalyticsModel) -> MeetingAnalytics:
    rate = model.action_item_completion_rate
    return MeetingAnalytics(
        id=model.id,
        user_id=model.user_id,
        total_meeting_time=model.total_meeting_time,
        participation_distribution=model.participation_distribution,
        action_item_completion_rate=float(rate) if rate is not None else None,
        meeting_sentiment_trends=model.meeting_sentiment_trends,
        period_start=model.period_start,
        period_end=model.period_end,
        created_at=model.created_at,
        updated_at=model.updated_at or model.created_at,
    )


_SORT_COLUMNS = {
    "period_start": MeetingAnalyticsModel.period_start,
    "created_at": MeetingAnalyticsModel.created_at,
}


class AnalyticsRepository:
    """Read-side queries for analytics.

    Args:
        session_factory: Async callable that yields AsyncSession instances.
    """

    def __init__(
        self, session_factory: Callable[..., AsyncGenerator[AsyncSession, None]]
    ) -> None:
        self._session_factory = session_factory

    async def list_analytics(
        self, user_id: uuid.UUID, filters: AnalyticsFilter
    ) -> tuple[list[MeetingAnalytics], int]:
        async for session in self._session_factory():
            stmt = select(MeetingAnalyticsModel).where(
                MeetingAnalyticsModel.user_id == user_id
            )
            if filters.period_start:
                stmt = stmt.where(MeetingAnalyticsModel.period_start >= filters.period_start)
            if filters.period_end:
                stmt = stmt.where(MeetingAnalyticsModel.period_end <= filters.period_end)
            total = await count_rows(session, stmt)
            stmt = apply_paging(
                stmt,
                _SORT_COLUMNS[filters.sort_by.value],
                filters.sort_order,
                filters.limit,
                filters.offset,
                tiebreak=MeetingAnalyticsModel.id,
            )
            result = await session.execute(stmt)
            return [_model_to_analytics(m) for m in result.scalars().all()], total

    async def get_dashboard(
        self,
        user_id: uuid.UUID,
        date_range: DateRange,
        start: datetime,
        end: datetime,
        now: datetime,
    ) -> Dashboard:
        """Aggregate dashboard figures for [start, end]."""
        async for session in self._session_factory():
            total_meetings = await session.scalar(
                select(func.count(MeetingModel.id)).where(
                    MeetingModel.user_id == user_id,
                    MeetingModel.created_at >= start,
                    MeetingModel.created_at <= end,
                )
            )

            total_seconds = await session.scalar(
                select(
                    func.coalesce(
                        func.sum(
                            func.extract("epoch", MeetingModel.end_time - MeetingModel.start_time)
                        ),
                        0,
                    )
                ).where(
                    MeetingModel.user_id == user_id,
                    MeetingModel.status == MeetingStatus.COMPLETED.value,
                    MeetingModel.start_time >= start,
                    MeetingModel.end_time <= end,
                )
            )

            items_row = (
                await session.execute(
                    select(
                        func.count(ActionItemModel.id),
                        func.count(
                            case(
                                (ActionItemModel.status == ActionItemStatus.COMPLETED.value, 1)
                            )
                        ),
                    )
                    .join(MeetingModel, MeetingModel.id == ActionItemModel.meeting_id)
                    .where(
                        MeetingModel.user_id == user_id,
                        ActionItemModel.created_at >= start,
                        ActionItemModel.created_at <= end,
                    )
                )
            ).one()

            upcoming = await session.execute(
                select(MeetingModel)
                .where(
                    MeetingModel.user_id == user_id,
                    MeetingModel.status == MeetingStatus.SCHEDULED.value,
                    MeetingModel.start_time > now,
                )
                .order_by(MeetingModel.start_time.asc())
                .limit(UPCOMING_LIMIT)
            )

            recent_items = await session.execute(
                select(ActionItemModel)
                .join(MeetingModel, MeetingModel.id == ActionItemModel.meeting_id)
                .where(
                    MeetingModel.user_id == user_id,
                    ActionItemModel.status != ActionItemStatus.COMPLETED.value,
                )
                .order_by(ActionItemModel.deadline.asc())
                .limit(RECENT_ACTION_ITEMS_LIMIT)
            )

            # Agents with no assignments in the window still appear with 0
            windowed_meetings = (
                select(MeetingAgentModel.agent_id, MeetingAgentModel.meeting_id)
                .join(MeetingModel, MeetingModel.id == MeetingAgentModel.meeting_id)
                .where(
                    MeetingModel.created_at >= start,
                    MeetingModel.created_at <= end,
                )
                .subquery()
            )
            usage_rows = await session.execute(
                select(
                    AgentModel.id,
                    AgentModel.name,
                    func.count(windowed_meetings.c.meeting_id).label("meeting_count"),
                )
                .outerjoin(windowed_meetings, windowed_meetings.c.agent_id == AgentModel.id)
                .where(AgentModel.user_id == user_id)
                .group_by(AgentModel.id, AgentModel.name)
                .order_by(func.count(windowed_meetings.c.meeting_id).desc(), AgentModel.name)
            )

            total_items, completed_items = items_row
            return Dashboard(
                date_range=date_range,
                period_start=start,
                period_end=end,
                total_meetings=int(total_meetings or 0),
                total_meeting_time=int(float(total_seconds or 0) // 60),
                action_item_completion_rate=completion_rate(
                    int(total_items or 0), int(completed_items or 0)
                ),
                upcoming_meetings=[_model_to_meeting(m) for m in upcoming.scalars().all()],
                recent_action_items=[
                    _model_to_action_item(m) for m in recent_items.scalars().all()
                ],
                agent_usage=[
                    AgentUsage(agent_id=row[0], agent_name=row[1], meeting_count=row[2])
                    for row in usage_rows.all()
                ],
            )
