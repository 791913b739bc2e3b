"""Select-statement helpers shared by the repositories."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.meetassist.schemas.common import SortOrder


async def count_rows(session: AsyncSession, stmt: Select) -> int:
    """Total rows matched by a filtered select, ignoring order and paging."""
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    result = await session.execute(count_stmt)
    return int(result.scalar_one())


def apply_paging(
    stmt: Select,
    column: Any,
    order: SortOrder,
    limit: int,
    offset: int,
    tiebreak: Any = None,
) -> Select:
    """Order by column (NULLs last) and slice."""
    ordered = column.asc().nulls_last() if order == SortOrder.ASC else column.desc().nulls_last()
    stmt = stmt.order_by(ordered)
    if tiebreak is not None:
        stmt = stmt.order_by(tiebreak)
    return stmt.limit(limit).offset(offset)
