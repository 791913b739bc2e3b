"""Schemas and field types shared across domains."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes from clients as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ListParams(BaseModel):
    """Pagination and ordering common to all search endpoints."""

    limit: int = Field(20, gt=0, le=500)
    offset: int = Field(0, ge=0)
    sort_order: SortOrder = SortOrder.DESC
