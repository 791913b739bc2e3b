"""Calendar integration endpoints, including a (mock) sync trigger."""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, Request, Response, status

from src.meetassist.api.deps import get_current_user, get_state
from src.meetassist.core.errors import no_updates, not_found
from src.meetassist.integrations.schemas import (
    CalendarIntegration,
    CalendarIntegrationCreate,
    CalendarIntegrationList,
    CalendarIntegrationUpdate,
    CalendarSyncResult,
)
from src.meetassist.users.schemas import User

router = APIRouter(prefix="/api/integrations/calendar", tags=["integrations"])


def _get_integration_repository(request: Request) -> Any:
    return get_state(request, "integration_repository", "Integration repository")


def _not_found():
    return not_found("Calendar integration not found", "INTEGRATION_NOT_FOUND")


@router.get("", response_model=CalendarIntegrationList)
async def list_integrations(request: Request, user: User = Depends(get_current_user)):
    integrations = await _get_integration_repository(request).list_integrations(user.id)
    return CalendarIntegrationList(integrations=integrations, total_count=len(integrations))


@router.post("", response_model=CalendarIntegration, status_code=status.HTTP_201_CREATED)
async def create_integration(
    body: CalendarIntegrationCreate,
    request: Request,
    user: User = Depends(get_current_user),
):
    return await _get_integration_repository(request).create_integration(user.id, body)


@router.put("/{integration_id}", response_model=CalendarIntegration)
async def update_integration(
    integration_id: uuid.UUID,
    body: CalendarIntegrationUpdate,
    request: Request,
    user: User = Depends(get_current_user),
):
    changes = body.model_dump(exclude_none=True)
    if not changes:
        raise no_updates()
    integration = await _get_integration_repository(request).update_integration(
        user.id, integration_id, changes
    )
    if integration is None:
        raise _not_found()
    return integration


@router.delete("/{integration_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_integration(
    integration_id: uuid.UUID,
    request: Request,
    user: User = Depends(get_current_user),
):
    deleted = await _get_integration_repository(request).delete_integration(
        user.id, integration_id
    )
    if not deleted:
        raise _not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{integration_id}/sync", response_model=CalendarSyncResult)
async def sync_integration(
    integration_id: uuid.UUID,
    request: Request,
    user: User = Depends(get_current_user),
):
    """Pull upcoming events from the provider."""
    integration = await _get_integration_repository(request).get_integration(
        user.id, integration_id
    )
    if integration is None:
        raise _not_found()
    calendar_client = get_state(request, "calendar_client", "Calendar client")
    return await calendar_client.fetch_events(integration)
