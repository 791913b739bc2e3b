"""API router -- aggregates all endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from src.meetassist.api.routes import (
    action_items,
    agent_templates,
    agents,
    analytics,
    auth,
    follow_up_emails,
    health,
    integrations,
    meetings,
    realtime,
    users,
)

router = APIRouter()

router.include_router(health.router)
router.include_router(auth.router)
router.include_router(users.router)
router.include_router(integrations.router)
router.include_router(agents.router)
router.include_router(agent_templates.router)
router.include_router(meetings.router)
router.include_router(action_items.router)
router.include_router(follow_up_emails.router)
router.include_router(analytics.router)
router.include_router(realtime.router)
