"""FastAPI application factory.

Creates the app with logging middleware, metrics middleware, CORS,
Sentry, the error envelope handlers, lifespan events that initialize the
database and place repositories and stub services on app.state, and the
API router.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import Response

from src.meetassist.action_items.repository import ActionItemRepository
from src.meetassist.agents.repository import AgentRepository
from src.meetassist.analytics.repository import AnalyticsRepository
from src.meetassist.api.middleware.logging import LoggingMiddleware, configure_structlog
from src.meetassist.api.router import router as api_router
from src.meetassist.config import get_settings
from src.meetassist.core.database import close_db, get_session, init_db
from src.meetassist.core.errors import register_exception_handlers
from src.meetassist.core.monitoring import MetricsMiddleware, get_metrics_response, init_sentry
from src.meetassist.follow_ups.repository import FollowUpEmailRepository
from src.meetassist.integrations.repository import IntegrationRepository
from src.meetassist.meetings.repository import MeetingRepository
from src.meetassist.realtime.manager import ConnectionManager
from src.meetassist.services import (
    AgentResponder,
    CalendarClient,
    EmailSender,
    Summarizer,
    Transcriber,
)
from src.meetassist.users.repository import UserRepository


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: init DB and Sentry on startup, close on shutdown."""
    log = structlog.get_logger(__name__)
    settings = get_settings()
    configure_structlog()

    if settings.SENTRY_DSN:
        init_sentry(dsn=settings.SENTRY_DSN, environment=settings.ENVIRONMENT.value)

    await init_db()

    # ── Repositories ─────────────────────────────────────────────────────
    app.state.user_repository = UserRepository(session_factory=get_session)
    app.state.integration_repository = IntegrationRepository(session_factory=get_session)
    app.state.agent_repository = AgentRepository(session_factory=get_session)
    app.state.meeting_repository = MeetingRepository(session_factory=get_session)
    app.state.action_item_repository = ActionItemRepository(session_factory=get_session)
    app.state.follow_up_email_repository = FollowUpEmailRepository(
        session_factory=get_session
    )
    app.state.analytics_repository = AnalyticsRepository(session_factory=get_session)

    # ── Stub services and realtime ───────────────────────────────────────
    app.state.calendar_client = CalendarClient()
    app.state.transcriber = Transcriber()
    app.state.summarizer = Summarizer()
    app.state.email_sender = EmailSender()
    app.state.agent_responder = AgentResponder()
    app.state.connection_manager = ConnectionManager()

    log.info("app.started", environment=settings.ENVIRONMENT.value)

    yield

    await close_db()
    log.info("app.stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="MeetAssist API",
        version="0.1.0",
        description="Meeting assistant backend with configurable AI agents",
        lifespan=lifespan,
    )

    # Middleware is added in reverse order (last added = outermost)

    if settings.CORS_ALLOWED_ORIGINS == "*":
        origins = ["*"]
    else:
        origins = [o.strip() for o in settings.CORS_ALLOWED_ORIGINS.split(",")]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(LoggingMiddleware)

    # Metrics middleware (outermost -- records Prometheus metrics for all requests)
    app.add_middleware(MetricsMiddleware)

    register_exception_handlers(app)

    app.include_router(api_router)

    @app.get("/metrics", include_in_schema=False)
    async def metrics(request: Request) -> Response:
        """Prometheus metrics endpoint."""
        return get_metrics_response()

    return app


# Module-level app for uvicorn
app = create_app()
