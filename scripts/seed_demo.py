#!/usr/bin/env python3
"""Seed a development database with demo users, agents, and meetings.

Goes through the application repositories, so passwords are hashed and
preferences rows are created exactly as registration would. Users whose
email already exists are skipped; nothing is updated.

Usage:
    python scripts/seed_demo.py
    python scripts/seed_demo.py --password secret123 --create-tables
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from datetime import datetime, timedelta, timezone

# Ensure project root is on sys.path so we can import src modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dotenv import load_dotenv  # noqa: E402

# Load .env from project root
load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))

logger = logging.getLogger(__name__)

DEMO_USERS = [
    ("alice.johnson@example.com", "Alice Johnson"),
    ("bob.smith@example.com", "Bob Smith"),
    ("carol.davis@example.com", "Carol Davis"),
]

DEMO_AGENTS = [
    {
        "name": "Project Manager Assistant",
        "meeting_type": "project_planning",
        "participation_level": "active_participant",
        "primary_objectives": "Track action items, ensure meeting stays on agenda, identify blockers",
        "voice_settings": '{"voice": "professional", "tone": "neutral"}',
    },
    {
        "name": "Technical Review Specialist",
        "meeting_type": "technical_review",
        "status": "inactive",
        "participation_level": "passive_observer",
        "primary_objectives": "Track technical discussions, note architecture decisions",
    },
]

DEMO_MEETINGS = [
    ("Q1 Project Planning Session", "project_planning", 1, 90),
    ("Product Launch Retrospective", "retrospective", 3, 90),
    ("Architecture Review", "technical_review", 7, 60),
]


async def seed(password: str, create_tables: bool) -> None:
    """Create demo data for every user in DEMO_USERS that does not exist yet.

    Args:
        password: Plaintext password given to every demo user.
        create_tables: Run metadata create_all first (for databases that
            have not been migrated).
    """
    from src.meetassist.action_items.repository import ActionItemRepository
    from src.meetassist.action_items.schemas import ActionItemCreate
    from src.meetassist.agents.repository import AgentRepository
    from src.meetassist.agents.schemas import AgentCreate, AgentTemplateCreate
    from src.meetassist.core.database import close_db, get_session, init_db
    from src.meetassist.core.security import hash_password
    from src.meetassist.meetings.repository import MeetingRepository
    from src.meetassist.meetings.schemas import MeetingCreate, ParticipantCreate
    from src.meetassist.users.repository import UserRepository

    if create_tables:
        await init_db()

    users = UserRepository(session_factory=get_session)
    agents = AgentRepository(session_factory=get_session)
    meetings = MeetingRepository(session_factory=get_session)
    action_items = ActionItemRepository(session_factory=get_session)

    now = datetime.now(timezone.utc).replace(minute=0, second=0, microsecond=0)
    try:
        for email, full_name in DEMO_USERS:
            if await users.get_user_by_email(email) is not None:
                logger.info("Skipping existing user %s", email)
                continue

            user = await users.create_user(email, full_name, hash_password(password))
            created_agents = [
                await agents.create_agent(user.id, AgentCreate(**spec)) for spec in DEMO_AGENTS
            ]
            await agents.create_template(
                user.id,
                AgentTemplateCreate(
                    name="Standup Facilitator",
                    meeting_type="standup",
                    primary_objectives="Keep updates short and capture blockers",
                    is_public=True,
                ),
            )

            for title, meeting_type, days_ahead, minutes in DEMO_MEETINGS:
                start = now + timedelta(days=days_ahead)
                meeting = await meetings.create_meeting(
                    user.id,
                    MeetingCreate(
                        title=title,
                        meeting_type=meeting_type,
                        start_time=start,
                        end_time=start + timedelta(minutes=minutes),
                    ),
                )
                await meetings.assign_agent(meeting.id, created_agents[0].id)
                await meetings.add_participant(
                    meeting.id, ParticipantCreate(name=full_name, email=email, role="organizer")
                )
                await action_items.create_action_item(
                    ActionItemCreate(
                        meeting_id=meeting.id,
                        description=f"Circulate notes for {title}",
                        assignee=full_name,
                        deadline=start + timedelta(days=2),
                    )
                )

            print(f"Seeded {email}: {len(created_agents)} agents, {len(DEMO_MEETINGS)} meetings")
    finally:
        await close_db()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed demo data for local development")
    parser.add_argument(
        "--password", default="password123", help="Password for every demo user"
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create tables from model metadata before seeding",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    asyncio.run(seed(args.password, args.create_tables))


if __name__ == "__main__":
    main()
