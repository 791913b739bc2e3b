"""Initial schema for users, agents, meetings, and meeting artifacts.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19

Creates every application table:
- users, user_preferences, password_reset_tokens
- calendar_integrations
- ai_agents, agent_templates
- meetings and the tables hanging off a meeting (meeting_agents,
  meeting_participants, meeting_summaries, meeting_transcripts,
  meeting_recordings, action_items, follow_up_emails)
- meeting_analytics

Child rows cascade on delete of their user or meeting.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column(
        "id",
        UUID(as_uuid=True),
        primary_key=True,
        server_default=sa.text("gen_random_uuid()"),
    )


def _fk(name: str, target: str, **kwargs) -> sa.Column:
    return sa.Column(
        name,
        UUID(as_uuid=True),
        sa.ForeignKey(target, ondelete="CASCADE"),
        nullable=False,
        **kwargs,
    )


def _timestamps(updated: bool = True) -> list[sa.Column]:
    columns = [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        )
    ]
    if updated:
        columns.append(
            sa.Column(
                "updated_at",
                sa.DateTime(timezone=True),
                server_default=sa.text("now()"),
                nullable=False,
            )
        )
    return columns


def upgrade() -> None:
    # ── users ────────────────────────────────────────────────────────────

    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("profile_picture_url", sa.String(500), nullable=True),
        sa.Column(
            "email_verified", sa.Boolean(), server_default=sa.text("false"), nullable=False
        ),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "user_preferences",
        _id(),
        _fk("user_id", "users.id", unique=True),
        sa.Column(
            "email_notifications", sa.Boolean(), server_default=sa.text("true"), nullable=False
        ),
        sa.Column(
            "push_notifications", sa.Boolean(), server_default=sa.text("true"), nullable=False
        ),
        sa.Column(
            "follow_up_reminders", sa.Boolean(), server_default=sa.text("true"), nullable=False
        ),
        *_timestamps(),
    )

    op.create_table(
        "password_reset_tokens",
        _id(),
        _fk("user_id", "users.id"),
        sa.Column("token", sa.String(255), nullable=False, unique=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
    )

    # ── calendar_integrations ────────────────────────────────────────────

    op.create_table(
        "calendar_integrations",
        _id(),
        _fk("user_id", "users.id"),
        sa.Column("provider", sa.String(255), nullable=False),
        sa.Column("provider_user_id", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("access_token", sa.String(500), nullable=True),
        sa.Column("refresh_token", sa.String(500), nullable=True),
        sa.Column(
            "is_connected", sa.Boolean(), server_default=sa.text("false"), nullable=False
        ),
        *_timestamps(),
    )
    op.create_index(
        "ix_calendar_integrations_user_id", "calendar_integrations", ["user_id"]
    )

    # ── agents ───────────────────────────────────────────────────────────

    op.create_table(
        "ai_agents",
        _id(),
        _fk("user_id", "users.id"),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("meeting_type", sa.String(255), nullable=False),
        sa.Column("status", sa.String(50), server_default=sa.text("'active'"), nullable=False),
        sa.Column(
            "participation_level",
            sa.String(50),
            server_default=sa.text("'observer'"),
            nullable=False,
        ),
        sa.Column("primary_objectives", sa.Text(), nullable=False),
        sa.Column("voice_settings", sa.Text(), nullable=True),
        sa.Column("custom_instructions", sa.Text(), nullable=True),
        sa.Column("speaking_triggers", sa.Text(), nullable=True),
        sa.Column("note_taking_focus", sa.Text(), nullable=True),
        sa.Column("follow_up_templates", sa.Text(), nullable=True),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_ai_agents_user_id", "ai_agents", ["user_id"])

    op.create_table(
        "agent_templates",
        _id(),
        _fk("user_id", "users.id"),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("meeting_type", sa.String(255), nullable=False),
        sa.Column("participation_level", sa.String(50), nullable=False),
        sa.Column("primary_objectives", sa.Text(), nullable=False),
        sa.Column("voice_settings", sa.Text(), nullable=True),
        sa.Column("custom_instructions", sa.Text(), nullable=True),
        sa.Column("is_public", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_agent_templates_user_id", "agent_templates", ["user_id"])

    # ── meetings ─────────────────────────────────────────────────────────

    op.create_table(
        "meetings",
        _id(),
        _fk("user_id", "users.id"),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("calendar_event_id", sa.String(255), nullable=True),
        sa.Column("meeting_type", sa.String(255), nullable=False),
        sa.Column("agenda", sa.Text(), nullable=True),
        sa.Column("desired_outcomes", sa.Text(), nullable=True),
        sa.Column("special_instructions", sa.Text(), nullable=True),
        sa.Column(
            "status", sa.String(50), server_default=sa.text("'scheduled'"), nullable=False
        ),
        *_timestamps(),
    )
    op.create_index("ix_meetings_user_id", "meetings", ["user_id"])
    op.create_index("ix_meetings_user_start", "meetings", ["user_id", "start_time"])

    op.create_table(
        "meeting_agents",
        _id(),
        _fk("meeting_id", "meetings.id"),
        _fk("agent_id", "ai_agents.id"),
        sa.Column(
            "join_status", sa.String(50), server_default=sa.text("'pending'"), nullable=False
        ),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("left_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("meeting_id", "agent_id", name="uq_meeting_agent"),
    )
    op.create_index("ix_meeting_agents_meeting_id", "meeting_agents", ["meeting_id"])
    op.create_index("ix_meeting_agents_agent_id", "meeting_agents", ["agent_id"])

    op.create_table(
        "meeting_participants",
        _id(),
        _fk("meeting_id", "meetings.id"),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("role", sa.String(255), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index(
        "ix_meeting_participants_meeting_id", "meeting_participants", ["meeting_id"]
    )

    op.create_table(
        "meeting_summaries",
        _id(),
        _fk("meeting_id", "meetings.id", unique=True),
        sa.Column("key_discussion_points", sa.Text(), nullable=False),
        sa.Column("decisions_made", sa.Text(), nullable=True),
        sa.Column("sentiment_analysis", sa.Text(), nullable=True),
        sa.Column("participant_engagement", sa.Text(), nullable=True),
        sa.Column("generated_summary", sa.Text(), nullable=False),
        sa.Column("edited_summary", sa.Text(), nullable=True),
        sa.Column("generated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("edited_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "is_finalized", sa.Boolean(), server_default=sa.text("false"), nullable=False
        ),
        *_timestamps(),
    )

    op.create_table(
        "meeting_transcripts",
        _id(),
        _fk("meeting_id", "meetings.id"),
        sa.Column("speaker", sa.String(255), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(updated=False),
    )
    op.create_index(
        "ix_meeting_transcripts_meeting_id", "meeting_transcripts", ["meeting_id"]
    )

    op.create_table(
        "meeting_recordings",
        _id(),
        _fk("meeting_id", "meetings.id", unique=True),
        sa.Column("recording_url", sa.String(500), nullable=True),
        sa.Column(
            "storage_duration", sa.Integer(), server_default=sa.text("30"), nullable=False
        ),
        sa.Column("file_size", sa.BigInteger(), nullable=True),
        *_timestamps(updated=False),
    )

    # ── action items and follow-ups ──────────────────────────────────────

    op.create_table(
        "action_items",
        _id(),
        _fk("meeting_id", "meetings.id"),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("assignee", sa.String(255), nullable=False),
        sa.Column("deadline", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(50), server_default=sa.text("'pending'"), nullable=False),
        sa.Column("comments", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_action_items_meeting_id", "action_items", ["meeting_id"])

    op.create_table(
        "follow_up_emails",
        _id(),
        _fk("meeting_id", "meetings.id"),
        sa.Column("template_id", sa.String(255), nullable=True),
        sa.Column("recipients", sa.Text(), nullable=False),
        sa.Column("subject", sa.String(500), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("scheduled_send_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(50), server_default=sa.text("'draft'"), nullable=False),
        sa.Column("attachments", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_follow_up_emails_meeting_id", "follow_up_emails", ["meeting_id"])

    # ── analytics ────────────────────────────────────────────────────────

    op.create_table(
        "meeting_analytics",
        _id(),
        _fk("user_id", "users.id"),
        sa.Column(
            "total_meeting_time", sa.Integer(), server_default=sa.text("0"), nullable=False
        ),
        sa.Column("participation_distribution", sa.Text(), nullable=True),
        sa.Column("action_item_completion_rate", sa.Numeric(5, 2), nullable=True),
        sa.Column("meeting_sentiment_trends", sa.Text(), nullable=True),
        sa.Column("period_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("period_end", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_meeting_analytics_user_id", "meeting_analytics", ["user_id"])


def downgrade() -> None:
    for table in (
        "meeting_analytics",
        "follow_up_emails",
        "action_items",
        "meeting_recordings",
        "meeting_transcripts",
        "meeting_summaries",
        "meeting_participants",
        "meeting_agents",
        "meetings",
        "agent_templates",
        "ai_agents",
        "calendar_integrations",
        "password_reset_tokens",
        "user_preferences",
        "users",
    ):
        op.drop_table(table)
