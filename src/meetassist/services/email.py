"""Mock mail transport."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import structlog

from src.meetassist.follow_ups.schemas import DeliveryReceipt, FollowUpEmail

logger = structlog.get_logger(__name__)


def split_recipients(recipients: str) -> list[str]:
    """Split a comma-separated recipient list, dropping blanks."""
    return [r.strip() for r in recipients.split(",") if r.strip()]


class EmailSender:
    """Pretends every send succeeds."""

    async def send(self, email: FollowUpEmail) -> DeliveryReceipt:
        now = datetime.now(timezone.utc)
        receipt = DeliveryReceipt(
            email_id=email.id,
            delivery_status="sent",
            sent_at=now,
            recipient_count=len(split_recipients(email.recipients)),
            message_id=f"msg_{uuid.uuid4().hex}",
        )
        logger.info(
            "email.delivered",
            email_id=str(email.id),
            recipient_count=receipt.recipient_count,
            message_id=receipt.message_id,
        )
        return receipt
