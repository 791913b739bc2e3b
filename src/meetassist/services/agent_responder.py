"""Mock agent reply generation."""

from __future__ import annotations

import random
import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel

RESPONSES = [
    "I noticed we have an action item without a clear deadline. Should we set a specific date?",
    "Based on the discussion, it seems like we need to prioritize the technical review.",
    "Let me summarize the key points discussed so far for clarity.",
    "I can help track the action items mentioned in this discussion.",
]


class AgentReply(BaseModel):
    response_text: str
    confidence: float
    response_type: str
    timestamp: datetime


class AgentResponder:
    """Returns one of a few canned suggestions.

    Args:
        rng: Random source; pass a seeded instance for repeatable output.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    async def respond(
        self,
        agent_id: uuid.UUID,
        meeting_context: dict[str, Any] | None = None,
        trigger_type: str = "manual",
    ) -> AgentReply:
        return AgentReply(
            response_text=self._rng.choice(RESPONSES),
            confidence=0.87,
            response_type="suggestion",
            timestamp=datetime.now(timezone.utc),
        )
