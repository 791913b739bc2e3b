"""Mock speech-to-text."""

from __future__ import annotations

import random
import uuid
from datetime import datetime, timezone

from pydantic import BaseModel

SPEAKERS = ["John Doe", "Jane Smith", "AI Agent", "Mike Johnson"]

PHRASES = [
    "Let's start with the project updates.",
    "The backend implementation is progressing well.",
    "We need to discuss the upcoming deadline.",
    "The client feedback has been positive so far.",
    "Are there any blockers we need to address?",
]


class TranscriptionResult(BaseModel):
    transcript_id: uuid.UUID
    speaker: str
    content: str
    confidence: float
    timestamp: datetime


class Transcriber:
    """Ignores the audio and picks a speaker and phrase at random.

    Args:
        rng: Random source; pass a seeded instance for repeatable output.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    async def transcribe(self, meeting_id: uuid.UUID, audio_chunk: str | None) -> TranscriptionResult:
        return TranscriptionResult(
            transcript_id=uuid.uuid4(),
            speaker=self._rng.choice(SPEAKERS),
            content=self._rng.choice(PHRASES),
            confidence=0.95,
            timestamp=datetime.now(timezone.utc),
        )
