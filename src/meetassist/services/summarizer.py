"""Mock meeting summarizer."""

from __future__ import annotations

import json
import uuid

from src.meetassist.meetings.schemas import Participant, SummaryDraft, Transcript


class Summarizer:
    """Produces a fixed summary.

    Engagement is keyed by the meeting's actual participants when there
    are any, so the output at least names the right people.
    """

    processing_time = 2.5

    async def summarize(
        self,
        meeting_id: uuid.UUID,
        transcripts: list[Transcript],
        participants: list[Participant],
    ) -> SummaryDraft:
        names = [p.name for p in participants] or ["John Doe", "Jane Smith", "Mike Johnson"]
        engagement = {
            name.replace(" ", "_"): "high" if i % 2 == 0 else "medium"
            for i, name in enumerate(names)
        }
        return SummaryDraft(
            key_discussion_points=(
                "1. Project timeline review\n"
                "2. Resource allocation discussion\n"
                "3. Client feedback analysis\n"
                "4. Next milestone planning"
            ),
            decisions_made=(
                "1. Extend project deadline by 2 weeks\n"
                "2. Hire additional developer\n"
                "3. Schedule weekly client check-ins"
            ),
            sentiment_analysis=json.dumps(
                {
                    "overall": "positive",
                    "key_moments": [
                        {"time": "10:15", "sentiment": "concerned"},
                        {"time": "10:45", "sentiment": "optimistic"},
                    ],
                }
            ),
            participant_engagement=json.dumps(engagement),
            generated_summary=(
                "The team reviewed project progress and made key decisions regarding "
                "timeline and resources. Overall positive sentiment with strong "
                f"engagement from participants across {len(transcripts)} transcript entries."
            ),
            processing_time=self.processing_time,
        )
