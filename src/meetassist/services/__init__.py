"""Stand-ins for external intelligence providers.

Each service exposes the async interface a real integration would
(calendar sync, speech-to-text, summarization, mail delivery, agent
replies) and returns canned payloads. Instances are created once at
startup and stored on app.state so tests can swap them.
"""

from src.meetassist.services.agent_responder import AgentReply, AgentResponder
from src.meetassist.services.calendar import CalendarClient
from src.meetassist.services.email import EmailSender
from src.meetassist.services.summarizer import Summarizer
from src.meetassist.services.transcription import TranscriptionResult, Transcriber

__all__ = [
    "AgentReply",
    "AgentResponder",
    "CalendarClient",
    "EmailSender",
    "Summarizer",
    "TranscriptionResult",
    "Transcriber",
]
