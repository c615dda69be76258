from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel


class Intent(str, Enum):
    """What the user is asking the coach for; selects the prompt template."""
    GREETING = "greeting"
    GENERAL = "general"
    REPORT = "report"
    QUESTION = "question"


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str
    created_at: datetime


class CoachReply(BaseModel):
    content: str
    intent: Intent
    offers_report: bool = False
    needs_disclaimer: bool = False
