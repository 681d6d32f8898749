# Role: Per-session record. Mode picks the turn driver (flow engine vs assisted collaborator); status flips to
# completed exactly once; current_question_id is only tracked for scripted sessions.

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ConversationMode(str, Enum):
    SCRIPTED = "scripted"
    ASSISTED = "assisted"


class ConversationStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class Conversation(BaseModel):
    id: int
    user_id: int
    mode: ConversationMode
    status: ConversationStatus = ConversationStatus.ACTIVE

    # Key line: None for assisted sessions; the scripted node the user is currently answering otherwise.
    current_question_id: Optional[int] = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_active(self) -> bool:
        return self.status == ConversationStatus.ACTIVE
