# Role: One transcript entry of a conversation (role + content + timestamp). Stored by the conversation store
# in insertion order and returned oldest-first by get-session.

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

Role = Literal["user", "assistant", "system"]


class Message(BaseModel):
    id: int
    conversation_id: int
    role: Role
    content: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
