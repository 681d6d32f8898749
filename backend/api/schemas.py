# Role: Wire shapes shared by the routers. Fields are snake_case in Python and camelCase on the wire; every
# response uses the {"success": ..., "data": ...} envelope.

from __future__ import annotations

from datetime import datetime
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from backend.models.message import Message
from backend.models.user import User

T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Envelope(CamelModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class UserOut(CamelModel):
    id: int
    email: str
    name: str
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls(id=user.id, email=user.email, name=user.name, created_at=user.created_at)


class UserSummary(CamelModel):
    id: int
    name: str
    email: str


class MessageOut(CamelModel):
    id: int
    role: str
    content: str
    created_at: datetime

    @classmethod
    def from_message(cls, message: Message) -> "MessageOut":
        return cls(id=message.id, role=message.role, content=message.content, created_at=message.created_at)
