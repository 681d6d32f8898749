# Role: In-memory persistence for users, conversations and transcripts. Stands in for the database the
# controller talks to: create/read/update by integer id, messages kept per conversation in insertion order.

from __future__ import annotations

import threading
from datetime import datetime, timezone
from itertools import count
from typing import Dict, Iterable, List, Optional, Tuple

from backend.models.conversation import Conversation, ConversationMode, ConversationStatus
from backend.models.message import Message, Role
from backend.models.user import User


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ConversationStore:
    def __init__(self) -> None:
        self._users: Dict[int, User] = {}
        self._conversations: Dict[int, Conversation] = {}
        self._messages: Dict[int, List[Message]] = {}

        self._user_ids = count(1)
        self._conversation_ids = count(1)
        self._message_ids = count(1)

        # Key line: guards id allocation, record updates and list appends.
        # Per-session turn ordering is not serialized here.
        self._lock = threading.Lock()

    # --- users -------------------------------------------------------

    def create_user(self, email: str, name: str) -> User:
        with self._lock:
            user = User(id=next(self._user_ids), email=email.lower(), name=name)
            self._users[user.id] = user
        return user

    def get_user(self, user_id: int) -> Optional[User]:
        return self._users.get(user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        wanted = email.strip().lower()
        for user in self._users.values():
            if user.email == wanted:
                return user
        return None

    def list_users(self) -> List[User]:
        # Newest first; ids break ties between users created in the same instant.
        return sorted(self._users.values(), key=lambda u: (u.created_at, u.id), reverse=True)

    def update_user(self, user_id: int, email: Optional[str] = None, name: Optional[str] = None) -> Optional[User]:
        updates = {}
        if email is not None:
            updates["email"] = email.lower()
        if name is not None:
            updates["name"] = name
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            user = user.model_copy(update=updates)
            self._users[user_id] = user
        return user

    def delete_user(self, user_id: int) -> bool:
        with self._lock:
            if self._users.pop(user_id, None) is None:
                return False
            for conversation in self.list_conversations(user_id):
                del self._conversations[conversation.id]
                self._messages.pop(conversation.id, None)
        return True

    def seed_users(self, users: Iterable[Tuple[str, str]]) -> int:
        # Insert-or-ignore by email; returns how many were added.
        added = 0
        for email, name in users:
            if self.get_user_by_email(email) is None:
                self.create_user(email, name)
                added += 1
        return added

    # --- conversations -----------------------------------------------

    def create_conversation(
        self,
        user_id: int,
        mode: ConversationMode,
        current_question_id: Optional[int] = None,
    ) -> Conversation:
        with self._lock:
            conversation = Conversation(
                id=next(self._conversation_ids),
                user_id=user_id,
                mode=mode,
                current_question_id=current_question_id,
            )
            self._conversations[conversation.id] = conversation
            self._messages[conversation.id] = []
        return conversation

    def get_conversation(self, conversation_id: int) -> Optional[Conversation]:
        return self._conversations.get(conversation_id)

    def list_conversations(self, user_id: int) -> List[Conversation]:
        return [c for c in self._conversations.values() if c.user_id == user_id]

    def update_conversation(
        self,
        conversation_id: int,
        *,
        status: Optional[ConversationStatus] = None,
        current_question_id: Optional[int] = None,
    ) -> Conversation:
        with self._lock:
            conversation = self._conversations[conversation_id]
            if status is not None:
                conversation.status = status
            if current_question_id is not None:
                conversation.current_question_id = current_question_id
            conversation.updated_at = _now()
        return conversation

    # --- messages ----------------------------------------------------

    def add_message(self, conversation_id: int, role: Role, content: str) -> Message:
        with self._lock:
            message = Message(id=next(self._message_ids), conversation_id=conversation_id, role=role, content=content)
            self._messages[conversation_id].append(message)
        return message

    def list_messages(self, conversation_id: int) -> List[Message]:
        # Oldest first (append order).
        return list(self._messages.get(conversation_id, []))
