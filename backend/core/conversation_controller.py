# Role: Orchestrator for one intake conversation turn. Glues together:
# input validation, the conversation store, and the turn driver picked by the session mode
# (deterministic FlowEngine for scripted sessions, an assisted collaborator otherwise).

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol

from backend.core.conversation_store import ConversationStore
from backend.core.errors import (
    ConversationNotActiveError,
    ConversationNotFoundError,
    InvalidConversationStateError,
    UserNotFoundError,
    ValidationError,
)
from backend.core.flow_engine import FlowEngine, FlowEngineError
from backend.core.validator import ValidationResult, Validator
from backend.llm.intake_assistant import IntakeAssistant
from backend.models.conversation import Conversation, ConversationMode, ConversationStatus
from backend.models.message import Message
from backend.models.user import User
from backend.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MODE = ConversationMode.ASSISTED


class AssistedCollaborator(Protocol):
    def first_question(self, user_name: str) -> str: ...

    def next_question(self, history: List[Dict[str, str]], latest_user_message: str) -> str: ...

    def should_end_conversation(self, history: List[Dict[str, str]]) -> bool: ...


@dataclass(frozen=True)
class StartResponse:
    conversation_id: int
    question: str
    message_id: int
    mode: ConversationMode


@dataclass(frozen=True)
class TurnResponse:
    conversation_id: int
    question: str
    message_id: int
    completed: bool


@dataclass(frozen=True)
class ConversationDetail:
    conversation: Conversation
    user: Optional[User]
    messages: List[Message] = field(default_factory=list)


def _raise_if_invalid(result: ValidationResult) -> None:
    if not result.ok:
        raise ValidationError("Validation failed", {"errors": result.problems})


class ConversationController:
    def __init__(
        self,
        store: Optional[ConversationStore] = None,
        engine: Optional[FlowEngine] = None,
        assistant: Optional[AssistedCollaborator] = None,
        validator: Optional[Validator] = None,
    ) -> None:
        # Key line: dependencies are injectable; the engine carries the flow loaded once at startup.
        self.store = store or ConversationStore()
        self.engine = engine or FlowEngine()
        self.assistant = assistant or IntakeAssistant()
        self.validator = validator or Validator()

    def _history(self, conversation_id: int) -> List[Dict[str, str]]:
        return [{"role": m.role, "content": m.content} for m in self.store.list_messages(conversation_id)]

    def _log_engine_failure(self, error: FlowEngineError, **context) -> None:
        context["timestamp"] = datetime.now(timezone.utc).isoformat()
        logger.error(f"Flow engine failure: {error} {context}")

    def start_conversation(self, user_id: int, mode: Optional[str] = None) -> StartResponse:
        # 1) Validate ids / mode, load the user
        # 2) Ask the turn driver for the opening question
        # 3) Persist conversation + first assistant message
        _raise_if_invalid(self.validator.validate_id(user_id, "userId"))
        _raise_if_invalid(self.validator.validate_mode(mode))
        session_mode = ConversationMode(mode) if mode else DEFAULT_MODE

        user = self.store.get_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        current_question_id: Optional[int] = None
        if session_mode == ConversationMode.SCRIPTED:
            try:
                step = self.engine.resolve_start(user.name)
            except FlowEngineError as e:
                self._log_engine_failure(e, user_id=user_id)
                raise
            first_question = step.text
            current_question_id = step.question_id
        else:
            first_question = self.assistant.first_question(user.name)

        conversation = self.store.create_conversation(
            user_id=user.id,
            mode=session_mode,
            current_question_id=current_question_id,
        )
        message = self.store.add_message(conversation.id, role="assistant", content=first_question)

        logger.info(f"Started {session_mode.value} conversation {conversation.id} for user {user.id}")
        return StartResponse(
            conversation_id=conversation.id,
            question=first_question,
            message_id=message.id,
            mode=session_mode,
        )

    def handle_turn(self, conversation_id: int, user_message: str) -> TurnResponse:
        # 1) Validate input, load an active conversation
        # 2) Persist the user's answer verbatim
        # 3) Resolve the next prompt (engine or assisted collaborator)
        # 4) Terminal -> mark completed; otherwise advance the scripted position
        # 5) Persist the assistant prompt and return
        _raise_if_invalid(self.validator.validate_id(conversation_id, "conversationId"))
        _raise_if_invalid(self.validator.validate_answer(user_message))

        conversation = self.store.get_conversation(conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        if not conversation.is_active:
            raise ConversationNotActiveError("Conversation is not active", {"conversation_id": conversation_id})

        scripted = conversation.mode == ConversationMode.SCRIPTED
        if scripted and conversation.current_question_id is None:
            raise InvalidConversationStateError(
                "Invalid conversation state: missing current question ID",
                {"conversation_id": conversation_id},
            )

        history = self._history(conversation_id)
        self.store.add_message(conversation_id, role="user", content=user_message)

        next_question_id: Optional[int] = None
        if scripted:
            try:
                step = self.engine.resolve_next(conversation.current_question_id, user_message)
            except FlowEngineError as e:
                self._log_engine_failure(
                    e,
                    conversation_id=conversation_id,
                    question_id=conversation.current_question_id,
                )
                raise
            next_prompt = step.text
            should_end = step.is_end
            # Key line: the end marker is never stored as the current question.
            if not self.engine.is_end_of_flow(step.question_id):
                next_question_id = step.question_id
        else:
            should_end = self.assistant.should_end_conversation(history)
            next_prompt = self.assistant.next_question(history, user_message)

        logger.debug(
            f"Turn conversation={conversation_id} mode={conversation.mode.value} "
            f"from={conversation.current_question_id} to={next_question_id} end={should_end}"
        )

        if should_end:
            self.store.update_conversation(conversation_id, status=ConversationStatus.COMPLETED)
        elif scripted and next_question_id is not None:
            self.store.update_conversation(conversation_id, current_question_id=next_question_id)

        message = self.store.add_message(conversation_id, role="assistant", content=next_prompt)
        if should_end:
            logger.info(f"Conversation {conversation_id} completed")

        return TurnResponse(
            conversation_id=conversation_id,
            question=next_prompt,
            message_id=message.id,
            completed=should_end,
        )

    def get_conversation(self, conversation_id: int) -> ConversationDetail:
        _raise_if_invalid(self.validator.validate_id(conversation_id, "conversationId"))
        conversation = self.store.get_conversation(conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        return ConversationDetail(
            conversation=conversation,
            user=self.store.get_user(conversation.user_id),
            messages=self.store.list_messages(conversation_id),
        )
