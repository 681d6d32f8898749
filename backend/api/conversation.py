# Role: Thin HTTP adapter for intake conversations. Parses request shapes and delegates every turn to
# ConversationController (business logic lives in core, not in the API layer). Errors surface through the
# app-level exception handlers.

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, status

from backend.api.deps import get_controller
from backend.api.schemas import CamelModel, Envelope, MessageOut, UserSummary
from backend.core.conversation_controller import ConversationController

router = APIRouter(prefix="/api/conversation", tags=["conversation"])


class StartConversationRequest(CamelModel):
    user_id: int
    mode: Optional[str] = None


class StartConversationData(CamelModel):
    conversation_id: int
    question: str
    message_id: int
    mode: str


class SendMessageRequest(CamelModel):
    conversation_id: int
    message: str


class SendMessageData(CamelModel):
    question: str
    message_id: int
    completed: bool


class ConversationData(CamelModel):
    id: int
    user_id: int
    mode: str
    status: str
    current_question_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    user: Optional[UserSummary] = None
    messages: List[MessageOut]


@router.post("/start", response_model=Envelope[StartConversationData], status_code=status.HTTP_201_CREATED)
def start_conversation(
    req: StartConversationRequest,
    controller: ConversationController = Depends(get_controller),
) -> Envelope[StartConversationData]:
    result = controller.start_conversation(req.user_id, req.mode)
    return Envelope(
        data=StartConversationData(
            conversation_id=result.conversation_id,
            question=result.question,
            message_id=result.message_id,
            mode=result.mode.value,
        )
    )


@router.post("/message", response_model=Envelope[SendMessageData])
def send_message(
    req: SendMessageRequest,
    controller: ConversationController = Depends(get_controller),
) -> Envelope[SendMessageData]:
    # 1) Forward (conversation_id, message) to the controller
    # 2) Return the next prompt in a stable schema for UI/clients
    result = controller.handle_turn(req.conversation_id, req.message)
    return Envelope(
        data=SendMessageData(question=result.question, message_id=result.message_id, completed=result.completed)
    )


@router.get("/{conversation_id}", response_model=Envelope[ConversationData])
def get_conversation(
    conversation_id: int,
    controller: ConversationController = Depends(get_controller),
) -> Envelope[ConversationData]:
    detail = controller.get_conversation(conversation_id)
    conversation = detail.conversation
    user = detail.user
    return Envelope(
        data=ConversationData(
            id=conversation.id,
            user_id=conversation.user_id,
            mode=conversation.mode.value,
            status=conversation.status.value,
            current_question_id=conversation.current_question_id,
            created_at=conversation.created_at,
            updated_at=conversation.updated_at,
            user=UserSummary(id=user.id, name=user.name, email=user.email) if user else None,
            messages=[MessageOut.from_message(m) for m in detail.messages],
        )
    )
