# Role: FastAPI dependencies. The controller (and the flow it carries) is built once at startup and hung on
# app.state; routers receive it through Depends instead of importing a module global.

from fastapi import Request

from backend.core.conversation_controller import ConversationController
from backend.core.conversation_store import ConversationStore


def get_controller(request: Request) -> ConversationController:
    return request.app.state.controller


def get_store(request: Request) -> ConversationStore:
    return get_controller(request).store
