"""
Application exceptions. Each carries the HTTP status the API layer answers with.
"""

from typing import Any, Dict, Optional


class IntakeError(Exception):
    """Base exception for all expected application errors"""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(IntakeError):
    """Raised when caller input is rejected before any work is done"""

    status_code = 400


class NotFoundError(IntakeError):
    """Raised when a requested resource doesn't exist"""

    status_code = 404


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: int):
        super().__init__("User not found", {"user_id": user_id})


class ConversationNotFoundError(NotFoundError):
    def __init__(self, conversation_id: int):
        super().__init__("Conversation not found", {"conversation_id": conversation_id})


class ConversationNotActiveError(IntakeError):
    """Raised when a turn is submitted against a completed conversation"""

    status_code = 400


class ConflictError(IntakeError):
    status_code = 409


class InvalidConversationStateError(IntakeError):
    """Raised when stored session data breaks an invariant (e.g. scripted session without a question id)"""

    status_code = 500
