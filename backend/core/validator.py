# Role: Input gatekeeper for the conversation boundary. Checks answer text and the requested mode before the
# controller touches storage or the flow engine, and reports every problem found.

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import backend.config as config
from backend.models.conversation import ConversationMode


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    problems: List[str]


class Validator:
    def __init__(self, max_message_length: Optional[int] = None) -> None:
        self._max_message_length = max_message_length

    @property
    def max_message_length(self) -> int:
        return self._max_message_length or config.MAX_MESSAGE_LENGTH

    def validate_answer(self, message: Optional[str]) -> ValidationResult:
        # 1) Must be present and contain something other than whitespace
        # 2) Must fit the maximum length (counted on the raw text that gets persisted)
        problems: List[str] = []

        if message is None or not message.strip():
            problems.append("message must not be empty")
        elif len(message) > self.max_message_length:
            problems.append(f"message must be at most {self.max_message_length} characters")

        return ValidationResult(ok=not problems, problems=problems)

    def validate_mode(self, mode: Optional[str]) -> ValidationResult:
        if mode is None:
            return ValidationResult(ok=True, problems=[])
        allowed = {m.value for m in ConversationMode}
        if mode not in allowed:
            return ValidationResult(ok=False, problems=[f"mode must be one of: {', '.join(sorted(allowed))}"])
        return ValidationResult(ok=True, problems=[])

    def validate_id(self, value: object, field: str) -> ValidationResult:
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            return ValidationResult(ok=False, problems=[f"{field} must be a positive integer"])
        return ValidationResult(ok=True, problems=[])
