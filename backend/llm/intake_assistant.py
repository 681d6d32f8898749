# Role: Assisted-mode collaborator. Produces the next intake question from the transcript and decides when the
# conversation has gathered enough. Degrades to deterministic fallback prompts when Gemini is not configured or fails.

from __future__ import annotations

from typing import Dict, List, Optional

import backend.config as config
from backend.llm.gemini_client import GeminiClient
from backend.prompts.intake_prompt import (
    FIRST_QUESTION_SYSTEM_PROMPT,
    NEXT_QUESTION_SYSTEM_PROMPT,
    SHOULD_END_SYSTEM_PROMPT,
    build_first_question_prompt,
    build_next_question_prompt,
    build_should_end_prompt,
)
from backend.utils.logging import get_logger

logger = get_logger(__name__)

History = List[Dict[str, str]]


class IntakeAssistant:
    def __init__(self, client: Optional[GeminiClient] = None, fallback_message_limit: Optional[int] = None) -> None:
        # Key line: lazy-init avoids crashing if GEMINI_API_KEY is missing (fallback prompts still work).
        self._client = client
        self._fallback_message_limit = fallback_message_limit

    def _get_client(self) -> Optional[GeminiClient]:
        if self._client is None and config.GEMINI_API_KEY:
            self._client = GeminiClient()
        return self._client

    @property
    def fallback_message_limit(self) -> int:
        return self._fallback_message_limit or config.ASSISTED_FALLBACK_MESSAGE_LIMIT

    def first_question(self, user_name: str) -> str:
        client = self._get_client()
        if client is None:
            return self._fallback_first_question(user_name)

        try:
            return client.generate_text(
                build_first_question_prompt(user_name),
                system_instruction=FIRST_QUESTION_SYSTEM_PROMPT,
                max_output_tokens=200,
            )
        except RuntimeError as e:
            logger.error(f"Assisted first question failed, using fallback: {e}")
            return self._fallback_first_question(user_name)

    def next_question(self, history: History, latest_user_message: str) -> str:
        client = self._get_client()
        if client is None:
            return self._fallback_next_question(len(history))

        try:
            return client.generate_text(
                build_next_question_prompt(history, latest_user_message),
                system_instruction=NEXT_QUESTION_SYSTEM_PROMPT,
                max_output_tokens=250,
            )
        except RuntimeError as e:
            logger.error(f"Assisted next question failed, using fallback: {e}")
            return self._fallback_next_question(len(history))

    def should_end_conversation(self, history: History) -> bool:
        client = self._get_client()
        if client is None:
            return len(history) >= self.fallback_message_limit

        try:
            answer = client.generate_text(
                build_should_end_prompt(history),
                system_instruction=SHOULD_END_SYSTEM_PROMPT,
                temperature=0.3,
                max_output_tokens=10,
            )
        except RuntimeError as e:
            logger.error(f"Assisted end check failed, using message count: {e}")
            return len(history) >= self.fallback_message_limit

        return answer.strip().upper() == "YES"

    # Fallbacks when Gemini is not available

    def _fallback_first_question(self, user_name: str) -> str:
        return (
            f"Hello {user_name}! I'm here to help you with your legal question. "
            "What type of legal matter do you need assistance with today?"
        )

    def _fallback_next_question(self, message_count: int) -> str:
        if message_count <= 2:
            return "Could you provide more details about your situation? For example, when did this issue start?"
        if message_count <= 4:
            return "Have you taken any steps to address this matter already? If so, what have you tried?"
        if message_count <= 6:
            return "Is there anything else you'd like to add that might be relevant to your case?"
        return (
            "Thank you for providing all this information. Based on what you've shared, I'll prepare a summary "
            "of your situation. Is there anything else you'd like to clarify?"
        )
