# Role: Prompt builders for assisted intake. Kept separate from the assistant so wording can change without touching
# control flow.

from __future__ import annotations

from typing import Dict, List

FIRST_QUESTION_SYSTEM_PROMPT = """You are a helpful legal assistant for EASYLEGAL, a platform that helps users with legal questions.
Your role is to gather information from users about their legal situation by asking clear, focused questions.
Be professional, empathetic, and concise. Ask one question at a time.
Your first question should be welcoming and ask about the type of legal matter they need help with."""

NEXT_QUESTION_SYSTEM_PROMPT = """You are a helpful legal assistant for EASYLEGAL.
Your role is to gather comprehensive information about the user's legal situation by asking follow-up questions.
Based on the conversation so far, ask a relevant follow-up question to better understand their case.
Be professional, empathetic, and concise. Ask one focused question at a time.
After gathering enough information (typically 3-5 exchanges), you should start wrapping up and offer to summarize."""

SHOULD_END_SYSTEM_PROMPT = """You are analyzing a legal consultation conversation to determine if enough information has been gathered.
Review the conversation and determine if:
1. The user has provided sufficient details about their legal matter
2. Key questions have been asked and answered
3. It's appropriate to wrap up and summarize

Respond with ONLY "YES" if the conversation should end, or "NO" if more questions are needed."""


def format_transcript(history: List[Dict[str, str]]) -> str:
    return "\n".join(f"{m.get('role', '').upper()}: {m.get('content', '')}" for m in history)


def build_first_question_prompt(user_name: str) -> str:
    return (
        f"The user's name is {user_name}. "
        "Generate a welcoming first question to start gathering information about their legal matter."
    )


def build_next_question_prompt(history: List[Dict[str, str]], latest_user_message: str) -> str:
    transcript = format_transcript(history)
    return (
        f"Conversation so far:\n{transcript}\n\n"
        f"Latest user message:\n{latest_user_message}\n\n"
        "Reply with the next question only."
    )


def build_should_end_prompt(history: List[Dict[str, str]]) -> str:
    return f"Conversation:\n{format_transcript(history)}\n\nShould this conversation end? (YES/NO)"
