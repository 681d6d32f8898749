# Role: Central configuration module. Loads .env into environment variables and computes runtime settings.
# Importers read backend.config.<NAME> so flags do not have to be threaded through every call.

from __future__ import annotations

import os
from typing import List, Optional, Tuple

from dotenv import load_dotenv

DEBUG: bool = False

# Flow definition
FLOW_PATH: Optional[str] = None
FLOW_STRICT: bool = False

# Conversation boundary
MAX_MESSAGE_LENGTH: int = 5000

# Assisted mode
GEMINI_API_KEY: Optional[str] = None
GEMINI_MODEL: str = "gemini-1.5-flash"
ASSISTED_FALLBACK_MESSAGE_LIMIT: int = 8

# Authorized users seeded into an empty store
DEFAULT_USERS: List[Tuple[str, str]] = []

_TRUTHY = {"1", "true", "yes"}


def _parse_users(raw: str) -> List[Tuple[str, str]]:
    # "alice@example.com:Alice,bob@example.com:Bob" -> [(email, name), ...]
    users: List[Tuple[str, str]] = []
    for chunk in raw.split(","):
        email, _, name = chunk.strip().partition(":")
        if email.strip() and name.strip():
            users.append((email.strip().lower(), name.strip()))
    return users


def load_env() -> None:
    """
    Load .env into os.environ, then recompute every setting.
    This makes settings correct even if load_env() is called after import.
    """
    global DEBUG, FLOW_PATH, FLOW_STRICT, MAX_MESSAGE_LENGTH
    global GEMINI_API_KEY, GEMINI_MODEL, ASSISTED_FALLBACK_MESSAGE_LIMIT, DEFAULT_USERS
    load_dotenv()
    # Key line: accept common truthy values.
    DEBUG = os.getenv("DEBUG", "0").lower() in _TRUTHY
    FLOW_PATH = os.getenv("FLOW_PATH") or None
    FLOW_STRICT = os.getenv("FLOW_STRICT", "0").lower() in _TRUTHY
    MAX_MESSAGE_LENGTH = int(os.getenv("MAX_MESSAGE_LENGTH", "5000"))
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or None
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
    ASSISTED_FALLBACK_MESSAGE_LIMIT = int(os.getenv("ASSISTED_FALLBACK_MESSAGE_LIMIT", "8"))
    DEFAULT_USERS = _parse_users(os.getenv("DEFAULT_USERS", ""))
