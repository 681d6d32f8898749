from pathlib import Path
from typing import Dict, List

import pytest
from fastapi.testclient import TestClient

from backend.core.conversation_controller import ConversationController
from backend.core.conversation_store import ConversationStore
from backend.core.flow_engine import FlowEngine
from backend.core.flow_loader import load_flow_definition
from backend.main import create_app

FLOW_PATH = Path(__file__).resolve().parent.parent / "backend" / "flows" / "conversation-flow.yaml"


class SpyFlowEngine(FlowEngine):
    """FlowEngine that records every node lookup made through it."""

    def __init__(self, flow=None):
        super().__init__(flow)
        self.calls: List[str] = []

    def resolve_start(self, user_name):
        self.calls.append("resolve_start")
        return super().resolve_start(user_name)

    def resolve_next(self, current_question_id, raw_answer):
        self.calls.append("resolve_next")
        return super().resolve_next(current_question_id, raw_answer)


class FakeAssistant:
    """Assisted collaborator with scripted replies; ends once `end_after` user answers were given."""

    def __init__(self, end_after: int = 2):
        self.end_after = end_after
        self.calls: List[str] = []
        self.histories: List[List[Dict[str, str]]] = []

    def first_question(self, user_name):
        self.calls.append("first_question")
        return f"Hi {user_name}, what happened?"

    def next_question(self, history, latest_user_message):
        self.calls.append("next_question")
        self.histories.append(list(history))
        return f"Follow-up about: {latest_user_message}"

    def should_end_conversation(self, history):
        self.calls.append("should_end_conversation")
        answers = sum(1 for m in history if m["role"] == "user") + 1
        return answers >= self.end_after


@pytest.fixture(scope="session")
def flow():
    return load_flow_definition(str(FLOW_PATH))


@pytest.fixture
def engine(flow):
    return SpyFlowEngine(flow)


@pytest.fixture
def assistant():
    return FakeAssistant()


@pytest.fixture
def store():
    return ConversationStore()


@pytest.fixture
def user(store):
    return store.create_user("jane@example.com", "Jane Smith")


@pytest.fixture
def controller(store, engine, assistant):
    return ConversationController(store=store, engine=engine, assistant=assistant)


@pytest.fixture
def client(controller):
    return TestClient(create_app(controller))


@pytest.fixture
def write_flow(tmp_path):
    def _write(text: str, name: str = "flow.yaml") -> str:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return str(path)

    return _write
