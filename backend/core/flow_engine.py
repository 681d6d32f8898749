# Role: Deterministic router for scripted intake. Pure lookups over an injected, immutable FlowDefinition:
# resolve_start() picks the first question, resolve_next() evaluates the current question's routes against an answer.
# Never calls a model, never touches storage, never catches its own integrity errors.

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from backend.models.flow import USER_NAME_PLACEHOLDER, FlowDefinition, NodeRef
from backend.utils.logging import get_logger

logger = get_logger(__name__)

END_OF_FLOW_MESSAGE = (
    "Thank you for providing all this information. Based on what you've shared, I'll prepare a summary of your "
    "situation. A legal professional will review your case and get back to you soon."
)

# Used when a route points at a question that does not exist.
DEGRADED_END_MESSAGE = "Thank you for providing this information. We'll review your case and get back to you soon."


class FlowEngineError(RuntimeError):
    pass


class FlowNotInitializedError(FlowEngineError):
    def __init__(self) -> None:
        super().__init__("Conversation flow not initialized")


class StartQuestionNotFoundError(FlowEngineError):
    def __init__(self, question_id: int) -> None:
        self.question_id = question_id
        super().__init__(f"Start question {question_id} not found in configuration")


class QuestionNotFoundError(FlowEngineError):
    def __init__(self, question_id: NodeRef) -> None:
        self.question_id = question_id
        super().__init__(f"Question {question_id} not found in configuration")


@dataclass(frozen=True)
class StartStep:
    question_id: int
    text: str


@dataclass(frozen=True)
class NextStep:
    question_id: Union[int, str]
    text: str
    is_end: bool


def normalize_answer(raw_answer: str) -> str:
    # Matching only; callers persist the original text.
    return (raw_answer or "").strip().lower()


class FlowEngine:
    def __init__(self, flow: Optional[FlowDefinition] = None) -> None:
        self._flow = flow

    @property
    def flow(self) -> FlowDefinition:
        if self._flow is None:
            raise FlowNotInitializedError()
        return self._flow

    def is_ready(self) -> bool:
        return self._flow is not None

    def resolve_start(self, user_name: str) -> StartStep:
        flow = self.flow
        question = flow.get(flow.start_question)
        if question is None:
            raise StartQuestionNotFoundError(flow.start_question)

        # Key line: literal replacement of the first placeholder, not general templating.
        text = question.text.replace(USER_NAME_PLACEHOLDER, user_name, 1)
        return StartStep(question_id=question.id, text=text)

    def resolve_next(self, current_question_id: int, raw_answer: str) -> NextStep:
        # 1) Look up the current question (missing -> caller/state integrity error)
        # 2) First substring match wins; otherwise the first default; neither -> end marker
        # 3) End marker -> fixed closing message
        # 4) Dangling target -> degrade to a closing message, log the anomaly
        flow = self.flow
        current = flow.get(current_question_id)
        if current is None:
            raise QuestionNotFoundError(current_question_id)

        answer = normalize_answer(raw_answer)
        next_id: Optional[NodeRef] = None
        fallback_id: Optional[NodeRef] = None
        for route in current.routes:
            if route.matches(answer):
                next_id = route.next_question
                break
            # Key line: a default never stops the scan, a later substring match still wins.
            if route.default and fallback_id is None:
                fallback_id = route.next_question

        if next_id is None:
            next_id = flow.end_marker if fallback_id is None else fallback_id

        if flow.is_end(next_id):
            return NextStep(question_id=flow.end_marker, text=END_OF_FLOW_MESSAGE, is_end=True)

        next_question = flow.get(next_id)
        if next_question is None:
            logger.warning(
                f"FLOW_ANOMALY dangling route at runtime: question {current.id} -> {next_id!r}; ending conversation"
            )
            return NextStep(question_id=flow.end_marker, text=DEGRADED_END_MESSAGE, is_end=True)

        return NextStep(question_id=next_question.id, text=next_question.text, is_end=False)

    def is_end_of_flow(self, question_id: NodeRef) -> bool:
        if self._flow is None:
            return False
        return self._flow.is_end(question_id)
