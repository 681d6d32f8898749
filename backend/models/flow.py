# Role: Typed, immutable view of the conversation-flow document. QuestionNode + RoutingRule describe one step of the
# scripted intake; FlowDefinition is the whole loaded document with a lookup table keyed by node id.

from __future__ import annotations

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator

NodeRef = Union[int, str]

USER_NAME_PLACEHOLDER = "{userName}"


class RoutingRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    answer_contains: Optional[str] = None
    default: bool = False
    next_question: NodeRef

    @model_validator(mode="after")
    def _check_condition(self):
        # A rule is either a substring condition or a catch-all.
        if not self.default and not self.answer_contains:
            raise ValueError("route needs answer_contains or default: true")
        return self

    def matches(self, normalized_answer: str) -> bool:
        # Substring rules only; defaults are resolved by the engine after the scan.
        return bool(self.answer_contains) and self.answer_contains.lower() in normalized_answer


class QuestionNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int = Field(gt=0)
    text: str
    routes: List[RoutingRule] = Field(default_factory=list)


class FlowSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    start_question: int
    end_marker: str = "END"


class FlowDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    questions: List[QuestionNode]
    config: FlowSettings

    _by_id: Dict[int, QuestionNode] = PrivateAttr(default_factory=dict)

    @model_validator(mode="after")
    def _check_unique_ids(self):
        seen = set()
        for question in self.questions:
            if question.id in seen:
                raise ValueError(f"duplicate question id {question.id}")
            seen.add(question.id)
        return self

    def model_post_init(self, __context) -> None:
        # Key line: the lookup table is built once and only read afterwards.
        self._by_id = {question.id: question for question in self.questions}

    @property
    def start_question(self) -> int:
        return self.config.start_question

    @property
    def end_marker(self) -> str:
        return self.config.end_marker

    def get(self, question_id: NodeRef) -> Optional[QuestionNode]:
        if not isinstance(question_id, int) or isinstance(question_id, bool):
            return None
        return self._by_id.get(question_id)

    def is_end(self, question_id: NodeRef) -> bool:
        return question_id == self.config.end_marker

    def dangling_references(self) -> List[tuple]:
        """(question id, next_question) pairs pointing at neither a node nor the end marker."""
        dangling = []
        for question in self.questions:
            for route in question.routes:
                target = route.next_question
                if self.is_end(target) or self.get(target) is not None:
                    continue
                dangling.append((question.id, target))
        return dangling
