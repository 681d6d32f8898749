import logging

import pytest

from backend.core.flow_engine import (
    DEGRADED_END_MESSAGE,
    END_OF_FLOW_MESSAGE,
    FlowEngine,
    FlowNotInitializedError,
    QuestionNotFoundError,
    StartQuestionNotFoundError,
    normalize_answer,
)
from backend.core.flow_loader import parse_flow

PRECEDENCE_FLOW = """
config: {start_question: 1, end_marker: END}
questions:
  - id: 1
    text: First
    routes:
      - {answer_contains: a, next_question: 2}
      - {default: true, next_question: 11}
  - id: 2
    text: Two
    routes:
      - {default: true, next_question: END}
  - id: 11
    text: Eleven
    routes:
      - {default: true, next_question: 12}
      - {default: true, next_question: 2}
  - id: 12
    text: Twelve
    routes:
      - {answer_contains: zzz, next_question: 2}
  - id: 13
    text: Thirteen
    routes:
      - {default: true, next_question: 99}
  - id: 14
    text: Fourteen
    routes:
      - {default: true, next_question: 11}
      - {answer_contains: contract, next_question: 2}
"""


@pytest.fixture
def small_engine():
    return FlowEngine(parse_flow(PRECEDENCE_FLOW))


class TestResolveStart:
    def test_substitutes_user_name(self, engine):
        step = engine.resolve_start("Jane Smith")
        assert step.question_id == 1
        assert "Jane Smith" in step.text
        assert "{userName}" not in step.text
        assert "EASYLEGAL" in step.text
        assert "legal matter" in step.text

    def test_stored_text_is_not_modified(self, engine, flow):
        engine.resolve_start("Jane Smith")
        assert "{userName}" in flow.get(1).text

    def test_text_without_placeholder_passes_through(self, small_engine):
        assert small_engine.resolve_start("Jane").text == "First"

    def test_missing_start_question(self):
        engine = FlowEngine(parse_flow("config: {start_question: 7}\nquestions:\n  - {id: 1, text: x}\n"))
        with pytest.raises(StartQuestionNotFoundError, match="Start question 7 not found"):
            engine.resolve_start("Jane")

    def test_uninitialized_engine(self):
        engine = FlowEngine()
        assert not engine.is_ready()
        with pytest.raises(FlowNotInitializedError, match="not initialized"):
            engine.resolve_start("Jane")
        with pytest.raises(FlowNotInitializedError):
            engine.resolve_next(1, "A")


class TestResolveNext:
    @pytest.mark.parametrize("answer", ["A", "a", "  A  ", "CONTRACT", "contract", "\tcontract\n"])
    def test_case_and_whitespace_insensitive(self, engine, answer):
        step = engine.resolve_next(1, answer)
        assert step.question_id == 2
        assert step.is_end is False
        assert "contract dispute" in step.text

    @pytest.mark.parametrize(
        "answer, expected",
        [
            ("I have a contract problem", 2),
            ("employment issue here", 5),
            ("B", 5),
            ("C", 8),
            ("D", 11),
            ("xyz qwerty", 11),
        ],
    )
    def test_first_question_routing(self, engine, answer, expected):
        assert engine.resolve_next(1, answer).question_id == expected

    def test_route_precedence(self, small_engine):
        assert small_engine.resolve_next(1, "xyz").question_id == 11
        assert small_engine.resolve_next(1, "I have a contract").question_id == 2

    def test_first_default_wins(self, small_engine):
        assert small_engine.resolve_next(11, "anything").question_id == 12

    def test_default_listed_first_does_not_shadow_substring(self, small_engine):
        assert small_engine.resolve_next(14, "a contract issue").question_id == 2
        assert small_engine.resolve_next(14, "xyz").question_id == 11

    def test_no_match_and_no_default_ends_flow(self, small_engine):
        step = small_engine.resolve_next(12, "nothing matches")
        assert step.is_end is True
        assert step.question_id == "END"
        assert step.text == END_OF_FLOW_MESSAGE

    def test_end_marker_returns_fixed_message(self, engine):
        step = engine.resolve_next(14, "No, that is all")
        assert step.question_id == "END"
        assert step.is_end is True
        assert step.text == END_OF_FLOW_MESSAGE
        assert "Thank you" in step.text
        assert "legal professional" in step.text

    def test_end_message_is_independent_of_predecessor(self, small_engine):
        assert small_engine.resolve_next(2, "x").text == END_OF_FLOW_MESSAGE

    def test_dangling_reference_degrades_to_end(self, small_engine, caplog):
        with caplog.at_level(logging.WARNING):
            step = small_engine.resolve_next(13, "anything")
        assert step.is_end is True
        assert step.question_id == "END"
        assert step.text == DEGRADED_END_MESSAGE
        assert "FLOW_ANOMALY" in caplog.text

    def test_unknown_current_question(self, engine):
        with pytest.raises(QuestionNotFoundError, match="Question 999 not found"):
            engine.resolve_next(999, "anything")

    def test_non_start_text_is_verbatim(self, engine, flow):
        assert engine.resolve_next(11, "It is complicated").text == flow.get(12).text

    def test_contract_path_to_end(self, engine):
        answers = ["A", "written", "Yes", "It started last month", "I sent some emails", "No"]
        question_id = 1
        visited = []
        for answer in answers:
            step = engine.resolve_next(question_id, answer)
            visited.append(step.question_id)
            question_id = step.question_id
        assert visited == [2, 3, 12, 13, 14, "END"]


def test_normalize_answer():
    assert normalize_answer("  Hello World \n") == "hello world"
    assert normalize_answer("") == ""


def test_is_end_of_flow(engine):
    assert engine.is_end_of_flow("END")
    assert not engine.is_end_of_flow(3)
    assert not FlowEngine().is_end_of_flow("END")
