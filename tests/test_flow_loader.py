import logging
from pathlib import Path

import pytest

from backend.core.flow_loader import FlowLoadError, candidate_paths, load_flow_definition, parse_flow, resolve_flow_path

SMALL_FLOW = """
config:
  start_question: 1
  end_marker: END
questions:
  - id: 1
    text: "Hi {userName}"
    routes:
      - answer_contains: a
        next_question: 2
      - default: true
        next_question: END
  - id: 2
    text: Second
    routes:
      - default: true
        next_question: 42
"""


def test_packaged_flow_loads(flow):
    assert flow.start_question == 1
    assert flow.end_marker == "END"
    assert len(flow.questions) == 14
    assert flow.dangling_references() == []


def test_explicit_path_is_tried_first(write_flow):
    path = write_flow(SMALL_FLOW)
    assert candidate_paths(path)[0] == Path(path)


def test_missing_document_is_fatal(tmp_path):
    with pytest.raises(FlowLoadError, match="Could not find"):
        resolve_flow_path([tmp_path / "nope.yaml", tmp_path / "also-nope.yaml"])


def test_unparseable_document_is_fatal(write_flow):
    path = write_flow("questions: [unclosed\n")
    with pytest.raises(FlowLoadError, match="not valid YAML"):
        load_flow_definition(path)


def test_non_mapping_document_is_rejected():
    with pytest.raises(FlowLoadError, match="must be a mapping"):
        parse_flow("- just\n- a list\n")


def test_structurally_invalid_document_is_rejected():
    with pytest.raises(FlowLoadError, match="invalid"):
        parse_flow("config: {start_question: 1}\nquestions:\n  - id: 1\n    text: x\n    routes: [{next_question: 2}]\n")


def test_duplicate_ids_are_rejected():
    text = "config: {start_question: 1}\nquestions:\n  - {id: 1, text: a}\n  - {id: 1, text: b}\n"
    with pytest.raises(FlowLoadError, match="duplicate question id 1"):
        parse_flow(text)


def test_dangling_reference_is_logged(write_flow, caplog):
    path = write_flow(SMALL_FLOW)
    with caplog.at_level(logging.WARNING):
        flow = load_flow_definition(path, strict=False)
    assert flow.dangling_references() == [(2, 42)]
    assert "FLOW_ANOMALY dangling route: question 2 -> 42" in caplog.text


def test_dangling_reference_is_fatal_when_strict(write_flow):
    path = write_flow(SMALL_FLOW)
    with pytest.raises(FlowLoadError, match="dangling"):
        load_flow_definition(path, strict=True)


def test_loaded_flow_is_immutable(flow):
    with pytest.raises(Exception):
        flow.questions[0].text = "changed"
