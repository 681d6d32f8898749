# Role: Startup-time loader for the scripted conversation flow. Resolves the YAML document from a short list of
# candidate locations, parses it into an immutable FlowDefinition, and fails fast on anything unusable.

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

import yaml
from pydantic import ValidationError as PydanticValidationError

import backend.config as config
from backend.models.flow import FlowDefinition
from backend.utils.logging import get_logger

logger = get_logger(__name__)

FLOW_FILENAME = "conversation-flow.yaml"


class FlowLoadError(RuntimeError):
    """The flow document is missing, unparseable, or structurally invalid."""


def candidate_paths(explicit: Optional[str] = None) -> List[Path]:
    # 1) Explicit path (argument or FLOW_PATH)
    # 2) The copy shipped inside the package
    # 3) Working-directory relative copies (source checkout / build output)
    paths: List[Path] = []
    explicit = explicit or config.FLOW_PATH
    if explicit:
        paths.append(Path(explicit))
    paths.append(Path(__file__).resolve().parent.parent / "flows" / FLOW_FILENAME)
    paths.append(Path.cwd() / "backend" / "flows" / FLOW_FILENAME)
    paths.append(Path.cwd() / "flows" / FLOW_FILENAME)
    return paths


def resolve_flow_path(paths: Sequence[Path]) -> Path:
    for path in paths:
        if path.is_file():
            return path
    tried = ", ".join(str(p) for p in paths)
    raise FlowLoadError(f"Could not find {FLOW_FILENAME}. Tried paths: {tried}")


def parse_flow(raw_text: str, source: str = "<string>") -> FlowDefinition:
    try:
        document = yaml.safe_load(raw_text)
    except yaml.YAMLError as e:
        raise FlowLoadError(f"Flow document {source} is not valid YAML: {e}") from e

    if not isinstance(document, dict):
        raise FlowLoadError(f"Flow document {source} must be a mapping with 'questions' and 'config'")

    try:
        return FlowDefinition.model_validate(document)
    except PydanticValidationError as e:
        raise FlowLoadError(f"Flow document {source} is invalid: {e}") from e


def load_flow_definition(path: Optional[str] = None, strict: Optional[bool] = None) -> FlowDefinition:
    """
    Resolve, read and parse the flow document.
    Dangling route targets are logged as anomalies; with strict=True they abort the load instead.
    """
    flow_path = resolve_flow_path(candidate_paths(path))
    logger.info(f"Loading conversation flow from: {flow_path}")

    flow = parse_flow(flow_path.read_text(encoding="utf-8"), source=str(flow_path))

    strict = config.FLOW_STRICT if strict is None else strict
    dangling = flow.dangling_references()
    for question_id, target in dangling:
        logger.warning(f"FLOW_ANOMALY dangling route: question {question_id} -> {target!r}")
    if dangling and strict:
        raise FlowLoadError(f"Flow document {flow_path} has {len(dangling)} dangling route(s)")

    if flow.get(flow.start_question) is None:
        # Not fatal here: resolve_start reports it when a session actually starts.
        logger.warning(f"FLOW_ANOMALY start question {flow.start_question} is not defined")

    logger.info(f"Conversation flow loaded with {len(flow.questions)} questions")
    return flow
