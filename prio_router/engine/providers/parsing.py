"""Parsing of language model replies into routing results."""

import json
import re
from datetime import date
from typing import Any

import structlog

from prio_router.engine import thresholds
from prio_router.engine.errors import BackendFailureError
from prio_router.engine.schemas import (
    ClassificationResult,
    GoalSuggestion,
    ParsedTask,
    Quadrant,
    RequestType,
    RoutingResult,
    TextResult,
)

logger = structlog.get_logger()

JSON_OBJECT_PATTERN = re.compile(r"\{[^}]+\}")

# Checked in order; the first marker present wins.
TEXT_MARKERS = (
    (Quadrant.DO_FIRST, ('"DO"', "QUADRANT: DO")),
    (Quadrant.SCHEDULE, ('"SCHEDULE"', "QUADRANT: SCHEDULE")),
    (Quadrant.DELEGATE, ('"DELEGATE"', "QUADRANT: DELEGATE")),
    (Quadrant.ELIMINATE, ('"ELIMINATE"', "QUADRANT: ELIMINATE")),
)


def extract_json(text: str) -> dict[str, Any] | None:
    """Return the first flat JSON object embedded in a reply, if it decodes."""
    match = JSON_OBJECT_PATTERN.search(text)
    if not match:
        return None
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError:
        logger.debug("Reply contained malformed JSON", snippet=match.group(0)[:200])
        return None
    return data if isinstance(data, dict) else None


def quadrant_from_markers(text: str) -> Quadrant:
    """Detect a quadrant from textual markers, defaulting to Schedule."""
    upper = text.upper()
    for quadrant, markers in TEXT_MARKERS:
        if any(marker in upper for marker in markers):
            return quadrant
    return Quadrant.SCHEDULE


def parse_classification(text: str) -> ClassificationResult:
    """
    Parse a priority classification reply.

    A JSON object supplies quadrant, confidence and reasoning. Without one the
    quadrant is read from text markers at a fixed low confidence.

    Args:
        text: Raw model output

    Returns:
        ClassificationResult derived from the reply
    """
    data = extract_json(text)

    if data is None:
        quadrant = quadrant_from_markers(text)
        return ClassificationResult(
            quadrant=quadrant,
            confidence=thresholds.UNPARSED_LLM_CONFIDENCE,
            explanation="Parsed from raw output",
            is_urgent=quadrant.is_urgent,
            is_important=quadrant.is_important,
        )

    quadrant = Quadrant.from_label(str(data.get("quadrant") or ""), default=Quadrant.SCHEDULE)

    try:
        confidence = float(data.get("confidence", thresholds.DEFAULT_LLM_CONFIDENCE))
    except (TypeError, ValueError):
        confidence = thresholds.DEFAULT_LLM_CONFIDENCE
    confidence = min(max(confidence, 0.0), 1.0)

    return ClassificationResult(
        quadrant=quadrant,
        confidence=confidence,
        explanation=str(data.get("reasoning") or "AI classification"),
        is_urgent=quadrant.is_urgent,
        is_important=quadrant.is_important,
    )


def parse_task(text: str, fallback_title: str) -> ParsedTask:
    """
    Parse a task-extraction reply.

    Args:
        text: Raw model output
        fallback_title: Title used when the reply names none

    Returns:
        ParsedTask with whatever fields the reply supplied

    Raises:
        BackendFailureError: If the reply holds no JSON object
    """
    data = extract_json(text)
    if data is None:
        raise BackendFailureError("parser", "Task reply contained no JSON object")

    due_date = None
    raw_date = data.get("due_date")
    if raw_date and raw_date != "null":
        try:
            due_date = date.fromisoformat(str(raw_date))
        except ValueError:
            logger.debug("Ignoring unparseable due date", due_date=raw_date)

    due_time = data.get("due_time")
    if not due_time or due_time == "null" or not re.fullmatch(r"\d{2}:\d{2}", str(due_time)):
        due_time = None

    priority = data.get("priority")
    if priority in ("", "null"):
        priority = None

    return ParsedTask(
        title=str(data.get("title") or fallback_title).strip(),
        due_date=due_date,
        due_time=due_time,
        priority=priority,
        confidence=0.7,
    )


def parse_goal(text: str, fallback_goal: str) -> GoalSuggestion:
    """Parse a structured-goal reply; raises BackendFailureError without JSON."""
    data = extract_json(text)
    if data is None:
        raise BackendFailureError("parser", "Goal reply contained no JSON object")

    milestones = data.get("milestones") or []
    if not isinstance(milestones, list):
        milestones = [str(milestones)]

    return GoalSuggestion(
        refined_goal=str(data.get("refined_goal") or fallback_goal),
        specific=str(data.get("specific") or ""),
        measurable=str(data.get("measurable") or ""),
        achievable=str(data.get("achievable") or ""),
        relevant=str(data.get("relevant") or ""),
        time_bound=str(data.get("time_bound") or ""),
        milestones=[str(m) for m in milestones],
    )


def parse_result(request_type: RequestType, text: str, source_text: str) -> RoutingResult:
    """
    Parse a reply into the result variant of a request type.

    Args:
        request_type: Type of the request that produced the reply
        text: Raw model output
        source_text: Original request text, used for fallbacks

    Returns:
        Result variant matching the request type
    """
    if request_type == RequestType.CLASSIFY_PRIORITY:
        return parse_classification(text)
    if request_type == RequestType.PARSE_TASK:
        return parse_task(text, source_text)
    if request_type == RequestType.SUGGEST_STRUCTURED_GOAL:
        return parse_goal(text, source_text)
    return TextResult(text=text.strip())
