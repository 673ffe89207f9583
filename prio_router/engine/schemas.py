"""Request, result, and provenance models for priority routing."""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Annotated, Any, Literal, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class Quadrant(str, Enum):
    """Eisenhower priority quadrants."""

    DO_FIRST = "do_first"    # Urgent + important
    SCHEDULE = "schedule"    # Important, not urgent
    DELEGATE = "delegate"    # Urgent, not important
    ELIMINATE = "eliminate"  # Neither

    @classmethod
    def from_flags(cls, is_urgent: bool, is_important: bool) -> "Quadrant":
        """Map urgency/importance flags onto exactly one quadrant."""
        if is_urgent and is_important:
            return cls.DO_FIRST
        if is_important:
            return cls.SCHEDULE
        if is_urgent:
            return cls.DELEGATE
        return cls.ELIMINATE

    @classmethod
    def from_label(cls, label: str, default: "Quadrant | None" = None) -> "Quadrant | None":
        """Parse a quadrant label such as ``DO``, ``do_first`` or ``Schedule``."""
        normalized = label.strip().lower().replace("-", "_").replace(" ", "_")
        if normalized in ("do", "do_first", "q1"):
            return cls.DO_FIRST
        for quadrant in cls:
            if quadrant.value == normalized:
                return quadrant
        return default

    @property
    def is_urgent(self) -> bool:
        return self in (Quadrant.DO_FIRST, Quadrant.DELEGATE)

    @property
    def is_important(self) -> bool:
        return self in (Quadrant.DO_FIRST, Quadrant.SCHEDULE)


class RequestType(str, Enum):
    """Kinds of work a routing request can ask for."""

    CLASSIFY_PRIORITY = "classify_priority"
    PARSE_TASK = "parse_task"
    SUGGEST_STRUCTURED_GOAL = "suggest_structured_goal"
    GENERATE_BRIEFING = "generate_briefing"
    EXTRACT_ACTION_ITEMS = "extract_action_items"
    GENERAL_CHAT = "general_chat"


class RequestOptions(BaseModel):
    """Caller options for a single request."""

    model_config = ConfigDict(frozen=True)

    use_escalation: bool = Field(
        default=True, description="Whether escalation to inference backends is permitted"
    )
    min_confidence_override: float | None = Field(
        default=None, description="Escalation threshold override; ignored unless positive"
    )
    max_tokens: int = Field(
        default=256, ge=1, description="Maximum tokens a backend may generate"
    )
    temperature: float = Field(
        default=0.3, ge=0.0, le=2.0, description="Sampling temperature for backends"
    )
    timeout_seconds: float | None = Field(
        default=None, gt=0, description="Per-attempt timeout for escalated calls"
    )


class ClassificationRequest(BaseModel):
    """An immutable routing request."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(
        default_factory=lambda: str(uuid4()), description="Request id used to correlate overrides"
    )
    text: str = Field(
        ..., description="Free-text task description"
    )
    request_type: RequestType = Field(
        default=RequestType.CLASSIFY_PRIORITY, description="Requested operation"
    )
    context: dict[str, Any] = Field(
        default_factory=dict, description="Optional free-form context"
    )
    options: RequestOptions = Field(
        default_factory=RequestOptions, description="Caller options"
    )


class ClassificationResult(BaseModel):
    """Priority classification of a task."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["classification"] = "classification"
    quadrant: Quadrant
    confidence: float = Field(..., ge=0.0, le=1.0)
    explanation: str
    is_urgent: bool
    is_important: bool
    urgency_signals: list[str] = Field(default_factory=list)
    importance_signals: list[str] = Field(default_factory=list)
    should_escalate: bool = False


class ParsedTask(BaseModel):
    """Structured task extracted from natural language."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["parsed_task"] = "parsed_task"
    title: str
    due_date: date | None = None
    due_time: str | None = Field(default=None, description="24-hour HH:MM")
    priority: str | None = None
    suggested_quadrant: Quadrant | None = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


class GoalSuggestion(BaseModel):
    """A goal refined into specific, measurable, time-bound form."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["goal_suggestion"] = "goal_suggestion"
    refined_goal: str
    specific: str = ""
    measurable: str = ""
    achievable: str = ""
    relevant: str = ""
    time_bound: str = ""
    milestones: list[str] = Field(default_factory=list)


class TextResult(BaseModel):
    """Free-text output for generative request types."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str


RoutingResult = Annotated[
    Union[ClassificationResult, ParsedTask, GoalSuggestion, TextResult],
    Field(discriminator="kind"),
]


class ResponseMetadata(BaseModel):
    """Provenance of a response."""

    model_config = ConfigDict(frozen=True)

    provider_id: str = "unknown"
    model_id: str = "unknown"
    backend_id: str = Field(
        default="unknown", description="Component that produced the result"
    )
    latency_ms: float = 0.0
    rule_based_latency_ms: float = 0.0
    escalated_latency_ms: float = 0.0
    was_rule_based: bool = False
    was_escalated: bool = False
    confidence_score: float | None = None
    tokens_used: int = 0
    cost_usd: float | None = None


class RoutingResponse(BaseModel):
    """Outcome of a routing request, or a backend's failure result."""

    model_config = ConfigDict(frozen=True)

    request_id: str
    success: bool = True
    result: RoutingResult | None = None
    error: str | None = None
    raw_text: str | None = None
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)


class RoutingStats(BaseModel):
    """Aggregate routing counters."""

    total_requests: int = 0
    rule_based_only_count: int = 0
    escalated_count: int = 0
    escalation_failed_count: int = 0
    override_count: int = 0
    average_rule_based_latency_ms: float = 0.0
    average_escalated_latency_ms: float = 0.0

    def accuracy(self) -> float:
        """Share of requests the user did not override; 0 when nothing was routed."""
        if self.total_requests <= 0:
            return 0.0
        return max(0.0, 1.0 - self.override_count / self.total_requests)


class OverrideRecord(BaseModel):
    """A user's correction of an automated classification."""

    model_config = ConfigDict(frozen=True)

    request_id: str
    original_quadrant: Quadrant
    corrected_quadrant: Quadrant
    was_escalated: bool
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
