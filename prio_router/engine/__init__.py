"""Priority classification and routing engine."""

from prio_router.engine.classifier import RuleBasedClassifier, SignalScores
from prio_router.engine.errors import (
    BackendFailureError,
    BackendUnavailableError,
    PrioRouterError,
    UnsupportedRequestTypeError,
)
from prio_router.engine.factory import build_router
from prio_router.engine.patterns import PatternGroup, PatternLibrary
from prio_router.engine.policy import EscalationDecision, EscalationPolicy
from prio_router.engine.router import Router, RoutingConfig, RoutingMode
from prio_router.engine.schemas import (
    ClassificationRequest,
    ClassificationResult,
    GoalSuggestion,
    OverrideRecord,
    ParsedTask,
    Quadrant,
    RequestOptions,
    RequestType,
    ResponseMetadata,
    RoutingResponse,
    RoutingStats,
    TextResult,
)
from prio_router.engine.temporal import DateMatch, TemporalExtractor, TimeMatch

__all__ = [
    "RuleBasedClassifier",
    "SignalScores",
    "BackendFailureError",
    "BackendUnavailableError",
    "PrioRouterError",
    "UnsupportedRequestTypeError",
    "build_router",
    "PatternGroup",
    "PatternLibrary",
    "EscalationDecision",
    "EscalationPolicy",
    "Router",
    "RoutingConfig",
    "RoutingMode",
    "ClassificationRequest",
    "ClassificationResult",
    "GoalSuggestion",
    "OverrideRecord",
    "ParsedTask",
    "Quadrant",
    "RequestOptions",
    "RequestType",
    "ResponseMetadata",
    "RoutingResponse",
    "RoutingStats",
    "TextResult",
    "DateMatch",
    "TemporalExtractor",
    "TimeMatch",
]
