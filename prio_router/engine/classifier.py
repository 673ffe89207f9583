"""Rule-based Eisenhower classification."""

from dataclasses import dataclass, field

import structlog

from prio_router.engine import thresholds
from prio_router.engine.patterns import PatternLibrary
from prio_router.engine.schemas import ClassificationResult, Quadrant

logger = structlog.get_logger()


@dataclass(frozen=True)
class SignalScores:
    """Pattern matches found in a task description."""

    urgency: list[str] = field(default_factory=list)
    importance: list[str] = field(default_factory=list)
    delegation: list[str] = field(default_factory=list)
    low_priority: list[str] = field(default_factory=list)
    has_near_deadline: bool = False
    has_far_deadline: bool = False

    @property
    def urgency_score(self) -> int:
        return len(self.urgency)

    @property
    def importance_score(self) -> int:
        return len(self.importance)

    @property
    def delegation_score(self) -> int:
        return len(self.delegation)

    @property
    def low_priority_score(self) -> int:
        return len(self.low_priority)

    @property
    def is_urgent(self) -> bool:
        return self.urgency_score >= 1 or self.has_near_deadline

    @property
    def is_important(self) -> bool:
        # Any low-priority or delegation signal vetoes importance.
        return (
            self.importance_score >= 1
            and self.low_priority_score == 0
            and self.delegation_score == 0
        )


class RuleBasedClassifier:
    """Deterministic pattern-matching classifier.

    Always available and never raises: ambiguous or empty input falls back to
    a low-confidence Schedule result so it gets reviewed rather than dropped.
    """

    MODEL_ID = "rule-based-v1"

    def __init__(
        self,
        patterns: type[PatternLibrary] = PatternLibrary,
        escalation_threshold: float = thresholds.ESCALATION_THRESHOLD,
    ):
        """Initialize the classifier.

        Args:
            patterns: Pattern library supplying the signal groups
            escalation_threshold: Confidence below which results are flagged for escalation
        """
        self.patterns = patterns
        self.escalation_threshold = escalation_threshold

    def score(self, text: str) -> SignalScores:
        """Match every signal group against the text.

        Args:
            text: Task description

        Returns:
            SignalScores with the matched phrases of each group
        """
        text = text.strip()
        return SignalScores(
            urgency=self.patterns.URGENCY.matches(text),
            importance=self.patterns.IMPORTANCE.matches(text),
            delegation=self.patterns.DELEGATION.matches(text),
            low_priority=self.patterns.LOW_PRIORITY.matches(text),
            has_near_deadline=self.patterns.NEAR_DEADLINE.any_match(text),
            has_far_deadline=self.patterns.FAR_DEADLINE.any_match(text),
        )

    def classify(self, text: str) -> ClassificationResult:
        """Classify a task description into an Eisenhower quadrant.

        Args:
            text: Task description

        Returns:
            ClassificationResult with quadrant, confidence and matched signals
        """
        if not text or not text.strip():
            return ClassificationResult(
                quadrant=Quadrant.SCHEDULE,
                confidence=thresholds.EMPTY_INPUT_CONFIDENCE,
                explanation="No task text provided - scheduling for review",
                is_urgent=False,
                is_important=False,
                should_escalate=thresholds.below_threshold(
                    thresholds.EMPTY_INPUT_CONFIDENCE, self.escalation_threshold
                ),
            )

        signals = self.score(text)
        quadrant, confidence, explanation = self._decide(signals)
        confidence = min(confidence, thresholds.MAX_RULE_BASED_CONFIDENCE)

        logger.debug(
            "Rule-based classification",
            quadrant=quadrant.value,
            confidence=confidence,
            urgency=signals.urgency_score,
            importance=signals.importance_score,
            delegation=signals.delegation_score,
            low_priority=signals.low_priority_score,
        )

        return ClassificationResult(
            quadrant=quadrant,
            confidence=confidence,
            explanation=explanation,
            is_urgent=signals.is_urgent,
            is_important=signals.is_important,
            urgency_signals=signals.urgency,
            importance_signals=signals.importance,
            should_escalate=thresholds.below_threshold(confidence, self.escalation_threshold),
        )

    def _decide(self, signals: SignalScores) -> tuple[Quadrant, float, str]:
        """Apply the classification precedence; the first matching rule wins."""
        urgency = signals.urgency_score
        importance = signals.importance_score
        delegation = signals.delegation_score
        low_priority = signals.low_priority_score
        is_urgent = signals.is_urgent
        is_important = signals.is_important

        if low_priority >= 2:
            return (
                Quadrant.ELIMINATE,
                thresholds.ELIMINATE_MULTI_CONFIDENCE,
                f"Multiple low-priority indicators detected: {', '.join(signals.low_priority[:2])}",
            )

        if low_priority >= 1 and urgency == 0 and importance == 0:
            return (
                Quadrant.ELIMINATE,
                thresholds.ELIMINATE_SINGLE_CONFIDENCE,
                f"Low-priority activity: {signals.low_priority[0]}",
            )

        if delegation >= 1 and not is_important and not is_urgent:
            return (
                Quadrant.DELEGATE,
                thresholds.scaled_confidence(
                    thresholds.DELEGATE_CLEAR_BASE, delegation, thresholds.DELEGATE_CLEAR_CAP
                ),
                f"Routine/administrative task: {signals.delegation[0]}",
            )

        if is_urgent and is_important:
            return (
                Quadrant.DO_FIRST,
                thresholds.scaled_confidence(
                    thresholds.DO_FIRST_BASE, urgency + importance, thresholds.DO_FIRST_CAP
                ),
                _explain("Urgent and important", signals.urgency, signals.importance),
            )

        if is_important:
            return (
                Quadrant.SCHEDULE,
                thresholds.scaled_confidence(
                    thresholds.SCHEDULE_BASE, importance, thresholds.SCHEDULE_CAP
                ),
                f"Important but not time-sensitive: {signals.importance[0]}",
            )

        if is_urgent:
            reason = signals.urgency[0] if signals.urgency else "deadline pressure"
            return (
                Quadrant.DELEGATE,
                thresholds.scaled_confidence(
                    thresholds.DELEGATE_URGENT_BASE, urgency, thresholds.DELEGATE_URGENT_CAP
                ),
                f"Time-sensitive but could potentially be delegated: {reason}",
            )

        if delegation >= 1:
            return (
                Quadrant.DELEGATE,
                thresholds.DELEGATE_RESIDUAL_CONFIDENCE,
                f"Routine task suitable for delegation: {signals.delegation[0]}",
            )

        if signals.has_far_deadline:
            return (
                Quadrant.SCHEDULE,
                thresholds.SCHEDULE_FAR_DEADLINE_CONFIDENCE,
                "Future deadline detected - schedule for later",
            )

        return (
            Quadrant.SCHEDULE,
            thresholds.SAFE_DEFAULT_CONFIDENCE,
            "No clear urgency indicators - scheduling for review",
        )


def _explain(prefix: str, urgency: list[str], importance: list[str]) -> str:
    signals = []
    if urgency:
        signals.append(f"urgency: {urgency[0]}")
    if importance:
        signals.append(f"importance: {importance[0]}")
    if not signals:
        return prefix
    return f"{prefix} ({', '.join(signals)})"
