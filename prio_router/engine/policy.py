"""Escalation gating for rule-based results."""

from pydantic import BaseModel, Field

from prio_router.engine import thresholds
from prio_router.engine.schemas import ClassificationRequest, RequestOptions, RequestType


class EscalationDecision(BaseModel):
    """Result of an escalation check."""

    escalate: bool = Field(description="Whether an inference backend should be tried")
    reason: str = Field(description="Explanation for the decision")
    threshold: float = Field(description="Effective confidence threshold applied")


class EscalationPolicy:
    """Decides whether a request may leave the rule-based path."""

    ELIGIBLE_TYPES = frozenset(
        {
            RequestType.CLASSIFY_PRIORITY,
            RequestType.PARSE_TASK,
            RequestType.SUGGEST_STRUCTURED_GOAL,
        }
    )

    def __init__(
        self,
        default_threshold: float = thresholds.ESCALATION_THRESHOLD,
        eligible_types: frozenset[RequestType] | None = None,
    ):
        """
        Initialize the policy.

        Args:
            default_threshold: Threshold used when a request supplies no positive override
            eligible_types: Request types that may be escalated
        """
        self.default_threshold = default_threshold
        self.eligible_types = eligible_types if eligible_types is not None else self.ELIGIBLE_TYPES

    def effective_threshold(self, options: RequestOptions) -> float:
        """Return the caller's override when positive, else the default threshold."""
        override = options.min_confidence_override
        if override is not None and override > 0:
            return override
        return self.default_threshold

    def permits(self, request_type: RequestType, options: RequestOptions) -> bool:
        """Check the confidence-independent conditions for escalation."""
        return request_type in self.eligible_types and options.use_escalation

    def decide(
        self,
        request_type: RequestType,
        confidence: float | None,
        options: RequestOptions,
    ) -> EscalationDecision:
        """
        Decide whether a rule-based result should be escalated.

        Args:
            request_type: Type of the request being routed
            confidence: Rule-based confidence, or None when there is no rule-based result
            options: Caller options

        Returns:
            EscalationDecision with the outcome and the threshold applied
        """
        threshold = self.effective_threshold(options)

        if request_type not in self.eligible_types:
            return EscalationDecision(
                escalate=False,
                reason=f"Request type {request_type.value} is not eligible for escalation",
                threshold=threshold,
            )

        if not options.use_escalation:
            return EscalationDecision(
                escalate=False,
                reason="Escalation disabled by caller",
                threshold=threshold,
            )

        if confidence is None:
            return EscalationDecision(
                escalate=True,
                reason="No rule-based result available",
                threshold=threshold,
            )

        if thresholds.below_threshold(confidence, threshold):
            return EscalationDecision(
                escalate=True,
                reason=f"Confidence {confidence:.2f} below threshold {threshold:.2f}",
                threshold=threshold,
            )

        return EscalationDecision(
            escalate=False,
            reason=f"Confidence {confidence:.2f} meets threshold {threshold:.2f}",
            threshold=threshold,
        )

    def should_escalate(self, request: ClassificationRequest, confidence: float | None) -> bool:
        """Shortcut returning only the decision flag for a request."""
        return self.decide(request.request_type, confidence, request.options).escalate
