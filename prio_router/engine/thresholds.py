"""Confidence thresholds and per-branch scoring constants.

Both the classifier and the router read from this table so the two never
disagree about where escalation starts.
"""

# Below this, a rule-based result is a candidate for escalation.
ESCALATION_THRESHOLD = 0.65

# Rule-based confidence never exceeds this; higher values are left to backends.
MAX_RULE_BASED_CONFIDENCE = 0.95

# Confidence reported for empty input and for the ambiguous safe default.
EMPTY_INPUT_CONFIDENCE = 0.55
SAFE_DEFAULT_CONFIDENCE = 0.55

# Multiple low-priority signals
ELIMINATE_MULTI_CONFIDENCE = 0.85
# Single low-priority signal with nothing else
ELIMINATE_SINGLE_CONFIDENCE = 0.75

# Clear delegation: base + step * min(delegation, cap)
DELEGATE_CLEAR_BASE = 0.70
DELEGATE_CLEAR_CAP = 2

# Urgent and important: base + step * min(urgency + importance, cap)
DO_FIRST_BASE = 0.75
DO_FIRST_CAP = 4

# Important, not urgent: base + step * min(importance, cap)
SCHEDULE_BASE = 0.70
SCHEDULE_CAP = 3

# Urgent, not important: base + step * min(urgency, cap)
DELEGATE_URGENT_BASE = 0.65
DELEGATE_URGENT_CAP = 2

# Residual delegation signal
DELEGATE_RESIDUAL_CONFIDENCE = 0.65

# Far deadline only
SCHEDULE_FAR_DEADLINE_CONFIDENCE = 0.60

# Increment applied per counted signal in the scaled branches.
SIGNAL_STEP = 0.05

# Confidence assigned when an LLM reply has no usable JSON.
UNPARSED_LLM_CONFIDENCE = 0.5
# Confidence assumed when an LLM reply omits the field.
DEFAULT_LLM_CONFIDENCE = 0.6


def scaled_confidence(base: float, count: int, cap: int) -> float:
    """Return ``base + SIGNAL_STEP * min(count, cap)`` rounded to two places."""
    return round(base + SIGNAL_STEP * min(count, cap), 2)


def below_threshold(confidence: float, threshold: float = ESCALATION_THRESHOLD) -> bool:
    """Check whether a confidence score falls under an escalation threshold."""
    return confidence < threshold
