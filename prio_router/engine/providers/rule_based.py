"""Rule-based backend wrapping the pattern classifier."""

import re
import time

import structlog

from prio_router.engine.classifier import RuleBasedClassifier
from prio_router.engine.errors import UnsupportedRequestTypeError
from prio_router.engine.providers.base import InferenceBackend
from prio_router.engine.schemas import (
    ClassificationRequest,
    ParsedTask,
    RequestType,
    ResponseMetadata,
    RoutingResponse,
)
from prio_router.engine.temporal import TemporalExtractor

logger = structlog.get_logger()

COMMAND_PREFIX = re.compile(r"^(remind me to|remind me|add task|create task|todo:?)\s+", re.IGNORECASE)
WHITESPACE = re.compile(r"\s+")


class RuleBasedBackend(InferenceBackend):
    """Offline backend that answers instantly and never fails on supported types."""

    PROVIDER_ID = "rule-based"

    backend_id = PROVIDER_ID
    display_name = "Fast Mode (Offline)"
    supported_types = frozenset({RequestType.CLASSIFY_PRIORITY, RequestType.PARSE_TASK})

    def __init__(
        self,
        classifier: RuleBasedClassifier | None = None,
        extractor: TemporalExtractor | None = None,
    ):
        """Initialize the backend.

        Args:
            classifier: Pattern classifier; a default one is created when omitted
            extractor: Date/time extractor for task parsing
        """
        super().__init__(timeout_seconds=None)
        self.classifier = classifier or RuleBasedClassifier()
        self.extractor = extractor or TemporalExtractor()

    @property
    def model_id(self) -> str:
        return self.classifier.MODEL_ID

    def respond(self, request: ClassificationRequest) -> RoutingResponse:
        """Answer a request synchronously.

        Args:
            request: Request to answer

        Returns:
            Successful RoutingResponse tagged as rule-based

        Raises:
            UnsupportedRequestTypeError: If the request type has no rule-based handler
        """
        start = time.perf_counter()

        if request.request_type == RequestType.CLASSIFY_PRIORITY:
            result = self.classifier.classify(request.text)
            confidence = result.confidence
        elif request.request_type == RequestType.PARSE_TASK:
            result = self.parse_task(request.text)
            confidence = result.confidence
        else:
            raise UnsupportedRequestTypeError(request.request_type, self.PROVIDER_ID)

        latency_ms = (time.perf_counter() - start) * 1000

        return RoutingResponse(
            request_id=request.id,
            result=result,
            metadata=ResponseMetadata(
                provider_id=self.PROVIDER_ID,
                model_id=self.model_id,
                backend_id=self.backend_id,
                latency_ms=latency_ms,
                rule_based_latency_ms=latency_ms,
                was_rule_based=True,
                confidence_score=confidence,
            ),
        )

    async def complete(self, request: ClassificationRequest) -> RoutingResponse:
        return self.respond(request)

    async def release(self) -> None:
        # Stateless; stays available.
        return None

    def estimate_cost(self, request: ClassificationRequest) -> float | None:
        return None

    def parse_task(self, text: str) -> ParsedTask:
        """Extract a structured task from natural language.

        Date and time phrases are removed from the title, along with command
        prefixes such as "remind me to".

        Args:
            text: Free-text task input

        Returns:
            ParsedTask with the cleaned title and the suggested quadrant
        """
        due_date = self.extractor.extract_due_date(text)
        due_time = self.extractor.extract_due_time(text)

        title = text
        if due_date:
            title = title.replace(due_date.span, "").strip()
        if due_time:
            title = title.replace(due_time.span, "").strip()

        title = COMMAND_PREFIX.sub("", title)
        title = WHITESPACE.sub(" ", title).strip()
        if title:
            title = title[0].upper() + title[1:]

        classification = self.classifier.classify(text)

        logger.debug(
            "Parsed task",
            title=title,
            due_date=due_date.value.isoformat() if due_date else None,
            due_time=due_time.value if due_time else None,
        )

        return ParsedTask(
            title=title,
            due_date=due_date.value if due_date else None,
            due_time=due_time.value if due_time else None,
            suggested_quadrant=classification.quadrant,
            confidence=classification.confidence,
        )
