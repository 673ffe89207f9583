"""Confidence-driven routing between the rule-based classifier and inference backends."""

import asyncio
import threading
import time
from enum import Enum

import structlog
from opentelemetry import trace
from pydantic import BaseModel, ConfigDict, Field

from prio_router.engine.errors import BackendUnavailableError, UnsupportedRequestTypeError
from prio_router.engine.policy import EscalationPolicy
from prio_router.engine.providers.base import InferenceBackend
from prio_router.engine.providers.rule_based import RuleBasedBackend
from prio_router.engine.schemas import (
    ClassificationRequest,
    OverrideRecord,
    Quadrant,
    RoutingResponse,
    RoutingStats,
)

logger = structlog.get_logger()


class RoutingMode(str, Enum):
    """Process-wide routing strategies."""

    RULE_BASED_ONLY = "rule_based_only"  # Never consult backends
    HYBRID = "hybrid"                    # Rule-based first, escalate on low confidence
    LLM_PREFERRED = "llm_preferred"      # Backends first, rule-based on failure
    LLM_ONLY = "llm_only"                # Backends only, failure surfaces to caller


class RoutingConfig(BaseModel):
    """Immutable routing configuration snapshot."""

    model_config = ConfigDict(frozen=True)

    mode: RoutingMode = Field(
        default=RoutingMode.HYBRID, description="Active routing strategy"
    )


class Router:
    """Routes requests across the rule-based classifier and ordered inference backends.

    Backends are tried one at a time in list order; the first successful
    response wins. Stats and override history are shared across concurrent
    ``route`` calls and guarded by a lock. The routing mode is read once per
    request, so a mode change applies to requests started after it.
    """

    PROVIDER_ID = "router"

    def __init__(
        self,
        rule_based: RuleBasedBackend | None = None,
        backends: list[InferenceBackend] | None = None,
        policy: EscalationPolicy | None = None,
        mode: RoutingMode = RoutingMode.HYBRID,
        tracer_provider: trace.TracerProvider | None = None,
    ):
        """Initialize the router.

        Args:
            rule_based: Rule-based backend consulted first
            backends: Inference backends in priority order
            policy: Escalation policy
            mode: Initial routing mode
            tracer_provider: Provider for routing spans; the global provider when omitted
        """
        self.rule_based = rule_based or RuleBasedBackend()
        self.backends = list(backends or [])
        self.policy = policy or EscalationPolicy()

        self._tracer = trace.get_tracer(__name__, tracer_provider=tracer_provider)
        self._config = RoutingConfig(mode=mode)
        self._lock = threading.Lock()
        self._stats = RoutingStats()
        self._rule_based_samples = 0
        self._escalated_samples = 0
        self._overrides: list[OverrideRecord] = []

    @property
    def routing_mode(self) -> RoutingMode:
        return self._config.mode

    def set_routing_mode(self, mode: RoutingMode) -> None:
        """Switch the routing mode for subsequent requests.

        Args:
            mode: New routing mode
        """
        previous = self._config.mode
        self._config = RoutingConfig(mode=mode)
        logger.info("Routing mode changed", previous=previous.value, mode=mode.value)

    async def initialize(self) -> bool:
        """Initialize every backend, tolerating failures.

        Returns:
            True; the rule-based path is always ready
        """
        await self.rule_based.initialize()

        ready = {}
        for backend in self.backends:
            try:
                ready[backend.backend_id] = await backend.initialize()
            except Exception as e:
                logger.warning(
                    "Backend initialization failed",
                    backend=backend.backend_id,
                    error=str(e),
                )
                ready[backend.backend_id] = False

        logger.info("Router initialized", mode=self.routing_mode.value, backends=ready)
        return True

    async def release(self) -> None:
        """Release every backend."""
        for backend in self.backends:
            try:
                await backend.release()
            except Exception as e:
                logger.warning("Backend release failed", backend=backend.backend_id, error=str(e))
        await self.rule_based.release()
        logger.info("Router released")

    async def route(self, request: ClassificationRequest) -> RoutingResponse:
        """Route a request according to the current mode.

        Args:
            request: Request to route

        Returns:
            RoutingResponse with provenance metadata

        Raises:
            UnsupportedRequestTypeError: If no component can answer the request type
            BackendUnavailableError: If LLM-only mode exhausts every backend
        """
        config = self._config

        with self._tracer.start_as_current_span("router.route") as span:
            span.set_attribute("request.type", request.request_type.value)
            span.set_attribute("routing.mode", config.mode.value)

            if config.mode == RoutingMode.RULE_BASED_ONLY:
                response = self._route_rule_based_only(request)
            elif config.mode == RoutingMode.HYBRID:
                response = await self._route_hybrid(request)
            elif config.mode == RoutingMode.LLM_PREFERRED:
                response = await self._route_llm_preferred(request)
            else:
                response = await self._route_llm_only(request)

            span.set_attribute("routing.was_escalated", response.metadata.was_escalated)
            span.set_attribute("routing.provider", response.metadata.backend_id)
            return response

    def _route_rule_based_only(self, request: ClassificationRequest) -> RoutingResponse:
        response = self.rule_based.respond(request)
        self._record(
            rule_based_only=True,
            rule_based_ms=response.metadata.rule_based_latency_ms,
        )
        return response

    async def _route_hybrid(self, request: ClassificationRequest) -> RoutingResponse:
        start = time.perf_counter()

        rule_response = None
        if self.rule_based.supports(request.request_type):
            rule_response = self.rule_based.respond(request)
        rule_based_ms = (time.perf_counter() - start) * 1000

        confidence = rule_response.metadata.confidence_score if rule_response else None
        decision = self.policy.decide(request.request_type, confidence, request.options)

        if not decision.escalate:
            if rule_response is None:
                raise UnsupportedRequestTypeError(request.request_type)
            self._record(rule_based_only=True, rule_based_ms=rule_based_ms)
            return rule_response

        logger.info(
            "Escalating request",
            request_id=request.id,
            request_type=request.request_type.value,
            confidence=confidence,
            reason=decision.reason,
        )

        outcome = await self._try_backends(request)
        total_ms = (time.perf_counter() - start) * 1000

        if outcome is not None:
            backend, response = outcome
            self._record(
                escalated=True,
                rule_based_ms=rule_based_ms,
                escalated_ms=total_ms - rule_based_ms,
            )
            return self._tag_escalated(response, backend, total_ms, rule_based_ms)

        if rule_response is None:
            self._record(failed=True)
            raise UnsupportedRequestTypeError(request.request_type)

        logger.info(
            "Falling back to rule-based result",
            request_id=request.id,
            confidence=confidence,
        )
        self._record(rule_based_only=True, failed=True, rule_based_ms=rule_based_ms)
        return self._tag_fallback(rule_response, total_ms, rule_based_ms)

    async def _route_llm_preferred(self, request: ClassificationRequest) -> RoutingResponse:
        if not self.policy.permits(request.request_type, request.options):
            return self._route_rule_based_only(request)

        start = time.perf_counter()
        outcome = await self._try_backends(request)
        escalated_ms = (time.perf_counter() - start) * 1000

        if outcome is not None:
            backend, response = outcome
            self._record(escalated=True, escalated_ms=escalated_ms)
            return self._tag_escalated(response, backend, escalated_ms, 0.0)

        if not self.rule_based.supports(request.request_type):
            self._record(failed=True)
            raise UnsupportedRequestTypeError(request.request_type)

        rule_start = time.perf_counter()
        rule_response = self.rule_based.respond(request)
        rule_based_ms = (time.perf_counter() - rule_start) * 1000
        total_ms = (time.perf_counter() - start) * 1000

        logger.info("Backends failed, using rule-based result", request_id=request.id)
        self._record(rule_based_only=True, failed=True, rule_based_ms=rule_based_ms)
        return self._tag_fallback(rule_response, total_ms, rule_based_ms)

    async def _route_llm_only(self, request: ClassificationRequest) -> RoutingResponse:
        start = time.perf_counter()
        outcome = await self._try_backends(request)
        escalated_ms = (time.perf_counter() - start) * 1000

        if outcome is None:
            self._record(failed=True)
            logger.error("No backend produced a result", request_id=request.id)
            raise BackendUnavailableError(
                f"No inference backend could answer request {request.id} and fallback is disabled"
            )

        backend, response = outcome
        self._record(escalated=True, escalated_ms=escalated_ms)
        return self._tag_escalated(response, backend, escalated_ms, 0.0)

    async def _try_backends(
        self, request: ClassificationRequest
    ) -> tuple[InferenceBackend, RoutingResponse] | None:
        """Try backends in order until one succeeds.

        Args:
            request: Request to answer

        Returns:
            Tuple of (backend, response) for the first success, or None
        """
        for backend in self.backends:
            if not backend.supports(request.request_type):
                logger.debug(
                    "Skipping backend: request type unsupported",
                    backend=backend.backend_id,
                    request_type=request.request_type.value,
                )
                continue

            if not backend.is_available:
                logger.info("Skipping backend: unavailable", backend=backend.backend_id)
                continue

            timeout = request.options.timeout_seconds or backend.timeout_seconds

            try:
                response = await asyncio.wait_for(backend.complete(request), timeout=timeout)
            except TimeoutError:
                logger.warning(
                    "Backend timed out",
                    backend=backend.backend_id,
                    request_id=request.id,
                    timeout_seconds=timeout,
                )
                continue
            except Exception as e:
                logger.warning(
                    "Backend attempt failed",
                    backend=backend.backend_id,
                    request_id=request.id,
                    error=str(e),
                )
                continue

            if not response.success or response.result is None:
                logger.warning(
                    "Backend returned failure result",
                    backend=backend.backend_id,
                    request_id=request.id,
                    error=response.error,
                )
                continue

            return backend, response

        return None

    def _tag_escalated(
        self,
        response: RoutingResponse,
        backend: InferenceBackend,
        total_ms: float,
        rule_based_ms: float,
    ) -> RoutingResponse:
        metadata = response.metadata.model_copy(
            update={
                "provider_id": self.PROVIDER_ID,
                "backend_id": backend.backend_id,
                "latency_ms": total_ms,
                "rule_based_latency_ms": rule_based_ms,
                "escalated_latency_ms": total_ms - rule_based_ms,
                "was_rule_based": False,
                "was_escalated": True,
            }
        )
        return response.model_copy(update={"metadata": metadata})

    def _tag_fallback(
        self,
        response: RoutingResponse,
        total_ms: float,
        rule_based_ms: float,
    ) -> RoutingResponse:
        # Shallow copy keeps the original result object.
        metadata = response.metadata.model_copy(
            update={
                "latency_ms": total_ms,
                "rule_based_latency_ms": rule_based_ms,
                "escalated_latency_ms": total_ms - rule_based_ms,
                "was_rule_based": True,
                "was_escalated": False,
            }
        )
        return response.model_copy(update={"metadata": metadata})

    def _record(
        self,
        rule_based_only: bool = False,
        escalated: bool = False,
        failed: bool = False,
        rule_based_ms: float | None = None,
        escalated_ms: float | None = None,
    ) -> None:
        """Apply one request's outcome to the stats."""
        with self._lock:
            stats = self._stats
            stats.total_requests += 1
            if rule_based_only:
                stats.rule_based_only_count += 1
            if escalated:
                stats.escalated_count += 1
            if failed:
                stats.escalation_failed_count += 1

            if rule_based_ms is not None:
                self._rule_based_samples += 1
                stats.average_rule_based_latency_ms += (
                    rule_based_ms - stats.average_rule_based_latency_ms
                ) / self._rule_based_samples
            if escalated_ms is not None:
                self._escalated_samples += 1
                stats.average_escalated_latency_ms += (
                    escalated_ms - stats.average_escalated_latency_ms
                ) / self._escalated_samples

    def get_stats(self) -> RoutingStats:
        """Return a snapshot of the routing stats."""
        with self._lock:
            return self._stats.model_copy()

    def reset_stats(self) -> None:
        """Clear all counters and the override history."""
        with self._lock:
            self._stats = RoutingStats()
            self._rule_based_samples = 0
            self._escalated_samples = 0
            self._overrides.clear()
        logger.info("Routing stats reset")

    def record_override(
        self,
        request_id: str,
        original_quadrant: Quadrant,
        corrected_quadrant: Quadrant,
        was_escalated: bool,
    ) -> OverrideRecord:
        """Record a user's correction of a classification.

        Args:
            request_id: Id of the request that was corrected
            original_quadrant: Quadrant the router returned
            corrected_quadrant: Quadrant the user chose
            was_escalated: Whether the original came from an escalated backend

        Returns:
            The stored OverrideRecord
        """
        record = OverrideRecord(
            request_id=request_id,
            original_quadrant=original_quadrant,
            corrected_quadrant=corrected_quadrant,
            was_escalated=was_escalated,
        )
        with self._lock:
            self._overrides.append(record)
            self._stats.override_count += 1

        logger.info(
            "Override recorded",
            request_id=request_id,
            original=original_quadrant.value,
            corrected=corrected_quadrant.value,
            was_escalated=was_escalated,
        )
        return record

    def get_override_history(self) -> list[OverrideRecord]:
        """Return a copy of the override history, oldest first."""
        with self._lock:
            return list(self._overrides)

    def accuracy(self) -> float:
        """Share of routed requests the user did not override; 0 before any request."""
        return self.get_stats().accuracy()
