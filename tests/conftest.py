"""Shared fixtures for routing engine tests."""

import asyncio
from datetime import date

import pytest

from prio_router.engine.classifier import RuleBasedClassifier
from prio_router.engine.providers.base import InferenceBackend
from prio_router.engine.providers.rule_based import RuleBasedBackend
from prio_router.engine.router import Router
from prio_router.engine.schemas import (
    ClassificationResult,
    Quadrant,
    RequestType,
    ResponseMetadata,
    RoutingResponse,
)
from prio_router.engine.temporal import TemporalExtractor

# Monday
REFERENCE_DATE = date(2024, 1, 15)


class StubBackend(InferenceBackend):
    """Scriptable backend recording how often it was called."""

    def __init__(
        self,
        backend_id: str = "stub",
        behavior: str = "succeed",
        available: bool = True,
        timeout_seconds: float | None = None,
        supported_types: frozenset[RequestType] | None = None,
        result=None,
        delay: float = 0.0,
    ):
        super().__init__(timeout_seconds=timeout_seconds)
        self.backend_id = backend_id
        self.behavior = behavior
        self._available = available
        self.supported_types = supported_types or frozenset(RequestType)
        self.result = result or ClassificationResult(
            quadrant=Quadrant.DO_FIRST,
            confidence=0.92,
            explanation="stub reasoning",
            is_urgent=True,
            is_important=True,
        )
        self.delay = delay
        self.calls = 0

    async def complete(self, request):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.behavior == "raise":
            raise RuntimeError(f"{self.backend_id} exploded")
        if self.behavior == "failure":
            return self.failure(request, "generation failed")
        return RoutingResponse(
            request_id=request.id,
            result=self.result,
            raw_text="{}",
            metadata=ResponseMetadata(
                provider_id=self.backend_id,
                model_id=f"{self.backend_id}-model",
                backend_id=self.backend_id,
                confidence_score=getattr(self.result, "confidence", None),
            ),
        )


@pytest.fixture
def classifier():
    """Create rule-based classifier."""
    return RuleBasedClassifier()


@pytest.fixture
def extractor():
    """Create temporal extractor pinned to a Monday."""
    return TemporalExtractor(today=lambda: REFERENCE_DATE)


@pytest.fixture
def rule_based(classifier, extractor):
    """Create rule-based backend."""
    return RuleBasedBackend(classifier=classifier, extractor=extractor)


@pytest.fixture
def stub_backend():
    """Expose the stub backend class."""
    return StubBackend


@pytest.fixture
def make_router(rule_based):
    """Build a router over the given stub backends."""

    def _make(*backends, **kwargs):
        return Router(rule_based=rule_based, backends=list(backends), **kwargs)

    return _make
