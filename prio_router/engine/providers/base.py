"""Base interface for inference backends."""

from abc import ABC, abstractmethod

from prio_router.engine.schemas import (
    ClassificationRequest,
    RequestType,
    ResponseMetadata,
    RoutingResponse,
)


class InferenceBackend(ABC):
    """Abstract base class for components that can answer routing requests."""

    backend_id: str = "unknown"
    display_name: str = "Unknown backend"
    supported_types: frozenset[RequestType] = frozenset()

    def __init__(self, timeout_seconds: float | None = None):
        """Initialize the backend.

        Args:
            timeout_seconds: Backend-level timeout for a single completion
        """
        self.timeout_seconds = timeout_seconds
        self._available = True

    @property
    def is_available(self) -> bool:
        """Liveness flag polled by the router before each attempt."""
        return self._available

    def supports(self, request_type: RequestType) -> bool:
        return request_type in self.supported_types

    async def initialize(self) -> bool:
        """Prepare the backend for use.

        Returns:
            True when the backend is ready to serve requests
        """
        return self.is_available

    @abstractmethod
    async def complete(self, request: ClassificationRequest) -> RoutingResponse:
        """Answer a routing request.

        Args:
            request: Request to answer

        Returns:
            RoutingResponse; ``success=False`` marks a failure result
        """
        pass

    async def release(self) -> None:
        """Free any resources held by the backend."""
        self._available = False

    def estimate_cost(self, request: ClassificationRequest) -> float | None:
        """Estimate the USD cost of answering a request, or None when unknown."""
        return 0.0

    def failure(self, request: ClassificationRequest, error: str) -> RoutingResponse:
        """Build a failure result for a request."""
        return RoutingResponse(
            request_id=request.id,
            success=False,
            error=error,
            metadata=ResponseMetadata(provider_id=self.backend_id, backend_id=self.backend_id),
        )
