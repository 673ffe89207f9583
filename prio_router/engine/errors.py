"""Exceptions raised by the routing engine."""

from prio_router.engine.schemas import RequestType


class PrioRouterError(Exception):
    """Base class for routing engine errors."""


class UnsupportedRequestTypeError(PrioRouterError):
    """No component can produce a result for this request type."""

    def __init__(self, request_type: RequestType, provider_id: str | None = None):
        self.request_type = request_type
        self.provider_id = provider_id
        where = f" by {provider_id}" if provider_id else ""
        super().__init__(f"Request type {request_type.value} is not supported{where}")


class BackendUnavailableError(PrioRouterError):
    """Every inference backend was unavailable or failed and no fallback is allowed."""


class BackendFailureError(PrioRouterError):
    """An inference backend failed to produce a usable response."""

    def __init__(self, backend_id: str, message: str):
        self.backend_id = backend_id
        super().__init__(f"{backend_id}: {message}")
