"""Logging and tracing setup."""

from prio_router.observability.logging import configure_logging
from prio_router.observability.otel import setup_telemetry

__all__ = ["configure_logging", "setup_telemetry"]
