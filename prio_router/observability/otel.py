"""OpenTelemetry tracing for routing spans."""

import re

import structlog
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from prio_router.config import Settings, get_settings

logger = structlog.get_logger()


def service_name(app_name: str) -> str:
    """Turn a display name like "Prio Router" into a service name like "prio-router"."""
    return re.sub(r"[^a-z0-9]+", "-", app_name.lower()).strip("-") or "prio-router"


def setup_telemetry(settings: Settings | None = None, install: bool = True) -> TracerProvider:
    """Build the tracer provider used for ``router.route`` spans.

    Pass the result to ``build_router(tracer_provider=...)``. When ``install``
    is set the provider also becomes the global one, so spans from other
    instrumented libraries share the same exporter.

    Args:
        settings: Application settings; the cached settings when omitted
        install: Register the provider globally

    Returns:
        The configured TracerProvider
    """
    settings = settings or get_settings()

    resource = Resource.create(
        {
            "service.name": service_name(settings.app_name),
            "service.version": settings.app_version,
            "deployment.environment": settings.environment,
            "prio_router.routing_mode": settings.routing_mode,
        }
    )

    provider = TracerProvider(resource=resource)

    if settings.otel_exporter_otlp_endpoint:
        exporter = OTLPSpanExporter(endpoint=settings.otel_exporter_otlp_endpoint)
        provider.add_span_processor(BatchSpanProcessor(exporter))
        logger.info(
            "OTLP exporter configured",
            endpoint=settings.otel_exporter_otlp_endpoint,
        )

    if install:
        trace.set_tracer_provider(provider)

    logger.info(
        "Tracing initialized",
        service=resource.attributes["service.name"],
        installed=install,
    )
    return provider
