"""Router assembly from application settings."""

import structlog
from opentelemetry.trace import TracerProvider

from prio_router.config import Settings, get_settings
from prio_router.engine.classifier import RuleBasedClassifier
from prio_router.engine.policy import EscalationPolicy
from prio_router.engine.prompts import PromptTemplate
from prio_router.engine.providers import (
    AnthropicBackend,
    GoogleBackend,
    InferenceBackend,
    LlamaServerBackend,
    OpenAIBackend,
    RuleBasedBackend,
)
from prio_router.engine.router import Router, RoutingMode

logger = structlog.get_logger()


def build_backend(backend_id: str, settings: Settings) -> InferenceBackend | None:
    """Build one backend by id.

    Args:
        backend_id: One of ``local``, ``anthropic``, ``openai``, ``google``
        settings: Application settings

    Returns:
        The backend, or None when it is not configured

    Raises:
        ValueError: If the backend id is unknown
    """
    if backend_id == "local":
        if not settings.local_server_url:
            return None
        return LlamaServerBackend(
            base_url=settings.local_server_url,
            model_id=settings.local_model_id,
            template=PromptTemplate(settings.local_prompt_template),
            stepwise_prompts=settings.local_stepwise_prompts,
            timeout_seconds=settings.backend_timeout_seconds,
        )

    cloud = {
        "anthropic": AnthropicBackend,
        "openai": OpenAIBackend,
        "google": GoogleBackend,
    }
    if backend_id not in cloud:
        raise ValueError(f"Unknown backend: {backend_id}")

    try:
        return cloud[backend_id](settings)
    except ValueError:
        # Missing credentials
        return None


def build_router(
    settings: Settings | None = None,
    tracer_provider: TracerProvider | None = None,
) -> Router:
    """Assemble a Router from settings.

    Backends are added in ``backend_order``; those without credentials or a
    server URL are skipped.

    Args:
        settings: Application settings; the cached settings when omitted
        tracer_provider: Provider for routing spans, e.g. from ``setup_telemetry``

    Returns:
        Configured Router, not yet initialized
    """
    settings = settings or get_settings()

    classifier = RuleBasedClassifier(escalation_threshold=settings.escalation_threshold)
    backends = []
    for backend_id in settings.backend_order:
        backend = build_backend(backend_id, settings)
        if backend is None:
            logger.info("Backend not configured, skipping", backend=backend_id)
            continue
        backends.append(backend)

    router = Router(
        rule_based=RuleBasedBackend(classifier=classifier),
        backends=backends,
        policy=EscalationPolicy(default_threshold=settings.escalation_threshold),
        mode=RoutingMode(settings.routing_mode),
        tracer_provider=tracer_provider,
    )

    logger.info(
        "Router built",
        mode=settings.routing_mode,
        backends=[backend.backend_id for backend in backends],
    )
    return router
