"""Local llama.cpp-compatible inference server backend."""

import time

import httpx
import structlog

from prio_router.engine.errors import BackendFailureError
from prio_router.engine.prompts import PromptTemplate, build_messages, format_prompt, stop_sequences
from prio_router.engine.providers.base import InferenceBackend
from prio_router.engine.providers.parsing import parse_result
from prio_router.engine.schemas import (
    ClassificationRequest,
    ClassificationResult,
    ParsedTask,
    RequestType,
    ResponseMetadata,
    RoutingResponse,
)

logger = structlog.get_logger()


class LlamaServerBackend(InferenceBackend):
    """Backend for a local model served over HTTP.

    The server must expose ``GET /health`` and ``POST /completion`` as the
    llama.cpp server does. The backend stays unavailable until
    ``initialize`` sees a healthy server.
    """

    backend_id = "local"
    display_name = "On-device model"
    supported_types = frozenset(
        {
            RequestType.CLASSIFY_PRIORITY,
            RequestType.PARSE_TASK,
            RequestType.SUGGEST_STRUCTURED_GOAL,
            RequestType.EXTRACT_ACTION_ITEMS,
            RequestType.GENERAL_CHAT,
        }
    )

    def __init__(
        self,
        base_url: str,
        model_id: str,
        template: PromptTemplate = PromptTemplate.PHI3,
        stepwise_prompts: bool = False,
        timeout_seconds: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the backend.

        Args:
            base_url: Server base URL, e.g. ``http://localhost:8080``
            model_id: Identifier of the served model
            template: Chat template of the served model
            stepwise_prompts: Use the shorter step-by-step classification prompt
            timeout_seconds: Backend-level timeout for a single completion
            http_client: Optional preconfigured client
        """
        super().__init__(timeout_seconds=timeout_seconds)
        self.base_url = base_url.rstrip("/")
        self.model_id = model_id
        self.template = template
        self.stepwise_prompts = stepwise_prompts
        self._client = http_client
        self._owns_client = http_client is None
        self._available = False

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=60.0)
            self._owns_client = True
        return self._client

    async def initialize(self) -> bool:
        """Probe the server's health endpoint.

        Returns:
            True if the server reported healthy
        """
        try:
            response = await self._get_client().get(f"{self.base_url}/health")
            self._available = response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning("Local inference server unreachable", url=self.base_url, error=str(e))
            self._available = False

        logger.info(
            "Local inference server probed",
            url=self.base_url,
            model=self.model_id,
            available=self._available,
        )
        return self._available

    async def complete(self, request: ClassificationRequest) -> RoutingResponse:
        """Generate a completion on the local server.

        Args:
            request: Request to answer

        Returns:
            RoutingResponse with the parsed result

        Raises:
            httpx.HTTPError: If the server call fails
        """
        start = time.perf_counter()

        system_prompt, user_prompt = build_messages(request, stepwise=self.stepwise_prompts)
        payload = {
            "prompt": format_prompt(self.template, system_prompt, user_prompt),
            "n_predict": request.options.max_tokens,
            "temperature": request.options.temperature,
            "stop": stop_sequences(self.template),
        }

        response = await self._get_client().post(f"{self.base_url}/completion", json=payload)
        response.raise_for_status()
        data = response.json()

        content = data.get("content", "")
        try:
            result = parse_result(request.request_type, content, request.text)
        except BackendFailureError as e:
            return self.failure(request, str(e))

        latency_ms = (time.perf_counter() - start) * 1000

        confidence = None
        if isinstance(result, (ClassificationResult, ParsedTask)):
            confidence = result.confidence

        return RoutingResponse(
            request_id=request.id,
            result=result,
            raw_text=content,
            metadata=ResponseMetadata(
                provider_id=self.backend_id,
                model_id=self.model_id,
                backend_id=self.backend_id,
                latency_ms=latency_ms,
                escalated_latency_ms=latency_ms,
                confidence_score=confidence,
                tokens_used=data.get("tokens_predicted", 0),
                cost_usd=0.0,
            ),
        )

    async def release(self) -> None:
        """Close the HTTP client if this backend created it."""
        self._available = False
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
