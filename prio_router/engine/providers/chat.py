"""Backend adapter for LangChain chat models."""

import time
from typing import Any

import structlog
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from prio_router.engine.errors import BackendFailureError
from prio_router.engine.prompts import build_messages
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


class ChatModelBackend(InferenceBackend):
    """Backend that prompts a chat model and parses its JSON reply.

    Subclasses supply the concrete chat model through ``_create_llm`` and
    their pricing table. A prebuilt model may be injected instead, in which
    case per-request temperature and token limits are the model's own.
    """

    # Pricing per 1M tokens (input, output) in USD
    PRICING: dict[str, tuple[float, float]] = {}
    DEFAULT_PRICING: tuple[float, float] = (0.0, 0.0)

    supported_types = frozenset(RequestType)

    def __init__(
        self,
        model: str,
        timeout_seconds: float | None = None,
        llm: BaseChatModel | None = None,
    ):
        """Initialize the backend.

        Args:
            model: Model identifier
            timeout_seconds: Backend-level timeout for a single completion
            llm: Prebuilt chat model, mainly for tests
        """
        super().__init__(timeout_seconds=timeout_seconds)
        self.model = model
        self._llm = llm

    def _create_llm(self, temperature: float, max_tokens: int) -> BaseChatModel:
        """Build the chat model; subclasses override this unless ``llm`` is injected."""
        raise BackendFailureError(
            self.backend_id,
            f"{type(self).__name__} has no chat model; pass llm or override _create_llm",
        )

    async def complete(self, request: ClassificationRequest) -> RoutingResponse:
        """Prompt the chat model and parse its reply.

        Args:
            request: Request to answer

        Returns:
            RoutingResponse with the parsed result, or a failure result when
            the reply cannot be parsed
        """
        start = time.perf_counter()

        system_prompt, user_prompt = build_messages(request)
        llm = self._llm or self._create_llm(
            temperature=request.options.temperature,
            max_tokens=request.options.max_tokens,
        )

        response = await llm.ainvoke(
            [SystemMessage(content=system_prompt), HumanMessage(content=user_prompt)]
        )
        content = _message_text(response)

        try:
            result = parse_result(request.request_type, content, request.text)
        except BackendFailureError as e:
            logger.warning(
                "Unparseable model reply",
                backend=self.backend_id,
                model=self.model,
                error=str(e),
            )
            return self.failure(request, str(e))

        usage = self._extract_usage(response)
        cost = self.calculate_cost(usage["input_tokens"], usage["output_tokens"], self.model)
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
                model_id=self.model,
                backend_id=self.backend_id,
                latency_ms=latency_ms,
                escalated_latency_ms=latency_ms,
                confidence_score=confidence,
                tokens_used=usage["total_tokens"],
                cost_usd=cost,
            ),
        )

    def _extract_usage(self, response: BaseMessage) -> dict[str, int]:
        """Read token usage from a reply.

        Args:
            response: Chat model reply

        Returns:
            Dict with input_tokens, output_tokens and total_tokens
        """
        usage_metadata = getattr(response, "usage_metadata", None) or {}
        input_tokens = usage_metadata.get("input_tokens", 0)
        output_tokens = usage_metadata.get("output_tokens", 0)
        return {
            "input_tokens": input_tokens,
            "output_tokens": output_tokens,
            "total_tokens": usage_metadata.get("total_tokens", input_tokens + output_tokens),
        }

    def get_pricing(self, model: str) -> tuple[float, float]:
        """Get pricing for a model.

        Args:
            model: Model identifier

        Returns:
            Tuple of (input_price, output_price) per 1M tokens in USD
        """
        return self.PRICING.get(model, self.DEFAULT_PRICING)

    def calculate_cost(self, input_tokens: int, output_tokens: int, model: str) -> float:
        """Calculate cost for token usage.

        Args:
            input_tokens: Number of input tokens
            output_tokens: Number of output tokens
            model: Model identifier

        Returns:
            Cost in USD
        """
        input_price, output_price = self.get_pricing(model)

        input_cost = (input_tokens / 1_000_000) * input_price
        output_cost = (output_tokens / 1_000_000) * output_price

        return input_cost + output_cost

    def estimate_cost(self, request: ClassificationRequest) -> float | None:
        """Upper-bound cost estimate: prompt at ~4 chars/token plus max output tokens."""
        system_prompt, user_prompt = build_messages(request)
        input_tokens = (len(system_prompt) + len(user_prompt)) // 4
        return self.calculate_cost(input_tokens, request.options.max_tokens, self.model)


def _message_text(message: Any) -> str:
    """Flatten a chat reply's content to text."""
    content = getattr(message, "content", message)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
        return "".join(parts)
    return str(content)
