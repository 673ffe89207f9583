"""Anthropic backend implementation."""

from langchain_anthropic import ChatAnthropic
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage

from prio_router.config import Settings
from prio_router.engine.providers.chat import ChatModelBackend


class AnthropicBackend(ChatModelBackend):
    """Anthropic Claude backend."""

    # Pricing per 1M tokens (input, output) in USD
    PRICING = {
        "claude-sonnet-4-20250514": (3.0, 15.0),
        "claude-3-5-sonnet-20241022": (3.0, 15.0),
        "claude-3-5-haiku-20241022": (0.8, 4.0),
        "claude-3-haiku-20240307": (0.25, 1.25),
    }
    DEFAULT_PRICING = (3.0, 15.0)

    backend_id = "anthropic"
    display_name = "Claude"

    def __init__(self, settings: Settings, llm: BaseChatModel | None = None):
        """Initialize Anthropic backend.

        Args:
            settings: Application settings
            llm: Prebuilt chat model overriding the one built from settings
        """
        if not settings.anthropic_api_key:
            raise ValueError("Anthropic API key not configured")

        super().__init__(
            model=settings.anthropic_model,
            timeout_seconds=settings.backend_timeout_seconds,
            llm=llm,
        )
        self._api_key = settings.anthropic_api_key.get_secret_value()

    def _create_llm(self, temperature: float, max_tokens: int) -> BaseChatModel:
        return ChatAnthropic(
            model=self.model,
            api_key=self._api_key,
            temperature=temperature,
            max_tokens=max_tokens,
        )

    def _extract_usage(self, response: BaseMessage) -> dict[str, int]:
        usage_data = getattr(response, "response_metadata", {}).get("usage", {})
        if not usage_data:
            return super()._extract_usage(response)
        return {
            "input_tokens": usage_data.get("input_tokens", 0),
            "output_tokens": usage_data.get("output_tokens", 0),
            "total_tokens": usage_data.get("input_tokens", 0) + usage_data.get("output_tokens", 0),
        }
