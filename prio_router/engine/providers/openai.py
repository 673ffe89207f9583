"""OpenAI backend implementation."""

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage
from langchain_openai import ChatOpenAI

from prio_router.config import Settings
from prio_router.engine.providers.chat import ChatModelBackend


class OpenAIBackend(ChatModelBackend):
    """OpenAI GPT backend."""

    # Pricing per 1M tokens (input, output) in USD
    PRICING = {
        "gpt-4o": (2.5, 10.0),
        "gpt-4o-mini": (0.15, 0.6),
        "gpt-4-turbo": (10.0, 30.0),
        "gpt-3.5-turbo": (0.5, 1.5),
    }
    DEFAULT_PRICING = (2.5, 10.0)

    backend_id = "openai"
    display_name = "GPT"

    def __init__(self, settings: Settings, llm: BaseChatModel | None = None):
        """Initialize OpenAI backend.

        Args:
            settings: Application settings
            llm: Prebuilt chat model overriding the one built from settings
        """
        if not settings.openai_api_key:
            raise ValueError("OpenAI API key not configured")

        super().__init__(
            model=settings.openai_model,
            timeout_seconds=settings.backend_timeout_seconds,
            llm=llm,
        )
        self._api_key = settings.openai_api_key.get_secret_value()

    def _create_llm(self, temperature: float, max_tokens: int) -> BaseChatModel:
        return ChatOpenAI(
            model=self.model,
            api_key=self._api_key,
            temperature=temperature,
            max_tokens=max_tokens,
        )

    def _extract_usage(self, response: BaseMessage) -> dict[str, int]:
        token_usage = getattr(response, "response_metadata", {}).get("token_usage", {})
        if not token_usage:
            return super()._extract_usage(response)
        return {
            "input_tokens": token_usage.get("prompt_tokens", 0),
            "output_tokens": token_usage.get("completion_tokens", 0),
            "total_tokens": token_usage.get("total_tokens", 0),
        }
