"""Google backend implementation."""

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from prio_router.config import Settings
from prio_router.engine.providers.chat import ChatModelBackend


class GoogleBackend(ChatModelBackend):
    """Google Gemini backend."""

    # Pricing per 1M tokens (input, output) in USD
    PRICING = {
        "gemini-2.5-pro": (1.25, 10.0),
        "gemini-2.5-flash": (0.3, 2.5),
        "gemini-1.5-pro": (1.25, 5.0),
        "gemini-1.5-flash": (0.075, 0.3),
    }
    DEFAULT_PRICING = (0.5, 2.0)

    backend_id = "google"
    display_name = "Gemini"

    def __init__(self, settings: Settings, llm: BaseChatModel | None = None):
        """Initialize Google backend.

        Args:
            settings: Application settings
            llm: Prebuilt chat model overriding the one built from settings
        """
        if not settings.google_api_key:
            raise ValueError("Google API key not configured")

        super().__init__(
            model=settings.google_model,
            timeout_seconds=settings.backend_timeout_seconds,
            llm=llm,
        )
        self._api_key = settings.google_api_key.get_secret_value()

    def _create_llm(self, temperature: float, max_tokens: int) -> BaseChatModel:
        return ChatGoogleGenerativeAI(
            model=self.model,
            google_api_key=self._api_key,
            temperature=temperature,
            max_output_tokens=max_tokens,
        )

    def _extract_usage(self, response: BaseMessage) -> dict[str, int]:
        usage_metadata = getattr(response, "response_metadata", {}).get("usage_metadata", {})
        if not usage_metadata:
            return super()._extract_usage(response)
        return {
            "input_tokens": usage_metadata.get("prompt_token_count", 0),
            "output_tokens": usage_metadata.get("candidates_token_count", 0),
            "total_tokens": usage_metadata.get("total_token_count", 0),
        }
