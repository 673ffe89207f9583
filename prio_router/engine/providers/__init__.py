"""Inference backend implementations for the router."""

from prio_router.engine.providers.anthropic import AnthropicBackend
from prio_router.engine.providers.base import InferenceBackend
from prio_router.engine.providers.chat import ChatModelBackend
from prio_router.engine.providers.google import GoogleBackend
from prio_router.engine.providers.llama_server import LlamaServerBackend
from prio_router.engine.providers.openai import OpenAIBackend
from prio_router.engine.providers.rule_based import RuleBasedBackend

__all__ = [
    "InferenceBackend",
    "ChatModelBackend",
    "AnthropicBackend",
    "GoogleBackend",
    "LlamaServerBackend",
    "OpenAIBackend",
    "RuleBasedBackend",
]
