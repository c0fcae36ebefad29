# Providers Package
from rakshak.providers.base import ReasoningClient
from rakshak.providers.gemini import GeminiReasoningClient
from rakshak.providers.ollama import OllamaReasoningClient
from rakshak.providers.provider_factory import create_reasoning_client

__all__ = [
    "ReasoningClient",
    "GeminiReasoningClient",
    "OllamaReasoningClient",
    "create_reasoning_client",
]
