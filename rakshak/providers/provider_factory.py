"""
Reasoning Provider Factory

Selects the primary-tier client from configuration (REASONING_PROVIDER).
Returning None means the engine runs on the deterministic rule table only.
"""

import logging
from typing import Optional

from rakshak.config.settings import Config
from rakshak.providers.base import ReasoningClient
from rakshak.providers.gemini import GeminiReasoningClient
from rakshak.providers.ollama import OllamaReasoningClient

logger = logging.getLogger(__name__)


def create_reasoning_client(config: Config) -> Optional[ReasoningClient]:
    """
    Build the configured reasoning client.

    Args:
        config: Application configuration.

    Returns:
        A ReasoningClient, or None when the provider is 'none' or the
        provider is not usable with the given configuration.
    """
    provider = config.reasoning.provider
    timeout = config.reasoning.timeout_seconds

    if provider == "none":
        logger.info("Reasoning provider disabled; using deterministic rules only")
        return None

    if provider == "gemini":
        if not config.gemini.api_key:
            logger.warning(
                "GEMINI_API_KEY not set; using deterministic rules only"
            )
            return None
        logger.info(f"Reasoning provider: gemini | model={config.gemini.model}")
        return GeminiReasoningClient(
            api_key=config.gemini.api_key,
            model=config.gemini.model,
            base_url=config.gemini.base_url,
            timeout=timeout,
        )

    if provider == "ollama":
        logger.info(
            f"Reasoning provider: ollama | url={config.ollama.url} model={config.ollama.model}"
        )
        return OllamaReasoningClient(
            base_url=config.ollama.url,
            model=config.ollama.model,
            timeout=timeout,
        )

    raise ValueError(f"Unknown reasoning provider: {provider}")
