"""
Ollama reasoning client.

Uses a locally-running Ollama server (/api/generate) in JSON mode.
"""

from typing import Optional

import httpx

from rakshak.errors import ReasoningClientError
from rakshak.providers.base import ReasoningClient


class OllamaReasoningClient(ReasoningClient):
    """Client for interacting with Ollama."""

    name = "ollama"

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "mistral",
        timeout: float = 15.0,
        temperature: float = 0.2,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(timeout=timeout, client=client)
        if base_url and not base_url.startswith("http"):
            base_url = f"http://{base_url}"
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature

    async def classify(self, prompt: str) -> str:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "format": "json",
            "stream": False,
            "options": {"temperature": self.temperature},
        }
        data = await self._post_json(f"{self.base_url}/api/generate", payload)
        text = data.get("response", "") if isinstance(data, dict) else ""
        if not text.strip():
            raise ReasoningClientError("Ollama returned empty response")
        return text
