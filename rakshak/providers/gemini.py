"""
Google Gemini reasoning client.

Talks to the Generative Language REST API (generateContent) and asks for a
JSON response body.
"""

from typing import Optional

import httpx

from rakshak.errors import ReasoningClientError
from rakshak.providers.base import ReasoningClient


class GeminiReasoningClient(ReasoningClient):
    """Client for the Gemini generateContent endpoint."""

    name = "gemini"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 15.0,
        temperature: float = 0.2,
        client: Optional[httpx.AsyncClient] = None,
    ):
        if not api_key:
            raise ValueError("Gemini API key is required")
        super().__init__(timeout=timeout, client=client)
        self._api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature

    async def classify(self, prompt: str) -> str:
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.temperature,
                "responseMimeType": "application/json",
            },
        }
        data = await self._post_json(
            f"{self.base_url}/models/{self.model}:generateContent",
            payload,
            headers={"x-goog-api-key": self._api_key},
        )
        return self._extract_text(data)

    @staticmethod
    def _extract_text(data: dict) -> str:
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as e:
            # Blocked prompts come back without candidates
            raise ReasoningClientError("Gemini returned no candidates") from e

        text = "".join(p.get("text", "") for p in parts if isinstance(p, dict))
        if not text.strip():
            raise ReasoningClientError("Gemini returned empty response")
        return text
