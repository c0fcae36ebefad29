"""
Reasoning client interface.

A reasoning client sends one prompt to an external model and returns the raw
text. It knows nothing about Verdicts; decoding belongs to AssistedStrategy.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from rakshak.errors import ReasoningClientError


class ReasoningClient(ABC):
    """Base class for reasoning service clients."""

    name = "reasoning"

    def __init__(self, timeout: float, client: Optional[httpx.AsyncClient] = None):
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    async def classify(self, prompt: str) -> str:
        """
        Send the classification prompt.

        Returns:
            Raw model text.

        Raises:
            ReasoningClientError: On transport errors, timeouts, HTTP errors
                or a response without text.
        """
        pass

    async def _post_json(self, url: str, payload: dict, **kwargs) -> dict:
        """Single POST attempt; every failure becomes ReasoningClientError."""
        try:
            response = await self._client.post(url, json=payload, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.TimeoutException as e:
            raise ReasoningClientError(f"{self.name} timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise ReasoningClientError(
                f"{self.name} returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise ReasoningClientError(f"{self.name} request failed: {e}") from e
        except ValueError as e:
            raise ReasoningClientError(f"{self.name} returned a non-JSON body") from e

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()
