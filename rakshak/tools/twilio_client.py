"""Twilio SMS client used as the emergency notification gateway"""
import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from rakshak.errors import NotificationFailed


logger = logging.getLogger(__name__)


class NotificationGateway(ABC):
    """Best-effort message sender."""

    @abstractmethod
    async def send(self, message: str, destination: str) -> None:
        """
        Deliver a message.

        Raises:
            NotificationFailed: If the gateway rejects or never receives it.
        """
        pass

    async def close(self):
        pass


class TwilioSMSGateway(NotificationGateway):
    """Sends SMS through the Twilio Messages REST API"""

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        base_url: str = "https://api.twilio.com",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        if not (account_sid and auth_token and from_number):
            raise ValueError("Twilio account SID, auth token and sender number are required")
        self.account_sid = account_sid
        self.from_number = from_number
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.client = client or httpx.AsyncClient(
            timeout=timeout, auth=(account_sid, auth_token)
        )

    @property
    def messages_url(self) -> str:
        return f"{self.base_url}/2010-04-01/Accounts/{self.account_sid}/Messages.json"

    async def send(self, message: str, destination: str) -> None:
        """Single send attempt; no retry.

        Raises:
            NotificationFailed: On timeout, connection error or a non-2xx reply
        """
        try:
            resp = await self.client.post(
                self.messages_url,
                data={"From": self.from_number, "To": destination, "Body": message},
            )
            resp.raise_for_status()
        except httpx.TimeoutException as e:
            raise NotificationFailed(f"Twilio timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            # Twilio error bodies carry a 'message' field, e.g. invalid 'To' number
            detail = ""
            try:
                body = e.response.json()
                if isinstance(body, dict):
                    detail = str(body.get("message", ""))
            except ValueError:
                pass
            raise NotificationFailed(
                f"Twilio returned HTTP {e.response.status_code} {detail}".rstrip()
            ) from e
        except httpx.HTTPError as e:
            raise NotificationFailed(f"Twilio request failed: {e}") from e

        try:
            body = resp.json()
            sid = body.get("sid", "") if isinstance(body, dict) else ""
        except ValueError:
            sid = ""
        logger.info(f"Twilio accepted message {sid or '(no sid)'}")

    async def close(self):
        await self.client.aclose()
