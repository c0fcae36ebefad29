"""
NOTIFICATION DISPATCHER

Gates the emergency alert on the Verdict and performs one best-effort send.
A failed send is logged and counted; it never changes the Verdict or the
response.
"""

import logging
from typing import Optional

from rakshak.errors import NotificationFailed
from rakshak.metrics import NOTIFICATIONS_TOTAL
from rakshak.models.notification import NotificationOutcome
from rakshak.models.verdict import Severity, Verdict
from rakshak.tools.twilio_client import NotificationGateway

logger = logging.getLogger(__name__)

# Lowest severity that alerts. LOW never alerts, even for an accident
ALERT_THRESHOLD = Severity.MEDIUM


class NotificationDispatcher:
    """Sends at most one alert per qualifying Verdict to a fixed contact."""

    AGENT_NAME = "NotificationDispatcher"

    def __init__(
        self,
        gateway: Optional[NotificationGateway],
        destination: Optional[str],
    ):
        self._gateway = gateway
        self._destination = destination

    @property
    def is_configured(self) -> bool:
        return self._gateway is not None and bool(self._destination)

    @staticmethod
    def should_notify(verdict: Verdict) -> bool:
        return verdict.is_accident and verdict.severity.rank >= ALERT_THRESHOLD.rank

    @staticmethod
    def format_message(verdict: Verdict, location: str) -> str:
        return (
            "RAKSHAK AI ALERT\n"
            f"SEVERITY: {verdict.severity.value}\n"
            f"LOCATION: {location}\n\n"
            f"SUMMARY: {verdict.summary}"
        )

    async def maybe_notify(self, verdict: Verdict, location: str) -> NotificationOutcome:
        """
        Send the alert if the Verdict qualifies. Never raises.

        Args:
            verdict: Final Verdict for the request.
            location: Sanitized location from the Reading.

        Returns:
            SENT, FAILED, or NOT_ATTEMPTED.
        """
        if not self.should_notify(verdict):
            logger.info(f"[{self.AGENT_NAME}] False alarm / low severity; no alert")
            return self._record(NotificationOutcome.NOT_ATTEMPTED)

        if not self.is_configured:
            logger.warning(
                f"[{self.AGENT_NAME}] Notification gateway or emergency contact not set; "
                f"skipping {verdict.severity.value} alert"
            )
            return self._record(NotificationOutcome.NOT_ATTEMPTED)

        logger.info(f"[{self.AGENT_NAME}] Emergency detected ({verdict.severity.value}); sending alert")
        try:
            await self._gateway.send(self.format_message(verdict, location), self._destination)
        except NotificationFailed as e:
            logger.error(f"[{self.AGENT_NAME}] Alert send failed: {e}")
            return self._record(NotificationOutcome.FAILED)
        except Exception:
            logger.exception(f"[{self.AGENT_NAME}] Alert send failed unexpectedly")
            return self._record(NotificationOutcome.FAILED)

        logger.info(f"[{self.AGENT_NAME}] Emergency alert sent")
        return self._record(NotificationOutcome.SENT)

    @staticmethod
    def _record(outcome: NotificationOutcome) -> NotificationOutcome:
        NOTIFICATIONS_TOTAL.labels(outcome=outcome.value).inc()
        return outcome

    async def close(self):
        if self._gateway is not None:
            await self._gateway.close()
