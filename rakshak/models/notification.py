"""Notification outcome, observed in logs and metrics only."""

from enum import Enum


class NotificationOutcome(str, Enum):
    """Result of a single alert dispatch attempt."""
    SENT = "SENT"
    FAILED = "FAILED"
    NOT_ATTEMPTED = "NOT_ATTEMPTED"
