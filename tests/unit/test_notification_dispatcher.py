"""
Unit Tests for Notification Dispatcher

Tests:
- Gating on isAccident and severity
- Single send attempt, failures swallowed
- Unconfigured gateway/contact
"""

import pytest

from rakshak.agents.notification_dispatcher import NotificationDispatcher
from rakshak.models.notification import NotificationOutcome
from rakshak.models.verdict import RecommendedAction, Severity, Verdict

CONTACT = "+15550001111"


def _verdict(is_accident, severity, action):
    return Verdict(is_accident=is_accident, severity=severity, summary="test", action=action)


ALERTING = [
    _verdict(True, Severity.MEDIUM, RecommendedAction.NOTIFY_CONTACT),
    _verdict(True, Severity.CRITICAL, RecommendedAction.DISPATCH_AMBULANCE),
]

SILENT = [
    _verdict(False, Severity.LOW, RecommendedAction.IGNORE),
    _verdict(False, Severity.LOW, RecommendedAction.LOG_EVENT),
    _verdict(False, Severity.MEDIUM, RecommendedAction.LOG_EVENT),
    _verdict(True, Severity.LOW, RecommendedAction.LOG_EVENT),
    _verdict(True, Severity.LOW, RecommendedAction.NOTIFY_CONTACT),
]


class TestShouldNotify:

    @pytest.mark.parametrize("verdict", ALERTING)
    def test_alerting_verdicts(self, verdict):
        assert NotificationDispatcher.should_notify(verdict) is True

    @pytest.mark.parametrize("verdict", SILENT)
    def test_silent_verdicts(self, verdict):
        assert NotificationDispatcher.should_notify(verdict) is False


class TestMaybeNotify:

    @pytest.mark.parametrize("verdict", ALERTING)
    @pytest.mark.asyncio
    async def test_sends_once(self, gateway, verdict):
        dispatcher = NotificationDispatcher(gateway=gateway, destination=CONTACT)

        outcome = await dispatcher.maybe_notify(verdict, "City Rd")

        assert outcome == NotificationOutcome.SENT
        assert len(gateway.sent) == 1
        message, destination = gateway.sent[0]
        assert destination == CONTACT
        assert f"SEVERITY: {verdict.severity.value}" in message
        assert "LOCATION: City Rd" in message
        assert "SUMMARY: test" in message

    @pytest.mark.parametrize("verdict", SILENT)
    @pytest.mark.asyncio
    async def test_never_sends_for_silent(self, gateway, verdict):
        dispatcher = NotificationDispatcher(gateway=gateway, destination=CONTACT)

        outcome = await dispatcher.maybe_notify(verdict, "Home")

        assert outcome == NotificationOutcome.NOT_ATTEMPTED
        assert gateway.sent == []

    @pytest.mark.asyncio
    async def test_gateway_failure_is_swallowed(self, make_gateway):
        gateway = make_gateway(fail=True)
        dispatcher = NotificationDispatcher(gateway=gateway, destination=CONTACT)

        outcome = await dispatcher.maybe_notify(ALERTING[1], "NH44")

        assert outcome == NotificationOutcome.FAILED
        assert len(gateway.sent) == 1

    @pytest.mark.asyncio
    async def test_unexpected_gateway_error_is_swallowed(self, make_gateway):
        gateway = make_gateway(error=ConnectionResetError("reset"))
        dispatcher = NotificationDispatcher(gateway=gateway, destination=CONTACT)

        outcome = await dispatcher.maybe_notify(ALERTING[0], "NH44")

        assert outcome == NotificationOutcome.FAILED
        assert len(gateway.sent) == 1

    @pytest.mark.asyncio
    async def test_missing_gateway(self):
        dispatcher = NotificationDispatcher(gateway=None, destination=CONTACT)

        outcome = await dispatcher.maybe_notify(ALERTING[1], "NH44")

        assert outcome == NotificationOutcome.NOT_ATTEMPTED
        assert dispatcher.is_configured is False

    @pytest.mark.asyncio
    async def test_missing_destination(self, gateway):
        dispatcher = NotificationDispatcher(gateway=gateway, destination=None)

        outcome = await dispatcher.maybe_notify(ALERTING[1], "NH44")

        assert outcome == NotificationOutcome.NOT_ATTEMPTED
        assert gateway.sent == []


def test_message_format():
    message = NotificationDispatcher.format_message(ALERTING[1], "NH44")

    assert message == (
        "RAKSHAK AI ALERT\n"
        "SEVERITY: CRITICAL\n"
        "LOCATION: NH44\n\n"
        "SUMMARY: test"
    )
