"""
Decision Engine - Assisted Reasoning with Deterministic Fallback

Produces a Verdict for every Reading using:
1. The assisted strategy (external reasoning service), one attempt
2. The deterministic rule table, whenever the assisted strategy is
   unavailable or returns something that is not a valid Verdict

classify() never raises. Only cancellation of the whole request
(asyncio.CancelledError) escapes, taking the in-flight reasoning call with it.
"""

import logging
import re
import time
from abc import ABC, abstractmethod
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from rakshak.errors import ReasoningClientError, ReasoningUnavailable
from rakshak.metrics import (
    CLASSIFICATION_SECONDS,
    CLASSIFICATIONS_TOTAL,
    REASONING_FAILURES_TOTAL,
)
from rakshak.models.reading import Reading
from rakshak.models.verdict import ClassificationTier, Verdict
from rakshak.providers.base import ReasoningClient
from rakshak.rules.accident_rules import RuleEngine

logger = logging.getLogger(__name__)


# Same semantics as rakshak.rules.accident_rules, stated for the model.
CLASSIFICATION_RULES = """\
1. Impact below 2 G and speed below 5 km/h: minor vibration or dropped phone. Not an accident, severity LOW, action Ignore.
2. Impact from 2 G up to (not including) 8 G, speed above 20 km/h and tilt below 20 degrees: pothole or hard braking, the vehicle keeps moving. Not an accident, severity LOW, action LogEvent.
3. Impact of at least 12 G, speed of at least 60 km/h and tilt of at least 45 degrees: severe accident. Accident, severity CRITICAL, action DispatchAmbulance.
4. Otherwise, impact of at least 8 G and speed of at least 40 km/h: possible collision. Accident, severity MEDIUM, action NotifyContact.
5. Anything else: unclear sensor pattern. Not an accident, severity LOW, action LogEvent."""

OUTPUT_SCHEMA = """\
{
  "isAccident": true | false,
  "severity": "LOW" | "MEDIUM" | "CRITICAL",
  "summary": "short explanation",
  "action": "Ignore" | "LogEvent" | "NotifyContact" | "DispatchAmbulance"
}"""

_CODE_FENCE = re.compile(r"^\s*```(?:json)?\s*([\s\S]*?)\s*```\s*$")


def build_classification_prompt(reading: Reading) -> str:
    """Build the structured prompt for the reasoning service."""
    return (
        "ACT AS AN EXPERT VEHICLE ACCIDENT ANALYSIS SYSTEM.\n\n"
        "DATA:\n"
        f"- Impact: {reading.impact:g} G\n"
        f"- Speed: {reading.speed:g} km/h\n"
        f"- Tilt: {reading.tilt:g} degrees\n"
        f"- Location: {reading.location}\n\n"
        "RULES:\n"
        f"{CLASSIFICATION_RULES}\n\n"
        "A non-accident must use action Ignore or LogEvent. "
        "CRITICAL severity is only valid for an accident.\n\n"
        "OUTPUT JSON ONLY, exactly this shape:\n"
        f"{OUTPUT_SCHEMA}\n"
    )


def decode_verdict(raw_text: str) -> Verdict:
    """
    Decode reasoning service output into a Verdict.

    Raises:
        ReasoningUnavailable: If the text is not a JSON object matching the
            Verdict schema and its invariants.
    """
    text = raw_text or ""
    fenced = _CODE_FENCE.match(text)
    if fenced:
        text = fenced.group(1)
    try:
        return Verdict.model_validate_json(text)
    except PydanticValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}"
            for err in e.errors()
        )
        raise ReasoningUnavailable(
            f"Malformed reasoning response ({problems})", reason="malformed"
        ) from e


class ReasoningStrategy(ABC):
    """A way of turning a Reading into a Verdict."""

    tier: ClassificationTier

    @abstractmethod
    async def classify(self, reading: Reading) -> Verdict:
        pass


class DeterministicStrategy(ReasoningStrategy):
    """Rule-table classification. Total and side-effect free."""

    tier = ClassificationTier.DETERMINISTIC

    def __init__(self, rule_engine: Optional[RuleEngine] = None):
        self._rule_engine = rule_engine or RuleEngine()

    def evaluate(self, reading: Reading) -> Verdict:
        return self._rule_engine.evaluate(reading).verdict

    async def classify(self, reading: Reading) -> Verdict:
        return self.evaluate(reading)


class AssistedStrategy(ReasoningStrategy):
    """Classification by the external reasoning service, one attempt per call."""

    tier = ClassificationTier.ASSISTED

    def __init__(self, client: ReasoningClient):
        self._client = client

    @property
    def client(self) -> ReasoningClient:
        return self._client

    async def classify(self, reading: Reading) -> Verdict:
        """
        Raises:
            ReasoningUnavailable: On any client failure or unusable output.
        """
        prompt = build_classification_prompt(reading)
        try:
            raw_text = await self._client.classify(prompt)
        except ReasoningClientError as e:
            raise ReasoningUnavailable(str(e), reason="client_error") from e

        logger.debug(f"[AssistedStrategy] Raw response: {raw_text!r}")
        return decode_verdict(raw_text)


class DecisionEngine:
    """
    Agent responsible for:
    1. Attempting the primary (assisted) strategy once
    2. Falling back to the deterministic strategy when it is unavailable
    3. Producing exactly one Verdict per Reading
    """

    AGENT_NAME = "DecisionEngine"

    def __init__(
        self,
        primary: Optional[ReasoningStrategy] = None,
        fallback: Optional[DeterministicStrategy] = None,
    ):
        """
        Initialize decision engine.

        Args:
            primary: Assisted strategy, or None for rules only.
            fallback: Deterministic strategy used when primary is unavailable.
        """
        self._primary = primary
        self._fallback = fallback or DeterministicStrategy()

    @property
    def primary(self) -> Optional[ReasoningStrategy]:
        return self._primary

    async def classify(self, reading: Reading) -> Verdict:
        """Return the Verdict for a Reading. Never raises."""
        verdict, _ = await self.classify_with_tier(reading)
        return verdict

    async def classify_with_tier(
        self, reading: Reading
    ) -> tuple[Verdict, ClassificationTier]:
        """
        Classify and report which strategy produced the Verdict.

        Args:
            reading: Validated sensor reading.

        Returns:
            Tuple of (Verdict, tier that produced it).
        """
        started = time.perf_counter()
        verdict: Optional[Verdict] = None
        tier = ClassificationTier.DETERMINISTIC

        if self._primary is not None:
            try:
                verdict = await self._primary.classify(reading)
                tier = self._primary.tier
            except ReasoningUnavailable as e:
                REASONING_FAILURES_TOTAL.labels(reason=e.reason).inc()
                logger.warning(
                    f"[{self.AGENT_NAME}] Primary tier unavailable ({e.reason}): {e}; "
                    f"falling back to rule table"
                )
            except Exception as e:
                REASONING_FAILURES_TOTAL.labels(reason="unexpected").inc()
                logger.exception(
                    f"[{self.AGENT_NAME}] Primary tier raised {type(e).__name__}; "
                    f"falling back to rule table"
                )

        if verdict is None:
            verdict = self._fallback.evaluate(reading)
            tier = self._fallback.tier

        CLASSIFICATION_SECONDS.labels(tier=tier.value).observe(time.perf_counter() - started)
        CLASSIFICATIONS_TOTAL.labels(tier=tier.value, severity=verdict.severity.value).inc()
        logger.info(
            f"[{self.AGENT_NAME}] Verdict: accident={verdict.is_accident} "
            f"severity={verdict.severity.value} action={verdict.action.value} "
            f"(tier: {tier.value})"
        )
        return verdict, tier
