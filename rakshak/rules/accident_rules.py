"""
Accident Rules - Deterministic Logic

Fallback tier of the DecisionEngine. The rule table encodes the known
false-positive scenarios (dropped device, pothole) as explicit exclusions so
that this tier is auditable on its own.

Rule evaluation order (first match wins):
1. Minor vibration       impact < 2 and speed < 5
2. Pothole/hard braking  2 <= impact < 8, speed > 20, tilt < 20
3. Severe accident       impact >= 12, speed >= 60, tilt >= 45
4. Possible collision    impact >= 8, speed >= 40
5. Default               unclear sensor pattern

Every severe-accident reading also satisfies the collision thresholds, so the
severe-accident rule is evaluated first. Lower bounds are inclusive, upper
bounds exclusive.
"""

import logging
from typing import Callable, Optional

from rakshak.models.reading import Reading
from rakshak.models.verdict import RecommendedAction, Severity, Verdict

logger = logging.getLogger(__name__)


# Rule identifiers for audit trail
RULE_MINOR_VIBRATION = "rule_minor_vibration"
RULE_POTHOLE = "rule_pothole_hard_braking"
RULE_SEVERE_ACCIDENT = "rule_severe_accident"
RULE_POSSIBLE_COLLISION = "rule_possible_collision"
RULE_DEFAULT_UNCLEAR = "rule_default_unclear"


class RuleResult:
    """Result of a rule evaluation."""

    def __init__(
        self,
        rule_id: str,
        verdict: Optional[Verdict],
        fires: bool = True,
    ):
        self.rule_id = rule_id
        self.verdict = verdict
        self.fires = fires

    def __repr__(self) -> str:
        return f"RuleResult({self.rule_id}, fires={self.fires})"


def _no_match(rule_id: str) -> RuleResult:
    return RuleResult(rule_id=rule_id, verdict=None, fires=False)


class AccidentRules:
    """
    Deterministic rules for accident classification.

    Each rule returns a RuleResult carrying the Verdict when it fires.
    """

    # Thresholds
    MINOR_IMPACT_MAX = 2.0
    MINOR_SPEED_MAX = 5.0
    POTHOLE_IMPACT_MIN = 2.0
    POTHOLE_IMPACT_MAX = 8.0
    POTHOLE_SPEED_MIN = 20.0
    POTHOLE_TILT_MAX = 20.0
    COLLISION_IMPACT_MIN = 8.0
    COLLISION_SPEED_MIN = 40.0
    SEVERE_IMPACT_MIN = 12.0
    SEVERE_SPEED_MIN = 60.0
    SEVERE_TILT_MIN = 45.0

    @staticmethod
    def check_minor_vibration(reading: Reading) -> RuleResult:
        """
        Rule: Low impact while (nearly) stationary → Ignore

        Covers a phone being handled or dropped in a parked vehicle.
        """
        if (
            reading.impact < AccidentRules.MINOR_IMPACT_MAX
            and reading.speed < AccidentRules.MINOR_SPEED_MAX
        ):
            return RuleResult(
                rule_id=RULE_MINOR_VIBRATION,
                verdict=Verdict(
                    is_accident=False,
                    severity=Severity.LOW,
                    summary="minor vibration",
                    action=RecommendedAction.IGNORE,
                ),
            )
        return _no_match(RULE_MINOR_VIBRATION)

    @staticmethod
    def check_pothole(reading: Reading) -> RuleResult:
        """
        Rule: Moderate impact, vehicle keeps moving, stays upright → LogEvent
        """
        if (
            AccidentRules.POTHOLE_IMPACT_MIN <= reading.impact < AccidentRules.POTHOLE_IMPACT_MAX
            and reading.speed > AccidentRules.POTHOLE_SPEED_MIN
            and reading.tilt < AccidentRules.POTHOLE_TILT_MAX
        ):
            return RuleResult(
                rule_id=RULE_POTHOLE,
                verdict=Verdict(
                    is_accident=False,
                    severity=Severity.LOW,
                    summary="pothole/hard braking",
                    action=RecommendedAction.LOG_EVENT,
                ),
            )
        return _no_match(RULE_POTHOLE)

    @staticmethod
    def check_severe_accident(reading: Reading) -> RuleResult:
        """
        Rule: High impact at high speed with rollover tilt → DispatchAmbulance
        """
        if (
            reading.impact >= AccidentRules.SEVERE_IMPACT_MIN
            and reading.speed >= AccidentRules.SEVERE_SPEED_MIN
            and reading.tilt >= AccidentRules.SEVERE_TILT_MIN
        ):
            return RuleResult(
                rule_id=RULE_SEVERE_ACCIDENT,
                verdict=Verdict(
                    is_accident=True,
                    severity=Severity.CRITICAL,
                    summary="severe accident",
                    action=RecommendedAction.DISPATCH_AMBULANCE,
                ),
            )
        return _no_match(RULE_SEVERE_ACCIDENT)

    @staticmethod
    def check_possible_collision(reading: Reading) -> RuleResult:
        """
        Rule: High impact at speed → NotifyContact
        """
        if (
            reading.impact >= AccidentRules.COLLISION_IMPACT_MIN
            and reading.speed >= AccidentRules.COLLISION_SPEED_MIN
        ):
            return RuleResult(
                rule_id=RULE_POSSIBLE_COLLISION,
                verdict=Verdict(
                    is_accident=True,
                    severity=Severity.MEDIUM,
                    summary="possible collision",
                    action=RecommendedAction.NOTIFY_CONTACT,
                ),
            )
        return _no_match(RULE_POSSIBLE_COLLISION)

    @staticmethod
    def default_unclear() -> RuleResult:
        """
        Default rule: No other rule fired → LogEvent
        """
        return RuleResult(
            rule_id=RULE_DEFAULT_UNCLEAR,
            verdict=Verdict(
                is_accident=False,
                severity=Severity.LOW,
                summary="unclear sensor pattern",
                action=RecommendedAction.LOG_EVENT,
            ),
        )


# Evaluation order; the default rule is always last and handled by RuleEngine.
RULE_TABLE: list[Callable[[Reading], RuleResult]] = [
    AccidentRules.check_minor_vibration,
    AccidentRules.check_pothole,
    AccidentRules.check_severe_accident,
    AccidentRules.check_possible_collision,
]


class RuleEngine:
    """Evaluates the accident rule table top-to-bottom, first match wins."""

    def __init__(self, rules: Optional[list[Callable[[Reading], RuleResult]]] = None):
        self._rules = rules if rules is not None else list(RULE_TABLE)

    def evaluate(self, reading: Reading) -> RuleResult:
        """
        Return the first rule that fires, or the default rule.

        Args:
            reading: Validated sensor reading.

        Returns:
            Firing RuleResult; its verdict is never None.
        """
        for rule_fn in self._rules:
            result = rule_fn(reading)
            if result.fires and result.verdict is not None:
                break
        else:
            result = AccidentRules.default_unclear()

        logger.info(
            f"Rule engine: {result.rule_id} fired, "
            f"severity={result.verdict.severity.value}, "
            f"action={result.verdict.action.value}"
        )
        return result
