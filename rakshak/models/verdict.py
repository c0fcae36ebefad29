"""
Verdict Model - Classification Output

Produced once per request by the DecisionEngine, either from the
reasoning service response or from the deterministic rule table.
The same schema is used to decode the reasoning service output, so a
response that violates it never becomes a Verdict.
"""

from enum import Enum

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    field_validator,
    model_validator,
)

SUMMARY_MAX_LENGTH = 280


class Severity(str, Enum):
    """Accident severity, ordered LOW < MEDIUM < CRITICAL."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.LOW: 0,
    Severity.MEDIUM: 1,
    Severity.CRITICAL: 2,
}


class RecommendedAction(str, Enum):
    """Recommended response. Not a guarantee that it was executed."""
    IGNORE = "Ignore"
    LOG_EVENT = "LogEvent"
    NOTIFY_CONTACT = "NotifyContact"
    DISPATCH_AMBULANCE = "DispatchAmbulance"


NON_ACCIDENT_ACTIONS = frozenset({RecommendedAction.IGNORE, RecommendedAction.LOG_EVENT})


class ClassificationTier(str, Enum):
    """Which strategy produced a Verdict."""
    ASSISTED = "ASSISTED"
    DETERMINISTIC = "DETERMINISTIC"


class Verdict(BaseModel):
    """
    Decision output for one Reading.

    Invariants:
    - is_accident == False implies action in {Ignore, LogEvent}
    - severity == CRITICAL implies is_accident == True
    """

    is_accident: StrictBool = Field(..., alias="isAccident", description="Genuine accident?")
    severity: Severity = Field(..., description="LOW | MEDIUM | CRITICAL")
    summary: str = Field(..., min_length=1, description="Short explanation")
    action: RecommendedAction = Field(..., description="Recommended response")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("summary", mode="before")
    @classmethod
    def bound_summary(cls, v):
        if isinstance(v, str):
            return v.strip()[:SUMMARY_MAX_LENGTH]
        return v

    @field_validator("action", mode="before")
    @classmethod
    def normalize_action(cls, v):
        # Reasoning services tend to answer "Dispatch Ambulance" / "Log Event"
        if isinstance(v, str):
            return v.replace(" ", "").replace("_", "")
        return v

    @model_validator(mode="after")
    def check_consistency(self) -> "Verdict":
        if not self.is_accident and self.action not in NON_ACCIDENT_ACTIONS:
            raise ValueError(
                f"action {self.action.value} requires isAccident=true"
            )
        if self.severity == Severity.CRITICAL and not self.is_accident:
            raise ValueError("CRITICAL severity requires isAccident=true")
        return self

    def to_response(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
