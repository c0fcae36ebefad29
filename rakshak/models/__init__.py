# Models Package
from rakshak.models.reading import Reading
from rakshak.models.verdict import (
    ClassificationTier,
    RecommendedAction,
    Severity,
    Verdict,
)
from rakshak.models.notification import NotificationOutcome

__all__ = [
    "Reading",
    "Verdict",
    "Severity",
    "RecommendedAction",
    "ClassificationTier",
    "NotificationOutcome",
]
