# Agents Package
from rakshak.agents.decision_engine import (
    AssistedStrategy,
    DecisionEngine,
    DeterministicStrategy,
    ReasoningStrategy,
)
from rakshak.agents.notification_dispatcher import NotificationDispatcher

__all__ = [
    "DecisionEngine",
    "ReasoningStrategy",
    "AssistedStrategy",
    "DeterministicStrategy",
    "NotificationDispatcher",
]
