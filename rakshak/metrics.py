"""
Prometheus metrics definitions for Rakshak.

This module defines all custom metrics used across the application.
"""

from prometheus_client import Counter, Histogram

# Decision Engine Metrics
CLASSIFICATIONS_TOTAL = Counter(
    'rakshak_classifications_total',
    'Total number of verdicts produced',
    ['tier', 'severity']
)

REASONING_FAILURES_TOTAL = Counter(
    'rakshak_reasoning_failures_total',
    'Primary tier attempts that fell back to the rule table',
    ['reason']
)

CLASSIFICATION_SECONDS = Histogram(
    'rakshak_classification_seconds',
    'Time spent producing a verdict, including the reasoning call',
    ['tier']
)

# Notification Metrics
NOTIFICATIONS_TOTAL = Counter(
    'rakshak_notifications_total',
    'Emergency alert dispatch outcomes',
    ['outcome']
)
