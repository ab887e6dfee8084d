"""Monitoring and metrics instrumentation for Civic Triage.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from civic_triage.monitoring.metrics import (
    classifications_total,
    inference_attempts_total,
    inference_latency_seconds,
    normalizer_overrides_total,
    persistence_best_effort_failures_total,
    validation_failures_total,
)

__all__ = [
    "inference_attempts_total",
    "inference_latency_seconds",
    "validation_failures_total",
    "normalizer_overrides_total",
    "classifications_total",
    "persistence_best_effort_failures_total",
]
