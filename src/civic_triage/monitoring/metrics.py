"""Custom Prometheus metrics for Civic Triage.

These metrics are exposed at /metrics endpoint and should be scraped by Prometheus.
Alert rules should be configured for:
- inference_attempts_total (high retryable-failure rate indicates upstream overload)
- validation_failures_total (invalid categories or malformed output indicate prompt drift)
- classifications_total (sudden rise in rejections or failures)
"""

from prometheus_client import Counter, Histogram

# === Inference Metrics ===

inference_attempts_total = Counter(
    "inference_attempts_total",
    "Total inference attempts by outcome",
    ["outcome"],
)
"""
Inference attempts counter by outcome.

Labels:
- outcome: success, rate_limited (429), overloaded (503), network_error, fatal

Alert thresholds:
- WARN: rate_limited + overloaded > 10% of attempts
- CRITICAL: any sustained fatal outcomes (bad API key, bad request)
"""

inference_latency_seconds = Histogram(
    "inference_latency_seconds",
    "Latency of a single inference call in seconds",
    ["model"],
    buckets=(0.5, 1.0, 2.0, 5.0, 10.0, 20.0, 30.0, 60.0),
)
"""
Inference latency histogram by model.

Labels:
- model: Gemini model identifier (e.g., gemini-3-flash-preview)

Observed per successful HTTP round trip, excluding backoff delays.
"""

# === Validation Metrics ===

validation_failures_total = Counter(
    "validation_failures_total",
    "Total validation failures by stage and error type",
    ["stage", "error_type"],
)
"""
Validation failures counter by stage and error type.

Labels:
- stage: stage1 (extract/parse), stage2 (category), stage3 (normalize)
- error_type: empty_output, malformed_json, not_json_object, invalid_category, invalid_field_value
"""

normalizer_overrides_total = Counter(
    "normalizer_overrides_total",
    "Fields whose model value was changed by the normalizer",
    ["field"],
)
"""
Normalizer overrides counter by field.

Labels:
- field: category_name, category_group, severity, confidence, due_date_days,
  suggested_priority, is_valid_report, image_matches_description, rejection_reason

A high override rate on a field means the model ignores that part of the prompt.
"""

# === Pipeline Metrics ===

classifications_total = Counter(
    "classifications_total",
    "Total classification requests by outcome",
    ["outcome"],
)
"""
Classification outcomes counter.

Labels:
- outcome: valid, rejected, failed
"""

# === Persistence Metrics ===

persistence_best_effort_failures_total = Counter(
    "persistence_best_effort_failures_total",
    "Failed best-effort inserts by table",
    ["table"],
)
"""
Best-effort insert failures by table.

Labels:
- table: report_locations, report_images

These failures are logged and ignored; the report itself is already stored.
"""
