"""
Bounded retry for inference calls.

Transient failures (HTTP 429, HTTP 503, transport errors) are retried with
a fixed backoff schedule; everything else is fatal on the first occurrence.

Main Components:
    - RetryEngine: Drives the retry loop
    - RetryPolicy: Attempt budget and delays; is_retryable_status predicate
    - RetryMetadata: Immutable history of retry attempts
    - InferenceExhausted: Exception raised when the budget is spent

Usage:
    >>> from civic_triage.retry import RetryEngine, RetryPolicy
    >>> engine = RetryEngine(llm_client, RetryPolicy())
    >>> response, metadata = await engine.execute(inference_request)
"""

from civic_triage.retry.engine import AttemptState, RetryEngine
from civic_triage.retry.exceptions import InferenceExhausted
from civic_triage.retry.metadata import RetryMetadata
from civic_triage.retry.policy import RetryPolicy, is_retryable_status

__all__ = [
    "RetryEngine",
    "AttemptState",
    "RetryPolicy",
    "RetryMetadata",
    "InferenceExhausted",
    "is_retryable_status",
]
