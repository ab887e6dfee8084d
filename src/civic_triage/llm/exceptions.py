"""
Custom exceptions for the LLM client layer.

These exceptions provide structured error handling for inference calls,
allowing the retry engine to distinguish transport-level failures (retried
with backoff) from content-level failures (fatal, never retried). The split
is structural: nothing is classified by matching error strings.
"""

from civic_triage.exceptions import PipelineError


class LLMClientError(PipelineError):
    """
    Base exception for all LLM client errors.
    
    All LLM-specific exceptions inherit from this to allow catching
    any LLM-related error with a single except clause.
    """
    error_code = "llm_error"


class RetryableInferenceError(LLMClientError):
    """
    Base for failures that the retry engine handles with backoff.
    
    Never surfaced to API callers individually; after the last attempt the
    retry engine wraps the final one in InferenceExhausted.
    
    Attributes:
        status_code: HTTP status when the server answered, None for transport errors
    """
    error_code = "inference_retryable"
    
    def __init__(self, message: str, status_code: int | None = None, details: dict | None = None):
        super().__init__(message, details)
        self.status_code = status_code


class LLMRateLimitError(RetryableInferenceError):
    """Raised when the inference API answers 429 Too Many Requests."""
    pass


class LLMOverloadedError(RetryableInferenceError):
    """Raised when the inference API answers 503 Service Unavailable."""
    pass


class LLMConnectionError(RetryableInferenceError):
    """
    Raised when unable to reach the inference API.
    
    Includes DNS failures, refused connections, dropped connections
    and read errors.
    """
    pass


class LLMTimeoutError(LLMConnectionError):
    """
    Raised when the inference call exceeds the timeout threshold.
    
    Separate from generic connection errors for logging/metrics only;
    handled identically by the retry engine.
    """
    pass


class InferenceFatal(LLMClientError):
    """
    Raised on a non-retryable inference failure.
    
    Examples:
    - 400 Bad Request (malformed payload, unsupported image)
    - 401/403 (bad or missing API key)
    - 404 (unknown model)
    - 2xx whose body is not a JSON object
    
    The retry engine re-raises this immediately without further attempts.
    """
    error_code = "inference_fatal"


class ImageFetchError(PipelineError):
    """
    Raised when the submitted image cannot be downloaded.
    
    Non-2xx response or transport failure. Fatal for the request; image
    downloads are not retried.
    """
    error_code = "image_fetch_failed"
