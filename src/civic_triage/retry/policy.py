"""
Retry policy for inference calls.

The policy is data plus one pure predicate:
- which HTTP statuses are transient (429 rate limit, 503 overload)
- how many attempts are allowed
- how long to wait before each attempt

Transport failures (connect/read errors, timeouts) are always retryable and
are represented by exception types, not status codes.
"""

from dataclasses import dataclass

RETRYABLE_STATUS_CODES = frozenset({429, 503})

DEFAULT_MAX_ATTEMPTS = 4
DEFAULT_DELAYS_MS = (0, 2000, 4000, 8000)


def is_retryable_status(status_code: int) -> bool:
    """
    Return True if an HTTP status from the inference API should be retried.
    
    Only 429 and 503 are retryable. Every other non-2xx status (400, 401,
    403, 404, 500, ...) is fatal.
    """
    return status_code in RETRYABLE_STATUS_CODES


@dataclass(frozen=True)
class RetryPolicy:
    """
    Attempt budget and fixed backoff schedule.
    
    Attributes:
        max_attempts: Total attempts including the first one
        delays_ms: Delay applied before attempt N (index N-1), in milliseconds
    """
    
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    delays_ms: tuple[int, ...] = DEFAULT_DELAYS_MS
    
    def __post_init__(self) -> None:
        """Validate policy invariants."""
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        
        if len(self.delays_ms) < self.max_attempts:
            raise ValueError(
                f"delays_ms needs one entry per attempt "
                f"({len(self.delays_ms)} < {self.max_attempts})"
            )
        
        if any(delay < 0 for delay in self.delays_ms):
            raise ValueError("delays_ms must be >= 0")
    
    def delay_before(self, attempt: int) -> float:
        """
        Seconds to wait before the given attempt (1-indexed).
        
        Raises:
            ValueError: attempt outside 1..max_attempts
        """
        if not 1 <= attempt <= self.max_attempts:
            raise ValueError(f"attempt must be in 1..{self.max_attempts}, got {attempt}")
        return self.delays_ms[attempt - 1] / 1000.0
    
    @classmethod
    def from_settings(cls, settings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.INFERENCE_MAX_ATTEMPTS,
            delays_ms=tuple(settings.RETRY_DELAYS_MS),
        )
