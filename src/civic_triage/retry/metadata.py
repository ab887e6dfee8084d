"""
Retry metadata tracking.

This module defines the RetryMetadata dataclass that captures the retry
history of one inference call for logging and metrics.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RetryMetadata:
    """
    Retry history of one inference call.
    
    Attributes:
        total_attempts: Number of inference attempts made (1..max_attempts)
        total_latency_ms: Time from first attempt to final result, delays included (ms)
        total_delay_ms: Time spent in backoff delays (ms)
        failures: One entry per failed attempt (attempt, error_type, error)
    """
    
    total_attempts: int
    total_latency_ms: int
    total_delay_ms: int = 0
    failures: list[dict] = field(default_factory=list)
    
    def __post_init__(self) -> None:
        """Validate metadata invariants."""
        if self.total_attempts < 1:
            raise ValueError("total_attempts must be >= 1")
        
        if self.total_latency_ms < 0:
            raise ValueError("total_latency_ms must be >= 0")
        
        if self.total_delay_ms < 0:
            raise ValueError("total_delay_ms must be >= 0")
        
        if len(self.failures) > self.total_attempts:
            raise ValueError("failures cannot outnumber attempts")
    
    @property
    def retries_used(self) -> int:
        """Attempts beyond the first one."""
        return self.total_attempts - 1
