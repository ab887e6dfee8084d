"""
Retry engine exceptions.

This module defines the exception raised by the retry engine when every
allowed inference attempt failed with a retryable error.
"""

from typing import TYPE_CHECKING

from civic_triage.exceptions import PipelineError

if TYPE_CHECKING:
    from civic_triage.retry.metadata import RetryMetadata


class InferenceExhausted(PipelineError):
    """
    Raised when all inference attempts failed with retryable errors.
    
    Attributes:
        attempts: Number of attempts made
        last_error: Detail of the final failure (e.g. "503: overloaded")
        retry_metadata: Complete retry history, when available
    """
    
    error_code = "inference_exhausted"
    
    def __init__(
        self,
        attempts: int,
        last_error: str,
        retry_metadata: "RetryMetadata | None" = None,
    ) -> None:
        """
        Initialize InferenceExhausted exception.
        
        Args:
            attempts: Number of attempts made
            last_error: Final error detail
            retry_metadata: Complete retry history
        """
        self.attempts = attempts
        self.last_error = last_error
        self.retry_metadata = retry_metadata
        
        super().__init__(
            f"Inference service is currently overloaded after {attempts} attempts. "
            f"Last error: {last_error}. Please try again in a moment.",
            details={"attempts": attempts, "last_error": last_error},
        )
