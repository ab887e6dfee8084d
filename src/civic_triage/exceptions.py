"""
Common base for every failure that aborts a classification or storage request.

Each layer (persistence, llm, retry, validation) defines its own exception
module; all fatal conditions derive from PipelineError so the API layer can
render them as one uniform error envelope.
"""

from typing import Any


class PipelineError(Exception):
    """
    Base exception for all fatal pipeline errors.
    
    Attributes:
        message: Human-readable error description (returned to the caller)
        details: Structured error data for logging/metrics
    """
    
    error_code: str = "pipeline_error"
    
    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
    
    def __str__(self) -> str:
        return self.message
