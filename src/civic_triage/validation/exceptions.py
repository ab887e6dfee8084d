"""
Validation-specific exceptions for the multi-stage validation pipeline.

Raised while turning the model's raw envelope into a ClassificationResult.
None of them is retried: a model answer that cannot be extracted, parsed
or resolved against the taxonomy fails the request.
"""

from typing import Any

from civic_triage.exceptions import PipelineError


class ValidationError(PipelineError):
    """
    Base exception for all validation errors.
    """
    
    error_code = "validation_failed"
    
    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """
        Initialize validation error.
        
        Args:
            message: Human-readable error description
            details: Structured error data for logging/metrics
        """
        super().__init__(message, details)


class EmptyModelOutput(ValidationError):
    """
    Stage 1: the envelope contains no text part.
    
    Typically a blocked or truncated candidate.
    """
    error_code = "empty_model_output"


class MalformedJSON(ValidationError):
    """
    Stage 1: the model text is not a single JSON object.
    """
    
    error_code = "malformed_json"
    
    def __init__(self, message: str, raw_content: str | None = None, parse_error: str | None = None):
        """
        Initialize malformed JSON error.
        
        Args:
            message: Error description
            raw_content: Model text; only the first 500 chars are kept
            parse_error: Original json.JSONDecodeError message
        """
        details = {}
        if raw_content:
            details["content_snippet"] = raw_content[:500]
        if parse_error:
            details["parse_error"] = parse_error
        
        super().__init__(message, details)


class InvalidCategory(ValidationError):
    """
    Stage 2: neither category_id nor category_name resolves in the snapshot.
    """
    
    error_code = "invalid_category"
    
    def __init__(
        self,
        message: str,
        invalid_value: Any | None = None,
        expected_values: list[int] | None = None,
    ):
        """
        Initialize invalid category error.
        
        Args:
            message: Error description
            invalid_value: The category_id the model returned
            expected_values: Valid category ids for this request
        """
        details = {}
        if invalid_value is not None:
            details["invalid_value"] = str(invalid_value)
        if expected_values:
            details["expected_values"] = expected_values[:20]  # Limit to first 20
        
        super().__init__(message, details)


class InvalidFieldValue(ValidationError):
    """
    Stage 3: a numeric field is missing, non-numeric or not finite.
    """
    
    error_code = "invalid_field_value"
    
    def __init__(self, message: str, field_path: str, invalid_value: Any | None = None):
        details = {"field_path": field_path}
        if invalid_value is not None:
            details["invalid_value"] = repr(invalid_value)[:100]
        super().__init__(message, details)
