"""
Multi-stage validation pipeline (4 stages).

- pipeline.py: Orchestrator for all validation stages
- stage1_extract.py: Answer extraction + JSON parsing (hard fail)
- stage2_category.py: Category resolution against the snapshot (hard fail)
- stage3_normalize.py: Severity/confidence/due date/priority normalization
- stage4_consistency.py: Validity flags, rejection reason, mismatch override
"""

from .exceptions import (
    ValidationError,
    EmptyModelOutput,
    MalformedJSON,
    InvalidCategory,
    InvalidFieldValue,
)
from .pipeline import ValidationPipeline, ValidationContext
from .stage4_consistency import FAIL_OPEN_DEFAULT

__all__ = [
    # Main pipeline
    "ValidationPipeline",
    "ValidationContext",
    "FAIL_OPEN_DEFAULT",
    # Exceptions (for API error handling)
    "ValidationError",
    "EmptyModelOutput",
    "MalformedJSON",
    "InvalidCategory",
    "InvalidFieldValue",
]
