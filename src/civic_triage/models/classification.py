"""
Classification request/result models.

ClassificationResult is only ever constructed by the validator, after every
field has been resolved, clamped or recomputed server-side. It is never
built directly from model output.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from civic_triage.models.enums import PriorityEnum


class ClassificationRequest(BaseModel):
    """Inbound request: the photo to classify and the citizen's text."""
    
    image_url: str = Field(..., min_length=1, description="Publicly fetchable URL of the photo")
    description: Optional[str] = Field(
        default=None,
        description="Optional citizen description, checked against the image",
    )


class ClassificationResult(BaseModel):
    """
    Normalized classification record returned to callers.
    
    Invariants (checked on construction):
    - is_valid_report is False exactly when rejection_reason is set
    - image_matches_description False implies is_valid_report False
    """
    
    model_config = ConfigDict(extra="ignore")
    
    category_id: int
    category_name: str
    category_group: str
    severity: int = Field(..., ge=1, le=5)
    confidence: float = Field(..., ge=0.0, le=1.0)
    ai_description: str
    due_date_days: int = Field(..., ge=0)
    suggested_priority: PriorityEnum
    is_valid_report: bool
    rejection_reason: Optional[str] = None
    image_matches_description: bool
    
    @model_validator(mode="after")
    def _check_consistency(self) -> "ClassificationResult":
        if self.is_valid_report == (self.rejection_reason is not None):
            raise ValueError("rejection_reason must be set if and only if the report is invalid")
        if not self.image_matches_description and self.is_valid_report:
            raise ValueError("a report whose image mismatches its description cannot be valid")
        return self


class ClassificationOutcome(BaseModel):
    """Result of one pipeline run plus audit data for logging."""
    
    classification: ClassificationResult
    attempts: int = Field(..., ge=1, description="Inference attempts used")
    categories_count: int = Field(..., ge=1, description="Size of the taxonomy snapshot")
    overrides: list[str] = Field(
        default_factory=list,
        description="Fields the normalizer changed relative to model output",
    )
    processing_duration_ms: int = Field(..., ge=0)
