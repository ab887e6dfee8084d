"""
API-specific request and response models for FastAPI endpoints.

Every JSON response carries a `success` flag; failures use ErrorResponse.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from civic_triage.models.classification import ClassificationResult


class AnalyzeReportResponse(BaseModel):
    """Response for POST /analyze-report."""
    
    success: bool = Field(default=True)
    classification: ClassificationResult = Field(
        description="Validated and normalized classification"
    )


class StoreReportResponse(BaseModel):
    """Response for POST /store-report."""
    
    success: bool = Field(default=True)
    report_id: str = Field(description="Store-issued report identifier")
    report_number: Optional[int | str] = Field(
        default=None,
        description="Human-facing sequential report number"
    )


class ErrorResponse(BaseModel):
    """Uniform failure envelope."""
    
    success: bool = Field(default=False)
    error: str = Field(description="Human-readable error message")


class HealthResponse(BaseModel):
    """Health check response."""
    
    status: str = Field(
        description="Overall health status",
        examples=["healthy", "degraded", "unhealthy"]
    )
    version: str = Field(
        description="Service version"
    )
    services: dict[str, str] = Field(
        description="Status of dependent services (supabase, gemini)"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Health check timestamp (UTC)"
    )
