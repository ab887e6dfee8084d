"""
Pydantic data models for Civic Triage.

Includes:
- Taxonomy (Category)
- Classification models (ClassificationRequest, ClassificationResult, ClassificationOutcome)
- Enums (PriorityEnum, ReportStatus)
- LLM models (ImagePayload, InferenceRequest, InferenceResponse)
- Report models (ReportLocation, StoreReportRequest, StoredReport)
"""

from civic_triage.models.enums import PriorityEnum, ReportStatus
from civic_triage.models.taxonomy import Category
from civic_triage.models.classification import (
    ClassificationRequest,
    ClassificationResult,
    ClassificationOutcome,
)
from civic_triage.models.llm_models import (
    ImagePayload,
    InferenceRequest,
    InferenceResponse,
)
from civic_triage.models.report import (
    ReportLocation,
    StoreReportRequest,
    StoredReport,
)

__all__ = [
    # Enums
    "PriorityEnum",
    "ReportStatus",
    # Taxonomy
    "Category",
    # Classification
    "ClassificationRequest",
    "ClassificationResult",
    "ClassificationOutcome",
    # LLM models
    "ImagePayload",
    "InferenceRequest",
    "InferenceResponse",
    # Report models
    "ReportLocation",
    "StoreReportRequest",
    "StoredReport",
]
