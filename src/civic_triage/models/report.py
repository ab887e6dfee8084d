"""
Models for persisting a finalized classification as a report.
"""

from typing import Optional

from pydantic import BaseModel, Field

from civic_triage.models.classification import ClassificationResult


class ReportLocation(BaseModel):
    """Where the citizen took the photo."""
    
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    location_source: str = Field(default="gps")
    gps_accuracy_meters: Optional[float] = None
    formatted_address: Optional[str] = None
    street_number: Optional[str] = None
    street_name: Optional[str] = None
    neighbourhood: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    postal_code: Optional[str] = None
    country_code: Optional[str] = None
    location_description: Optional[str] = None


class StoreReportRequest(BaseModel):
    """Inbound request for the persistence handler."""
    
    citizen_id: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    image_url: str = Field(..., min_length=1)
    classification: ClassificationResult
    location: ReportLocation


class StoredReport(BaseModel):
    """Identifiers issued by the store for a new report."""
    
    report_id: str
    report_number: Optional[int | str] = None
    location_stored: bool = True
    image_stored: bool = True
