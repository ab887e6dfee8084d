"""
Repository for storing a finalized classification as a municipal report.

Storage Strategy (three tables, one request):
- reports: primary row, must succeed (ReportInsertFailed otherwise)
- report_locations: best-effort, failure logged and ignored
- report_images: best-effort, failure logged and ignored

There is no transaction spanning the three inserts; a report may exist
without its location or image row.
"""

from datetime import datetime, timezone
from typing import Any, Dict

import structlog

from civic_triage.models.enums import ReportStatus
from civic_triage.models.report import ReportLocation, StoredReport, StoreReportRequest
from civic_triage.monitoring.metrics import persistence_best_effort_failures_total
from civic_triage.persistence.exceptions import ReportInsertFailed, StoreError
from civic_triage.persistence.supabase_client import SupabaseRestClient

logger = structlog.get_logger(__name__)

# Optional location columns, sent only when the caller provided a value
OPTIONAL_LOCATION_FIELDS = (
    "gps_accuracy_meters",
    "formatted_address",
    "street_number",
    "street_name",
    "neighbourhood",
    "city",
    "province",
    "postal_code",
    "country_code",
    "location_description",
)


class ReportRepository:
    """
    Persists reports through the Supabase REST client.
    """
    
    REPORTS_TABLE = "reports"
    LOCATIONS_TABLE = "report_locations"
    IMAGES_TABLE = "report_images"
    
    def __init__(self, client: SupabaseRestClient):
        """
        Initialize repository.
        
        Args:
            client: Supabase REST client
        """
        self.client = client
    
    async def store(self, request: StoreReportRequest) -> StoredReport:
        """
        Insert the report, then its location and image rows.
        
        Args:
            request: Citizen data, classification and location
        
        Returns:
            StoredReport with the store-issued id and report number
        
        Raises:
            ReportInsertFailed: The `reports` insert failed
        """
        try:
            rows = await self.client.insert(
                self.REPORTS_TABLE,
                build_report_row(request),
                returning="id,report_number",
            )
        except StoreError as e:
            raise ReportInsertFailed(
                f"Failed to insert report: {e.message}",
                details=e.details,
            ) from e
        
        report = rows[0]
        if report.get("id") is None:
            raise ReportInsertFailed("Failed to insert report: no id returned")
        report_id = str(report["id"])
        report_number = report.get("report_number")
        logger.info("Report created", report_id=report_id, report_number=report_number)
        
        location_stored = await self._insert_best_effort(
            self.LOCATIONS_TABLE,
            build_location_row(report_id, request.location),
            report_id,
        )
        image_stored = await self._insert_best_effort(
            self.IMAGES_TABLE,
            {
                "report_id": report_id,
                "image_url": request.image_url,
                "is_primary": True,
                "ai_analyzed": True,
            },
            report_id,
        )
        
        return StoredReport(
            report_id=report_id,
            report_number=report_number,
            location_stored=location_stored,
            image_stored=image_stored,
        )
    
    async def _insert_best_effort(self, table: str, row: Dict[str, Any], report_id: str) -> bool:
        try:
            await self.client.insert(table, row)
        except StoreError as e:
            persistence_best_effort_failures_total.labels(table=table).inc()
            logger.warning(
                "Best-effort insert failed",
                table=table,
                report_id=report_id,
                error=e.message,
            )
            return False
        logger.info("Stored report detail", table=table, report_id=report_id)
        return True


def build_report_row(request: StoreReportRequest) -> Dict[str, Any]:
    """
    Map a store request onto a `reports` row.
    
    Confidence is stored as a percentage with 2 decimals (0.93 -> 93.0).
    """
    classification = request.classification
    status = ReportStatus.OPEN if classification.is_valid_report else ReportStatus.REJECTED
    return {
        "citizen_id": request.citizen_id,
        "description": request.description,
        "category_id": classification.category_id,
        "ai_category_name": classification.category_name,
        "ai_description": classification.ai_description,
        "ai_severity": classification.severity,
        "ai_confidence": round(classification.confidence * 100, 2),
        "ai_image_relevant": classification.image_matches_description,
        "status": status.value,
        "ai_processed_at": datetime.now(timezone.utc).isoformat(),
    }


def build_location_row(report_id: str, location: ReportLocation) -> Dict[str, Any]:
    """Map a location onto a `report_locations` row, skipping unset optional fields."""
    row: Dict[str, Any] = {
        "report_id": report_id,
        "latitude": location.latitude,
        "longitude": location.longitude,
        "location_source": location.location_source or "gps",
    }
    for field in OPTIONAL_LOCATION_FIELDS:
        value = getattr(location, field)
        if value is not None and value != "":
            row[field] = value
    return row
