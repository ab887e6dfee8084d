"""
Persistence layer: Supabase REST access, taxonomy loading and report storage.
"""

from civic_triage.persistence.exceptions import (
    EmptyTaxonomy,
    ReportInsertFailed,
    StoreError,
    TaxonomyUnavailable,
)
from civic_triage.persistence.report_repository import ReportRepository
from civic_triage.persistence.supabase_client import SupabaseRestClient
from civic_triage.persistence.taxonomy_loader import TaxonomyLoader

__all__ = [
    "SupabaseRestClient",
    "TaxonomyLoader",
    "ReportRepository",
    "StoreError",
    "TaxonomyUnavailable",
    "EmptyTaxonomy",
    "ReportInsertFailed",
]
