"""
Exceptions for the persistence layer (Supabase PostgREST access).

StoreError is raised by the low-level REST client; the taxonomy loader and
the report repository translate it into the fatal, caller-facing errors below.
"""

from civic_triage.exceptions import PipelineError


class StoreError(PipelineError):
    """
    Raised when a PostgREST call fails.
    
    Covers transport failures (connect/read errors, timeouts), non-2xx
    responses and bodies that are not the expected JSON shape.
    """
    error_code = "store_error"


class TaxonomyUnavailable(PipelineError):
    """Raised when the active categories cannot be fetched or trusted."""
    error_code = "taxonomy_unavailable"


class EmptyTaxonomy(PipelineError):
    """
    Raised when the store holds zero active categories.
    
    Classification is impossible without at least one category, so this
    is fatal for the request.
    """
    error_code = "empty_taxonomy"


class ReportInsertFailed(PipelineError):
    """Raised when the primary `reports` row could not be inserted."""
    error_code = "report_insert_failed"
