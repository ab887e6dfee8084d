"""
API routes for report analysis and storage.

- POST /analyze-report: classify a citizen photo (+ optional description)
- POST /store-report: persist an already-computed classification
- GET /health: store and inference API reachability
- GET /schema: JSON Schema the model must answer with
"""

import time
from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from civic_triage.api.dependencies import (
    get_classification_pipeline,
    get_llm_client,
    get_prompt_builder,
    get_report_repository,
    get_settings,
    get_supabase_client,
)
from civic_triage.api.models import (
    AnalyzeReportResponse,
    ErrorResponse,
    HealthResponse,
    StoreReportResponse,
)
from civic_triage.config import Settings
from civic_triage.llm.base_client import BaseLLMClient
from civic_triage.llm.prompt_builder import PromptBuilder
from civic_triage.models.classification import ClassificationRequest
from civic_triage.models.report import StoreReportRequest
from civic_triage.orchestrator import ClassificationPipeline
from civic_triage.persistence.report_repository import ReportRepository
from civic_triage.persistence.supabase_client import SupabaseRestClient

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post(
    "/analyze-report",
    response_model=AnalyzeReportResponse,
    status_code=status.HTTP_200_OK,
    summary="Classify a citizen report photo",
    description="""
    Classify the photo at `image_url` against the active category taxonomy.
    
    The optional `description` is checked against the image; a mismatch
    produces a rejected (but still classified) report.
    """,
    responses={
        200: {"description": "Classification completed (valid or rejected report)"},
        400: {"model": ErrorResponse, "description": "image_url missing or not a string"},
        500: {"model": ErrorResponse, "description": "Pipeline failure"},
    },
)
async def analyze_report(
    request: ClassificationRequest,
    pipeline: ClassificationPipeline = Depends(get_classification_pipeline),
) -> AnalyzeReportResponse:
    """
    Classify one report.
    
    Args:
        request: image URL and optional description
        pipeline: Classification pipeline (injected)
    
    Returns:
        AnalyzeReportResponse with the validated classification
    """
    logger.info(
        "Analyze request received",
        image_url=request.image_url,
        has_description=bool(request.description and request.description.strip()),
    )
    outcome = await pipeline.classify(request)
    return AnalyzeReportResponse(classification=outcome.classification)


@router.post(
    "/store-report",
    response_model=StoreReportResponse,
    status_code=status.HTTP_200_OK,
    summary="Store a classified report",
    responses={
        200: {"description": "Report stored"},
        400: {"model": ErrorResponse, "description": "Missing required fields"},
        500: {"model": ErrorResponse, "description": "Report insert failed"},
    },
)
async def store_report(
    request: StoreReportRequest,
    repository: ReportRepository = Depends(get_report_repository),
) -> StoreReportResponse:
    """
    Persist a report with its location and image.
    
    Location and image rows are best-effort; only the report row is required.
    """
    start_time = time.perf_counter()
    stored = await repository.store(request)
    
    logger.info(
        "Report stored",
        report_id=stored.report_id,
        report_number=stored.report_number,
        location_stored=stored.location_stored,
        image_stored=stored.image_stored,
        duration_ms=int((time.perf_counter() - start_time) * 1000),
    )
    return StoreReportResponse(
        report_id=stored.report_id,
        report_number=stored.report_number,
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="""
    Check the health of the service and its dependencies.
    
    Returns status of:
    - Supabase (categories table reachable)
    - Gemini (API key accepted, model available)
    """,
    responses={
        200: {"description": "All services healthy, or degraded"},
        503: {"description": "No dependency reachable"},
    },
)
async def health_check(
    config: Settings = Depends(get_settings),
    store: SupabaseRestClient = Depends(get_supabase_client),
    llm_client: BaseLLMClient = Depends(get_llm_client),
):
    """
    Check health of all services.
    
    Returns:
        HealthResponse with service statuses
    """
    services = {
        "supabase": "ok" if await store.health_check() else "unreachable",
        "gemini": "ok" if await llm_client.health_check() else "unreachable",
    }
    healthy_count = sum(1 for value in services.values() if value == "ok")
    
    if healthy_count == len(services):
        health_status = "healthy"
        status_code = status.HTTP_200_OK
    elif healthy_count > 0:
        health_status = "degraded"
        status_code = status.HTTP_200_OK
    else:
        health_status = "unhealthy"
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    
    logger.info("Health check", status=health_status, services=services)
    
    response = HealthResponse(
        status=health_status,
        version=config.APP_VERSION,
        services=services,
        timestamp=datetime.now(timezone.utc),
    )
    return JSONResponse(
        status_code=status_code,
        content=response.model_dump(mode="json"),
    )


@router.get(
    "/schema",
    summary="Get JSON Schema for the model's structured output",
    responses={
        200: {
            "description": "JSON Schema",
            "content": {"application/json": {}},
        },
    },
)
async def get_schema(
    prompt_builder: PromptBuilder = Depends(get_prompt_builder),
):
    """Return the response schema sent with every inference request."""
    return prompt_builder.response_schema
