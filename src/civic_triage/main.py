"""
FastAPI application entry point for Civic Triage.
"""

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from civic_triage.api.dependencies import (
    get_image_fetcher,
    get_llm_client,
    get_prompt_builder,
    get_supabase_client,
)
from civic_triage.api.error_handlers import EXCEPTION_HANDLERS
from civic_triage.api.middleware import RequestTracingMiddleware
from civic_triage.api.routes import router
from civic_triage.config import settings
from civic_triage.logging_config import configure_logging

# Logging is configured before the app object exists so startup events are structured
configure_logging(settings.LOG_LEVEL, settings.ENVIRONMENT, settings.APP_VERSION)
logger = structlog.get_logger(__name__)


app = FastAPI(
    title=settings.APP_NAME,
    description="Municipal issue report classification with multimodal LLM inference",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Added first (innermost): CORS preflights are answered before reaching it
app.add_middleware(RequestTracingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)

# PipelineError subclasses -> 500 envelope, body errors -> 400 envelope
for exc_class, handler in EXCEPTION_HANDLERS.items():
    app.add_exception_handler(exc_class, handler)

app.include_router(router, tags=["reports"])


@app.on_event("startup")
async def startup():
    """Application startup - load templates and log configuration."""
    logger.info(
        "Application startup",
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        supabase_url=settings.SUPABASE_URL,
        model=settings.GEMINI_MODEL,
    )
    
    if not settings.GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY is not set; inference calls will fail")
    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        logger.warning("SUPABASE_SERVICE_ROLE_KEY is not set; store calls will fail")
    
    # Fail fast on a missing template or schema
    prompt_builder = get_prompt_builder()
    logger.info("Prompt template ready", templates_dir=str(prompt_builder.templates_dir))
    
    logger.info("Application startup complete")


@app.on_event("shutdown")
async def shutdown():
    """Application shutdown - close pooled HTTP clients."""
    logger.info("Application shutdown")
    await get_llm_client().close()
    await get_supabase_client().close()
    await get_image_fetcher().close()
    logger.info("Application shutdown complete")


# Exposes /metrics (default HTTP metrics + the pipeline counters)
if settings.PROMETHEUS_ENABLED:
    Instrumentator().instrument(app).expose(app)


@app.get("/")
async def root():
    """Root endpoint with API documentation links."""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs",
        "health": "/health",
        "schema": "/schema",
        "metrics": "/metrics" if settings.PROMETHEUS_ENABLED else None,
    }


if __name__ == "__main__":
    import uvicorn
    
    uvicorn.run(
        "civic_triage.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
