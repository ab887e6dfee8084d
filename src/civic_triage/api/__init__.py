"""
FastAPI API routes and endpoints.

- routes.py: POST /analyze-report, POST /store-report, GET /health, GET /schema
- dependencies.py: Dependency injection for clients, pipeline, repository
- models.py: API-specific request/response models
- error_handlers.py: Exception handlers for the {success, error} envelope
- middleware.py: Request ID tracing
"""

from civic_triage.api import dependencies, error_handlers, models
from civic_triage.api.routes import router

__all__ = [
    "router",
    "dependencies",
    "error_handlers",
    "models",
]
