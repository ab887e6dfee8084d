"""
FastAPI exception handlers for structured error responses.

Maps request validation failures to 400 and every pipeline failure to 500,
both rendered as {"success": false, "error": "..."}.
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from civic_triage.exceptions import PipelineError

logger = logging.getLogger(__name__)

# Client-facing message for a malformed body, per endpoint
REQUEST_ERROR_MESSAGES = {
    "/analyze-report": "image_url is required",
    "/store-report": (
        "Missing required fields: citizen_id, description, image_url, "
        "classification, location"
    ),
}
DEFAULT_REQUEST_ERROR_MESSAGE = "Invalid request body"


def error_body(message: str) -> dict:
    return {"success": False, "error": message}


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle invalid request bodies.
    
    Maps to 400 Bad Request (client error).
    
    Args:
        request: FastAPI request
        exc: RequestValidationError instance
    
    Returns:
        JSON error response
    """
    logger.warning(
        "Invalid request format",
        extra={"path": request.url.path, "errors": str(exc.errors())[:500]},
    )
    
    message = REQUEST_ERROR_MESSAGES.get(request.url.path, DEFAULT_REQUEST_ERROR_MESSAGE)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(message),
    )


async def pipeline_error_handler(request: Request, exc: PipelineError) -> JSONResponse:
    """
    Handle pipeline failures (taxonomy, image fetch, inference, validation, storage).
    
    Maps to 500 Internal Server Error with the error message.
    
    Args:
        request: FastAPI request
        exc: PipelineError instance
    
    Returns:
        JSON error response
    """
    logger.error(
        "Pipeline error",
        extra={
            "path": request.url.path,
            "error_type": type(exc).__name__,
            "error_code": exc.error_code,
            "details": exc.details,
        },
    )
    
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(exc.message or "Internal server error"),
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected errors.
    
    Maps to 500 Internal Server Error.
    """
    logger.exception(
        "Unexpected error",
        extra={"error_type": type(exc).__name__},
    )
    
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error"),
    )


# Exception handler mapping for FastAPI app.add_exception_handler()
EXCEPTION_HANDLERS = {
    RequestValidationError: request_validation_error_handler,
    PipelineError: pipeline_error_handler,
    Exception: generic_error_handler,
}
