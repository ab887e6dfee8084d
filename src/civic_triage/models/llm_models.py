"""
LLM-specific data models for the inference request/response cycle.

These are internal to the inference layer and separate from the business
models (ClassificationResult) so the client implementation can change
without touching validation.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ImagePayload(BaseModel):
    """Fetched image, ready to be inlined in the inference request."""
    
    model_config = ConfigDict(frozen=True)
    
    data_base64: str = Field(..., description="Base64-encoded image bytes")
    mime_type: str = Field(default="image/jpeg", description="Forwarded content-type")
    size_bytes: int = Field(..., ge=0)


class InferenceRequest(BaseModel):
    """
    Standardized multimodal generation request.
    
    One InferenceRequest is sent unchanged on every retry attempt.
    """
    model_config = ConfigDict(frozen=True)
    
    prompt: str = Field(..., description="Complete classification prompt")
    image: ImagePayload
    model: str = Field(..., description="Model identifier (e.g. 'gemini-3-flash-preview')")
    temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    top_p: Optional[float] = Field(default=0.95, ge=0.0, le=1.0)
    max_tokens: int = Field(default=8192, ge=1)
    response_schema: Optional[Dict[str, Any]] = Field(
        default=None,
        description="JSON output schema for constrained decoding",
    )


class InferenceResponse(BaseModel):
    """
    Raw model response envelope plus transport metadata.
    
    `envelope` is the decoded JSON body exactly as returned by the API;
    extracting the answer text is the response extractor's job.
    """
    model_config = ConfigDict(frozen=True)
    
    envelope: Dict[str, Any]
    model_version: str
    status_code: int = 200
    latency_ms: int = Field(..., ge=0)
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
