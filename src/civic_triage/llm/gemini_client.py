"""
Gemini client implementation for multimodal inference.

Communicates with the Gemini REST API using httpx AsyncClient. Supports:
- Text prompt + inlined base64 image in a single request
- Structured output via responseSchema (responseMimeType=application/json)
- Permissive safety settings (municipal photos routinely show hazards)
- Connection pooling and health checks

Retries are NOT performed here: each call is exactly one attempt, and
failures are raised as retryable or fatal exceptions for the RetryEngine.
"""

import time
from typing import Any, Dict, Optional
import httpx
import structlog

from civic_triage.llm.base_client import BaseLLMClient
from civic_triage.llm.exceptions import (
    InferenceFatal,
    LLMConnectionError,
    LLMOverloadedError,
    LLMRateLimitError,
    LLMTimeoutError,
)
from civic_triage.models.llm_models import InferenceRequest, InferenceResponse
from civic_triage.monitoring.metrics import inference_latency_seconds
from civic_triage.retry.policy import is_retryable_status


logger = structlog.get_logger(__name__)

SAFETY_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)

# Upstream error bodies are truncated to this many characters
ERROR_BODY_LIMIT = 200


class GeminiClient(BaseLLMClient):
    """
    Gemini-specific LLM client using httpx for async HTTP communication.
    
    API Endpoints:
    - POST /v1beta/models/{model}:generateContent?key=...: Generate content
    - GET /v1beta/models/{model}?key=...: Model metadata (health check)
    """
    
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://generativelanguage.googleapis.com",
        timeout: float = 60.0,
        connection_limits: Optional[httpx.Limits] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **kwargs
    ):
        """
        Initialize Gemini client.
        
        Args:
            api_key: Gemini API key (sent as `key` query parameter)
            base_url: Gemini API base URL
            timeout: Request timeout in seconds
            connection_limits: httpx connection pool limits (default: 10 max connections)
            transport: Optional httpx transport (tests inject httpx.MockTransport)
            **kwargs: Additional config
        """
        super().__init__(base_url, timeout, **kwargs)
        
        if connection_limits is None:
            connection_limits = httpx.Limits(
                max_keepalive_connections=5,
                max_connections=10,
                keepalive_expiry=30.0
            )
        
        self._api_key = api_key
        self._client: Optional[httpx.AsyncClient] = None
        self._connection_limits = connection_limits
        self._transport = transport
    
    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                limits=self._connection_limits,
                transport=self._transport,
            )
            logger.debug("Created new httpx AsyncClient")
        return self._client
    
    def build_payload(self, request: InferenceRequest) -> Dict[str, Any]:
        """
        Build the generateContent payload.
        
        {
            "contents": [{"parts": [{"text": ...}, {"inline_data": {...}}]}],
            "generationConfig": {
                "temperature": 0.1,
                "topP": 0.95,
                "maxOutputTokens": 8192,
                "responseMimeType": "application/json",
                "responseSchema": {...}
            },
            "safetySettings": [{"category": ..., "threshold": "BLOCK_NONE"}, ...]
        }
        """
        generation_config: Dict[str, Any] = {
            "temperature": request.temperature,
            "maxOutputTokens": request.max_tokens,
            "responseMimeType": "application/json",
        }
        if request.top_p is not None:
            generation_config["topP"] = request.top_p
        if request.response_schema:
            generation_config["responseSchema"] = request.response_schema
        
        return {
            "contents": [
                {
                    "parts": [
                        {"text": request.prompt},
                        {
                            "inline_data": {
                                "mime_type": request.image.mime_type,
                                "data": request.image.data_base64,
                            }
                        },
                    ]
                }
            ],
            "generationConfig": generation_config,
            "safetySettings": [
                {"category": category, "threshold": "BLOCK_NONE"}
                for category in SAFETY_CATEGORIES
            ],
        }
    
    async def generate(self, request: InferenceRequest) -> InferenceResponse:
        """Send one generateContent request and classify the outcome."""
        start_time = time.perf_counter()
        payload = self.build_payload(request)
        
        logger.info(
            "Sending generation request to Gemini",
            model=request.model,
            prompt_length=len(request.prompt),
            image_bytes=request.image.size_bytes,
            mime_type=request.image.mime_type,
            has_schema=bool(request.response_schema),
        )
        
        try:
            client = await self._get_client()
            response = await client.post(
                f"/v1beta/models/{request.model}:generateContent",
                params={"key": self._api_key},
                json=payload,
            )
        except httpx.TimeoutException as e:
            logger.warning("Gemini request timeout", timeout=self.timeout, error=str(e))
            raise LLMTimeoutError(
                f"Request timeout after {self.timeout}s",
                details={"timeout": self.timeout, "error_type": type(e).__name__},
            ) from e
        except httpx.TransportError as e:
            logger.warning("Gemini network error", error_type=type(e).__name__, error=str(e))
            raise LLMConnectionError(
                f"Network error: {type(e).__name__}: {e}",
                details={"error_type": type(e).__name__},
            ) from e
        
        latency_ms = int((time.perf_counter() - start_time) * 1000)
        status_code = response.status_code
        
        if not response.is_success:
            error_text = response.text[:ERROR_BODY_LIMIT]
            message = f"{status_code}: {error_text}"
            details = {"status": status_code, "error": error_text}
            
            if is_retryable_status(status_code):
                logger.warning("Gemini retryable HTTP error", status_code=status_code)
                if status_code == 429:
                    raise LLMRateLimitError(message, status_code=status_code, details=details)
                raise LLMOverloadedError(message, status_code=status_code, details=details)
            
            logger.error("Gemini HTTP error", status_code=status_code, error_text=error_text)
            raise InferenceFatal(
                f"Gemini API error ({status_code}): {error_text}",
                details=details,
            )
        
        try:
            envelope = response.json()
        except ValueError as e:
            raise InferenceFatal(
                "Invalid JSON response from Gemini",
                details={"status": status_code, "parse_error": str(e)},
            ) from e
        if not isinstance(envelope, dict):
            raise InferenceFatal(
                f"Gemini response is not a JSON object (got {type(envelope).__name__})",
                details={"status": status_code},
            )
        
        usage = envelope.get("usageMetadata") or {}
        model_version = envelope.get("modelVersion") or request.model
        
        logger.info(
            "Gemini generation successful",
            model=model_version,
            latency_ms=latency_ms,
            candidates=len(envelope.get("candidates") or []),
            prompt_tokens=usage.get("promptTokenCount"),
            completion_tokens=usage.get("candidatesTokenCount"),
        )
        inference_latency_seconds.labels(model=request.model).observe(latency_ms / 1000.0)
        
        return InferenceResponse(
            envelope=envelope,
            model_version=model_version,
            status_code=status_code,
            latency_ms=latency_ms,
            prompt_tokens=usage.get("promptTokenCount"),
            completion_tokens=usage.get("candidatesTokenCount"),
        )
    
    async def health_check(self, model: Optional[str] = None) -> bool:
        """
        Check that the API key is accepted and the model exists.
        
        Uses GET /v1beta/models/{model}, which does not consume generation quota.
        """
        model = model or self.extra_config.get("model", "gemini-3-flash-preview")
        try:
            client = await self._get_client()
            response = await client.get(
                f"/v1beta/models/{model}",
                params={"key": self._api_key},
                timeout=5.0,
            )
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning("Gemini health check failed", error=str(e))
            return False
    
    async def close(self):
        """Close HTTP client connections."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed Gemini client")
