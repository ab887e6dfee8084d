"""
LLM client abstraction and implementations.

Components:
- BaseLLMClient: Abstract base class for inference clients
- GeminiClient: Implementation for the Gemini generateContent API
- PromptBuilder: Renders the classification prompt from the category snapshot
- ImageFetcher: Downloads and base64-encodes the submitted photo
- exceptions: Retryable vs fatal inference exceptions
"""

from civic_triage.llm.base_client import BaseLLMClient
from civic_triage.llm.exceptions import (
    ImageFetchError,
    InferenceFatal,
    LLMClientError,
    LLMConnectionError,
    LLMOverloadedError,
    LLMRateLimitError,
    LLMTimeoutError,
    RetryableInferenceError,
)
from civic_triage.llm.gemini_client import GeminiClient
from civic_triage.llm.image_fetcher import ImageFetcher
from civic_triage.llm.prompt_builder import PromptBuilder

__all__ = [
    "BaseLLMClient",
    "GeminiClient",
    "PromptBuilder",
    "ImageFetcher",
    "LLMClientError",
    "RetryableInferenceError",
    "LLMRateLimitError",
    "LLMOverloadedError",
    "LLMConnectionError",
    "LLMTimeoutError",
    "InferenceFatal",
    "ImageFetchError",
]
