"""Unit test fixtures (mocks and stubs).

Provides mock objects for testing without external dependencies.
"""

import pytest
from unittest.mock import AsyncMock

from civic_triage.llm.base_client import BaseLLMClient
from civic_triage.models.llm_models import InferenceResponse


@pytest.fixture
def mock_llm_client() -> AsyncMock:
    """Mock BaseLLMClient; configure generate.side_effect per test."""
    mock = AsyncMock(spec=BaseLLMClient)
    mock.generate = AsyncMock()
    mock.health_check = AsyncMock(return_value=True)
    return mock


@pytest.fixture
def mock_inference_response(make_envelope, model_output) -> InferenceResponse:
    """Successful InferenceResponse wrapping the default model answer."""
    return InferenceResponse(
        envelope=make_envelope(model_output),
        model_version="gemini-3-flash-preview",
        status_code=200,
        latency_ms=1500,
        prompt_tokens=2400,
        completion_tokens=120,
    )
