"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

import json
import pytest
from typing import Any, Dict

from civic_triage.config import Settings
from civic_triage.models.llm_models import ImagePayload
from civic_triage.models.taxonomy import Category


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults for local testing."""
    return Settings(
        # === Application ===
        APP_NAME="Civic Triage (Test)",
        APP_VERSION="0.1.0",
        DEBUG=True,
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",
        
        # === Supabase ===
        SUPABASE_URL="http://supabase.test",
        SUPABASE_SERVICE_ROLE_KEY="service-role-test-key",
        
        # === Gemini ===
        GEMINI_API_KEY="gemini-test-key",
        GEMINI_BASE_URL="http://gemini.test",
        GEMINI_MODEL="gemini-3-flash-preview",
        
        # === Feature Flags ===
        PROMETHEUS_ENABLED=False,  # Disable metrics in tests unless explicitly needed
    )


@pytest.fixture
def sample_categories() -> list[Category]:
    """Three-category taxonomy snapshot, ordered by id."""
    return [
        Category(
            id=1,
            name="Pothole",
            example_issues="holes in asphalt, sunken road surface",
            category_group="Roads",
            min_response_days=3,
            max_response_days=14,
        ),
        Category(
            id=2,
            name="Broken Streetlight",
            example_issues="light out, flickering lamp, damaged pole",
            category_group="Electrical",
            min_response_days=1,
            max_response_days=7,
        ),
        Category(
            id=3,
            name="Graffiti",
            example_issues="tags on walls, vandalised signage",
            category_group="Sanitation",
            min_response_days=7,
            max_response_days=30,
        ),
    ]


@pytest.fixture
def category_rows(sample_categories) -> list[Dict[str, Any]]:
    """The sample taxonomy as the store returns it."""
    return [c.model_dump() for c in sample_categories]


@pytest.fixture
def model_output() -> Dict[str, Any]:
    """A well-formed model answer for a moderate pothole."""
    return {
        "category_id": 1,
        "category_name": "Pothole",
        "category_group": "Roads",
        "severity": 3,
        "confidence": 0.87,
        "ai_description": "Medium pothole in the right lane of an asphalt street.",
        "due_date_days": 9,
        "suggested_priority": "medium",
        "is_valid_report": True,
        "rejection_reason": None,
        "image_matches_description": True,
    }


def build_envelope(answer: Any) -> Dict[str, Any]:
    """Wrap a model answer (dict or raw text) in a generateContent response body."""
    text = answer if isinstance(answer, str) else json.dumps(answer)
    return {
        "candidates": [
            {
                "content": {"role": "model", "parts": [{"text": text}]},
                "finishReason": "STOP",
            }
        ],
        "usageMetadata": {"promptTokenCount": 2400, "candidatesTokenCount": 120},
        "modelVersion": "gemini-3-flash-preview",
    }


@pytest.fixture
def make_envelope():
    """Factory fixture: make_envelope(answer) -> generateContent body."""
    return build_envelope


@pytest.fixture
def image_payload() -> ImagePayload:
    """Tiny fake JPEG payload."""
    return ImagePayload(data_base64="/9j/4AAQ", mime_type="image/jpeg", size_bytes=6)


class RecordingSleep:
    """Stand-in for asyncio.sleep that records requested delays."""
    
    def __init__(self):
        self.calls: list[float] = []
    
    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    """Sleep recorder to inject into RetryEngine."""
    return RecordingSleep()
