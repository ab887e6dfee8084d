"""
Integration tests for the HTTP API.

The FastAPI app runs under TestClient with its upstream clients replaced
(via dependency_overrides) by clients wired to the scripted upstreams.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from civic_triage.api.dependencies import (
    get_image_fetcher,
    get_llm_client,
    get_retry_engine,
    get_supabase_client,
)
from civic_triage.main import app
from civic_triage.persistence.supabase_client import SupabaseRestClient


pytestmark = pytest.mark.integration


@pytest.fixture
def client(supabase_client, gemini_client, image_fetcher, retry_engine):
    """TestClient with every upstream served by FakeUpstream."""
    app.dependency_overrides[get_supabase_client] = lambda: supabase_client
    app.dependency_overrides[get_llm_client] = lambda: gemini_client
    app.dependency_overrides[get_image_fetcher] = lambda: image_fetcher
    app.dependency_overrides[get_retry_engine] = lambda: retry_engine
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def store_payload(model_output) -> dict:
    return {
        "citizen_id": "citizen-1",
        "description": "Pothole on Elm St",
        "image_url": "http://cdn.test/reports/photo.jpg",
        "classification": model_output,
        "location": {"latitude": 45.5, "longitude": -73.56, "city": "Montreal"},
    }


class TestAnalyzeReport:
    
    def test_success(self, client, upstream, make_envelope, model_output):
        upstream.queue_gemini(httpx.Response(200, json=make_envelope(model_output)))
        
        response = client.post(
            "/analyze-report",
            json={"image_url": "http://cdn.test/reports/photo.jpg", "description": "Pothole"},
        )
        
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["classification"] == {
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
    
    def test_rejected_report_is_still_200(self, client, upstream, make_envelope, model_output):
        model_output.update(is_valid_report=False, rejection_reason="Image shows a sandwich.")
        upstream.queue_gemini(httpx.Response(200, json=make_envelope(model_output)))
        
        response = client.post("/analyze-report", json={"image_url": "http://cdn.test/x.jpg"})
        
        assert response.status_code == 200
        classification = response.json()["classification"]
        assert classification["is_valid_report"] is False
        assert classification["rejection_reason"] == "Image shows a sandwich."
    
    def test_missing_image_url(self, client, upstream):
        response = client.post("/analyze-report", json={"description": "Pothole"})
        
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "image_url is required"}
        assert upstream.gemini_requests == []
    
    def test_non_string_image_url(self, client):
        response = client.post("/analyze-report", json={"image_url": 42})
        
        assert response.status_code == 400
        assert response.json()["error"] == "image_url is required"
    
    def test_pipeline_failure(self, client, upstream):
        upstream.categories = []
        
        response = client.post("/analyze-report", json={"image_url": "http://cdn.test/x.jpg"})
        
        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "No active categories found in database",
        }
    
    def test_exhausted_message(self, client, upstream, recording_sleep):
        upstream.queue_gemini(*[httpx.Response(503, text="overloaded") for _ in range(4)])
        
        response = client.post("/analyze-report", json={"image_url": "http://cdn.test/x.jpg"})
        
        assert response.status_code == 500
        error = response.json()["error"]
        assert "after 4 attempts" in error
        assert "503: overloaded" in error
        assert recording_sleep.calls == [2.0, 4.0, 8.0]
    
    def test_request_id_echoed(self, client, upstream, make_envelope, model_output):
        upstream.queue_gemini(httpx.Response(200, json=make_envelope(model_output)))
        
        response = client.post(
            "/analyze-report",
            json={"image_url": "http://cdn.test/x.jpg"},
            headers={"X-Request-ID": "req-123"},
        )
        
        assert response.headers["X-Request-ID"] == "req-123"
    
    def test_request_id_generated(self, client):
        response = client.post("/analyze-report", json={})
        
        assert response.headers["X-Request-ID"]


class TestStoreReport:
    
    def test_success(self, client, upstream, store_payload):
        response = client.post("/store-report", json=store_payload)
        
        assert response.status_code == 200
        assert response.json() == {"success": True, "report_id": "1001", "report_number": 1001}
        assert [table for table, _ in upstream.inserts] == [
            "reports",
            "report_locations",
            "report_images",
        ]
    
    def test_missing_fields(self, client, store_payload):
        del store_payload["location"]
        
        response = client.post("/store-report", json=store_payload)
        
        assert response.status_code == 400
        assert response.json()["error"].startswith("Missing required fields")
    
    def test_report_insert_failure(self, client, upstream, store_payload):
        upstream.failing_tables = {"reports"}
        
        response = client.post("/store-report", json=store_payload)
        
        assert response.status_code == 500
        assert response.json()["error"].startswith("Failed to insert report")
    
    def test_best_effort_failure_still_succeeds(self, client, upstream, store_payload):
        upstream.failing_tables = {"report_images"}
        
        response = client.post("/store-report", json=store_payload)
        
        assert response.status_code == 200
        assert response.json()["success"] is True


class TestServiceEndpoints:
    
    def test_root(self, client):
        response = client.get("/")
        
        assert response.status_code == 200
        assert response.json()["status"] == "running"
    
    def test_schema(self, client):
        response = client.get("/schema")
        
        assert response.status_code == 200
        assert "category_id" in response.json()["required"]
    
    def test_health_all_ok(self, client):
        response = client.get("/health")
        
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["services"] == {"supabase": "ok", "gemini": "ok"}
    
    def test_health_degraded(self, client):
        broken_store = SupabaseRestClient(
            "http://supabase.test",
            "service-key",
            transport=httpx.MockTransport(lambda request: httpx.Response(503)),
        )
        app.dependency_overrides[get_supabase_client] = lambda: broken_store
        
        response = client.get("/health")
        
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "degraded"
        assert data["services"]["supabase"] == "unreachable"
