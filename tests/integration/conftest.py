"""Integration test fixtures.

Every upstream (Supabase, Gemini, the image CDN) is served by one
httpx.MockTransport routed by host, so the real clients, retry engine and
validator run end to end without network access.
"""

import json
from typing import Any, Dict, List

import httpx
import pytest

from civic_triage.llm.gemini_client import GeminiClient
from civic_triage.llm.image_fetcher import ImageFetcher
from civic_triage.llm.prompt_builder import PromptBuilder
from civic_triage.orchestrator import ClassificationPipeline
from civic_triage.persistence.report_repository import ReportRepository
from civic_triage.persistence.supabase_client import SupabaseRestClient
from civic_triage.persistence.taxonomy_loader import TaxonomyLoader
from civic_triage.retry.engine import RetryEngine
from civic_triage.retry.policy import RetryPolicy
from civic_triage.validation.pipeline import ValidationPipeline


SUPABASE_URL = "http://supabase.test"
GEMINI_URL = "http://gemini.test"
IMAGE_URL = "http://cdn.test/reports/photo.jpg"
IMAGE_BYTES = b"\xff\xd8\xff\xe0integration-jpeg"


class FakeUpstream:
    """
    Scripted Supabase + Gemini + CDN.
    
    Attributes:
        categories: Rows returned for the categories select
        gemini_responses: Responses served in order, one per generateContent call
        gemini_requests: Decoded generateContent bodies, in call order
        inserts: (table, row) pairs received by the store
        failing_tables: Tables whose inserts answer 500
    """
    
    def __init__(self, categories: List[Dict[str, Any]]):
        self.categories = categories
        self.gemini_responses: List[httpx.Response] = []
        self.gemini_requests: List[Dict[str, Any]] = []
        self.inserts: List[tuple] = []
        self.failing_tables: set = set()
        self.image_status = 200
        self.next_report_id = 1000
    
    def queue_gemini(self, *responses: httpx.Response) -> None:
        self.gemini_responses.extend(responses)
    
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)
    
    def handle(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "supabase.test":
            return self._handle_store(request)
        if request.url.host == "gemini.test":
            return self._handle_gemini(request)
        if request.url.host == "cdn.test":
            if self.image_status != 200:
                return httpx.Response(self.image_status)
            return httpx.Response(200, content=IMAGE_BYTES, headers={"content-type": "image/jpeg"})
        return httpx.Response(404)
    
    def _handle_store(self, request: httpx.Request) -> httpx.Response:
        table = request.url.path.rsplit("/", 1)[-1]
        if request.method == "GET":
            if table == "categories":
                return httpx.Response(200, json=self.categories)
            return httpx.Response(404, json={"message": f"unknown table {table}"})
        
        row = json.loads(request.content)
        if table in self.failing_tables:
            return httpx.Response(500, json={"message": "insert failed"})
        self.inserts.append((table, row))
        if "select" in request.url.params:
            self.next_report_id += 1
            return httpx.Response(
                201, json=[{"id": str(self.next_report_id), "report_number": self.next_report_id}]
            )
        return httpx.Response(201)
    
    def _handle_gemini(self, request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json={"name": "models/gemini-3-flash-preview"})
        self.gemini_requests.append(json.loads(request.content))
        if not self.gemini_responses:
            return httpx.Response(500, text="no scripted response")
        return self.gemini_responses.pop(0)


@pytest.fixture
def upstream(category_rows) -> FakeUpstream:
    return FakeUpstream(category_rows)


@pytest.fixture
def supabase_client(upstream) -> SupabaseRestClient:
    return SupabaseRestClient(SUPABASE_URL, "service-key", transport=upstream.transport())


@pytest.fixture
def gemini_client(upstream) -> GeminiClient:
    return GeminiClient(
        api_key="gemini-key",
        base_url=GEMINI_URL,
        transport=upstream.transport(),
        model="gemini-3-flash-preview",
    )


@pytest.fixture
def image_fetcher(upstream) -> ImageFetcher:
    return ImageFetcher(transport=upstream.transport())


@pytest.fixture
def retry_engine(gemini_client, recording_sleep) -> RetryEngine:
    return RetryEngine(gemini_client, RetryPolicy(), sleep=recording_sleep)


@pytest.fixture
def classification_pipeline(
    supabase_client, image_fetcher, retry_engine
) -> ClassificationPipeline:
    return ClassificationPipeline(
        taxonomy_loader=TaxonomyLoader(supabase_client),
        prompt_builder=PromptBuilder(),
        image_fetcher=image_fetcher,
        retry_engine=retry_engine,
        validator=ValidationPipeline(),
    )


@pytest.fixture
def report_repository(supabase_client) -> ReportRepository:
    return ReportRepository(supabase_client)
