"""
Unit tests for SupabaseRestClient.

PostgREST is replaced with httpx.MockTransport.
"""

import json

import httpx
import pytest

from civic_triage.persistence.exceptions import StoreError
from civic_triage.persistence.supabase_client import SupabaseRestClient


def make_client(handler) -> SupabaseRestClient:
    return SupabaseRestClient(
        base_url="http://supabase.test/",
        service_role_key="service-key",
        transport=httpx.MockTransport(handler),
    )


class TestSelect:
    
    @pytest.mark.asyncio
    async def test_select_builds_postgrest_query(self):
        seen = {}
        
        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(200, json=[{"id": 1}])
        
        client = make_client(handler)
        rows = await client.select(
            "categories", columns="id,name", filters={"is_active": "eq.true"}, order="id.asc"
        )
        await client.close()
        
        request = seen["request"]
        assert rows == [{"id": 1}]
        assert request.method == "GET"
        assert request.url.path == "/rest/v1/categories"
        assert request.url.params["select"] == "id,name"
        assert request.url.params["is_active"] == "eq.true"
        assert request.url.params["order"] == "id.asc"
        assert request.headers["apikey"] == "service-key"
        assert request.headers["authorization"] == "Bearer service-key"
    
    @pytest.mark.asyncio
    async def test_error_status(self):
        client = make_client(lambda request: httpx.Response(401, text="JWT expired"))
        
        with pytest.raises(StoreError) as exc_info:
            await client.select("categories")
        
        assert "401" in exc_info.value.message
        assert "JWT expired" in exc_info.value.message
        assert exc_info.value.details["status_code"] == 401
    
    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)
        
        with pytest.raises(StoreError, match="ConnectError"):
            await make_client(handler).select("categories")
    
    @pytest.mark.asyncio
    async def test_non_list_body(self):
        client = make_client(lambda request: httpx.Response(200, json={"id": 1}))
        
        with pytest.raises(StoreError, match="Unexpected response shape"):
            await client.select("categories")


class TestInsert:
    
    @pytest.mark.asyncio
    async def test_insert_with_returning(self):
        seen = {}
        
        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(201, json=[{"id": "abc", "report_number": 42}])
        
        rows = await make_client(handler).insert(
            "reports", {"citizen_id": "u1"}, returning="id,report_number"
        )
        
        request = seen["request"]
        assert rows == [{"id": "abc", "report_number": 42}]
        assert request.method == "POST"
        assert request.url.params["select"] == "id,report_number"
        assert request.headers["prefer"] == "return=representation"
        assert json.loads(request.content) == {"citizen_id": "u1"}
    
    @pytest.mark.asyncio
    async def test_insert_minimal(self):
        seen = {}
        
        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(201)
        
        rows = await make_client(handler).insert("report_images", {"report_id": "abc"})
        
        assert rows == []
        assert seen["request"].headers["prefer"] == "return=minimal"
        assert "select" not in seen["request"].url.params
    
    @pytest.mark.asyncio
    async def test_insert_returning_nothing(self):
        client = make_client(lambda request: httpx.Response(201, json=[]))
        
        with pytest.raises(StoreError, match="returned no rows"):
            await client.insert("reports", {}, returning="id")
    
    @pytest.mark.asyncio
    async def test_insert_conflict(self):
        client = make_client(lambda request: httpx.Response(409, text="duplicate key"))
        
        with pytest.raises(StoreError):
            await client.insert("reports", {}, returning="id")


class TestHealthCheck:
    
    @pytest.mark.asyncio
    async def test_healthy(self):
        def handler(request):
            assert request.url.params["limit"] == "1"
            return httpx.Response(200, json=[{"id": 1}])
        
        assert await make_client(handler).health_check() is True
    
    @pytest.mark.asyncio
    async def test_unhealthy(self):
        assert await make_client(lambda request: httpx.Response(500)).health_check() is False
