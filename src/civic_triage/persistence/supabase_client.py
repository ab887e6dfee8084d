"""
Thin async client for the Supabase PostgREST API.

Communicates with `{SUPABASE_URL}/rest/v1/<table>` using httpx AsyncClient,
authenticated with the service-role key (sent both as `apikey` and as a
Bearer token). Only the two operations the service needs are implemented:
filtered select and insert-with-returning.
"""

import time
from typing import Any, Dict, List, Optional

import httpx
import structlog

from civic_triage.persistence.exceptions import StoreError


logger = structlog.get_logger(__name__)


class SupabaseRestClient:
    """
    PostgREST client with a persistent, pooled httpx.AsyncClient.
    
    Filters use PostgREST syntax, e.g. ``{"is_active": "eq.true"}``;
    ordering uses ``"id.asc"``.
    """
    
    def __init__(
        self,
        base_url: str,
        service_role_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the REST client.
        
        Args:
            base_url: Supabase project URL (e.g., https://xyz.supabase.co)
            service_role_key: Service-role API key
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests inject httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._service_role_key = service_role_key
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
    
    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=f"{self.base_url}/rest/v1",
                timeout=httpx.Timeout(self.timeout),
                headers={
                    "apikey": self._service_role_key,
                    "Authorization": f"Bearer {self._service_role_key}",
                },
                transport=self._transport,
            )
            logger.debug("Created new httpx AsyncClient", base_url=self.base_url)
        return self._client
    
    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: Optional[Dict[str, str]] = None,
        order: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Read rows from a table.
        
        Args:
            table: Table name
            columns: Comma-separated column list for `select=`
            filters: Column -> PostgREST filter expression
            order: Ordering expression (e.g., "id.asc")
            
        Returns:
            List of row dicts (possibly empty)
            
        Raises:
            StoreError: Transport failure, non-2xx status or non-list body
        """
        params: Dict[str, str] = {"select": columns}
        params.update(filters or {})
        if order:
            params["order"] = order
        
        data = await self._request("GET", f"/{table}", table=table, params=params)
        if not isinstance(data, list):
            raise StoreError(
                f"Unexpected response shape from table '{table}'",
                details={"table": table, "type": type(data).__name__},
            )
        return data
    
    async def insert(
        self,
        table: str,
        row: Dict[str, Any],
        returning: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Insert a single row.
        
        Args:
            table: Table name
            row: Column values
            returning: Columns to return (e.g., "id,report_number"); None returns nothing
            
        Returns:
            Returned rows (empty list when `returning` is None)
            
        Raises:
            StoreError: Transport failure, non-2xx status or bad body
        """
        params: Dict[str, str] = {}
        headers = {"Prefer": "return=minimal"}
        if returning:
            params["select"] = returning
            headers["Prefer"] = "return=representation"
        
        data = await self._request(
            "POST", f"/{table}", table=table, params=params, json=row, headers=headers
        )
        if not returning:
            return []
        if not isinstance(data, list) or not data:
            raise StoreError(
                f"Insert into '{table}' returned no rows",
                details={"table": table},
            )
        return data
    
    async def _request(self, method: str, path: str, table: str, **kwargs) -> Any:
        start_time = time.perf_counter()
        try:
            client = await self._get_client()
            response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(
                "Store request failed",
                method=method,
                table=table,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise StoreError(
                f"Store request to '{table}' failed: {type(e).__name__}",
                details={"table": table, "error": str(e)},
            ) from e
        
        duration_ms = int((time.perf_counter() - start_time) * 1000)
        if not response.is_success:
            logger.error(
                "Store returned error status",
                method=method,
                table=table,
                status_code=response.status_code,
                duration_ms=duration_ms,
            )
            raise StoreError(
                f"Store returned {response.status_code} for '{table}': {response.text[:200]}",
                details={"table": table, "status_code": response.status_code},
            )
        
        logger.debug(
            "Store request completed",
            method=method,
            table=table,
            status_code=response.status_code,
            duration_ms=duration_ms,
        )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise StoreError(
                f"Store returned invalid JSON for '{table}'",
                details={"table": table},
            ) from e
    
    async def health_check(self) -> bool:
        """
        Check that the store is reachable and the key is accepted.
        
        Returns:
            True if a trivial categories query succeeds, False otherwise
            
        Note:
            This should NOT raise exceptions - return False on error.
        """
        try:
            await self.select("categories", columns="id", filters={"limit": "1"})
            return True
        except StoreError as e:
            logger.warning("Store health check failed", error=e.message)
            return False
    
    async def close(self):
        """Close the underlying connection pool."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed Supabase REST client")
    
    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(base_url={self.base_url}, timeout={self.timeout}s)"
