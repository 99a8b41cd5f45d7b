"""
ServiceClient - Thin async HTTP transport for the DSpace REST API.

All network I/O of the data-access layer goes through ServiceClient.request.
Caching and fallback logic live one level up, in the datasource resources.
"""

from typing import Any

import httpx
from loguru import logger

from dspace_client.services.errors import (
    NotFoundError,
    RequestTimeoutError,
    ServiceError,
)


class ServiceClient:
    """
    Async HTTP client bound to one DSpace API base URL.

    Usage:
        client = ServiceClient("http://localhost:8080/server/api")

        data = await client.request(
            "/discover/browses/author/entries",
            params={"page": 0, "size": 20},
        )

        # Pre-encoded query strings are sent verbatim
        data = await client.request(
            "/discover/search/objects",
            query_string="query=nile&f.author=Doe%2C+J.,equals",
        )
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        http_client: httpx.AsyncClient | None = None,
        service_id: str = "dspace",
    ):
        self.base_url = base_url.rstrip("/")
        self.service_id = service_id
        self._timeout = timeout
        self._headers = headers or {}

        # HTTP client (lazy initialization unless injected)
        self._http_client = http_client

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self._timeout),
                headers=self._headers,
                follow_redirects=True,
            )
        return self._http_client

    async def _send(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
        query_string: str | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Send one request and map transport and status failures to ServiceError."""
        url = f"{path}?{query_string}" if query_string else path
        req_timeout = timeout or self._timeout
        client = await self._get_http_client()

        try:
            response = await client.request(
                method=method,
                url=url,
                params=params,
                json=json_data,
                headers=headers,
                timeout=req_timeout,
            )
            response.raise_for_status()

        except httpx.TimeoutException as e:
            raise RequestTimeoutError(self.service_id, req_timeout) from e

        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 404:
                raise NotFoundError(path, service_id=self.service_id) from e
            raise ServiceError(
                f"HTTP {status}: {e.response.text[:200]}",
                service_id=self.service_id,
                status_code=status,
            ) from e

        except httpx.RequestError as e:
            raise ServiceError(str(e), service_id=self.service_id) from e

        return response

    async def request(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        *,
        method: str = "GET",
        json_data: dict[str, Any] | None = None,
        query_string: str | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """
        Make an HTTP request against the API.

        Args:
            path: Endpoint path relative to the API base URL
            params: Query parameters (encoded by httpx)
            method: HTTP method (GET, POST, etc.)
            json_data: JSON body for POST/PUT requests
            query_string: Already-encoded query string, appended as-is
            timeout: Override request timeout

        Returns:
            Decoded JSON body ({} for empty bodies)

        Raises:
            NotFoundError: On HTTP 404
            RequestTimeoutError: If request times out
            ServiceError: For other HTTP or transport errors
        """
        response = await self._send(
            method,
            path,
            params=params,
            json_data=json_data,
            query_string=query_string,
            timeout=timeout,
        )

        if not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise ServiceError(
                f"Invalid JSON from {path}", service_id=self.service_id
            ) from e

    async def request_bytes(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        *,
        accept: str = "application/octet-stream",
        timeout: float | None = None,
    ) -> bytes:
        """GET a binary resource with an explicit Accept header. Errors map as in request()."""
        response = await self._send(
            "GET", path, params=params, headers={"Accept": accept}, timeout=timeout
        )
        return response.content

    def url_for(self, path: str) -> str:
        """Absolute URL for an API path."""
        return f"{self.base_url}{path}"

    async def close(self) -> None:
        """Close the HTTP client and cleanup resources."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
        logger.debug("ServiceClient closed")

    async def __aenter__(self) -> "ServiceClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
