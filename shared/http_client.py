"""
Async HTTP client used for outbound calls to external APIs.
"""

import asyncio
from typing import Any

import aiohttp


class HTTPStatusError(Exception):
    """Raised when a response carries a non-success status."""

    def __init__(self, status: int, body: str, url: str = "") -> None:
        super().__init__(f"HTTP {status} for {url}: {body}")
        self.status = status
        self.body = body
        self.url = url


class AsyncHTTPClient:
    """Async HTTP client returning parsed JSON bodies."""

    def __init__(self, timeout: int = 30) -> None:
        """Initialize HTTP client."""
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "AsyncHTTPClient":
        """Enter async context manager."""
        self.session = aiohttp.ClientSession(timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context manager."""
        if self.session:
            await self.session.close()

    @staticmethod
    async def _prepare_request(coro_or_ctx: Any) -> Any:
        """Normalize aiohttp request result to an async context manager."""
        if asyncio.iscoroutine(coro_or_ctx):
            return await coro_or_ctx
        return coro_or_ctx

    @staticmethod
    async def _ensure_response_ok(response: Any, url: str) -> None:
        """Raise HTTPStatusError carrying the body text for non-2xx responses."""
        if 200 <= response.status < 300:
            return
        body = await response.text()
        raise HTTPStatusError(response.status, body, url)

    async def get(self, url: str, headers: dict[str, Any] | None = None) -> dict[str, Any]:
        """Perform GET request."""
        if not self.session:
            raise RuntimeError("HTTP client not initialized. Use async context manager.")

        request_ctx = await self._prepare_request(self.session.get(url, headers=headers))
        async with request_ctx as response:
            await self._ensure_response_ok(response, url)
            return await response.json()

    async def post(
        self,
        url: str,
        data: dict[str, Any] | None = None,
        headers: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Perform POST request with a JSON body."""
        if not self.session:
            raise RuntimeError("HTTP client not initialized. Use async context manager.")

        request_ctx = await self._prepare_request(
            self.session.post(url, json=data, headers=headers)
        )
        async with request_ctx as response:
            await self._ensure_response_ok(response, url)
            return await response.json()

    async def post_form(
        self,
        url: str,
        data: dict[str, Any],
        headers: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Perform POST request with a form-encoded body."""
        if not self.session:
            raise RuntimeError("HTTP client not initialized. Use async context manager.")

        request_ctx = await self._prepare_request(
            self.session.post(url, data=data, headers=headers)
        )
        async with request_ctx as response:
            await self._ensure_response_ok(response, url)
            return await response.json()
