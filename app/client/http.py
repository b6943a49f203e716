"""
Async HTTP client for the marketplace API.

Unwraps the response envelope: successful calls return `data`, failed calls
raise ApiError carrying the envelope's status, message and error.
"""

import logging
import time
from typing import Any, Callable, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-2xx response (or transport failure, with status 0)."""

    def __init__(self, status: int, message: str, error: Any = None):
        super().__init__(f"{status}: {message}")
        self.status = status
        self.message = message
        self.error = error


class ApiClient:
    """
    Thin wrapper over httpx.AsyncClient.

    Args:
        base_url: API root, e.g. http://localhost:8000/api/v1
        token_provider: Returns the current bearer token, or None when signed out
        transport: Optional httpx transport (ASGI app or mock in tests)
    """

    def __init__(
        self,
        base_url: str,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._token_provider = token_provider
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self) -> Dict[str, str]:
        token = self._token_provider() if self._token_provider else None
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Send a request and return the envelope's `data`."""
        started = time.perf_counter()
        try:
            response = await self._client.request(
                method, path, params=params, json=json, files=files, headers=self._headers()
            )
        except httpx.HTTPError as exc:
            logger.error(
                "api request failed",
                extra={"method": method, "path": path, "error_type": type(exc).__name__},
            )
            raise ApiError(0, "Network error", str(exc)) from exc

        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.debug(
            "api request",
            extra={"method": method, "path": path, "status_code": response.status_code, "duration_ms": duration_ms},
        )

        try:
            envelope = response.json()
        except ValueError:
            envelope = None

        if response.is_error:
            if isinstance(envelope, dict):
                raise ApiError(
                    envelope.get("status", response.status_code),
                    envelope.get("message") or response.reason_phrase,
                    envelope.get("error"),
                )
            raise ApiError(response.status_code, response.reason_phrase)

        if not isinstance(envelope, dict) or "data" not in envelope:
            raise ApiError(response.status_code, "Malformed response envelope", envelope)
        return envelope["data"]

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None, files: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("POST", path, json=json, files=files)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)
