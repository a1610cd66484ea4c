"""
Infrastructure - HTTP API Delegate

httpx-backed implementation of the `make_api_call` capability used by the
reference host. Relative URLs are joined onto the configured base URL.
"""

import logging
from typing import Any, Dict, Mapping, Optional

import httpx

logger = logging.getLogger(__name__)

_BODYLESS_METHODS = {"GET", "DELETE", "HEAD", "OPTIONS"}


class ApiCallError(Exception):
    """Raised when the remote API cannot be reached or answers with an error status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class HttpApiClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.headers = {"Content-Type": "application/json", **(headers or {})}
        self._transport = transport
        # Created lazily so the client binds to the running event loop
        self._http_client: Optional[httpx.AsyncClient] = None

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                headers=self.headers,
                transport=self._transport,
            )
        return self._http_client

    async def __call__(self, request: Mapping[str, Any]) -> Any:
        return await self.make_api_call(request)

    async def make_api_call(self, request: Mapping[str, Any]) -> Any:
        """
        Sends `request` ({url, method, body, headers?}) and returns the decoded
        JSON payload, or the raw text for non-JSON responses.
        """
        method = str(request.get("method") or "GET").upper()
        url = request["url"]
        body = request.get("body")
        headers = request.get("headers") or None

        kwargs: Dict[str, Any] = {"headers": headers}
        if method in _BODYLESS_METHODS:
            if isinstance(body, Mapping):
                kwargs["params"] = {key: value for key, value in body.items() if value is not None}
        elif body is not None:
            kwargs["json"] = body

        client = self._get_http_client()
        logger.debug(f"{method} {url}")
        try:
            response = await client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ApiCallError(
                f"HTTP API error (status {e.response.status_code}): {method} {url}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise ApiCallError(f"HTTP API error: {e}") from e

        if "application/json" in response.headers.get("content-type", ""):
            return response.json()
        return response.text

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
