from __future__ import annotations

import time
from contextvars import ContextVar
from typing import Any, Dict, Optional

import httpx

from shared.logging import get_logger

logger = get_logger(__name__)

# Set per incoming request by the HTTP layer; forwarded to every upstream call.
trace_id_var: ContextVar[Optional[str]] = ContextVar("trace_id", default=None)

TRACE_HEADER = "x-trace-id"


class UpstreamError(Exception):
    """
    Non-2xx answer from an upstream service.
    """

    def __init__(self, status_code: int, reason: str, url: str):
        self.status_code = status_code
        self.reason = reason
        self.url = url
        super().__init__(f"HTTP {status_code}: {reason} from {url}")

    @property
    def not_found(self) -> bool:
        return self.status_code == 404


class UpstreamClient:
    """
    JSON client for one upstream service, bound to its base URL.
    The httpx client is created on first use and shared until close().
    """

    def __init__(
        self,
        name: str,
        base_url: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ):
        self.name = name
        self.base_url = base_url.rstrip("/")
        self._transport = transport
        self._timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            kwargs: Dict[str, Any] = {"transport": self._transport}
            if self._timeout is not None:
                kwargs["timeout"] = self._timeout
            self._client = httpx.AsyncClient(**kwargs)
        return self._client

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._request("GET", path, params=params)

    async def post(self, path: str, body: Any) -> Any:
        return await self._request("POST", path, json=body)

    async def put(self, path: str, body: Any) -> Any:
        return await self._request("PUT", path, json=body)

    async def delete(self, path: str) -> None:
        await self._request("DELETE", path)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        headers = {}
        trace_id = trace_id_var.get()
        if trace_id:
            headers[TRACE_HEADER] = trace_id

        started = time.time()
        resp = await self.client().request(method, url, headers=headers, **kwargs)
        elapsed_ms = int((time.time() - started) * 1000)

        if not resp.is_success:
            logger.warning(
                "upstream_call_failed service=%s method=%s url=%s status=%s latency_ms=%s",
                self.name,
                method,
                resp.request.url,
                resp.status_code,
                elapsed_ms,
            )
            raise UpstreamError(resp.status_code, resp.reason_phrase, str(resp.request.url))

        logger.debug(
            "upstream_call service=%s method=%s url=%s status=%s latency_ms=%s",
            self.name,
            method,
            resp.request.url,
            resp.status_code,
            elapsed_ms,
        )
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()
