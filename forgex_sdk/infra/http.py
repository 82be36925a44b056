"""
Shared HTTP transport

One httpx.AsyncClient is shared by every provider adapter and the RPC
connection handle. Each request is normalized: HTTP status errors,
timeouts, connection failures and undecodable bodies all surface as
UpstreamError prefixed with "<provider>.<operation>".
"""

import logging
import threading
from typing import Any, Dict, Optional

import httpx

from ..config import config as global_config
from ..errors import UpstreamError
from .retry import execute_with_retry

logger = logging.getLogger(__name__)


def _extract_error_message(response: httpx.Response) -> Optional[str]:
    """Best-effort error message from an error response body"""
    try:
        data = response.json()
    except ValueError:
        text = response.text
        return text[:500] if text else None

    if isinstance(data, dict):
        for key in ("error", "description", "message", "detail"):
            value = data.get(key)
            if isinstance(value, dict):
                value = value.get("message", value)
            if value:
                return str(value)
    return str(data)[:500]


class HttpTransport:
    """
    Shared async HTTP transport

    Construction performs no I/O; the underlying client is created on the
    first request.

    Usage:
        http = HttpTransport()
        data = await http.request("GET", url, provider="pyth", operation="get_price")
        await http.aclose()

        # Tests inject a mock transport
        http = HttpTransport(transport=httpx.MockTransport(handler))
    """

    def __init__(
        self,
        timeout_seconds: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_delay_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        http_config = global_config.http
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else http_config.timeout_seconds
        self.max_retries = max_retries if max_retries is not None else http_config.max_retries
        self.retry_delay_seconds = (
            retry_delay_seconds if retry_delay_seconds is not None else http_config.retry_delay_seconds
        )
        self._transport = transport
        self._headers = {
            "User-Agent": http_config.user_agent,
            "Accept": "application/json",
            **(headers or {}),
        }
        self._client: Optional[httpx.AsyncClient] = None
        self._client_lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self._client is not None and not self._client.is_closed

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client (thread-safe)"""
        if self._client is None or self._client.is_closed:
            with self._client_lock:
                if self._client is None or self._client.is_closed:
                    self._client = httpx.AsyncClient(
                        timeout=self.timeout_seconds,
                        headers=self._headers,
                        transport=self._transport,
                    )
        return self._client

    async def request(
        self,
        method: str,
        url: str,
        *,
        provider: str,
        operation: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
        expect_json: bool = True,
    ) -> Any:
        """
        Make one logical request, retried per the configured attempt budget.

        Returns:
            Decoded JSON body (or text when expect_json is False)

        Raises:
            UpstreamError: On any failure
        """

        async def attempt():
            return await self._send(
                method, url, provider, operation, params, json, headers, expect_json
            )

        return await execute_with_retry(
            attempt,
            f"{provider}.{operation}",
            max_retries=self.max_retries,
            retry_delay=self.retry_delay_seconds,
        )

    async def _send(
        self,
        method: str,
        url: str,
        provider: str,
        operation: str,
        params: Optional[Dict[str, Any]],
        json: Any,
        headers: Optional[Dict[str, str]],
        expect_json: bool,
    ) -> Any:
        client = self._get_client()
        logger.debug(f"{provider}.{operation}: {method} {url}")

        try:
            response = await client.request(method, url, params=params, json=json, headers=headers)
            response.raise_for_status()

        except httpx.HTTPStatusError as e:
            message = _extract_error_message(e.response)
            logger.warning(f"{provider}.{operation}: HTTP {e.response.status_code} from {url}")
            raise UpstreamError.http_status(provider, operation, e.response.status_code, message) from e

        except httpx.TimeoutException as e:
            logger.warning(f"{provider}.{operation}: timeout calling {url}")
            raise UpstreamError.timeout(provider, operation, self.timeout_seconds) from e

        except httpx.RequestError as e:
            logger.warning(f"{provider}.{operation}: connection error calling {url}: {e}")
            raise UpstreamError.connection_failed(provider, operation, url, e) from e

        if not expect_json:
            return response.text

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError.malformed(provider, operation, "body is not valid JSON", e) from e

    async def aclose(self):
        """Close the underlying client"""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
        return False
