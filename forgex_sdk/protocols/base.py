"""
Provider adapter base class

Every provider adapter subclasses ProviderAdapter and decorates each of its
public operations with @upstream_call("<operation>"). The decorator names
the operation for the transport and converts anything that escapes the
operation (decoding mistakes, embedded library exceptions) into an
UpstreamError prefixed with "<provider>.<operation>". Errors raised by the RPC
client or by another operation are re-reported under the outer operation.
"""

import contextvars
import functools
import logging
from typing import Any, Dict, Optional

from ..errors import ConfigurationError, ForgeXError, UpstreamError
from ..infra.http import HttpTransport
from ..infra.rpc import RpcClient
from ..types.common import Network

logger = logging.getLogger(__name__)

_current_operation: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "current_operation", default=None
)


def upstream_call(operation: str):
    """
    Mark an adapter coroutine as a provider operation

    Usage:
        @upstream_call("get_markets")
        async def get_markets(self) -> List[dict]:
            return await self._get("/markets")
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            token = _current_operation.set(operation)
            try:
                return await func(self, *args, **kwargs)
            except UpstreamError as e:
                if (e.provider, e.operation) == (self.name, operation):
                    raise
                raise UpstreamError.rescoped(self.name, operation, e) from e
            except ForgeXError:
                raise
            except (KeyError, IndexError, TypeError, ValueError) as e:
                raise UpstreamError.malformed(self.name, operation, f"{type(e).__name__}: {e}", e) from e
            except Exception as e:
                raise UpstreamError.from_exception(self.name, operation, e) from e
            finally:
                _current_operation.reset(token)

        wrapper.operation = operation
        return wrapper

    return decorator


class ProviderAdapter:
    """
    Base class for provider adapters

    Subclasses set:
    - name: provider name, used as error / log prefix
    - default_base_url: REST or GraphQL root
    - requires_api_key: refuse construction without a key

    and may override:
    - _headers(): per-request auth headers
    - _auth_params(): per-request auth query params
    - health_probe(): cheap call used by the facade health check
    - initialize(): deferred setup that needs network access
    """

    name: str = ""
    default_base_url: str = ""
    requires_api_key: bool = False

    def __init__(
        self,
        http: HttpTransport,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        rpc: Optional[RpcClient] = None,
        network: Network = Network.MAINNET,
    ):
        if self.requires_api_key and not api_key:
            raise ConfigurationError.missing(f"{self.name} API key")
        self._http = http
        self._api_key = api_key
        self._base_url = (base_url or self.default_base_url).rstrip("/")
        self._rpc = rpc
        self._network = network

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def has_api_key(self) -> bool:
        return bool(self._api_key)

    @property
    def has_health_probe(self) -> bool:
        return type(self).health_probe is not ProviderAdapter.health_probe

    @property
    def _operation(self) -> str:
        return _current_operation.get() or "request"

    def _headers(self) -> Dict[str, str]:
        return {}

    def _auth_params(self) -> Dict[str, Any]:
        return {}

    def _url(self, path: str, base_url: Optional[str] = None) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        root = (base_url or self._base_url).rstrip("/")
        if not path:
            return root
        return f"{root}/{path.lstrip('/')}"

    def _require_rpc(self) -> RpcClient:
        if self._rpc is None:
            raise ConfigurationError.missing(f"{self.name} RPC connection")
        return self._rpc

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        base_url: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        expect_json: bool = True,
    ) -> Any:
        merged_params = {**self._auth_params(), **(params or {})}
        merged_params = {k: v for k, v in merged_params.items() if v is not None}
        return await self._http.request(
            method,
            self._url(path, base_url),
            provider=self.name,
            operation=self._operation,
            params=merged_params or None,
            json=json,
            headers={**self._headers(), **(headers or {})} or None,
            expect_json=expect_json,
        )

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        return await self._request("GET", path, params=params, **kwargs)

    async def _post(self, path: str, json: Any = None, params: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        return await self._request("POST", path, params=params, json=json, **kwargs)

    async def _delete(self, path: str, params: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        return await self._request("DELETE", path, params=params, **kwargs)

    async def _graphql(self, query: str, variables: Optional[Dict[str, Any]] = None, path: str = "") -> Any:
        """
        POST a GraphQL query

        Raises:
            UpstreamError: The payload carries an `errors` array
        """
        payload = await self._post(path, json={"query": query, "variables": variables or {}})
        if payload.get("errors"):
            raise UpstreamError.graphql(self.name, self._operation, payload["errors"])
        return payload.get("data") or {}

    async def initialize(self):
        """Deferred setup; no-op unless the provider needs one"""

    async def health_probe(self) -> Any:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(base_url={self._base_url!r})"
