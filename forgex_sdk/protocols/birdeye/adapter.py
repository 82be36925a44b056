"""
Birdeye Adapter

Token prices, market stats, security flags and wallet views from the
Birdeye public API. Every response is wrapped as {success, data}; the
adapter returns the unwrapped data.
"""

import logging
from typing import Any, Dict, List, Optional

from ...errors import ConfigurationError, UpstreamError
from ...types.common import SOL_MINT
from ...types.market import TokenPrice
from ..base import ProviderAdapter, upstream_call
from ..mapping import Field, remap

logger = logging.getLogger(__name__)

PRICE_TIMEFRAMES = ("1m", "3m", "5m", "15m", "30m", "1H", "2H", "4H", "6H", "8H", "12H", "1D", "3D", "1W", "1M")
HISTORY_WINDOWS = ("24H", "7D", "30D")

MAX_MULTI_PRICE = 100

PRICE_FIELDS = (
    Field("usd_price", "value", default=0.0),
    Field("price_change_24h", "priceChange24h"),
)


class BirdeyeAdapter(ProviderAdapter):
    """
    Birdeye market data adapter (API key required)

    Usage:
        price = await client.birdeye.get_price(SOL_MINT)
        trending = await client.birdeye.get_trending_tokens(limit=10)
    """

    name = "birdeye"
    default_base_url = "https://public-api.birdeye.so"
    requires_api_key = True

    def _headers(self) -> Dict[str, str]:
        return {"X-API-KEY": self._api_key, "x-chain": "solana"}

    async def _get_data(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        payload = await self._get(path, params=params)
        if isinstance(payload, dict) and payload.get("success") is False:
            raise UpstreamError(self.name, self._operation, payload.get("message") or "request rejected")
        return payload.get("data") if isinstance(payload, dict) else payload

    # ==================== Prices ====================

    @upstream_call("get_price")
    async def get_price(self, mint: str) -> TokenPrice:
        data = await self._get_data("/defi/price", {"address": mint})
        return TokenPrice(mint=mint, **remap(data, PRICE_FIELDS))

    @upstream_call("get_multi_price")
    async def get_multi_price(self, mints: List[str]) -> Dict[str, TokenPrice]:
        if not mints:
            return {}
        if len(mints) > MAX_MULTI_PRICE:
            raise ConfigurationError.invalid("mints", f"at most {MAX_MULTI_PRICE} addresses per call")
        data = await self._get_data("/defi/multi_price", {"list_address": ",".join(mints)})
        return {
            mint: TokenPrice(mint=mint, **remap(raw, PRICE_FIELDS))
            for mint, raw in (data or {}).items()
            if raw
        }

    @upstream_call("get_price_history")
    async def get_price_history(self, mint: str, window: str = "24H") -> List[Dict[str, Any]]:
        if window not in HISTORY_WINDOWS:
            raise ConfigurationError.invalid("window", f"must be one of {HISTORY_WINDOWS}")
        data = await self._get_data("/defi/history_price", {
            "address": mint,
            "address_type": "token",
            "type": window,
        })
        return [
            {"timestamp": int(item["unixTime"]), "price": float(item["value"])}
            for item in (data or {}).get("items", [])
        ]

    @upstream_call("get_ohlcv")
    async def get_ohlcv(
        self,
        mint: str,
        timeframe: str = "15m",
        time_from: Optional[int] = None,
        time_to: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        if timeframe not in PRICE_TIMEFRAMES:
            raise ConfigurationError.invalid("timeframe", f"must be one of {PRICE_TIMEFRAMES}")
        data = await self._get_data("/defi/ohlcv", {
            "address": mint,
            "type": timeframe,
            "time_from": time_from,
            "time_to": time_to,
        })
        return [
            {
                "timestamp": int(item["unixTime"]),
                "open": float(item["o"]),
                "high": float(item["h"]),
                "low": float(item["l"]),
                "close": float(item["c"]),
                "volume": float(item.get("v") or 0),
            }
            for item in (data or {}).get("items", [])
        ]

    # ==================== Tokens ====================

    @upstream_call("get_token_overview")
    async def get_token_overview(self, mint: str) -> Dict[str, Any]:
        return await self._get_data("/defi/token_overview", {"address": mint})

    @upstream_call("get_trending_tokens")
    async def get_trending_tokens(
        self,
        sort_by: str = "rank",
        sort_type: str = "asc",
        offset: int = 0,
        limit: int = 20,
    ) -> List[Dict[str, Any]]:
        if not 1 <= limit <= 20:
            raise ConfigurationError.invalid("limit", "must be within 1..20")
        data = await self._get_data("/defi/token_trending", {
            "sort_by": sort_by,
            "sort_type": sort_type,
            "offset": offset,
            "limit": limit,
        })
        return (data or {}).get("tokens", [])

    @upstream_call("get_token_security")
    async def get_token_security(self, mint: str) -> Dict[str, Any]:
        return await self._get_data("/defi/token_security", {"address": mint})

    @upstream_call("get_token_holders")
    async def get_token_holders(self, mint: str, offset: int = 0, limit: int = 100) -> List[Dict[str, Any]]:
        data = await self._get_data("/defi/v3/token/holder", {"address": mint, "offset": offset, "limit": limit})
        return (data or {}).get("items", [])

    # ==================== Wallet ====================

    @upstream_call("get_wallet_tokens")
    async def get_wallet_tokens(self, wallet: str) -> Dict[str, Any]:
        """Token list with USD values; keys: wallet, totalUsd, items"""
        return await self._get_data("/v1/wallet/token_list", {"wallet": wallet})

    @upstream_call("get_wallet_net_worth")
    async def get_wallet_net_worth(self, wallet: str) -> Dict[str, Any]:
        return await self._get_data("/wallet/v2/current-net-worth", {"wallet": wallet})

    async def health_probe(self):
        return await self.get_price(SOL_MINT)
