"""
Raydium Adapter

Pool discovery, token list, priority fees and swap computation through the
Raydium v3 REST API. Every response is wrapped as {id, success, data}.
"""

import logging
from typing import Any, Dict, List, Optional

from ...errors import ConfigurationError, UpstreamError
from ...types.market import SwapQuote
from ..base import ProviderAdapter, upstream_call
from ..mapping import Field, remap, remap_many

logger = logging.getLogger(__name__)

SWAP_HOST = "https://transaction-v1.raydium.io"

POOL_TYPES = ("all", "concentrated", "standard", "allFarm", "concentratedFarm", "standardFarm")
SORT_FIELDS = ("default", "liquidity", "volume24h", "fee24h", "apr24h", "volume7d", "apr7d")

POOL_FIELDS = (
    Field("id", "id", cast=str),
    Field("type", "type", cast=str),
    Field("mint_a", "mintA.address", cast=str),
    Field("symbol_a", "mintA.symbol", cast=str),
    Field("mint_b", "mintB.address", cast=str),
    Field("symbol_b", "mintB.symbol", cast=str),
    Field("price", "price"),
    Field("tvl", "tvl"),
    Field("fee_rate", "feeRate"),
    Field("volume_24h", "day.volume"),
    Field("apr_24h", "day.apr"),
)

TOKEN_FIELDS = (
    Field("mint", "address", cast=str),
    Field("symbol", "symbol", cast=str),
    Field("name", "name", cast=str),
    Field("decimals", "decimals", cast=int),
    Field("logo_uri", "logoURI", cast=str),
)

SWAP_FIELDS = (
    Field("input_mint", "inputMint", cast=str),
    Field("output_mint", "outputMint", cast=str),
    Field("in_amount", "inputAmount", cast=int, default=0),
    Field("out_amount", "outputAmount", cast=int, default=0),
    Field("other_amount_threshold", "otherAmountThreshold", cast=int, default=0),
    Field("price_impact_pct", "priceImpactPct", default=0.0),
    Field("slippage_bps", "slippageBps", cast=int, default=0),
    Field("route_plan", "routePlan", cast=list, default=[]),
)


class RaydiumAdapter(ProviderAdapter):
    """
    Raydium REST adapter

    Usage:
        fee = await client.raydium.get_priority_fee()
        pools = await client.raydium.get_pool_list(sort_field="volume24h", page_size=10)
    """

    name = "raydium"
    default_base_url = "https://api-v3.raydium.io"

    async def _get_data(self, path: str, params: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        payload = await self._get(path, params=params, **kwargs)
        if not payload.get("success", True):
            raise UpstreamError(self.name, self._operation, payload.get("msg") or "request rejected")
        return payload.get("data")

    @upstream_call("get_priority_fee")
    async def get_priority_fee(self) -> Dict[str, int]:
        """Priority fee tiers in micro-lamports: very_high, high, medium"""
        data = await self._get_data("/main/auto-fee")
        return remap(data, (
            Field("very_high", "default.vh", cast=int),
            Field("high", "default.h", cast=int),
            Field("medium", "default.m", cast=int),
        ))

    @upstream_call("get_pool_list")
    async def get_pool_list(
        self,
        pool_type: str = "all",
        sort_field: str = "default",
        sort_type: str = "desc",
        page_size: int = 100,
        page: int = 1,
    ) -> Dict[str, Any]:
        """
        One page of pools

        Returns:
            {"count", "has_next_page", "pools": [...]}
        """
        if pool_type not in POOL_TYPES:
            raise ConfigurationError.invalid("pool_type", f"must be one of {POOL_TYPES}")
        if sort_field not in SORT_FIELDS:
            raise ConfigurationError.invalid("sort_field", f"must be one of {SORT_FIELDS}")
        if sort_type not in ("asc", "desc"):
            raise ConfigurationError.invalid("sort_type", "must be asc or desc")
        if not 1 <= page_size <= 1000:
            raise ConfigurationError.invalid("page_size", "must be within 1..1000")
        data = await self._get_data("/pools/info/list", params={
            "poolType": pool_type,
            "poolSortField": sort_field,
            "sortType": sort_type,
            "pageSize": page_size,
            "page": page,
        })
        return {
            "count": int(data.get("count") or 0),
            "has_next_page": bool(data.get("hasNextPage")),
            "pools": remap_many(data.get("data"), POOL_FIELDS),
        }

    @upstream_call("get_pools_by_ids")
    async def get_pools_by_ids(self, ids: List[str]) -> List[Dict[str, Any]]:
        if not ids:
            raise ConfigurationError.invalid("ids", "at least one pool id is required")
        data = await self._get_data("/pools/info/ids", params={"ids": ",".join(ids)})
        return remap_many([p for p in data or [] if p], POOL_FIELDS)

    @upstream_call("get_pools_by_mints")
    async def get_pools_by_mints(self, mint1: str, mint2: Optional[str] = None) -> List[Dict[str, Any]]:
        data = await self._get_data("/pools/info/mint", params={
            "mint1": mint1,
            "mint2": mint2,
            "poolType": "all",
            "poolSortField": "default",
            "sortType": "desc",
            "pageSize": 100,
            "page": 1,
        })
        return remap_many((data or {}).get("data"), POOL_FIELDS)

    @upstream_call("get_token_list")
    async def get_token_list(self) -> List[Dict[str, Any]]:
        data = await self._get_data("/mint/list")
        return remap_many((data or {}).get("mintList"), TOKEN_FIELDS)

    @upstream_call("compute_swap")
    async def compute_swap(
        self,
        input_mint: str,
        output_mint: str,
        amount: int,
        slippage_bps: int = 50,
        tx_version: str = "V0",
    ) -> SwapQuote:
        """Exact-in swap route; the raw payload is kept for building the transaction"""
        if amount <= 0:
            raise ConfigurationError.invalid("amount", "must be positive (base units)")
        if not 0 <= slippage_bps <= 10_000:
            raise ConfigurationError.invalid("slippage_bps", "must be within 0..10000")
        payload = await self._get("/compute/swap-base-in", base_url=SWAP_HOST, params={
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": str(amount),
            "slippageBps": slippage_bps,
            "txVersion": tx_version,
        })
        if not payload.get("success"):
            raise UpstreamError(self.name, "compute_swap", payload.get("msg") or "no route found")
        quote = remap(payload.get("data"), SWAP_FIELDS, SwapQuote)
        quote.raw_response = payload
        return quote

    async def health_probe(self):
        return await self.get_priority_fee()
