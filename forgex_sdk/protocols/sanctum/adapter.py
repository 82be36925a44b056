"""
Sanctum Adapter

Liquid staking token (LST) yields and LST-to-LST swaps.
"""

import logging
from typing import Any, Dict, List, Optional

from ...errors import ConfigurationError, UpstreamError
from ...types.positions import LsdYield
from ..base import ProviderAdapter, upstream_call
from ..mapping import Field, remap, remap_many

logger = logging.getLogger(__name__)

LSD_FIELDS = (
    Field("token", "symbol", cast=str),
    Field("mint", "mint", cast=str),
    Field("apy", "apy", multiply=100, default=0.0),
    Field("tvl", "tvl"),
    Field("protocol", "protocol", cast=str),
    Field("staking_strategy", "strategy", cast=str),
)

SWAP_QUOTE_FIELDS = (
    Field("out_amount", "outAmount", cast=str),
    Field("price", "price"),
    Field("price_impact", "priceImpact"),
    Field("fee", "fee"),
    Field("route_type", "routeType", cast=str),
)


class SanctumAdapter(ProviderAdapter):
    """
    Sanctum LST adapter

    Usage:
        yields = await client.sanctum.get_all_lsd_yields()
        jito = await client.sanctum.get_lsd_yield("jitoSOL")
    """

    name = "sanctum"
    default_base_url = "https://api.sanctum.so/v1"

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}

    @upstream_call("get_all_lsd_yields")
    async def get_all_lsd_yields(self) -> List[LsdYield]:
        """Every LST with its APY in percent"""
        data = await self._get("/lsds")
        return remap_many(data["lsds"], LSD_FIELDS, LsdYield)

    @upstream_call("get_lsd_yield")
    async def get_lsd_yield(self, symbol: str) -> LsdYield:
        wanted = symbol.lower()
        for lsd in await self.get_all_lsd_yields():
            if (lsd.token or "").lower() == wanted:
                return lsd
        raise UpstreamError(self.name, "get_lsd_yield", f"LSD token {symbol} not found")

    @upstream_call("get_supported_lsds")
    async def get_supported_lsds(self) -> List[Dict[str, Optional[str]]]:
        return [
            {"symbol": lsd.token, "mint": lsd.mint, "protocol": lsd.protocol}
            for lsd in await self.get_all_lsd_yields()
        ]

    @upstream_call("get_swap_quote")
    async def get_swap_quote(self, from_mint: str, to_mint: str, amount: int, slippage_bps: int = 50) -> Dict[str, Any]:
        """LST swap quote; the returned dict is what prepare_swap expects"""
        if amount <= 0:
            raise ConfigurationError.invalid("amount", "must be positive (base units)")
        if not 0 <= slippage_bps <= 10_000:
            raise ConfigurationError.invalid("slippage_bps", "must be within 0..10000")
        data = await self._post("/swap/quote", json={
            "inputMint": from_mint,
            "outputMint": to_mint,
            "amount": str(amount),
            "slippageBps": slippage_bps,
        })
        return {
            "from_mint": from_mint,
            "to_mint": to_mint,
            "in_amount": str(amount),
            "slippage_bps": slippage_bps,
            **remap(data, SWAP_QUOTE_FIELDS),
        }

    @upstream_call("prepare_swap")
    async def prepare_swap(self, quote: Dict[str, Any], wallet: str) -> Dict[str, Any]:
        """
        Unsigned swap transaction for a quote from get_swap_quote

        Returns:
            {"transaction" (base64), "blockhash", "expected_out_amount"}
        """
        data = await self._post("/swap/prepare", json={
            "inputMint": quote["from_mint"],
            "outputMint": quote["to_mint"],
            "amount": quote["in_amount"],
            "slippageBps": quote["slippage_bps"],
            "userPublicKey": wallet,
        })
        return {
            "transaction": data["transaction"],
            "blockhash": data.get("blockhash"),
            "expected_out_amount": quote.get("out_amount"),
        }

    async def health_probe(self):
        return await self.get_all_lsd_yields()
