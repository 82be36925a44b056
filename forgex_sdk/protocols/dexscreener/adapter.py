"""
DexScreener Adapter

Pair and token analytics across DEXes from the public DexScreener API.
"""

import logging
from typing import Any, Dict, List, Optional

from ...errors import ConfigurationError
from ...types.common import SOL_MINT
from ...types.market import DexPair
from ..base import ProviderAdapter, upstream_call
from ..mapping import Field, remap_many

logger = logging.getLogger(__name__)

MAX_TOKENS_PER_CALL = 30

PAIR_FIELDS = (
    Field("chain_id", "chainId", cast=str),
    Field("dex_id", "dexId", cast=str),
    Field("pair_address", "pairAddress", cast=str),
    Field("base_symbol", "baseToken.symbol", cast=str, default=""),
    Field("quote_symbol", "quoteToken.symbol", cast=str, default=""),
    Field("price_usd", "priceUsd"),
    Field("liquidity_usd", "liquidity.usd"),
    Field("volume_24h", "volume.h24"),
    Field("price_change_24h", "priceChange.h24"),
    Field("url", "url", cast=str),
)


def _pairs(items: Optional[List[Any]]) -> List[DexPair]:
    return remap_many(items, PAIR_FIELDS, DexPair)


class DexScreenerAdapter(ProviderAdapter):
    """
    DexScreener adapter

    Usage:
        pairs = await client.dexscreener.get_token_pairs("solana", SOL_MINT)
        best = await client.dexscreener.get_best_pair("solana", SOL_MINT)
    """

    name = "dexscreener"
    default_base_url = "https://api.dexscreener.com"

    # ==================== Pairs ====================

    @upstream_call("get_token_pairs")
    async def get_token_pairs(self, chain_id: str, token: str) -> List[DexPair]:
        data = await self._get(f"/latest/dex/tokens/{chain_id}/{token}")
        return _pairs(data.get("pairs"))

    @upstream_call("search_pairs")
    async def search_pairs(self, query: str) -> List[DexPair]:
        if not query:
            raise ConfigurationError.invalid("query", "must not be empty")
        data = await self._get("/latest/dex/search", params={"q": query})
        return _pairs(data.get("pairs"))

    @upstream_call("get_pair")
    async def get_pair(self, chain_id: str, pair_address: str) -> Optional[DexPair]:
        data = await self._get(f"/latest/dex/pairs/{chain_id}/{pair_address}")
        pairs = _pairs(data.get("pairs"))
        return pairs[0] if pairs else None

    @upstream_call("get_token_pools")
    async def get_token_pools(self, chain_id: str, token: str) -> List[DexPair]:
        return _pairs(await self._get(f"/token-pairs/v1/{chain_id}/{token}"))

    @upstream_call("get_tokens")
    async def get_tokens(self, chain_id: str, tokens: List[str]) -> List[DexPair]:
        """Pairs for up to 30 token addresses in one call"""
        if not tokens:
            raise ConfigurationError.invalid("tokens", "at least one address is required")
        if len(tokens) > MAX_TOKENS_PER_CALL:
            raise ConfigurationError.invalid("tokens", f"at most {MAX_TOKENS_PER_CALL} addresses per call")
        return _pairs(await self._get(f"/tokens/v1/{chain_id}/{','.join(tokens)}"))

    # ==================== Derived views ====================

    @upstream_call("get_best_pair")
    async def get_best_pair(self, chain_id: str, token: str) -> Optional[DexPair]:
        """Pair with the deepest USD liquidity"""
        pairs = await self.get_token_pairs(chain_id, token)
        if not pairs:
            return None
        return max(pairs, key=lambda p: p.liquidity_usd or 0.0)

    @upstream_call("get_pairs_by_volume")
    async def get_pairs_by_volume(self, chain_id: str, token: str, min_liquidity_usd: float = 0.0) -> List[DexPair]:
        """Pairs above min_liquidity_usd, highest 24h volume first"""
        pairs = await self.get_token_pairs(chain_id, token)
        kept = [p for p in pairs if (p.liquidity_usd or 0.0) >= min_liquidity_usd]
        return sorted(kept, key=lambda p: p.volume_24h or 0.0, reverse=True)

    # ==================== Profiles / boosts / orders ====================

    @upstream_call("get_latest_profiles")
    async def get_latest_profiles(self) -> List[Dict[str, Any]]:
        return await self._get("/token-profiles/latest/v1")

    @upstream_call("get_latest_boosts")
    async def get_latest_boosts(self) -> List[Dict[str, Any]]:
        return await self._get("/token-boosts/latest/v1")

    @upstream_call("get_top_boosts")
    async def get_top_boosts(self) -> List[Dict[str, Any]]:
        return await self._get("/token-boosts/top/v1")

    @upstream_call("get_orders")
    async def get_orders(self, chain_id: str, token: str) -> List[Dict[str, Any]]:
        """Paid orders (profile, ads, boosts) for a token"""
        return await self._get(f"/orders/v1/{chain_id}/{token}")

    async def health_probe(self):
        return await self.get_token_pairs("solana", SOL_MINT)
