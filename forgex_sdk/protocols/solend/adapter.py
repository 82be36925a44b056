"""
Solend Adapter

Lending pools and reserve rates from the Solend (Save) REST API. Pool
configuration is fetched once by initialize(); read operations call it on
first use, so construction stays free of network I/O.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from ...errors import ConfigurationError, UpstreamError
from ...types.positions import LendingMarket
from ..base import ProviderAdapter, upstream_call
from ..mapping import Field, lookup, remap, remap_many

logger = logging.getLogger(__name__)

PRIMARY_POOL = "main"

POOL_FIELDS = (
    Field("address", "address", cast=str),
    Field("name", "name", cast=str),
    Field("is_primary", "isPrimary", cast=bool, default=False),
    Field("authority", "authorityAddress", cast=str),
)

POOL_RESERVE_FIELDS = (
    Field("address", "address", cast=str),
    Field("symbol", "liquidityToken.symbol", cast=str, default="Unknown"),
    Field("mint", "liquidityToken.mint", cast=str),
    Field("decimals", "liquidityToken.decimals", cast=int, default=6),
)

RATE_FIELDS = (
    Field("supply_apy", "rates.supplyInterest", multiply=100, default=0.0),
    Field("borrow_apy", "rates.borrowInterest", multiply=100, default=0.0),
    Field("utilization", ("reserve.utilization", "utilization"), multiply=100, default=0.0),
    Field("total_supply", "reserve.liquidity.totalSupply"),
    Field("total_borrow", "reserve.liquidity.borrowedAmount"),
    Field("available_liquidity", "reserve.liquidity.availableAmount"),
    Field("price", "reserve.liquidity.marketPrice"),
    Field("ltv", "reserve.config.loanToValueRatio"),
)


class SolendAdapter(ProviderAdapter):
    """
    Solend lending adapter

    Usage:
        await client.solend.initialize()
        reserves = await client.solend.get_reserves()
        usdc = await client.solend.get_reserve("USDC")
    """

    name = "solend"
    default_base_url = "https://api.solend.fi"

    def __init__(self, http, *, deployment: str = "production", **kwargs):
        super().__init__(http, **kwargs)
        self._deployment = deployment
        self._pools: Dict[str, Dict[str, Any]] = {}
        self._init_lock = asyncio.Lock()

    @property
    def is_initialized(self) -> bool:
        return bool(self._pools)

    @upstream_call("initialize")
    async def initialize(self):
        """Fetch pool and reserve configuration"""
        async with self._init_lock:
            data = await self._get("/v1/markets/configs", params={
                "scope": "all",
                "deployment": self._deployment,
            })
            pools = {}
            for raw in data or []:
                pool = remap(raw, POOL_FIELDS)
                pool["reserves"] = remap_many(raw.get("reserves"), POOL_RESERVE_FIELDS)
                key = PRIMARY_POOL if pool["is_primary"] else (pool["name"] or pool["address"]).lower()
                pools[key] = pool
            if not pools:
                raise UpstreamError(self.name, "initialize", "no lending pools returned")
            self._pools = pools
            logger.info(f"solend: loaded {len(pools)} pools")

    async def _pool(self, pool_name: str) -> Dict[str, Any]:
        if not self._pools:
            await self.initialize()
        pool = self._pools.get(pool_name.lower())
        if pool is None:
            raise ConfigurationError.invalid("pool_name", f"pool {pool_name!r} not found")
        return pool

    @upstream_call("get_markets")
    async def get_markets(self) -> List[Dict[str, Any]]:
        """Pool summaries: address, name, is_primary, authority, reserve count"""
        if not self._pools:
            await self.initialize()
        return [
            {**{k: v for k, v in pool.items() if k != "reserves"}, "reserve_count": len(pool["reserves"])}
            for pool in self._pools.values()
        ]

    @upstream_call("get_reserves")
    async def get_reserves(self, pool_name: str = PRIMARY_POOL) -> List[LendingMarket]:
        """Reserve rates of a pool, in percent"""
        pool = await self._pool(pool_name)
        reserves = {r["address"]: r for r in pool["reserves"]}
        if not reserves:
            return []
        data = await self._get("/v1/reserves", params={"ids": ",".join(reserves)})
        markets = []
        for raw in lookup(data, "results", []):
            config = reserves.get(lookup(raw, "reserve.address"))
            if config is None:
                continue
            markets.append(LendingMarket(
                token_mint=config["mint"],
                token_symbol=config["symbol"],
                **remap(raw, RATE_FIELDS),
            ))
        return markets

    @upstream_call("get_reserve")
    async def get_reserve(self, symbol: str, pool_name: str = PRIMARY_POOL) -> Optional[LendingMarket]:
        wanted = symbol.lower()
        for market in await self.get_reserves(pool_name):
            if market.token_symbol.lower() == wanted:
                return market
        return None

    @upstream_call("get_wallet_assets")
    async def get_wallet_assets(self, wallet: str, pool_name: str = PRIMARY_POOL) -> List[Dict[str, Any]]:
        """Wallet token accounts whose mint is a reserve of the pool"""
        rpc = self._require_rpc()
        pool = await self._pool(pool_name)
        symbols = {r["mint"]: r["symbol"] for r in pool["reserves"]}
        accounts = await rpc.get_parsed_token_accounts_by_owner(wallet)
        return [
            {**account, "symbol": symbols[account["mint"]]}
            for account in accounts
            if account["mint"] in symbols
        ]

    async def health_probe(self):
        return await self.initialize()
