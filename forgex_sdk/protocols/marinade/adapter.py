"""
Marinade Adapter

Read-only liquid staking stats for mSOL through the Marinade REST API.
"""

import asyncio
import logging
from typing import Any, Dict

from ...errors import ConfigurationError
from ...types.positions import StakingInfo
from ..base import ProviderAdapter, upstream_call
from ..mapping import Field, remap

logger = logging.getLogger(__name__)

APY_WINDOWS = ("1d", "7d", "30d", "365d")

TVL_FIELDS = (
    Field("total_sol", ("total_sol", "staked_sol")),
    Field("total_usd", ("total_usd", "staked_usd")),
)


class MarinadeAdapter(ProviderAdapter):
    """
    Marinade staking adapter

    Usage:
        info = await client.marinade.get_staking_info()
        print(f"mSOL APY: {info.apy:.2f}%")
    """

    name = "marinade"
    default_base_url = "https://api.marinade.finance"

    @upstream_call("get_staking_apy")
    async def get_staking_apy(self, window: str = "7d") -> float:
        """mSOL APY in percent over the window"""
        if window not in APY_WINDOWS:
            raise ConfigurationError.invalid("window", f"must be one of {APY_WINDOWS}")
        data = await self._get(f"/msol/apy/{window}")
        return float(data["value"]) * 100

    @upstream_call("get_msol_price")
    async def get_msol_price(self) -> float:
        """SOL per mSOL"""
        return float(await self._get("/msol/price_sol"))

    @upstream_call("get_tvl")
    async def get_tvl(self) -> Dict[str, Any]:
        return remap(await self._get("/tlv"), TVL_FIELDS)

    @upstream_call("get_staking_info")
    async def get_staking_info(self, token: str = "mSOL") -> StakingInfo:
        """APY, exchange rate and TVL, fetched concurrently"""
        if token != "mSOL":
            raise ConfigurationError.invalid("token", "only mSOL is supported")
        apy, price, tvl = await asyncio.gather(
            self.get_staking_apy(),
            self.get_msol_price(),
            self.get_tvl(),
        )
        return StakingInfo(
            token=token,
            apy=apy,
            tvl=tvl["total_usd"],
            exchange_rate=price,
            total_staked=tvl["total_sol"],
        )

    async def health_probe(self):
        return await self.get_staking_apy()
