"""
Drift Adapter

Read-only perpetuals data from the Drift data API. Amounts arrive as
fixed-point integers: base amounts use 1e9 precision, quote amounts and
prices 1e6, funding rates 1e9.
"""

import logging
from typing import Any, Dict, List

from ...types.positions import PerpPosition
from ..base import ProviderAdapter, upstream_call
from ..mapping import Field, remap_many

logger = logging.getLogger(__name__)

BASE_PRECISION = 1e9
QUOTE_PRECISION = 1e6
PRICE_PRECISION = 1e6
FUNDING_RATE_PRECISION = 1e9

MARKET_FIELDS = (
    Field("market_index", "contract_index", cast=int),
    Field("symbol", "ticker_id", cast=str),
    Field("base_currency", "base_currency", cast=str),
    Field("last_price", "last_price"),
    Field("index_price", "index_price"),
    Field("funding_rate", "funding_rate"),
    Field("open_interest", "open_interest"),
    Field("volume_24h", "quote_volume"),
)

POSITION_FIELDS = (
    Field("market_index", "marketIndex", cast=int),
    Field("market", ("marketName", "symbol"), cast=str, default=""),
    Field("base_asset_amount", "baseAssetAmount", divide=BASE_PRECISION, default=0.0),
    Field("quote_entry_amount", "quoteEntryAmount", divide=QUOTE_PRECISION, default=0.0),
    Field("unrealized_pnl", "unrealizedPnl", divide=QUOTE_PRECISION),
)

FUNDING_FIELDS = (
    Field("ts", "ts", cast=int),
    Field("funding_rate", "fundingRate", divide=FUNDING_RATE_PRECISION),
    Field("oracle_price", "oraclePriceTwap", divide=PRICE_PRECISION),
)


class DriftAdapter(ProviderAdapter):
    """
    Drift perpetuals adapter

    Usage:
        positions = await client.drift.get_position_details(wallet)
        markets = await client.drift.get_markets()
    """

    name = "drift"
    default_base_url = "https://data.api.drift.trade"

    @upstream_call("get_markets")
    async def get_markets(self) -> List[Dict[str, Any]]:
        data = await self._get("/contracts")
        return remap_many(data.get("contracts"), MARKET_FIELDS)

    @upstream_call("get_position_details")
    async def get_position_details(self, wallet: str) -> List[PerpPosition]:
        """Open perp positions of wallet; closed (zero size) ones are dropped"""
        data = await self._get(f"/authority/{wallet}/perpPositions")
        positions = remap_many(data.get("positions"), POSITION_FIELDS, PerpPosition)
        open_positions = []
        for position in positions:
            if position.base_asset_amount == 0:
                continue
            position.entry_price = abs(position.quote_entry_amount / position.base_asset_amount)
            open_positions.append(position)
        return open_positions

    @upstream_call("get_funding_rates")
    async def get_funding_rates(self, market_name: str = "SOL-PERP") -> List[Dict[str, Any]]:
        data = await self._get("/fundingRates", params={"marketName": market_name})
        return remap_many(data.get("fundingRates"), FUNDING_FIELDS)

    async def health_probe(self):
        return await self.get_markets()
