"""
Pyth Adapter

Oracle prices from the Pyth Hermes service. Hermes reports fixed-point
integers with an exponent; every price returned here has the exponent
applied already.
"""

import logging
import time
from typing import Any, Dict, List, Optional, Union

from ...errors import ConfigurationError, UpstreamError
from ...types.market import PriceData
from ..base import ProviderAdapter, upstream_call
from ..mapping import Field, lookup, remap_many

logger = logging.getLogger(__name__)

BENCHMARKS_URL = "https://benchmarks.pyth.network/v1"

PYTH_FEEDS = {
    "SOL": "0xef0d8b6fda2ceba41da15d4095d1da392a0d2f8ed0c6c7bc0f4cfac8c280b56d",
    "BTC": "0xe62df6c8b4a85fe1a67db44dc12de5db330f7ac66b72dc658afedf0f4a415b43",
    "ETH": "0xff61491a931112ddf1bd8147cd1b641375f79f5825126d665480874634fd0ace",
    "USDC": "0xeaa020c61cc479712813461ce153894a96a6c00b21ed0cfc2798d1f9a9e9c94a",
    "USDT": "0x2b89b9dc8fdf9f34709a5b106b472f0f39bb6ca9ce04b0fd7f2e971688e2e53b",
    "AVAX": "0x93da3352f9f1d105fdfe4971cfa80e9dd777bfc5d0f683ebb6e1294b92137bb7",
    "LINK": "0x8ac0c70fff57e9aefdf5edf44b51d62c2d433653cbb2cf5cc06bb115af04d221",
}

_SYMBOL_BY_FEED = {feed_id[2:]: symbol for symbol, feed_id in PYTH_FEEDS.items()}

FEED_FIELDS = (
    Field("id", "id", cast=str),
    Field("symbol", "attributes.symbol", cast=str),
    Field("asset_type", "attributes.asset_type", cast=str),
    Field("base", "attributes.base", cast=str),
    Field("description", "attributes.description", cast=str),
)

BENCHMARK_FIELDS = (
    Field("symbol", "symbol", cast=str),
    Field("price", "price"),
    Field("timestamp", "timestamp", cast=int),
    Field("type", "type", cast=str),
)


def normalize_price(value: Union[int, str], expo: int) -> float:
    """value * 10^expo, dividing for negative exponents to keep decimals exact"""
    value = int(value)
    if expo < 0:
        return value / (10 ** -expo)
    return float(value * (10 ** expo))


def _resolve_feed(feed: str) -> str:
    """Accept either a known symbol ("SOL") or a hex feed id"""
    return PYTH_FEEDS.get(feed.upper(), feed)


def _to_price_data(raw: Dict[str, Any]) -> PriceData:
    price = raw["price"]
    expo = int(price["expo"])
    ema = raw.get("ema_price")
    feed_id = str(raw["id"])
    return PriceData(
        feed_id=feed_id,
        price=normalize_price(price["price"], expo),
        confidence=normalize_price(price["conf"], expo),
        expo=expo,
        publish_time=int(price.get("publish_time") or raw.get("publish_time") or 0),
        ema_price=normalize_price(ema["price"], int(ema["expo"])) if ema else None,
        symbol=_SYMBOL_BY_FEED.get(feed_id.lower().replace("0x", "")),
    )


class PythAdapter(ProviderAdapter):
    """
    Pyth Hermes adapter

    Usage:
        sol = await client.pyth.get_price("SOL")
        prices = await client.pyth.get_latest_prices(["SOL", "BTC", "ETH"])
    """

    name = "pyth"
    default_base_url = "https://hermes.pyth.network/v2"

    @upstream_call("get_latest_prices")
    async def get_latest_prices(self, feeds: List[str]) -> List[PriceData]:
        """Latest prices for symbols or feed ids, in request order"""
        if not feeds:
            raise ConfigurationError.invalid("feeds", "at least one feed is required")
        data = await self._get("/updates/price/latest", params={
            "ids[]": [_resolve_feed(f) for f in feeds],
            "encoding": "hex",
            "parsed": "true",
        })
        return [_to_price_data(raw) for raw in data.get("parsed") or []]

    @upstream_call("get_price")
    async def get_price(self, feed: str) -> PriceData:
        prices = await self.get_latest_prices([feed])
        if not prices:
            raise UpstreamError(self.name, "get_price", f"Price feed not found: {feed}")
        return prices[0]

    @upstream_call("get_historical_prices")
    async def get_historical_prices(
        self,
        feed: str,
        start_time: int,
        end_time: Optional[int] = None,
    ) -> List[PriceData]:
        data = await self._get("/updates/price", params={
            "ids[]": [_resolve_feed(feed)],
            "start_time": start_time,
            "end_time": end_time,
            "encoding": "hex",
            "parsed": "true",
        })
        return [_to_price_data(raw) for raw in data.get("parsed") or []]

    @upstream_call("get_price_feeds")
    async def get_price_feeds(self, query: Optional[str] = None, asset_type: Optional[str] = None) -> List[Dict[str, Any]]:
        data = await self._get("/price_feeds", params={"query": query, "asset_type": asset_type})
        return remap_many(data, FEED_FIELDS)

    @upstream_call("search_price_feeds")
    async def search_price_feeds(self, query: str) -> List[Dict[str, Any]]:
        """Case-insensitive match on symbol, base or description"""
        needle = query.lower()
        feeds = await self.get_price_feeds()
        return [
            f for f in feeds
            if any(needle in (f.get(key) or "").lower() for key in ("symbol", "base", "description"))
        ]

    @upstream_call("get_price_update_data")
    async def get_price_update_data(self, feeds: List[str]) -> List[Dict[str, Any]]:
        """Signed price updates (base64 VAAs) for on-chain consumption"""
        data = await self._get("/updates/price/latest", params={
            "ids[]": [_resolve_feed(f) for f in feeds],
            "encoding": "base64",
            "parsed": "true",
        })
        parsed = data.get("parsed") or []
        updates = []
        for index, vaa in enumerate(lookup(data, "binary.data", [])):
            publish_time = lookup(parsed, f"{index}.price.publish_time") if index < len(parsed) else None
            updates.append({"vaa": vaa, "publish_time": int(publish_time or time.time())})
        return updates

    @upstream_call("get_benchmark_prices")
    async def get_benchmark_prices(self, symbols: Optional[List[str]] = None, date: Optional[str] = None) -> List[Dict[str, Any]]:
        data = await self._get("/benchmarks/latest", base_url=BENCHMARKS_URL, params={
            "symbols": ",".join(symbols) if symbols else None,
            "date": date,
        })
        return remap_many(data, BENCHMARK_FIELDS)

    # ==================== Helpers ====================

    @staticmethod
    def confidence_ratio(price: PriceData) -> float:
        """Confidence interval as percent of price"""
        if price.price == 0:
            return 0.0
        return price.confidence / abs(price.price) * 100

    @staticmethod
    def is_price_stale(publish_time: int, max_age_seconds: int = 60) -> bool:
        return time.time() - publish_time > max_age_seconds

    @staticmethod
    def price_change(old_price: float, new_price: float) -> Dict[str, float]:
        absolute = new_price - old_price
        percentage = absolute / old_price * 100 if old_price else 0.0
        return {"absolute": absolute, "percentage": percentage}

    async def health_probe(self):
        return await self.get_price("SOL")
