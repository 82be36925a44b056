"""
Market Module

Market-wide snapshot assembled from oracle, chain and marketplace data.
"""

import logging
from typing import Any, Awaitable, Dict, List, TYPE_CHECKING

from ..infra.fanout import settle_all
from ..infra.retry import CorrelationContext
from ..types.common import SOL_MINT
from ..types.market import DexPair, PriceData
from ..types.results import MarketOverview

if TYPE_CHECKING:
    from ..client import ForgeXClient

logger = logging.getLogger(__name__)

OVERVIEW_SYMBOLS = ("SOL", "BTC", "ETH")
TOP_COLLECTIONS = 5
TOP_PAIRS = 5


class MarketModule:
    """
    Market overview

    Usage:
        overview = await client.get_market_overview()
        sol = overview.prices["sol"]
        if sol:
            print(f"SOL: ${sol.price:.2f}")
    """

    def __init__(self, client: "ForgeXClient"):
        self._client = client

    async def get_market_overview(self) -> MarketOverview:
        """
        Prices, slot, staking, top NFT collections and SOL pairs

        Never raises; see MarketOverview.absent / failures for missing fields.
        """
        slots = self._client.slots()
        calls: Dict[str, Awaitable[Any]] = {
            "slot": self._client.connection.get_slot(),
        }
        absent: Dict[str, str] = {}

        sources = {
            "prices": ("pyth", lambda pyth: self._prices(pyth)),
            "staking": ("marinade", lambda marinade: marinade.get_staking_info()),
            "nfts": ("tensor", lambda tensor: tensor.get_collections("24h", TOP_COLLECTIONS)),
            "sol_pairs": ("dexscreener", lambda dex: self._sol_pairs(dex)),
        }
        for field, (provider, call) in sources.items():
            slot = slots[provider]
            if slot.is_present:
                calls[field] = call(slot.adapter)
            else:
                absent[field] = f"{provider}: {slot.reason}"

        with CorrelationContext("market") as cid:
            logger.debug(f"[{cid}] Market overview fan-out: {list(calls)}")
            settled = await settle_all(calls)

        overview = MarketOverview(
            prices={symbol.lower(): None for symbol in OVERVIEW_SYMBOLS},
            absent=absent,
        )
        for field, outcome in settled.items():
            if not outcome.ok:
                overview.failures[field] = str(outcome.error)
                logger.warning(f"Market overview {field} failed: {outcome.error}")
            elif field == "prices":
                overview.prices.update(outcome.value)
            else:
                setattr(overview, field, outcome.value)
        return overview

    @staticmethod
    async def _prices(pyth) -> Dict[str, PriceData]:
        prices = await pyth.get_latest_prices(list(OVERVIEW_SYMBOLS))
        return {p.symbol.lower(): p for p in prices if p.symbol}

    @staticmethod
    async def _sol_pairs(dex) -> List[DexPair]:
        pairs = await dex.get_pairs_by_volume("solana", SOL_MINT)
        return pairs[:TOP_PAIRS]
