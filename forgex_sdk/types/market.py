"""
Market data types: prices, quotes, NFT collections, DEX pairs
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional


@dataclass
class PriceData:
    """
    Oracle price

    Attributes:
        feed_id: Oracle feed identifier (hex)
        price: Price in quote units, exponent already applied
        confidence: Confidence interval, exponent already applied
        expo: Exponent reported by the oracle
        publish_time: Unix seconds
        ema_price: Exponential moving average price, if reported
    """
    feed_id: str
    price: float
    confidence: float
    expo: int
    publish_time: int
    ema_price: Optional[float] = None
    symbol: Optional[str] = None


@dataclass
class TokenPrice:
    mint: str
    usd_price: float
    decimals: Optional[int] = None
    price_change_24h: Optional[float] = None


@dataclass
class SwapQuote:
    """
    Swap quote

    Attributes:
        input_mint: Input token mint
        output_mint: Output token mint
        in_amount: Input amount (raw)
        out_amount: Output amount (raw)
        other_amount_threshold: Minimum output after slippage (raw)
        price_impact_pct: Price impact as reported by the aggregator
        slippage_bps: Applied slippage in basis points
        route_plan: Route legs as returned by the aggregator
        raw_response: Raw quote payload, needed to build the swap
    """
    input_mint: str
    output_mint: str
    in_amount: int
    out_amount: int
    other_amount_threshold: int = 0
    price_impact_pct: float = 0.0
    slippage_bps: int = 50
    route_plan: List[dict] = field(default_factory=list)
    raw_response: Optional[dict] = field(default=None, repr=False)

    @property
    def exchange_rate(self) -> Decimal:
        """Output per input (raw units)"""
        if self.in_amount == 0:
            return Decimal(0)
        return Decimal(self.out_amount) / Decimal(self.in_amount)

    @property
    def hops(self) -> int:
        return len(self.route_plan)

    def __str__(self) -> str:
        return f"Quote({self.in_amount} -> {self.out_amount}, impact={self.price_impact_pct:.2f}%)"


@dataclass
class NftCollection:
    """NFT collection stats, floor prices in SOL"""
    id: str
    slug: str
    name: str
    image_uri: Optional[str] = None
    floor_price: Optional[float] = None
    num_listed: Optional[int] = None
    num_mints: Optional[int] = None
    volume_24h: Optional[float] = None


@dataclass
class DexPair:
    """Trading pair as indexed by a DEX aggregator"""
    chain_id: str
    dex_id: str
    pair_address: str
    base_symbol: str
    quote_symbol: str
    price_usd: Optional[float] = None
    liquidity_usd: Optional[float] = None
    volume_24h: Optional[float] = None
    price_change_24h: Optional[float] = None
    url: Optional[str] = None
