"""
Jupiter Adapter

Swap aggregator: quotes, swap instructions, Ultra orders, token search,
prices and Lend/Earn data. The free tier (lite-api.jup.ag) needs no key;
passing an API key switches to the paid tier.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ...errors import ConfigurationError
from ...types.common import SOL_MINT
from ...types.market import SwapQuote, TokenPrice
from ..base import ProviderAdapter, upstream_call
from ..mapping import Field, remap

logger = logging.getLogger(__name__)

FREE_TIER_URL = "https://lite-api.jup.ag"
PAID_TIER_URL = "https://api.jup.ag"

MAX_SLIPPAGE_BPS = 10_000

QUOTE_FIELDS = (
    Field("input_mint", "inputMint", cast=str),
    Field("output_mint", "outputMint", cast=str),
    Field("in_amount", "inAmount", cast=int, default=0),
    Field("out_amount", "outAmount", cast=int, default=0),
    Field("other_amount_threshold", "otherAmountThreshold", cast=int, default=0),
    Field("price_impact_pct", "priceImpactPct", default=0.0),
    Field("slippage_bps", "slippageBps", cast=int, default=0),
    Field("route_plan", "routePlan", cast=list, default=[]),
)

PRICE_FIELDS = (
    Field("usd_price", "usdPrice"),
    Field("decimals", "decimals", cast=int),
    Field("price_change_24h", "priceChange24h"),
)


def _validate_slippage(slippage_bps: int):
    if not 0 <= slippage_bps <= MAX_SLIPPAGE_BPS:
        raise ConfigurationError.invalid("slippage_bps", f"must be within 0..{MAX_SLIPPAGE_BPS}, got {slippage_bps}")


@dataclass
class QuoteParams:
    """
    Swap quote request

    Attributes:
        input_mint: Mint sold
        output_mint: Mint bought
        amount: Input amount in base units
        slippage_bps: Slippage tolerance, 0..10000
        swap_mode: "ExactIn" or "ExactOut"
        only_direct_routes: Restrict to single-hop routes
        dexes: Restrict to these DEX labels
        exclude_dexes: Exclude these DEX labels
    """
    input_mint: str
    output_mint: str
    amount: int
    slippage_bps: int = 50
    swap_mode: str = "ExactIn"
    only_direct_routes: bool = False
    dexes: List[str] = field(default_factory=list)
    exclude_dexes: List[str] = field(default_factory=list)

    def validate(self):
        if self.amount <= 0:
            raise ConfigurationError.invalid("amount", "must be positive (base units)")
        _validate_slippage(self.slippage_bps)
        if self.swap_mode not in ("ExactIn", "ExactOut"):
            raise ConfigurationError.invalid("swap_mode", "must be ExactIn or ExactOut")
        if self.input_mint == self.output_mint:
            raise ConfigurationError.invalid("output_mint", "must differ from input_mint")

    def to_query(self) -> Dict[str, Any]:
        query = {
            "inputMint": self.input_mint,
            "outputMint": self.output_mint,
            "amount": str(self.amount),
            "slippageBps": self.slippage_bps,
            "swapMode": self.swap_mode,
            "onlyDirectRoutes": str(self.only_direct_routes).lower(),
        }
        if self.dexes:
            query["dexes"] = ",".join(self.dexes)
        if self.exclude_dexes:
            query["excludeDexes"] = ",".join(self.exclude_dexes)
        return query


class JupiterAdapter(ProviderAdapter):
    """
    Jupiter aggregator adapter

    Usage:
        quote = await client.jupiter.get_quote(QuoteParams(SOL, USDC, 1_000_000_000))
        prices = await client.jupiter.get_prices([SOL, USDC])
    """

    name = "jupiter"
    default_base_url = FREE_TIER_URL

    def __init__(self, http, *, api_key: Optional[str] = None, base_url: Optional[str] = None, **kwargs):
        if base_url is None and api_key:
            base_url = PAID_TIER_URL
        super().__init__(http, api_key=api_key, base_url=base_url, **kwargs)

    def _headers(self) -> Dict[str, str]:
        return {"x-api-key": self._api_key} if self._api_key else {}

    # ==================== Swap API ====================

    @upstream_call("get_quote")
    async def get_quote(self, params: QuoteParams) -> SwapQuote:
        """Quote for params; the raw payload is kept for building the swap"""
        params.validate()
        data = await self._get("/swap/v1/quote", params=params.to_query())
        quote = remap(data, QUOTE_FIELDS, SwapQuote)
        quote.raw_response = data
        return quote

    @upstream_call("get_swap_instructions")
    async def get_swap_instructions(
        self,
        quote: SwapQuote,
        user_public_key: str,
        wrap_and_unwrap_sol: bool = True,
        prioritization_fee_lamports: Optional[int] = None,
    ) -> Dict[str, Any]:
        if not quote.raw_response:
            raise ConfigurationError.invalid("quote", "quote has no raw response; fetch it with get_quote")
        body = {
            "quoteResponse": quote.raw_response,
            "userPublicKey": user_public_key,
            "wrapAndUnwrapSol": wrap_and_unwrap_sol,
        }
        if prioritization_fee_lamports is not None:
            body["prioritizationFeeLamports"] = prioritization_fee_lamports
        return await self._post("/swap/v1/swap-instructions", json=body)

    @upstream_call("get_best_route")
    async def best_route(self, input_mint: str, output_mint: str, amount: int) -> Dict[str, Any]:
        """Quote at 50 bps with its price impact and estimated output"""
        quote = await self.get_quote(QuoteParams(input_mint, output_mint, amount, slippage_bps=50))
        return {
            "quote": quote,
            "price_impact": quote.price_impact_pct,
            "estimated_output": quote.out_amount,
        }

    # ==================== Ultra API ====================

    @upstream_call("get_order")
    async def get_order(
        self,
        input_mint: str,
        output_mint: str,
        amount: int,
        taker: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Ultra order: quote plus unsigned transaction when taker is given"""
        if amount <= 0:
            raise ConfigurationError.invalid("amount", "must be positive (base units)")
        return await self._get("/ultra/v1/order", params={
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": str(amount),
            "taker": taker,
        })

    @upstream_call("get_holdings")
    async def get_holdings(self, address: str) -> Dict[str, Any]:
        """
        Wallet holdings

        Returns:
            {"sol": ui SOL amount, "tokens": {mint: {"amount", "decimals", "accounts"}}}
        """
        data = await self._get(f"/ultra/v1/holdings/{address}")
        tokens: Dict[str, Dict[str, Any]] = {}
        for mint, accounts in (data.get("tokens") or {}).items():
            if not accounts:
                continue
            tokens[mint] = {
                "amount": sum(float(a.get("uiAmount") or 0) for a in accounts),
                "decimals": int(accounts[0].get("decimals", 0)),
                "accounts": len(accounts),
            }
        return {"sol": float(data.get("uiAmount") or 0), "tokens": tokens}

    # ==================== Tokens ====================

    @upstream_call("search_tokens")
    async def search_tokens(self, query: str) -> List[Dict[str, Any]]:
        if not query:
            raise ConfigurationError.invalid("query", "must not be empty")
        return await self._get("/tokens/v2/search", params={"query": query})

    @upstream_call("get_recent_tokens")
    async def get_recent_tokens(self) -> List[Dict[str, Any]]:
        return await self._get("/tokens/v2/recent")

    # ==================== Price API ====================

    @upstream_call("get_prices")
    async def get_prices(self, mints: List[str]) -> Dict[str, TokenPrice]:
        """USD prices keyed by mint; mints without a price are omitted"""
        if not mints:
            return {}
        data = await self._get("/price/v3", params={"ids": ",".join(mints)})
        prices = {}
        for mint, raw in data.items():
            if raw:
                prices[mint] = TokenPrice(mint=mint, **remap(raw, PRICE_FIELDS))
        return prices

    @upstream_call("get_price")
    async def get_price(self, mint: str) -> Optional[TokenPrice]:
        prices = await self.get_prices([mint])
        return prices.get(mint)

    # ==================== Lend / Earn ====================

    @upstream_call("get_lend_tokens")
    async def get_lend_tokens(self) -> List[Dict[str, Any]]:
        return await self._get("/lend/v1/earn/tokens")

    @upstream_call("get_lend_positions")
    async def get_lend_positions(self, users: List[str]) -> List[Dict[str, Any]]:
        if not users:
            raise ConfigurationError.invalid("users", "at least one wallet is required")
        return await self._get("/lend/v1/earn/positions", params={"users": ",".join(users)})

    async def health_probe(self):
        return await self.get_prices([SOL_MINT])
