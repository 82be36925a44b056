"""
Mayan Adapter

Cross-chain swaps out of Solana: token discovery and quotes from the Mayan
price API, swap tracking from the explorer API. The adapter is bound to the
origin wallet, so it only exists once a wallet is bound.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ...errors import ConfigurationError, UpstreamError
from ..base import ProviderAdapter, upstream_call
from ..mapping import Field, remap, remap_many

logger = logging.getLogger(__name__)

EXPLORER_URL = "https://explorer-api.mayan.finance"

# Maximum native gas drop on the destination chain, in its native token
GAS_DROP_LIMITS = {
    "ethereum": 0.05,
    "bsc": 0.02,
    "polygon": 0.2,
    "avalanche": 0.2,
    "solana": 0.2,
    "arbitrum": 0.01,
}

SUPPORTED_CHAINS = ("solana", "ethereum", "bsc", "polygon", "avalanche", "arbitrum", "optimism", "base")

TOKEN_STANDARDS = ("native", "spl", "spl2022")

FINAL_STATUS_MARKERS = ("SETTLED", "COMPLETED")

TOKEN_FIELDS = (
    Field("name", "name", cast=str),
    Field("symbol", "symbol", cast=str),
    Field("mint", "mint", cast=str),
    Field("contract", "contract", cast=str),
    Field("decimals", "decimals", cast=int, default=0),
    Field("standard", "standard", cast=str),
    Field("verified", "verified", cast=bool, default=False),
    Field("has_auction", "hasAuction", cast=bool, default=False),
    Field("pyth_price_id", "pythUsdPriceId", cast=str),
)

QUOTE_FIELDS = (
    Field("type", "type", cast=str),
    Field("from_token", "fromToken.contract", cast=str),
    Field("to_token", "toToken.contract", cast=str),
    Field("to_chain", "toChain", cast=str),
    Field("effective_amount_in", "effectiveAmountIn"),
    Field("expected_amount_out", "expectedAmountOut"),
    Field("min_amount_out", "minAmountOut"),
    Field("price_impact", "priceImpact"),
    Field("eta_seconds", "etaSeconds", cast=int),
    Field("slippage_bps", "slippageBps", cast=int),
)

SWAP_FIELDS = (
    Field("id", "id", cast=str),
    Field("trader", "trader", cast=str),
    Field("source_tx_hash", "sourceTxHash", cast=str),
    Field("status", "status", cast=str, default=""),
    Field("source_chain", "sourceChain", cast=str),
    Field("dest_chain", "destChain", cast=str),
    Field("dest_address", "destAddress", cast=str),
    Field("from_symbol", "fromTokenSymbol", cast=str),
    Field("from_amount", "fromAmount"),
    Field("to_symbol", "toTokenSymbol", cast=str),
    Field("to_amount", "toAmount"),
    Field("initiated_at", "initiatedAt", cast=str),
    Field("completed_at", "completedAt", cast=str),
)


def validate_gas_drop(chain: str, amount: float) -> bool:
    """False for unknown chains or drops above the chain limit"""
    limit = GAS_DROP_LIMITS.get(chain)
    return limit is not None and amount <= limit


def is_final_status(status: str) -> bool:
    return any(marker in status for marker in FINAL_STATUS_MARKERS)


@dataclass
class CrossChainQuoteParams:
    """
    Cross-chain quote request, source chain is always Solana

    Attributes:
        amount: Input amount in UI units
        from_token: Source token contract (mint)
        to_token: Destination token contract
        to_chain: Destination chain name
        slippage: Slippage tolerance in percent (3 = 3%)
        gas_drop: Native gas to deliver on the destination chain
        referrer: Solana referrer address
    """
    amount: float
    from_token: str
    to_token: str
    to_chain: str
    slippage: float = 3.0
    gas_drop: Optional[float] = None
    referrer: Optional[str] = None

    @property
    def slippage_bps(self) -> int:
        return int(round(self.slippage * 100))

    def validate(self):
        if self.amount <= 0:
            raise ConfigurationError.invalid("amount", "must be positive")
        if self.to_chain not in SUPPORTED_CHAINS:
            raise ConfigurationError.invalid("to_chain", f"must be one of {SUPPORTED_CHAINS}")
        if not 0 <= self.slippage_bps <= 10_000:
            raise ConfigurationError.invalid("slippage", "must be within 0..100 percent")


class MayanAdapter(ProviderAdapter):
    """
    Mayan cross-chain swap adapter (wallet bound)

    Usage:
        client.bind(wallet)
        quote = await client.mayan.get_quote(CrossChainQuoteParams(1.0, SOL, USDC_ETH, "ethereum"))
        done = await client.mayan.is_swap_completed(tx_hash)
    """

    name = "mayan"
    default_base_url = "https://price-api.mayan.finance"

    def __init__(self, http, *, wallet: str, **kwargs):
        if not wallet:
            raise ConfigurationError.missing("mayan origin wallet")
        super().__init__(http, **kwargs)
        self._wallet = wallet

    @property
    def wallet(self) -> str:
        return self._wallet

    @staticmethod
    def get_supported_chains() -> List[str]:
        return list(SUPPORTED_CHAINS)

    @staticmethod
    def validate_gas_drop(chain: str, amount: float) -> bool:
        return validate_gas_drop(chain, amount)

    @staticmethod
    def get_max_gas_drop(chain: str) -> Optional[float]:
        return GAS_DROP_LIMITS.get(chain)

    # ==================== Tokens ====================

    @upstream_call("get_tokens")
    async def get_tokens(self, standard: str = "spl", non_portal: bool = True) -> List[Dict[str, Any]]:
        if standard not in TOKEN_STANDARDS:
            raise ConfigurationError.invalid("standard", f"must be one of {TOKEN_STANDARDS}")
        data = await self._get("/v3/tokens", params={
            "chain": "solana",
            "standard": standard,
            "nonPortal": str(non_portal).lower(),
        })
        return remap_many(data.get("solana"), TOKEN_FIELDS)

    @upstream_call("get_all_tokens")
    async def get_all_tokens(self, non_portal: bool = True) -> List[Dict[str, Any]]:
        groups = await asyncio.gather(*(self.get_tokens(s, non_portal) for s in TOKEN_STANDARDS))
        return [token for group in groups for token in group]

    @upstream_call("find_token")
    async def find_token(self, symbol: str) -> Optional[Dict[str, Any]]:
        """Case-insensitive symbol lookup across every token standard"""
        wanted = symbol.lower()
        for token in await self.get_all_tokens():
            if (token["symbol"] or "").lower() == wanted:
                return token
        return None

    # ==================== Quotes ====================

    @upstream_call("get_quote")
    async def get_quote(self, params: CrossChainQuoteParams) -> Dict[str, Any]:
        """Best quote for params; the raw route is kept under "raw" """
        params.validate()
        if params.gas_drop and not validate_gas_drop(params.to_chain, params.gas_drop):
            logger.warning(
                f"mayan: gas drop {params.gas_drop} exceeds limit "
                f"{GAS_DROP_LIMITS.get(params.to_chain)} for {params.to_chain}"
            )
        data = await self._get("/v3/quote", params={
            "amountIn": params.amount,
            "fromToken": params.from_token,
            "fromChain": "solana",
            "toToken": params.to_token,
            "toChain": params.to_chain,
            "slippageBps": params.slippage_bps,
            "gasDrop": params.gas_drop,
            "referrer": params.referrer,
        })
        quotes = data.get("quotes") if isinstance(data, dict) else data
        if not quotes:
            raise UpstreamError(self.name, "get_quote", "no quotes returned")
        quote = remap(quotes[0], QUOTE_FIELDS)
        quote["raw"] = quotes[0]
        return quote

    # ==================== Tracking ====================

    @upstream_call("track_swap")
    async def track_swap(self, tx_hash: str) -> Dict[str, Any]:
        return remap(await self._get(f"/v3/swap/trx/{tx_hash}", base_url=EXPLORER_URL), SWAP_FIELDS)

    @upstream_call("is_swap_completed")
    async def is_swap_completed(self, tx_hash: str) -> bool:
        swap = await self.track_swap(tx_hash)
        return is_final_status(swap["status"])

    @upstream_call("wait_for_swap")
    async def wait_for_swap(self, tx_hash: str, timeout: float = 300, interval: float = 5) -> Dict[str, Any]:
        """Poll until the swap settles or fails; tracking errors are retried until timeout"""
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            try:
                swap = await self.track_swap(tx_hash)
                if is_final_status(swap["status"]) or "FAILED" in swap["status"]:
                    return swap
            except UpstreamError as e:
                logger.debug(f"mayan: tracking {tx_hash} failed, retrying: {e}")
            await asyncio.sleep(interval)
        raise UpstreamError.timeout(self.name, "wait_for_swap", timeout)

    @upstream_call("get_wallet_swaps")
    async def get_wallet_swaps(self, trader: Optional[str] = None, limit: int = 20) -> List[Dict[str, Any]]:
        """Swap history of trader, defaulting to the bound wallet"""
        data = await self._get("/v3/swaps", base_url=EXPLORER_URL, params={
            "trader": trader or self._wallet,
            "limit": limit,
        })
        items = data.get("data") if isinstance(data, dict) else data
        return remap_many(items, SWAP_FIELDS)

    async def health_probe(self):
        return await self.get_tokens("native")
