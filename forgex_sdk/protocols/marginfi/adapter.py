"""
Marginfi Adapter

Lending markets, account positions and unsigned lending transactions from
the marginfi REST API.
"""

import logging
from typing import Any, Dict, List

from ...errors import ConfigurationError
from ...types.positions import LendingMarket
from ..base import ProviderAdapter, upstream_call
from ..kamino.adapter import LendingAction
from ..mapping import Field, remap, remap_many

logger = logging.getLogger(__name__)

MARKET_FIELDS = (
    Field("token_mint", "tokenMint", cast=str),
    Field("token_symbol", "tokenSymbol", cast=str),
    Field("supply_apy", "supplyApy", default=0.0),
    Field("borrow_apy", "borrowApy", default=0.0),
    Field("total_supply", "totalSupply"),
    Field("total_borrow", "totalBorrow"),
    Field("available_liquidity", "availableLiquidity"),
    Field("price", "price"),
    Field("ltv", "ltv"),
)

ACCOUNT_FIELDS = (
    Field("account", "account", cast=str),
    Field("owner", "owner", cast=str),
    Field("health_factor", "healthFactor"),
    Field("net_value", "netValue", default=0.0),
    Field("total_borrowed_value", "totalBorrowedValue", default=0.0),
    Field("total_supplied_value", "totalSuppliedValue", default=0.0),
)

ASSET_FIELDS = (
    Field("token_symbol", "tokenSymbol", cast=str),
    Field("token_mint", "tokenMint", cast=str),
    Field("token_price", "tokenPrice"),
    Field("deposit_balance", "depositBalance", default=0.0),
    Field("deposit_value", "depositValue", default=0.0),
    Field("borrow_balance", "borrowBalance", default=0.0),
    Field("borrow_value", "borrowValue", default=0.0),
)

# marginfi names the supply action "deposit"
_ACTION_PATHS = {
    LendingAction.SUPPLY: "deposit",
    LendingAction.WITHDRAW: "withdraw",
    LendingAction.BORROW: "borrow",
    LendingAction.REPAY: "repay",
}


class MarginfiAdapter(ProviderAdapter):
    """
    marginfi lending adapter

    Usage:
        markets = await client.marginfi.get_markets()
        account = await client.marginfi.get_account(wallet)
    """

    name = "marginfi"
    default_base_url = "https://api.marginfi.com/v1"

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}

    @upstream_call("get_account")
    async def get_account(self, wallet: str) -> Dict[str, Any]:
        data = await self._get(f"/accounts/{wallet}")
        account = remap(data, ACCOUNT_FIELDS)
        account["assets"] = remap_many(data.get("assets"), ASSET_FIELDS)
        return account

    @upstream_call("get_markets")
    async def get_markets(self) -> List[LendingMarket]:
        data = await self._get("/markets")
        markets = remap_many(data["markets"], MARKET_FIELDS, LendingMarket)
        for market in markets:
            if market.total_supply:
                market.utilization = (market.total_borrow or 0.0) / market.total_supply * 100
        return markets

    async def _build_transaction(self, action: LendingAction, wallet: str, token_mint: str, amount: int) -> Dict[str, Any]:
        if amount <= 0:
            raise ConfigurationError.invalid("amount", "must be positive (base units)")
        data = await self._post(f"/transactions/{_ACTION_PATHS[action]}", json={
            "wallet": wallet,
            "tokenMint": token_mint,
            "amount": str(amount),
        })
        return {
            "transaction": data["transaction"],
            "blockhash": data.get("blockhash"),
            "expected_balance": data.get("expectedBalance"),
            "action": action.value,
        }

    @upstream_call("build_deposit_transaction")
    async def build_deposit_transaction(self, wallet: str, token_mint: str, amount: int) -> Dict[str, Any]:
        return await self._build_transaction(LendingAction.SUPPLY, wallet, token_mint, amount)

    @upstream_call("build_withdraw_transaction")
    async def build_withdraw_transaction(self, wallet: str, token_mint: str, amount: int) -> Dict[str, Any]:
        return await self._build_transaction(LendingAction.WITHDRAW, wallet, token_mint, amount)

    @upstream_call("build_borrow_transaction")
    async def build_borrow_transaction(self, wallet: str, token_mint: str, amount: int) -> Dict[str, Any]:
        return await self._build_transaction(LendingAction.BORROW, wallet, token_mint, amount)

    @upstream_call("build_repay_transaction")
    async def build_repay_transaction(self, wallet: str, token_mint: str, amount: int) -> Dict[str, Any]:
        return await self._build_transaction(LendingAction.REPAY, wallet, token_mint, amount)

    async def health_probe(self):
        return await self.get_markets()
