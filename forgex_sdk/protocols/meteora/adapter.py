"""
Meteora Adapter

Dynamic vault listings, vault performance, user positions, and unsigned
deposit / withdraw transactions from the Meteora REST API.
"""

import logging
from typing import Any, Dict, List

from ...errors import ConfigurationError
from ..base import ProviderAdapter, upstream_call
from ..mapping import Field, remap, remap_many

logger = logging.getLogger(__name__)

VAULT_FIELDS = (
    Field("address", "address", cast=str),
    Field("name", "name", cast=str),
    Field("token_a_mint", "tokenA.mint", cast=str),
    Field("token_a_symbol", "tokenA.symbol", cast=str),
    Field("token_a_decimals", "tokenA.decimals", cast=int),
    Field("token_b_mint", "tokenB.mint", cast=str),
    Field("token_b_symbol", "tokenB.symbol", cast=str),
    Field("token_b_decimals", "tokenB.decimals", cast=int),
    Field("tvl", "tvl"),
    Field("apr", "apr"),
    Field("strategy_type", "strategyType", cast=str),
)

VAULT_DETAIL_FIELDS = VAULT_FIELDS + (
    Field("apy", "apy"),
    Field("volume_24h", "volume24h"),
    Field("fees_24h", "fees24h"),
    Field("fees_tier", "feesTier"),
    Field("drawdown", "drawdown", default=0.0),
    Field("share_price_history", "sharePriceHistory", cast=list, default=[]),
    Field("lp_token_mint", "lpTokenMint", cast=str),
)

POSITION_FIELDS = (
    Field("vault_address", "vaultAddress", cast=str),
    Field("vault_name", "vaultName", cast=str),
    Field("lp_balance", "lpBalance", cast=str),
    Field("value_usd", "valueUsd", default=0.0),
    Field("token_a_amount", "tokenAAmount", cast=str),
    Field("token_b_amount", "tokenBAmount", cast=str),
    Field("share", "share", default=0.0),
)


def _positive_amount(name: str, value: int):
    if value < 0:
        raise ConfigurationError.invalid(name, "must not be negative (base units)")


class MeteoraAdapter(ProviderAdapter):
    """
    Meteora vault adapter

    Usage:
        vaults = await client.meteora.get_all_vaults()
        tx = await client.meteora.build_deposit_transaction(vault, wallet, 1_000_000, 0)
    """

    name = "meteora"
    default_base_url = "https://api.meteora.ag/v1"

    def _headers(self) -> Dict[str, str]:
        return {"x-api-key": self._api_key} if self._api_key else {}

    @upstream_call("get_all_vaults")
    async def get_all_vaults(self) -> List[Dict[str, Any]]:
        data = await self._get("/vaults")
        return remap_many(data["vaults"], VAULT_FIELDS)

    @upstream_call("get_vault")
    async def get_vault(self, vault: str) -> Dict[str, Any]:
        return remap(await self._get(f"/vaults/{vault}"), VAULT_DETAIL_FIELDS)

    @upstream_call("get_user_positions")
    async def get_user_positions(self, wallet: str) -> List[Dict[str, Any]]:
        data = await self._get(f"/users/{wallet}/positions")
        return remap_many(data.get("positions"), POSITION_FIELDS)

    @upstream_call("build_deposit_transaction")
    async def build_deposit_transaction(self, vault: str, wallet: str, amount_a: int, amount_b: int) -> Dict[str, Any]:
        """Unsigned deposit; amounts in base units of token A / token B"""
        _positive_amount("amount_a", amount_a)
        _positive_amount("amount_b", amount_b)
        if amount_a == 0 and amount_b == 0:
            raise ConfigurationError.invalid("amount_a", "at least one side must be non-zero")
        data = await self._post(f"/vaults/{vault}/deposit", json={
            "userWallet": wallet,
            "amountA": str(amount_a),
            "amountB": str(amount_b),
        })
        return {
            "transaction": data["transaction"],
            "expected_lp_amount": data.get("expectedLpAmount"),
            "blockhash": data.get("blockhash"),
        }

    @upstream_call("build_withdraw_transaction")
    async def build_withdraw_transaction(self, vault: str, wallet: str, lp_amount: int) -> Dict[str, Any]:
        if lp_amount <= 0:
            raise ConfigurationError.invalid("lp_amount", "must be positive (base units)")
        data = await self._post(f"/vaults/{vault}/withdraw", json={
            "userWallet": wallet,
            "lpAmount": str(lp_amount),
        })
        return {
            "transaction": data["transaction"],
            "expected_amount_a": data.get("expectedAmountA"),
            "expected_amount_b": data.get("expectedAmountB"),
            "blockhash": data.get("blockhash"),
        }

    async def health_probe(self):
        return await self.get_all_vaults()
