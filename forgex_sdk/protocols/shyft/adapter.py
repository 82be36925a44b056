"""
Shyft Adapter

Read-only wallet, token, NFT and transaction views from the Shyft REST API.
Responses are wrapped as {success, message, result}.
"""

import logging
from typing import Any, Dict, List, Optional

from ...errors import ConfigurationError, UpstreamError
from ..base import ProviderAdapter, upstream_call
from ..mapping import Field, remap, remap_many

logger = logging.getLogger(__name__)

SYSTEM_PROGRAM = "11111111111111111111111111111111"

TOKEN_BALANCE_FIELDS = (
    Field("mint", "address", cast=str),
    Field("balance", "balance", default=0.0),
    Field("symbol", "info.symbol", cast=str),
    Field("name", "info.name", cast=str),
    Field("decimals", "info.decimals", cast=int),
)

PORTFOLIO_FIELDS = (
    Field("sol_balance", "sol_balance", default=0.0),
    Field("num_tokens", "num_tokens", cast=int, default=0),
    Field("num_nfts", "num_nfts", cast=int, default=0),
)

TRANSACTION_FIELDS = (
    Field("signature", "signatures.0", cast=str),
    Field("timestamp", "timestamp", cast=str),
    Field("type", "type", cast=str),
    Field("status", "status", cast=str),
    Field("fee", "fee"),
    Field("fee_payer", "fee_payer", cast=str),
)


class ShyftAdapter(ProviderAdapter):
    """
    Shyft adapter (API key required)

    Usage:
        sol = await client.shyft.get_wallet_balance(wallet)
        portfolio = await client.shyft.get_portfolio(wallet)
    """

    name = "shyft"
    default_base_url = "https://api.shyft.to/sol/v1"
    requires_api_key = True

    def _headers(self) -> Dict[str, str]:
        return {"x-api-key": self._api_key}

    def _auth_params(self) -> Dict[str, Any]:
        return {"network": self._network.value}

    async def _result(self, path: str, params: Dict[str, Any]) -> Any:
        payload = await self._get(path, params=params)
        if not payload.get("success", False):
            raise UpstreamError(self.name, self._operation, payload.get("message") or "request rejected")
        return payload.get("result")

    # ==================== Wallet ====================

    @upstream_call("get_wallet_balance")
    async def get_wallet_balance(self, wallet: str) -> float:
        """SOL balance (UI units)"""
        result = await self._result("/wallet/balance", {"wallet": wallet})
        return float(result["balance"])

    @upstream_call("get_token_balance")
    async def get_token_balance(self, wallet: str, token: str) -> Dict[str, Any]:
        result = await self._result("/wallet/token_balance", {"wallet": wallet, "token": token})
        return remap(result, TOKEN_BALANCE_FIELDS)

    @upstream_call("get_all_token_balances")
    async def get_all_token_balances(self, wallet: str) -> List[Dict[str, Any]]:
        result = await self._result("/wallet/all_tokens", {"wallet": wallet})
        return remap_many(result, TOKEN_BALANCE_FIELDS)

    @upstream_call("get_portfolio")
    async def get_portfolio(self, wallet: str) -> Dict[str, Any]:
        result = await self._result("/wallet/get_portfolio", {"wallet": wallet})
        portfolio = remap(result, PORTFOLIO_FIELDS)
        portfolio["tokens"] = remap_many(result.get("tokens"), TOKEN_BALANCE_FIELDS)
        portfolio["nfts"] = result.get("nfts") or []
        return portfolio

    @upstream_call("get_transaction_history")
    async def get_transaction_history(
        self,
        wallet: str,
        limit: int = 10,
        before: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        if not 1 <= limit <= 100:
            raise ConfigurationError.invalid("limit", "must be within 1..100")
        result = await self._result("/transaction/history", {
            "account": wallet,
            "tx_num": limit,
            "before_tx_signature": before,
        })
        return remap_many(result, TRANSACTION_FIELDS)

    # ==================== Tokens / NFTs ====================

    @upstream_call("get_token_info")
    async def get_token_info(self, token: str) -> Dict[str, Any]:
        return await self._result("/token/get_info", {"token_address": token})

    @upstream_call("get_nft")
    async def get_nft(self, mint: str) -> Dict[str, Any]:
        return await self._result("/nft/read", {"token_address": mint})

    @upstream_call("get_nfts_by_owner")
    async def get_nfts_by_owner(self, owner: str) -> List[Dict[str, Any]]:
        return await self._result("/nft/read_all", {"address": owner}) or []

    async def health_probe(self):
        return await self.get_wallet_balance(SYSTEM_PROGRAM)
