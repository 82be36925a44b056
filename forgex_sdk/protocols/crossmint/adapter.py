"""
Crossmint Adapter

Custodial smart wallets through the Crossmint wallets REST API. Wallets are
addressed by locator: an address, or "email:<address>:<wallet type>".
Non-mainnet networks go to the staging environment.
"""

import logging
from typing import Any, Dict, List, Optional

from ...errors import ConfigurationError
from ...types.common import Network
from ..base import ProviderAdapter, upstream_call
from ..mapping import Field, remap, remap_many

logger = logging.getLogger(__name__)

PRODUCTION_URL = "https://www.crossmint.com/api/2022-06-09"
STAGING_URL = "https://staging.crossmint.com/api/2022-06-09"

WALLET_TYPE = "solana-smart-wallet"
TRANSFER_TOKENS = ("usdc", "sol")

WALLET_FIELDS = (
    Field("address", "address", cast=str),
    Field("type", "type", cast=str),
    Field("linked_user", "linkedUser", cast=str),
    Field("created_at", "createdAt", cast=str),
)

BALANCE_FIELDS = (
    Field("token", "token", cast=str),
    Field("decimals", "decimals", cast=int),
    Field("amount", ("amount", "balances.total"), cast=str, default="0"),
)


def email_locator(email: str) -> str:
    return f"email:{email}:{WALLET_TYPE}"


class CrossmintAdapter(ProviderAdapter):
    """
    Crossmint wallets adapter (API key required)

    Usage:
        wallet = await client.crossmint.create_wallet("user@example.com")
        balances = await client.crossmint.get_balances(wallet["address"])
    """

    name = "crossmint"
    default_base_url = PRODUCTION_URL
    requires_api_key = True

    def __init__(self, http, *, base_url: Optional[str] = None, network: Network = Network.MAINNET, **kwargs):
        if base_url is None and network is not Network.MAINNET:
            base_url = STAGING_URL
        super().__init__(http, base_url=base_url, network=network, **kwargs)

    def _headers(self) -> Dict[str, str]:
        return {"X-API-KEY": self._api_key}

    @upstream_call("create_wallet")
    async def create_wallet(self, email: str) -> Dict[str, Any]:
        """Create (or fetch the existing) smart wallet linked to email"""
        if "@" not in email:
            raise ConfigurationError.invalid("email", "must be an email address")
        data = await self._post("/wallets", json={"type": WALLET_TYPE, "linkedUser": f"email:{email}"})
        return remap(data, WALLET_FIELDS)

    @upstream_call("get_wallet")
    async def get_wallet(self, locator: str) -> Dict[str, Any]:
        return remap(await self._get(f"/wallets/{locator}"), WALLET_FIELDS)

    @upstream_call("get_balances")
    async def get_balances(self, locator: str, tokens: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        data = await self._get(f"/wallets/{locator}/balances", params={
            "tokens": ",".join(tokens or TRANSFER_TOKENS),
            "chains": "solana",
        })
        return remap_many(data, BALANCE_FIELDS)

    @upstream_call("get_activity")
    async def get_activity(self, locator: str) -> Dict[str, Any]:
        data = await self._get(f"/wallets/{locator}/activity", params={"chain": "solana"})
        events = (data or {}).get("events") or []
        return {"events": events, "total_events": len(events)}

    @upstream_call("transfer")
    async def transfer(self, locator: str, recipient: str, token: str, amount: str) -> Dict[str, Any]:
        """Custodial transfer; amount in UI units as a decimal string"""
        if token not in TRANSFER_TOKENS:
            raise ConfigurationError.invalid("token", f"must be one of {TRANSFER_TOKENS}")
        data = await self._post(f"/wallets/{locator}/tokens/solana:{token}/transfers", json={
            "recipient": recipient,
            "amount": amount,
        })
        return {
            "id": data.get("id"),
            "status": data.get("status"),
            "explorer_link": data.get("explorerLink") or data.get("onChain", {}).get("explorerLink"),
        }

    @upstream_call("add_delegated_signer")
    async def add_delegated_signer(self, locator: str, signer: str) -> Dict[str, Any]:
        return await self._post(f"/wallets/{locator}/signers", json={"signer": signer})

    @upstream_call("get_delegated_signers")
    async def get_delegated_signers(self, locator: str) -> List[Dict[str, Any]]:
        return await self._get(f"/wallets/{locator}/signers")
