"""
Helius Adapter

NFT metadata, parsed wallet activity and webhook management through the
Helius v1 API. The API key travels as the `api-key` query parameter.
"""

import logging
from typing import Any, Dict, List, Optional

from ...errors import ConfigurationError, UpstreamError
from ..base import ProviderAdapter, upstream_call
from ..mapping import Field, remap, remap_many

logger = logging.getLogger(__name__)

NFT_FIELDS = (
    Field("mint", "mint", cast=str),
    Field("name", "name", cast=str),
    Field("symbol", "symbol", cast=str),
    Field("description", "description", cast=str),
    Field("image", "image", cast=str),
    Field("attributes", "attributes", cast=list, default=[]),
    Field("collection", "collection", cast=None),
    Field("creators", "creators", cast=list, default=[]),
    Field("owner", "owner", cast=str),
    Field("token_standard", "tokenStandard", cast=str),
    Field("royalty", "royalty", cast=None),
)

ACTIVITY_FIELDS = (
    Field("signature", "signature", cast=str),
    Field("timestamp", "timestamp", cast=int),
    Field("type", "type", cast=str),
    Field("fee", "fee", cast=int, default=0),
    Field("fee_payer", "feePayer", cast=str),
    Field("source", "source", cast=str),
    Field("native_transfers", "nativeTransfers", cast=list, default=[]),
    Field("token_transfers", "tokenTransfers", cast=list, default=[]),
)

WEBHOOK_FIELDS = (
    Field("webhook_id", "webhookID", cast=str),
    Field("webhook_url", "webhookURL", cast=str),
    Field("wallet_addresses", "accountAddresses", cast=list, default=[]),
    Field("event_types", "transactionTypes", cast=list, default=[]),
    Field("webhook_name", "webhookName", cast=str),
)

NFT_OPTIONS = {"showCollectionMetadata": True}


class HeliusAdapter(ProviderAdapter):
    """
    Helius adapter (API key required)

    Usage:
        nft = await client.helius.get_nft_metadata(mint)
        activity = await client.helius.get_wallet_activity(wallet, limit=20)
    """

    name = "helius"
    default_base_url = "https://api.helius.xyz/v1"
    requires_api_key = True

    def _auth_params(self) -> Dict[str, Any]:
        return {"api-key": self._api_key}

    async def _query_nfts(self, query: Dict[str, Any]) -> List[Dict[str, Any]]:
        data = await self._post("/nfts", json={"query": query, "options": NFT_OPTIONS})
        return remap_many((data or {}).get("result"), NFT_FIELDS)

    @upstream_call("get_nft_metadata")
    async def get_nft_metadata(self, mint: str) -> Dict[str, Any]:
        nfts = await self._query_nfts({"mintAccounts": [mint]})
        if not nfts:
            raise UpstreamError(self.name, "get_nft_metadata", f"No metadata found for NFT {mint}")
        return nfts[0]

    @upstream_call("get_batch_nft_metadata")
    async def get_batch_nft_metadata(self, mints: List[str]) -> List[Dict[str, Any]]:
        if not mints:
            raise ConfigurationError.invalid("mints", "at least one mint is required")
        return await self._query_nfts({"mintAccounts": list(mints)})

    @upstream_call("get_wallet_nfts")
    async def get_wallet_nfts(self, wallet: str) -> List[Dict[str, Any]]:
        return await self._query_nfts({"ownerAddress": wallet})

    @upstream_call("get_wallet_activity")
    async def get_wallet_activity(self, wallet: str, limit: int = 10) -> List[Dict[str, Any]]:
        if not 1 <= limit <= 100:
            raise ConfigurationError.invalid("limit", "must be within 1..100")
        data = await self._post("/transactions", json={
            "query": {"accounts": [wallet]},
            "options": {"limit": limit},
        })
        return remap_many((data or {}).get("result"), ACTIVITY_FIELDS)

    # ==================== Webhooks ====================

    @upstream_call("create_webhook")
    async def create_webhook(
        self,
        webhook_url: str,
        wallet_addresses: List[str],
        event_types: List[str],
        webhook_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        if not wallet_addresses:
            raise ConfigurationError.invalid("wallet_addresses", "at least one address is required")
        data = await self._post("/webhooks", json={
            "webhookURL": webhook_url,
            "accountAddresses": wallet_addresses,
            "transactionTypes": event_types,
            "webhookType": "enhanced",
            "webhookName": webhook_name or f"Webhook for {len(wallet_addresses)} wallets",
        })
        return remap(data, WEBHOOK_FIELDS)

    @upstream_call("delete_webhook")
    async def delete_webhook(self, webhook_id: str) -> bool:
        await self._delete(f"/webhooks/{webhook_id}", expect_json=False)
        return True

    @upstream_call("get_webhooks")
    async def get_webhooks(self) -> List[Dict[str, Any]]:
        return remap_many(await self._get("/webhooks"), WEBHOOK_FIELDS)

    async def health_probe(self):
        return await self.get_webhooks()
