"""
Squads Adapter

Multisig configuration, proposals and vaults from the Squads v3 API and
indexer. Treasury balances are read straight from the chain.
"""

import logging
import time
from typing import Any, Dict, List, Optional

from ...errors import ConfigurationError, UpstreamError
from ...types.common import lamports_to_sol
from ..base import ProviderAdapter, upstream_call
from ..mapping import Field, remap, remap_many

logger = logging.getLogger(__name__)

INDEXER_URL = "https://indexer.squads.so/v1"

PROPOSAL_STATUSES = ("Draft", "Active", "ExecuteReady", "Executed", "Rejected", "Cancelled", "Stale")

MULTISIG_FIELDS = (
    Field("address", "publicKey", cast=str),
    Field("threshold", "threshold", cast=int, default=0),
    Field("members", "members", cast=list, default=[]),
    Field("transaction_index", "transactionIndex", cast=int, default=0),
    Field("stale_transaction_index", "staleTransactionIndex", cast=int, default=0),
    Field("timelock", "timelock", cast=int, default=0),
    Field("create_key", "createKey", cast=str),
    Field("allow_external_execute", "allowExternalExecute", cast=bool, default=False),
)

PROPOSAL_FIELDS = (
    Field("address", "publicKey", cast=str),
    Field("multisig", "multisig", cast=str),
    Field("transaction_index", "transactionIndex", cast=int, default=0),
    Field("creator", "creator", cast=str),
    Field("status", "status", cast=str),
    Field("approvals", "approvals", cast=list, default=[]),
    Field("rejections", "rejections", cast=list, default=[]),
    Field("message", "message", cast=str),
    Field("created_at", "createdAt", cast=int),
)

VAULT_FIELDS = (
    Field("address", "publicKey", cast=str),
    Field("index", "index", cast=int, default=0),
    Field("multisig", "multisig", cast=str),
    Field("balance", "balance", default=0.0),
    Field("tokens", "tokens", cast=list, default=[]),
)

TRANSACTION_FIELDS = (
    Field("signature", "signature", cast=str),
    Field("slot", "slot", cast=int),
    Field("block_time", "blockTime", cast=int),
    Field("status", "status", cast=str),
    Field("fee", "fee", cast=int),
    Field("type", "type", cast=str),
    Field("signer", "signer", cast=str),
)


class SquadsAdapter(ProviderAdapter):
    """
    Squads multisig adapter

    Usage:
        multisig = await client.squads.get_multisig(address)
        active = await client.squads.get_proposals(address, status="Active")
        treasury = await client.squads.get_treasury_balance(address)
    """

    name = "squads"
    default_base_url = "https://api.squads.so/v3"

    def _headers(self) -> Dict[str, str]:
        return {"X-API-KEY": self._api_key} if self._api_key else {}

    @upstream_call("get_multisig")
    async def get_multisig(self, address: str) -> Dict[str, Any]:
        return remap(await self._get(f"/multisig/{address}"), MULTISIG_FIELDS)

    @upstream_call("get_proposals")
    async def get_proposals(
        self,
        address: str,
        status: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        if status is not None and status not in PROPOSAL_STATUSES:
            raise ConfigurationError.invalid("status", f"must be one of {PROPOSAL_STATUSES}")
        data = await self._get(f"/multisig/{address}/proposals", params={
            "limit": limit,
            "offset": offset,
            "status": status,
        })
        return remap_many(data, PROPOSAL_FIELDS)

    @upstream_call("get_proposal")
    async def get_proposal(self, proposal: str) -> Dict[str, Any]:
        return remap(await self._get(f"/proposal/{proposal}"), PROPOSAL_FIELDS)

    @upstream_call("get_vaults")
    async def get_vaults(self, address: str) -> List[Dict[str, Any]]:
        return remap_many(await self._get(f"/multisig/{address}/vaults"), VAULT_FIELDS)

    @upstream_call("get_transactions")
    async def get_transactions(self, address: str, limit: int = 50, before: Optional[str] = None) -> List[Dict[str, Any]]:
        data = await self._get(
            f"/multisig/{address}/transactions",
            params={"limit": limit, "before": before},
            base_url=INDEXER_URL,
        )
        return remap_many(data, TRANSACTION_FIELDS)

    @upstream_call("get_activity")
    async def get_activity(self, address: str, limit: int = 50, offset: int = 0) -> List[Dict[str, Any]]:
        return await self._get(f"/multisig/{address}/activity", params={"limit": limit, "offset": offset}) or []

    @upstream_call("get_user_multisigs")
    async def get_user_multisigs(self, member: str) -> List[Dict[str, Any]]:
        return remap_many(await self._get(f"/user/{member}/multisigs"), MULTISIG_FIELDS)

    @upstream_call("get_treasury_balance")
    async def get_treasury_balance(self, address: str) -> Dict[str, Any]:
        """
        SOL and SPL balances held by address

        Returns:
            {"address", "sol", "tokens": [{mint, amount, decimals}], "timestamp"}
        """
        rpc = self._require_rpc()
        lamports = await rpc.get_balance(address)
        accounts = await rpc.get_parsed_token_accounts_by_owner(address)
        tokens = [
            {"mint": a["mint"], "amount": a["amount"], "decimals": a["decimals"]}
            for a in accounts
            if a["amount"] > 0
        ]
        return {
            "address": address,
            "sol": lamports_to_sol(lamports),
            "tokens": tokens,
            "timestamp": int(time.time() * 1000),
        }

    # ==================== Proposal transactions ====================

    async def _proposal_transaction(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        data = await self._post(path, json=body)
        if not data or not data.get("transaction"):
            raise UpstreamError.malformed(self.name, self._operation, "response carries no transaction")
        return data

    @upstream_call("build_create_proposal_transaction")
    async def build_create_proposal_transaction(
        self,
        address: str,
        creator: str,
        instructions: List[Dict[str, Any]],
        message: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await self._proposal_transaction(f"/multisig/{address}/proposal", {
            "creator": creator,
            "instructions": instructions,
            "message": message,
        })

    @upstream_call("build_approve_proposal_transaction")
    async def build_approve_proposal_transaction(self, proposal: str, member: str) -> Dict[str, Any]:
        return await self._proposal_transaction(f"/proposal/{proposal}/approve", {"member": member})

    @upstream_call("build_reject_proposal_transaction")
    async def build_reject_proposal_transaction(self, proposal: str, member: str) -> Dict[str, Any]:
        return await self._proposal_transaction(f"/proposal/{proposal}/reject", {"member": member})

    @upstream_call("build_execute_proposal_transaction")
    async def build_execute_proposal_transaction(self, proposal: str, member: str) -> Dict[str, Any]:
        return await self._proposal_transaction(f"/proposal/{proposal}/execute", {"member": member})
