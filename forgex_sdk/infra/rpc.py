"""
Async Solana JSON-RPC client

The connection handle shared by the facade, the wallet module and the
RPC-backed adapters. Requests go through the shared HttpTransport, so
timeouts and retry follow the transport configuration.
"""

import itertools
import logging
from typing import Any, Dict, List, Optional, Union

from ..errors import ConfigurationError, RpcError, UpstreamError
from ..types.common import Commitment
from .http import HttpTransport

logger = logging.getLogger(__name__)

TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGqPFXCWuBvf9Ss623VQ5DA"


class RpcClient:
    """
    Solana RPC connection handle

    Supports:
    - Multiple RPC endpoints with fallback on transport failures
    - Default commitment per client

    Usage:
        rpc = RpcClient("https://api.mainnet-beta.solana.com", http)
        lamports = await rpc.get_balance("Wallet...")
        slot = await rpc.call("getSlot", [])
    """

    def __init__(
        self,
        endpoint: Union[str, List[str]],
        http: HttpTransport,
        commitment: Union[Commitment, str] = Commitment.CONFIRMED,
    ):
        self._endpoints = [endpoint] if isinstance(endpoint, str) else list(endpoint)
        if not self._endpoints or not all(self._endpoints):
            raise ConfigurationError.missing("RPC endpoint")

        self._http = http
        self._commitment = commitment.value if isinstance(commitment, Commitment) else commitment
        self._current_endpoint_idx = 0
        self._ids = itertools.count(1)

    @property
    def endpoint(self) -> str:
        """Current active endpoint"""
        return self._endpoints[self._current_endpoint_idx]

    @property
    def endpoints(self) -> List[str]:
        return list(self._endpoints)

    @property
    def commitment(self) -> str:
        return self._commitment

    def _rotate_endpoint(self):
        if len(self._endpoints) > 1:
            self._current_endpoint_idx = (self._current_endpoint_idx + 1) % len(self._endpoints)
            logger.info(f"Rotating to RPC endpoint: {self.endpoint}")

    async def call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """
        Make JSON-RPC call

        Transport failures (timeouts, connection errors, 5xx) move on to the
        next configured endpoint; an RPC `error` object is raised at once.

        Raises:
            RpcError: The node returned an error object
            UpstreamError: Transport failure on every endpoint
        """
        body = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params or [],
        }

        last_error: Optional[UpstreamError] = None
        for _ in range(len(self._endpoints)):
            endpoint = self.endpoint
            try:
                result = await self._http.request(
                    "POST", endpoint, provider="rpc", operation=method, json=body
                )
            except UpstreamError as e:
                if not e.recoverable:
                    raise
                last_error = e
                self._rotate_endpoint()
                continue

            if not isinstance(result, dict):
                raise RpcError(method, "RPC response is not an object", endpoint=endpoint)
            if "error" in result:
                raise RpcError.from_response(method, result["error"], endpoint=endpoint)
            return result.get("result")

        raise last_error

    def _config(self, commitment: Optional[str] = None, **extra) -> Dict[str, Any]:
        return {"commitment": commitment or self._commitment, **extra}

    async def get_balance(self, address: str, commitment: Optional[str] = None) -> int:
        """SOL balance in lamports"""
        result = await self.call("getBalance", [address, self._config(commitment)])
        if isinstance(result, dict):
            return int(result.get("value", 0))
        return int(result or 0)

    async def get_slot(self, commitment: Optional[str] = None) -> int:
        return int(await self.call("getSlot", [self._config(commitment)]))

    async def get_version(self) -> Dict[str, Any]:
        return await self.call("getVersion", [])

    async def get_latest_blockhash(self, commitment: Optional[str] = None) -> Dict[str, Any]:
        """Dict with blockhash and lastValidBlockHeight"""
        result = await self.call("getLatestBlockhash", [self._config(commitment)])
        return (result or {}).get("value", {})

    async def get_account_info(
        self,
        address: str,
        encoding: str = "base64",
        commitment: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """Account info or None if not found"""
        result = await self.call("getAccountInfo", [address, self._config(commitment, encoding=encoding)])
        return result.get("value") if result else None

    async def get_program_accounts(
        self,
        program_id: str,
        filters: Optional[List[Dict[str, Any]]] = None,
        encoding: str = "base64",
    ) -> List[Dict[str, Any]]:
        config = self._config(encoding=encoding)
        if filters:
            config["filters"] = filters
        return await self.call("getProgramAccounts", [program_id, config]) or []

    async def get_parsed_token_accounts_by_owner(
        self,
        owner: str,
        program_id: str = TOKEN_PROGRAM_ID,
    ) -> List[Dict[str, Any]]:
        """
        SPL token accounts of owner, jsonParsed

        Returns:
            List of {pubkey, mint, amount (ui), decimals}
        """
        result = await self.call(
            "getTokenAccountsByOwner",
            [owner, {"programId": program_id}, self._config(encoding="jsonParsed")],
        )
        accounts = []
        for item in (result or {}).get("value", []):
            info = item["account"]["data"]["parsed"]["info"]
            token_amount = info["tokenAmount"]
            accounts.append({
                "pubkey": item["pubkey"],
                "mint": info["mint"],
                "amount": float(token_amount.get("uiAmount") or 0),
                "decimals": int(token_amount["decimals"]),
            })
        return accounts

    async def get_signatures_for_address(self, address: str, limit: int = 10) -> List[Dict[str, Any]]:
        return await self.call("getSignaturesForAddress", [address, {"limit": limit}]) or []

    async def request_airdrop(self, address: str, lamports: int) -> str:
        """Returns the airdrop transaction signature"""
        return await self.call("requestAirdrop", [address, lamports, self._config()])

    async def send_raw_transaction(self, tx_base64: str, skip_preflight: bool = False) -> str:
        """Returns the transaction signature"""
        return await self.call(
            "sendTransaction",
            [tx_base64, {
                "encoding": "base64",
                "skipPreflight": skip_preflight,
                "preflightCommitment": self._commitment,
            }],
        )

    def __repr__(self) -> str:
        return f"RpcClient(endpoint={self.endpoint!r}, commitment={self._commitment!r})"
