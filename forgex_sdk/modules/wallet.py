"""
Wallet Module

Provides wallet creation, balance queries and SOL transfers.
"""

import base64
import logging
from typing import Any, Dict, List, Sequence, Union, TYPE_CHECKING

from solders.hash import Hash
from solders.message import MessageV0
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.system_program import TransferParams, transfer
from solders.transaction import VersionedTransaction

from ..errors import ConfigurationError, InvalidWalletState
from ..infra.signer import KeypairWallet, wallet_can_sign, wallet_public_key
from ..types.common import Network, lamports_to_sol, sol_to_lamports

if TYPE_CHECKING:
    from ..client import ForgeXClient

logger = logging.getLogger(__name__)

MAX_HISTORY_LIMIT = 1000


class WalletModule:
    """
    Wallet operations module

    Provides:
    - Wallet generation and import
    - SOL balance and signature history
    - Devnet / testnet airdrops
    - Signing and submitting through the bound wallet

    Usage:
        wallet = client.wallet.generate_wallet()
        client.bind(wallet)

        info = await client.wallet.get_wallet_info(wallet.public_key)
        signature = await client.wallet.send_sol("Recipient...", 0.01)
    """

    def __init__(self, client: "ForgeXClient"):
        """
        Initialize wallet module

        Args:
            client: ForgeXClient instance
        """
        self._client = client
        self._rpc = client.connection

    # ==================== Wallets ====================

    def generate_wallet(self) -> KeypairWallet:
        """New keypair-backed wallet"""
        wallet = KeypairWallet.generate()
        logger.info(f"Generated wallet {wallet.public_key}")
        return wallet

    def import_wallet(self, secret: Union[str, bytes, Sequence[int]]) -> KeypairWallet:
        """
        Wallet from a secret key

        Args:
            secret: base58 string, JSON array string, 64 raw bytes or list of ints

        Raises:
            ConfigurationError: secret cannot be parsed
        """
        return KeypairWallet.from_secret(secret)

    @staticmethod
    def validate_address(address: str) -> bool:
        """True when address decodes to a 32-byte public key"""
        if not address or not isinstance(address, str):
            return False
        try:
            Pubkey.from_string(address)
        except ValueError:
            return False
        return True

    # ==================== Queries ====================

    async def get_wallet_info(self, address: str) -> Dict[str, Any]:
        """
        Address, SOL balance and validity

        A failed balance read is logged and reported as 0.0.
        """
        if not self.validate_address(address):
            raise ConfigurationError.invalid("address", f"Invalid Solana address: {address}")

        try:
            balance = lamports_to_sol(await self._rpc.get_balance(address))
        except Exception as e:
            logger.warning(f"Failed to read balance of {address}: {e}")
            balance = 0.0

        return {"address": address, "sol_balance": balance, "is_valid": True}

    async def get_transaction_history(self, address: str, limit: int = 10) -> List[Dict[str, Any]]:
        """Recent signatures of address, newest first"""
        if not 1 <= limit <= MAX_HISTORY_LIMIT:
            raise ConfigurationError.invalid("limit", f"must be between 1 and {MAX_HISTORY_LIMIT}")
        return await self._rpc.get_signatures_for_address(address, limit)

    async def request_airdrop(self, address: str, sol: float = 1.0) -> str:
        """
        Request an airdrop of SOL

        Raises:
            ConfigurationError: client is connected to mainnet
        """
        if self._client.network is Network.MAINNET:
            raise ConfigurationError.invalid("network", "airdrops are only available on devnet and testnet")
        lamports = sol_to_lamports(sol)
        signature = await self._rpc.request_airdrop(address, lamports)
        logger.info(f"Airdrop of {sol} SOL to {address}: {signature}")
        return signature

    # ==================== Transactions ====================

    def _signing_wallet(self):
        wallet = self._client.bound_wallet
        if wallet is None:
            raise InvalidWalletState.not_bound()
        if wallet_public_key(wallet) is None:
            raise InvalidWalletState.no_public_key()
        if not wallet_can_sign(wallet):
            raise InvalidWalletState.cannot_sign()
        return wallet

    async def send_transaction(self, tx: VersionedTransaction, skip_preflight: bool = False) -> str:
        """
        Sign tx with the bound wallet and submit it

        Returns:
            Transaction signature

        Raises:
            InvalidWalletState: no wallet bound, or it cannot sign
        """
        wallet = self._signing_wallet()
        signed = await wallet.sign_transaction(tx)
        signature = await self._rpc.send_raw_transaction(
            base64.b64encode(bytes(signed)).decode("ascii"),
            skip_preflight=skip_preflight,
        )
        logger.info(f"Submitted transaction {signature}")
        return signature

    async def send_sol(self, to: str, amount: float) -> str:
        """
        Transfer SOL from the bound wallet

        Args:
            to: Recipient address
            amount: Amount in SOL

        Raises:
            InvalidWalletState: no wallet bound, or it cannot sign
            ConfigurationError: invalid recipient or amount
        """
        wallet = self._signing_wallet()
        if not self.validate_address(to):
            raise ConfigurationError.invalid("to", f"Invalid Solana address: {to}")
        lamports = sol_to_lamports(amount)
        if lamports <= 0:
            raise ConfigurationError.invalid("amount", "must be positive")

        payer = Pubkey.from_string(wallet_public_key(wallet))
        instruction = transfer(TransferParams(
            from_pubkey=payer,
            to_pubkey=Pubkey.from_string(to),
            lamports=lamports,
        ))
        blockhash = await self._rpc.get_latest_blockhash()
        message = MessageV0.try_compile(payer, [instruction], [], Hash.from_string(blockhash["blockhash"]))
        unsigned = VersionedTransaction.populate(
            message, [Signature.default()] * message.header.num_required_signatures
        )
        logger.info(f"Sending {amount} SOL from {payer} to {to}")
        return await self.send_transaction(unsigned)
