"""
Wallet and signing abstractions

Defines the wallet interface the facade binds to, and a keypair-backed
implementation for scripts, tests and server-side use.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Union, runtime_checkable

import base58
from solders.keypair import Keypair
from solders.message import to_bytes_versioned
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import VersionedTransaction

from ..errors import ConfigurationError, InvalidWalletState

logger = logging.getLogger(__name__)


class WalletType(Enum):
    GENERATED = "generated"
    IMPORTED = "imported"


@runtime_checkable
class WalletAdapter(Protocol):
    """
    Protocol for wallets the facade can bind to

    Implementations must provide:
    - public_key: base58 string or Pubkey, None while disconnected

    And may provide:
    - sign_transaction(tx) -> tx (coroutine)
    - sign_all_transactions(txs) -> txs (coroutine)
    """

    @property
    def public_key(self) -> Optional[Union[str, Pubkey]]:
        ...


def wallet_public_key(wallet) -> Optional[str]:
    """Base58 public key of a wallet-like object, or None"""
    if wallet is None:
        return None
    key = getattr(wallet, "public_key", None)
    if key is None:
        return None
    return str(key)


def wallet_can_sign(wallet) -> bool:
    return callable(getattr(wallet, "sign_transaction", None))


def load_keypair(
    secret: Optional[Union[str, bytes, Sequence[int]]] = None,
    *,
    path: Optional[Union[str, Path]] = None,
) -> Keypair:
    """
    Load a keypair

    Supports:
    - 64 raw bytes or a list of ints (Solana CLI format)
    - JSON array string: "[1,2,3,...]"
    - base58 encoded secret key
    - path to a keypair file holding either a JSON array or 64 raw bytes

    Raises:
        ConfigurationError: Input cannot be parsed as a keypair
    """
    if path is not None:
        content = Path(path).read_bytes()
        try:
            data = json.loads(content.decode("utf-8"))
            if isinstance(data, list):
                return Keypair.from_bytes(bytes(data))
        except (json.JSONDecodeError, UnicodeDecodeError):
            pass
        if len(content) == 64:
            return Keypair.from_bytes(content)
        raise ConfigurationError.invalid("keypair_path", f"Cannot parse keypair file: {path}")

    if secret is None:
        raise ConfigurationError.missing("keypair")

    try:
        if isinstance(secret, str):
            text = secret.strip()
            if text.startswith("["):
                return Keypair.from_bytes(bytes(json.loads(text)))
            return Keypair.from_bytes(base58.b58decode(text))
        return Keypair.from_bytes(bytes(secret))
    except (ValueError, TypeError) as e:
        raise ConfigurationError.invalid("keypair", f"Cannot parse secret key: {e}") from e


def sign_versioned_transaction(keypair: Keypair, tx: VersionedTransaction) -> VersionedTransaction:
    """
    Add keypair's signature to a versioned transaction

    Signatures of other required signers are preserved.

    Raises:
        InvalidWalletState: keypair is not among the required signers
    """
    message = tx.message
    signature = keypair.sign_message(to_bytes_versioned(message))

    num_required = message.header.num_required_signatures
    account_keys = message.account_keys
    our_pubkey = keypair.pubkey()

    signer_index = None
    for i in range(min(num_required, len(account_keys))):
        if account_keys[i] == our_pubkey:
            signer_index = i
            break

    if signer_index is None:
        raise InvalidWalletState(
            f"Wallet {our_pubkey} is not in the required signers list"
        )

    signatures = list(tx.signatures)
    if len(signatures) < num_required:
        signatures.extend([Signature.default()] * (num_required - len(signatures)))
    signatures[signer_index] = signature

    return VersionedTransaction.populate(message, signatures)


class KeypairWallet:
    """
    Wallet backed by a local keypair

    Connected on construction by default. While disconnected, public_key is
    None, so binding it raises InvalidWalletState.

    Usage:
        wallet = KeypairWallet.generate()
        client.bind(wallet)

        signed = await wallet.sign_transaction(tx)
    """

    def __init__(
        self,
        keypair: Keypair,
        wallet_type: WalletType = WalletType.IMPORTED,
        connected: bool = True,
    ):
        self._keypair = keypair
        self.wallet_type = wallet_type
        self._connected = connected

    @classmethod
    def generate(cls) -> "KeypairWallet":
        return cls(Keypair(), WalletType.GENERATED)

    @classmethod
    def from_secret(cls, secret: Union[str, bytes, Sequence[int]]) -> "KeypairWallet":
        return cls(load_keypair(secret), WalletType.IMPORTED)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "KeypairWallet":
        return cls(load_keypair(path=path), WalletType.IMPORTED)

    @property
    def keypair(self) -> Keypair:
        return self._keypair

    @property
    def pubkey(self) -> Pubkey:
        return self._keypair.pubkey()

    @property
    def public_key(self) -> Optional[str]:
        """Public key as base58 string, None while disconnected"""
        if not self._connected:
            return None
        return str(self._keypair.pubkey())

    @property
    def is_connected(self) -> bool:
        return self._connected

    def connect(self) -> str:
        self._connected = True
        return str(self._keypair.pubkey())

    def disconnect(self):
        self._connected = False

    def secret_base58(self) -> str:
        return base58.b58encode(bytes(self._keypair)).decode("ascii")

    def sign_message(self, message: bytes) -> bytes:
        return bytes(self._keypair.sign_message(message))

    def _require_connected(self):
        if not self._connected:
            raise InvalidWalletState("Wallet is disconnected")

    async def sign_transaction(self, tx: VersionedTransaction) -> VersionedTransaction:
        self._require_connected()
        return sign_versioned_transaction(self._keypair, tx)

    async def sign_all_transactions(self, txs: List[VersionedTransaction]) -> List[VersionedTransaction]:
        self._require_connected()
        return [sign_versioned_transaction(self._keypair, tx) for tx in txs]

    def __repr__(self) -> str:
        state = "connected" if self._connected else "disconnected"
        return f"KeypairWallet({self._keypair.pubkey()}, {self.wallet_type.value}, {state})"
