"""
Infrastructure layer for ForgeX SDK

Provides:
- HttpTransport: shared async HTTP client with error normalization and retry
- RpcClient: async Solana JSON-RPC connection handle
- KeypairWallet / WalletAdapter: wallet interface and keypair implementation
- settle_all: concurrent join that tolerates individual failures
"""

from .http import HttpTransport
from .rpc import RpcClient
from .signer import (
    KeypairWallet,
    WalletAdapter,
    WalletType,
    load_keypair,
    sign_versioned_transaction,
)
from .fanout import Settled, settle_all
from .retry import CorrelationContext, execute_with_retry

__all__ = [
    "HttpTransport",
    "RpcClient",
    "KeypairWallet",
    "WalletAdapter",
    "WalletType",
    "load_keypair",
    "sign_versioned_transaction",
    "Settled",
    "settle_all",
    "CorrelationContext",
    "execute_with_retry",
]
