"""
ForgeX SDK - Unified interface for Solana provider APIs

One client over about twenty providers:
- Swaps and AMMs: Jupiter, Raydium, Mayan (cross-chain)
- Lending: Kamino, MarginFi, Solend
- Staking and LSTs: Marinade, Sanctum
- Perpetuals: Drift
- Market data: Pyth, Birdeye, DexScreener
- NFTs: Tensor, Helius
- Wallet infrastructure: Shyft, Crossmint, Squads, Dialect, Clockwork
- Vaults: Meteora

Cross-provider operations (portfolio, market overview, health check) fan
out concurrently and tolerate individual provider failures.
"""

from .client import ForgeXClient
from .binding import AdapterSlot, AdapterTable, BindingState, BindingStatus
from .types import (
    Commitment,
    ConnectionConfig,
    Credentials,
    Network,
    Token,
    TOKENS,
    SOL_MINT,
    LAMPORTS_PER_SOL,
    lamports_to_sol,
    sol_to_lamports,
    HealthReport,
    MarketOverview,
    PortfolioSnapshot,
)
from .errors import (
    ForgeXError,
    UpstreamError,
    RpcError,
    ConfigurationError,
    InvalidWalletState,
    AdapterUnavailable,
    ErrorCode,
)
from .infra import HttpTransport, RpcClient, KeypairWallet, WalletAdapter, load_keypair
from .protocols import PROVIDERS, ProtocolRegistry
from .config import setup_logging

__all__ = [
    # Client
    "ForgeXClient",
    # Binding
    "AdapterSlot",
    "AdapterTable",
    "BindingState",
    "BindingStatus",
    # Types
    "Commitment",
    "ConnectionConfig",
    "Credentials",
    "Network",
    "Token",
    "TOKENS",
    "SOL_MINT",
    "LAMPORTS_PER_SOL",
    "lamports_to_sol",
    "sol_to_lamports",
    "HealthReport",
    "MarketOverview",
    "PortfolioSnapshot",
    # Errors
    "ForgeXError",
    "UpstreamError",
    "RpcError",
    "ConfigurationError",
    "InvalidWalletState",
    "AdapterUnavailable",
    "ErrorCode",
    # Infrastructure
    "HttpTransport",
    "RpcClient",
    "KeypairWallet",
    "WalletAdapter",
    "load_keypair",
    # Providers
    "PROVIDERS",
    "ProtocolRegistry",
    "setup_logging",
]

__version__ = "0.3.0"
