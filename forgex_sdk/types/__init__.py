"""
Type definitions for ForgeX SDK
"""

from .common import (
    LAMPORTS_PER_SOL,
    SOL_MINT,
    TOKENS,
    DEFAULT_ENDPOINTS,
    Commitment,
    ConnectionConfig,
    Credentials,
    Network,
    Token,
    lamports_to_sol,
    sol_to_lamports,
)
from .market import DexPair, NftCollection, PriceData, SwapQuote, TokenPrice
from .positions import LendingMarket, LoanHealth, LsdYield, PerpPosition, StakingInfo
from .results import HealthReport, MarketOverview, PortfolioSnapshot

__all__ = [
    # Common types
    "LAMPORTS_PER_SOL",
    "SOL_MINT",
    "TOKENS",
    "DEFAULT_ENDPOINTS",
    "Commitment",
    "ConnectionConfig",
    "Credentials",
    "Network",
    "Token",
    "lamports_to_sol",
    "sol_to_lamports",
    # Market types
    "DexPair",
    "NftCollection",
    "PriceData",
    "SwapQuote",
    "TokenPrice",
    # Position types
    "LendingMarket",
    "LoanHealth",
    "LsdYield",
    "PerpPosition",
    "StakingInfo",
    # Aggregated results
    "HealthReport",
    "MarketOverview",
    "PortfolioSnapshot",
]
