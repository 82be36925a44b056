"""
Functional modules for ForgeXClient

Provides high-level operations:
- PortfolioModule: Cross-provider wallet snapshot
- MarketModule: Market overview
- HealthModule: Service health check
- WalletModule: Wallet creation, balances, transfers
"""

from .portfolio import PortfolioModule
from .market import MarketModule
from .health import HealthModule
from .wallet import WalletModule

__all__ = [
    "PortfolioModule",
    "MarketModule",
    "HealthModule",
    "WalletModule",
]
