"""
Aggregated results of the cross-provider operations

All results are ephemeral. A field is None (or empty) when its source
adapter is absent or its call failed; `absent` and `failures` tell the two
cases apart.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .market import DexPair, NftCollection, PriceData
from .positions import LoanHealth, PerpPosition, StakingInfo


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class PortfolioSnapshot:
    """
    Wallet portfolio across providers

    Attributes:
        wallet: Wallet address queried
        sol_balance: SOL balance (lamports / 1e9)
        tokens: Token holdings keyed by mint
        lending: Lending obligation health
        staking: Liquid staking stats
        perpetuals: Open perpetual positions
        timestamp: Milliseconds since epoch
        absent: field -> reason the source adapter was absent
        failures: field -> error message of the failed call
    """
    wallet: str
    sol_balance: Optional[float] = None
    tokens: Optional[Dict[str, dict]] = None
    lending: Optional[LoanHealth] = None
    staking: Optional[StakingInfo] = None
    perpetuals: List[PerpPosition] = field(default_factory=list)
    timestamp: int = field(default_factory=_now_ms)
    absent: Dict[str, str] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)

    @property
    def is_complete(self) -> bool:
        return not self.absent and not self.failures


@dataclass
class MarketOverview:
    """
    Market snapshot

    Attributes:
        prices: sol / btc / eth USD prices
        slot: Current slot of the connected cluster
        staking: Liquid staking stats
        nfts: Top collections by 24h volume
        sol_pairs: Top SOL trading pairs
    """
    prices: Dict[str, Optional[PriceData]] = field(default_factory=dict)
    slot: Optional[int] = None
    staking: Optional[StakingInfo] = None
    nfts: List[NftCollection] = field(default_factory=list)
    sol_pairs: List[DexPair] = field(default_factory=list)
    timestamp: int = field(default_factory=_now_ms)
    absent: Dict[str, str] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)


@dataclass
class HealthReport:
    """
    Per-service health

    Attributes:
        services: name -> probe succeeded
        overall: healthy / attempted (0.0 when nothing was attempted)
        absent: name -> reason, for services not probed
    """
    services: Dict[str, bool] = field(default_factory=dict)
    overall: float = 0.0
    timestamp: int = field(default_factory=_now_ms)
    absent: Dict[str, str] = field(default_factory=dict)

    @property
    def attempted(self) -> int:
        return len(self.services)

    @property
    def healthy(self) -> int:
        return sum(1 for ok in self.services.values() if ok)

    @property
    def unhealthy(self) -> List[str]:
        return [name for name, ok in self.services.items() if not ok]

    @classmethod
    def from_checks(cls, services: Dict[str, bool], absent: Optional[Dict[str, str]] = None) -> "HealthReport":
        attempted = len(services)
        healthy = sum(1 for ok in services.values() if ok)
        return cls(
            services=dict(services),
            overall=healthy / attempted if attempted else 0.0,
            absent=dict(absent or {}),
        )
