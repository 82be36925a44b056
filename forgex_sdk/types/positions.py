"""
Position and yield types for lending, staking and perpetuals
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class LoanHealth:
    """
    Lending obligation health

    Attributes:
        health_factor: allowed borrow value / borrowed value (999 when no debt)
        total_deposit: Deposited value in USD
        total_borrow: Borrowed value in USD
        max_borrow: Allowed borrow value in USD
        borrow_utilization: total_borrow / max_borrow in percent
        deposits: Per-reserve deposits
        borrows: Per-reserve borrows
    """
    wallet: str
    health_factor: float
    total_deposit: float = 0.0
    total_borrow: float = 0.0
    max_borrow: float = 0.0
    borrow_utilization: float = 0.0
    deposits: List[dict] = field(default_factory=list)
    borrows: List[dict] = field(default_factory=list)

    @property
    def has_debt(self) -> bool:
        return self.total_borrow > 0


@dataclass
class StakingInfo:
    """Liquid staking token stats, apy in percent"""
    token: str
    apy: float
    tvl: Optional[float] = None
    exchange_rate: Optional[float] = None
    total_staked: Optional[float] = None


@dataclass
class PerpPosition:
    """
    Perpetual futures position

    Attributes:
        base_asset_amount: Size in base units (negative for short)
        quote_entry_amount: Entry notional in USD
        entry_price: |quote_entry_amount / base_asset_amount|
    """
    market_index: int
    market: str
    base_asset_amount: float
    quote_entry_amount: float
    entry_price: float = 0.0
    unrealized_pnl: Optional[float] = None

    @property
    def side(self) -> str:
        if self.base_asset_amount > 0:
            return "long"
        if self.base_asset_amount < 0:
            return "short"
        return "flat"


@dataclass
class LsdYield:
    token: str
    mint: str
    apy: float
    tvl: Optional[float] = None
    protocol: Optional[str] = None
    staking_strategy: Optional[str] = None


@dataclass
class LendingMarket:
    """Lending reserve summary, rates in percent"""
    token_mint: str
    token_symbol: str
    supply_apy: float
    borrow_apy: float
    total_supply: Optional[float] = None
    total_borrow: Optional[float] = None
    available_liquidity: Optional[float] = None
    utilization: Optional[float] = None
    price: Optional[float] = None
    ltv: Optional[float] = None
