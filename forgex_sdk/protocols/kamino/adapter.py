"""
Kamino Lend Adapter

Markets, reserves, obligation health and unsigned lending transactions via
the Kamino REST API.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from ...errors import ConfigurationError
from ...types.positions import LoanHealth
from ..base import ProviderAdapter, upstream_call
from ..mapping import Field, remap, remap_many

logger = logging.getLogger(__name__)

NO_DEBT_HEALTH_FACTOR = 999.0
LIQUIDATION_WARNING_THRESHOLD = 1.3

RESERVE_FIELDS = (
    Field("mint", "mintAddress", cast=str),
    Field("symbol", "symbol", cast=str, default="Unknown"),
    Field("decimals", "decimals", cast=int),
    Field("supply_apy", "supplyApy", default=0.0),
    Field("borrow_apy", "borrowApy", default=0.0),
    Field("total_supply", "totalSupply"),
    Field("total_borrow", "totalBorrow"),
    Field("utilization", "utilizationRate"),
    Field("ltv", "ltv", default=0.0),
    Field("liquidation_threshold", "liquidationThreshold", default=0.0),
)

OBLIGATION_TOTALS = (
    Field("health_factor", "healthFactor", default=NO_DEBT_HEALTH_FACTOR),
    Field("total_deposit", "depositedValueUsd", default=0.0),
    Field("total_borrow", "borrowedValueUsd", default=0.0),
    Field("max_borrow", "allowedBorrowValueUsd", default=0.0),
)


class LendingAction(Enum):
    SUPPLY = "supply"
    WITHDRAW = "withdraw"
    BORROW = "borrow"
    REPAY = "repay"


@dataclass
class LendingParams:
    """
    Lending transaction request

    Attributes:
        market: Lending market address
        reserve: Reserve address
        amount: Amount in base units
        user_public_key: Wallet that signs the transaction
        obligation: Existing obligation address, if any
    """
    market: str
    reserve: str
    amount: int
    user_public_key: str
    obligation: Optional[str] = None

    def validate(self):
        if self.amount <= 0:
            raise ConfigurationError.invalid("amount", "must be positive (base units)")
        if not self.market or not self.reserve:
            raise ConfigurationError.invalid("market", "market and reserve are required")


class KaminoAdapter(ProviderAdapter):
    """
    Kamino Lend adapter

    Usage:
        health = await client.kamino.get_loan_health(wallet)
        if KaminoAdapter.is_at_risk_of_liquidation(health.health_factor):
            ...
    """

    name = "kamino"
    default_base_url = "https://api.kamino.finance"

    @upstream_call("get_markets")
    async def get_markets(self) -> List[Dict[str, Any]]:
        return await self._get("/markets") or []

    @upstream_call("get_market")
    async def get_market(self, market_address: str) -> Dict[str, Any]:
        """Market with normalized reserves"""
        data = await self._get(f"/markets/{market_address}")
        return {
            "address": data.get("address", market_address),
            "name": data.get("name"),
            "reserves": remap_many(data.get("reserves"), RESERVE_FIELDS),
        }

    @upstream_call("get_loan_health")
    async def get_loan_health(self, wallet: str, market_address: Optional[str] = None) -> LoanHealth:
        """
        Health of the wallet's first obligation (optionally within one market)

        A wallet without obligations reports the no-debt health factor 999.
        Deposits and borrows are enriched with reserve symbol, rates and
        risk parameters from the obligation's market.
        """
        obligations = await self._get(f"/users/{wallet}/obligations") or []
        if market_address:
            obligations = [ob for ob in obligations if ob.get("market") == market_address]
        if not obligations:
            return LoanHealth(wallet=wallet, health_factor=NO_DEBT_HEALTH_FACTOR)

        obligation = obligations[0]
        market = await self.get_market(obligation["market"])
        reserves = {r["mint"]: r for r in market["reserves"]}

        deposits = []
        for d in obligation.get("deposits") or []:
            reserve = reserves.get(d["mintAddress"], {})
            deposits.append({
                "mint": d["mintAddress"],
                "symbol": reserve.get("symbol", "Unknown"),
                "amount": float(d.get("amount") or 0),
                "value": float(d.get("marketValue") or 0),
                "apy": reserve.get("supply_apy", 0.0),
                "ltv": reserve.get("ltv", 0.0),
            })

        borrows = []
        for b in obligation.get("borrows") or []:
            reserve = reserves.get(b["mintAddress"], {})
            borrows.append({
                "mint": b["mintAddress"],
                "symbol": reserve.get("symbol", "Unknown"),
                "amount": float(b.get("amount") or 0),
                "value": float(b.get("marketValue") or 0),
                "apy": reserve.get("borrow_apy", 0.0),
                "liquidation_threshold": reserve.get("liquidation_threshold", 0.0),
            })

        totals = remap(obligation, OBLIGATION_TOTALS)
        max_borrow = totals["max_borrow"]
        utilization = totals["total_borrow"] / max_borrow * 100 if max_borrow > 0 else 0.0

        return LoanHealth(
            wallet=wallet,
            borrow_utilization=utilization,
            deposits=deposits,
            borrows=borrows,
            **totals,
        )

    async def _build_transaction(self, action: LendingAction, params: LendingParams) -> Dict[str, Any]:
        params.validate()
        data = await self._post(f"/transactions/{action.value}", json={
            "market": params.market,
            "reserve": params.reserve,
            "amount": str(params.amount),
            "userPublicKey": params.user_public_key,
            "obligation": params.obligation,
        })
        return {"transaction": data["transaction"], "action": action.value}

    @upstream_call("build_supply_transaction")
    async def build_supply_transaction(self, params: LendingParams) -> Dict[str, Any]:
        """Unsigned supply transaction (base64)"""
        return await self._build_transaction(LendingAction.SUPPLY, params)

    @upstream_call("build_withdraw_transaction")
    async def build_withdraw_transaction(self, params: LendingParams) -> Dict[str, Any]:
        return await self._build_transaction(LendingAction.WITHDRAW, params)

    @upstream_call("build_borrow_transaction")
    async def build_borrow_transaction(self, params: LendingParams) -> Dict[str, Any]:
        return await self._build_transaction(LendingAction.BORROW, params)

    @upstream_call("build_repay_transaction")
    async def build_repay_transaction(self, params: LendingParams) -> Dict[str, Any]:
        return await self._build_transaction(LendingAction.REPAY, params)

    @upstream_call("get_historical_apy")
    async def get_historical_apy(self, market_address: str, reserve_address: str, days: int = 30) -> List[Dict[str, Any]]:
        if days <= 0:
            raise ConfigurationError.invalid("days", "must be positive")
        data = await self._get(
            f"/markets/{market_address}/reserves/{reserve_address}/history",
            params={"days": days},
        )
        return remap_many(data, (
            Field("timestamp", "timestamp", cast=int),
            Field("supply_apy", "supplyApy", default=0.0),
            Field("borrow_apy", "borrowApy", default=0.0),
        ))

    async def health_probe(self):
        return await self.get_markets()

    @staticmethod
    def to_raw_amount(amount: Union[Decimal, float, str], decimals: int) -> int:
        return int(Decimal(str(amount)) * Decimal(10 ** decimals))

    @staticmethod
    def from_raw_amount(raw_amount: Union[int, str], decimals: int) -> float:
        return int(raw_amount) / 10 ** decimals

    @staticmethod
    def calculate_liquidation_price(collateral_value: float, borrow_value: float, liquidation_threshold: float) -> float:
        if borrow_value == 0:
            return 0.0
        return borrow_value / (collateral_value * liquidation_threshold)

    @staticmethod
    def is_at_risk_of_liquidation(health_factor: float, warning_threshold: float = LIQUIDATION_WARNING_THRESHOLD) -> bool:
        return health_factor < warning_threshold
