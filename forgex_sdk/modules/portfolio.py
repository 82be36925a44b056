"""
Portfolio Module

Aggregates one wallet's positions across providers.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, TYPE_CHECKING

from ..infra.fanout import settle_all
from ..infra.retry import CorrelationContext
from ..types.common import lamports_to_sol
from ..types.results import PortfolioSnapshot

if TYPE_CHECKING:
    from ..client import ForgeXClient

logger = logging.getLogger(__name__)


class PortfolioModule:
    """
    Cross-provider portfolio view

    Fans out to:
    - RPC getBalance (SOL balance)
    - jupiter: token holdings
    - kamino: lending obligation health
    - marinade: liquid staking stats
    - drift: open perpetual positions

    Usage:
        snapshot = await client.get_portfolio("Wallet...")
        if snapshot.lending and snapshot.lending.has_debt:
            print(snapshot.lending.health_factor)
    """

    def __init__(self, client: "ForgeXClient"):
        self._client = client

    async def get_portfolio(self, address: str) -> PortfolioSnapshot:
        """
        Snapshot of address across providers

        Never raises. A field whose adapter is absent is listed in `absent`;
        a field whose call failed is listed in `failures`. Both stay None
        (or empty).
        """
        slots = self._client.slots()
        calls: Dict[str, Awaitable[Any]] = {
            "sol_balance": self._sol_balance(address),
        }
        absent: Dict[str, str] = {}

        def branch(field: str, provider: str, call: Callable[[Any], Awaitable[Any]]):
            slot = slots[provider]
            if slot.is_present:
                calls[field] = call(slot.adapter)
            else:
                absent[field] = f"{provider}: {slot.reason}"

        branch("tokens", "jupiter", lambda jupiter: self._tokens(jupiter, address))
        branch("lending", "kamino", lambda kamino: kamino.get_loan_health(address))
        branch("staking", "marinade", lambda marinade: marinade.get_staking_info())
        branch("perpetuals", "drift", lambda drift: drift.get_position_details(address))

        with CorrelationContext("portfolio") as cid:
            logger.debug(f"[{cid}] Portfolio fan-out for {address}: {list(calls)}")
            settled = await settle_all(calls)

        snapshot = PortfolioSnapshot(wallet=address, absent=absent)
        for field, outcome in settled.items():
            if outcome.ok:
                setattr(snapshot, field, outcome.value)
            else:
                snapshot.failures[field] = str(outcome.error)
                logger.warning(f"Portfolio {field} failed for {address}: {outcome.error}")
        return snapshot

    async def _sol_balance(self, address: str) -> float:
        lamports = await self._client.connection.get_balance(address)
        return lamports_to_sol(lamports)

    @staticmethod
    async def _tokens(jupiter, address: str) -> Dict[str, dict]:
        holdings = await jupiter.get_holdings(address)
        return holdings["tokens"]
