"""
Portfolio analysis across providers

Usage:
    python examples/portfolio_analysis.py <wallet address>
"""

import asyncio
import logging
import sys

from common import banner, create_client, section

from forgex_sdk import setup_logging

logger = logging.getLogger("forgex_sdk.examples.portfolio")


def print_tokens(tokens):
    if not tokens:
        print("  No token holdings")
        return
    for mint, holding in sorted(tokens.items(), key=lambda item: -item[1]["amount"]):
        print(f"  {mint[:8]}...  {holding['amount']:>18,.6f}  ({holding['accounts']} account(s))")


def print_lending(health):
    print(f"  Health factor:      {health.health_factor:.2f}")
    print(f"  Deposited (USD):    ${health.total_deposit:,.2f}")
    print(f"  Borrowed (USD):     ${health.total_borrow:,.2f}")
    print(f"  Borrow utilization: {health.borrow_utilization:.1f}%")
    for deposit in health.deposits:
        print(f"    + {deposit['symbol']:<8} {deposit['amount']:,.4f}  APY {deposit['apy']:.2f}%")
    for borrow in health.borrows:
        print(f"    - {borrow['symbol']:<8} {borrow['amount']:,.4f}  APY {borrow['apy']:.2f}%")


def print_perpetuals(positions):
    if not positions:
        print("  No open positions")
        return
    for p in positions:
        pnl = f"{p.unrealized_pnl:+,.2f}" if p.unrealized_pnl is not None else "n/a"
        print(f"  {p.market:<10} {p.side:<5} {abs(p.base_asset_amount):,.4f} @ {p.entry_price:,.4f}  PnL {pnl}")


async def run(address: str):
    async with create_client() as client:
        print(f"Network:  {client.network.value}")
        print(f"Endpoint: {client.endpoint}")
        print(f"Wallet:   {address}")

        snapshot = await client.get_portfolio(address)

        section("SOL")
        if snapshot.sol_balance is not None:
            print(f"  {snapshot.sol_balance:,.9f} SOL")

        section("Tokens (Jupiter)")
        if snapshot.tokens is not None:
            print_tokens(snapshot.tokens)

        section("Lending (Kamino)")
        if snapshot.lending is not None:
            print_lending(snapshot.lending)

        section("Staking (Marinade)")
        if snapshot.staking is not None:
            print(f"  mSOL APY: {snapshot.staking.apy:.2f}%  rate: {snapshot.staking.exchange_rate:.4f} SOL")

        section("Perpetuals (Drift)")
        print_perpetuals(snapshot.perpetuals)

        if snapshot.absent or snapshot.failures:
            section("Unavailable")
            for field_name, reason in snapshot.absent.items():
                print(f"  {field_name}: absent ({reason})")
            for field_name, error in snapshot.failures.items():
                print(f"  {field_name}: failed ({error})")


def main():
    setup_logging()
    banner("ForgeX Portfolio Analysis")

    if len(sys.argv) < 2:
        print("Usage: python examples/portfolio_analysis.py <wallet address>")
        sys.exit(1)

    try:
        asyncio.run(run(sys.argv[1]))
    except Exception as e:
        logger.error(f"Portfolio analysis failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
