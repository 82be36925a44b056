"""
Market overview: oracle prices, current slot, staking, NFTs and SOL pairs

Usage:
    python examples/market_overview.py
"""

import asyncio
import logging
import sys

from common import banner, create_client, section

from forgex_sdk import setup_logging

logger = logging.getLogger("forgex_sdk.examples.market")


async def run():
    async with create_client() as client:
        overview = await client.get_market_overview()

        section("Oracle prices (Pyth)")
        for symbol, price in overview.prices.items():
            if price is None:
                print(f"  {symbol.upper():<4} n/a")
            else:
                print(f"  {symbol.upper():<4} ${price.price:>12,.4f}  (+/- {price.confidence:,.4f})")

        section("Chain")
        print(f"  Slot: {overview.slot if overview.slot is not None else 'n/a'}")

        section("Staking (Marinade)")
        if overview.staking is not None:
            print(f"  mSOL APY:  {overview.staking.apy:.2f}%")
            if overview.staking.tvl is not None:
                print(f"  TVL (USD): ${overview.staking.tvl:,.0f}")

        section("Top NFT collections, 24h volume (Tensor)")
        for collection in overview.nfts:
            floor = f"{collection.floor_price:,.2f} SOL" if collection.floor_price is not None else "n/a"
            print(f"  {collection.name:<30} floor {floor}")

        section("Top SOL pairs by 24h volume (DexScreener)")
        for pair in overview.sol_pairs:
            print(f"  {pair.dex_id:<12} {pair.base_symbol}/{pair.quote_symbol:<8} "
                  f"vol ${pair.volume_24h or 0:,.0f}  liq ${pair.liquidity_usd or 0:,.0f}")

        if overview.absent or overview.failures:
            section("Unavailable")
            for field_name, reason in overview.absent.items():
                print(f"  {field_name}: absent ({reason})")
            for field_name, error in overview.failures.items():
                print(f"  {field_name}: failed ({error})")


def main():
    setup_logging()
    banner("ForgeX Market Overview")
    try:
        asyncio.run(run())
    except Exception as e:
        logger.error(f"Market overview failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
