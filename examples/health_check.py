"""
Provider health check

Probes the RPC connection and every configured provider, then lists the
providers that were not probed and why.

Usage:
    python examples/health_check.py
"""

import asyncio
import logging
import sys

from common import banner, create_client, section

from forgex_sdk import setup_logging

logger = logging.getLogger("forgex_sdk.examples.health")


async def run() -> float:
    async with create_client() as client:
        section("Adapters")
        for name, status in client.status().items():
            print(f"  {name:<12} {status}")

        report = await client.health_check()

        section("Probes")
        for name, ok in sorted(report.services.items()):
            print(f"  {name:<12} {'OK' if ok else 'DOWN'}")

        if report.absent:
            section("Not probed")
            for name, reason in sorted(report.absent.items()):
                print(f"  {name:<12} {reason}")

        print(f"\nOverall: {report.healthy}/{report.attempted} healthy ({report.overall:.0%})")
        return report.overall


def main():
    setup_logging()
    banner("ForgeX Health Check")
    try:
        overall = asyncio.run(run())
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        sys.exit(1)
    sys.exit(0 if overall > 0 else 2)


if __name__ == "__main__":
    main()
