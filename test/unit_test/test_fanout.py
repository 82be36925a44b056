"""
Tests for the cross-provider operations: portfolio, market overview and
health check, plus the settle-all join underneath them.
"""

import asyncio

import httpx

from conftest import Router, run
from forgex_sdk import ForgeXClient
from forgex_sdk.infra.fanout import settle_all
from forgex_sdk.infra.signer import KeypairWallet
from forgex_sdk.types import Credentials, SOL_MINT

WALLET = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"
USDC = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"

SOL_FEED = "ef0d8b6fda2ceba41da15d4095d1da392a0d2f8ed0c6c7bc0f4cfac8c280b56d"
BTC_FEED = "e62df6c8b4a85fe1a67db44dc12de5db330f7ac66b72dc658afedf0f4a415b43"


def _feed(feed_id, price, expo=-8):
    return {
        "id": feed_id,
        "price": {"price": str(price), "conf": "100000", "expo": expo, "publish_time": 1_700_000_000},
        "ema_price": {"price": str(price), "conf": "100000", "expo": expo, "publish_time": 1_700_000_000},
    }


def _marinade_routes(router):
    router.add("/msol/apy/7d", {"value": 0.072})
    router.add("/msol/price_sol", 1.27)
    router.add("/tlv", {"total_sol": 11_000_000.0, "total_usd": 1_600_000_000.0})


class TestSettleAll:
    def test_collects_values_and_errors(self):
        async def ok():
            return 1

        async def boom():
            raise ValueError("nope")

        settled = run(settle_all({"a": ok(), "b": boom()}))
        assert settled["a"].ok and settled["a"].value == 1
        assert not settled["b"].ok
        assert isinstance(settled["b"].error, ValueError)
        assert settled["b"].value_or("fallback") == "fallback"

    def test_failure_does_not_cancel_siblings(self):
        finished = []

        async def slow():
            await asyncio.sleep(0.01)
            finished.append("slow")
            return "done"

        async def fast_fail():
            raise RuntimeError("fast")

        settled = run(settle_all({"slow": slow(), "fail": fast_fail()}))
        assert finished == ["slow"]
        assert settled["slow"].value == "done"

    def test_empty(self):
        assert run(settle_all({})) == {}


class TestPortfolio:
    def test_every_branch_failing_resolves(self):
        router = Router().fail_all(500)
        client = ForgeXClient(http=router.transport())

        snapshot = run(client.get_portfolio(WALLET))

        assert snapshot.wallet == WALLET
        assert snapshot.sol_balance is None
        assert snapshot.tokens is None
        assert snapshot.lending is None
        assert snapshot.staking is None
        assert snapshot.perpetuals == []
        assert snapshot.timestamp > 0
        assert set(snapshot.failures) == {"sol_balance", "tokens", "lending", "staking", "perpetuals"}
        assert "rpc.getBalance" in snapshot.failures["sol_balance"]
        assert not snapshot.is_complete

    def test_all_branches_succeed(self, router):
        router.rpc("getBalance", {"context": {"slot": 1}, "value": 2_500_000_000})
        router.add(f"/ultra/v1/holdings/{WALLET}", {
            "uiAmount": 2.5,
            "tokens": {USDC: [{"uiAmount": 10.0, "decimals": 6}, {"uiAmount": 5.0, "decimals": 6}]},
        })
        router.add(f"/users/{WALLET}/obligations", [])
        _marinade_routes(router)
        router.add(f"/authority/{WALLET}/perpPositions", {"positions": [
            {"marketIndex": 0, "marketName": "SOL-PERP", "baseAssetAmount": 2_000_000_000,
             "quoteEntryAmount": -300_000_000},
            {"marketIndex": 1, "marketName": "BTC-PERP", "baseAssetAmount": 0, "quoteEntryAmount": 0},
        ]})
        client = ForgeXClient(http=router.transport())

        snapshot = run(client.get_portfolio(WALLET))

        assert snapshot.failures == {}
        assert snapshot.absent == {}
        assert snapshot.sol_balance == 2.5
        assert snapshot.tokens[USDC]["amount"] == 15.0
        assert snapshot.tokens[USDC]["accounts"] == 2
        assert snapshot.lending.health_factor == 999.0
        assert not snapshot.lending.has_debt
        assert abs(snapshot.staking.apy - 7.2) < 1e-9
        assert snapshot.staking.exchange_rate == 1.27
        assert len(snapshot.perpetuals) == 1
        assert snapshot.perpetuals[0].side == "long"
        assert snapshot.perpetuals[0].entry_price == 150.0

    def test_partial_failure(self, router):
        router.rpc("getBalance", {"context": {"slot": 1}, "value": 1_000_000_000})
        _marinade_routes(router)
        client = ForgeXClient(http=router.transport())

        snapshot = run(client.get_portfolio(WALLET))

        assert snapshot.sol_balance == 1.0
        assert snapshot.staking is not None
        assert set(snapshot.failures) == {"tokens", "lending", "perpetuals"}


class TestMarketOverview:
    def _routes(self, router):
        router.rpc("getSlot", 312_000_000)
        router.add("/updates/price/latest", {"parsed": [_feed(SOL_FEED, 14_825_000_000), _feed(BTC_FEED, 6_500_000_000_000)]})
        _marinade_routes(router)
        router.add("/latest/dex/tokens/solana/", {"pairs": [
            {"chainId": "solana", "dexId": "raydium", "pairAddress": "P1", "baseToken": {"symbol": "SOL"},
             "quoteToken": {"symbol": "USDC"}, "priceUsd": "148.25", "liquidity": {"usd": 5e6}, "volume": {"h24": 1e6}},
            {"chainId": "solana", "dexId": "orca", "pairAddress": "P2", "baseToken": {"symbol": "SOL"},
             "quoteToken": {"symbol": "USDT"}, "priceUsd": "148.20", "liquidity": {"usd": 2e6}, "volume": {"h24": 3e6}},
        ]})

    def test_overview_without_tensor_key(self, router):
        self._routes(router)
        client = ForgeXClient(http=router.transport())

        overview = run(client.get_market_overview())

        assert overview.slot == 312_000_000
        assert overview.prices["sol"].price == 148.25
        assert overview.prices["btc"].price == 65_000.0
        # ETH missing from the oracle reply
        assert overview.prices["eth"] is None
        assert abs(overview.staking.apy - 7.2) < 1e-9
        assert [p.pair_address for p in overview.sol_pairs] == ["P2", "P1"]
        assert overview.nfts == []
        assert overview.absent == {"nfts": "tensor: missing tensor API key"}
        assert overview.failures == {}

    def test_concurrent_overviews_are_independent(self, router):
        self._routes(router)
        client = ForgeXClient(http=router.transport())

        async def scenario():
            return await asyncio.gather(*(client.get_market_overview() for _ in range(3)))

        first, second, third = run(scenario())
        assert first is not second
        assert first.prices is not second.prices
        assert first.slot == second.slot == third.slot == 312_000_000
        assert len(router.rpc_calls("getSlot")) == 3

    def test_alternating_upstream_does_not_leak_between_calls(self, router):
        replies = iter([
            httpx.Response(500, json={"error": "oracle down"}),
            httpx.Response(200, json={"parsed": [_feed(SOL_FEED, 14_825_000_000)]}),
        ])
        router.add("/updates/price/latest", lambda request: next(replies))
        self._routes(router)
        client = ForgeXClient(http=router.transport())

        async def scenario():
            return await asyncio.gather(client.get_market_overview(), client.get_market_overview())

        overviews = run(scenario())

        failed = [o for o in overviews if o.failures]
        healthy = [o for o in overviews if not o.failures]
        assert len(failed) == 1
        assert len(healthy) == 1
        assert set(failed[0].failures) == {"prices"}
        assert "pyth.get_latest_prices" in failed[0].failures["prices"]
        assert failed[0].prices == {"sol": None, "btc": None, "eth": None}
        assert failed[0].slot == 312_000_000
        assert healthy[0].prices["sol"].price == 148.25
        assert healthy[0].failures == {}

    def test_all_failing(self):
        router = Router().fail_all(502)
        client = ForgeXClient(credentials=Credentials(tensor="t"), http=router.transport())

        overview = run(client.get_market_overview())

        assert overview.slot is None
        assert overview.prices == {"sol": None, "btc": None, "eth": None}
        assert overview.sol_pairs == []
        assert set(overview.failures) == {"slot", "prices", "staking", "nfts", "sol_pairs"}


class TestHealthCheck:
    def test_overall_is_healthy_over_attempted(self, router):
        router.rpc("getSlot", 1)
        router.add("/updates/price/latest", {"parsed": [_feed(SOL_FEED, 14_825_000_000)]})
        router.add("/msol/apy/7d", {"value": 0.07})
        client = ForgeXClient(http=router.transport())

        report = run(client.health_check())

        assert report.services["connection"] is True
        assert report.services["pyth"] is True
        assert report.services["marinade"] is True
        assert report.services["drift"] is False
        # connection + eleven keyless adapters with probes
        assert report.attempted == 12
        assert report.healthy == 3
        assert report.overall == 3 / 12
        assert report.absent["tensor"] == "missing tensor API key"
        assert report.absent["squads"] == "no health probe"
        assert "squads" not in report.services

    def test_never_raises_when_everything_fails(self):
        router = Router().fail_all(500)
        client = ForgeXClient(http=router.transport())

        report = run(client.health_check())

        assert report.overall == 0.0
        assert report.healthy == 0
        assert report.attempted == len(report.services)
        assert report.timestamp > 0

    def test_bound_wallet_adds_probe(self, router):
        router.rpc("getSlot", 1)
        client = ForgeXClient(http=router.transport())
        client.bind(KeypairWallet.generate())

        report = run(client.health_check())

        assert "mayan" in report.services
        assert report.attempted == 13


def test_snapshot_isolated_from_concurrent_unbind(router):
    """A fan-out started while bound keeps its own view of the slots"""
    router.rpc("getSlot", 1)
    client = ForgeXClient(http=router.transport())
    client.bind(KeypairWallet.generate())

    async def scenario():
        task = asyncio.ensure_future(client.health_check())
        await asyncio.sleep(0)
        client.unbind()
        return await task

    report = run(scenario())
    assert "mayan" in report.services
    assert client.mayan is None
