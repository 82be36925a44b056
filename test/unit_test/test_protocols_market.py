"""
Market data adapters: Pyth, Birdeye, DexScreener, Raydium, Jupiter, Tensor
"""

import json
import time

import pytest

from conftest import run
from forgex_sdk.errors import ConfigurationError, ErrorCode, UpstreamError
from forgex_sdk.protocols.birdeye import BirdeyeAdapter
from forgex_sdk.protocols.dexscreener import DexScreenerAdapter
from forgex_sdk.protocols.jupiter import JupiterAdapter, QuoteParams
from forgex_sdk.protocols.pyth import PYTH_FEEDS, PythAdapter
from forgex_sdk.protocols.pyth.adapter import normalize_price
from forgex_sdk.protocols.raydium import RaydiumAdapter
from forgex_sdk.protocols.tensor import TensorAdapter
from forgex_sdk.types import SOL_MINT
from forgex_sdk.types.market import PriceData

USDC = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
SOL_FEED = PYTH_FEEDS["SOL"][2:]


class TestPyth:
    def test_normalize_price(self):
        assert normalize_price("14825000000", -8) == 148.25
        assert normalize_price(5, 2) == 500.0

    def test_get_price_by_symbol(self, router):
        router.add("/updates/price/latest", {"parsed": [{
            "id": SOL_FEED,
            "price": {"price": "14825000000", "conf": "7500000", "expo": -8, "publish_time": 1_700_000_000},
            "ema_price": {"price": "14800000000", "conf": "7000000", "expo": -8, "publish_time": 1_700_000_000},
        }]})
        pyth = PythAdapter(router.transport())

        price = run(pyth.get_price("sol"))

        assert price.symbol == "SOL"
        assert price.price == 148.25
        assert price.confidence == 0.075
        assert price.ema_price == 148.0
        assert price.publish_time == 1_700_000_000
        request = router.requests[0]
        assert request.url.params.get_list("ids[]") == [PYTH_FEEDS["SOL"]]
        assert request.url.params["parsed"] == "true"

    def test_unknown_feed_raises(self, router):
        router.add("/updates/price/latest", {"parsed": []})
        with pytest.raises(UpstreamError) as exc_info:
            run(PythAdapter(router.transport()).get_price("0xdeadbeef"))
        assert exc_info.value.message.startswith("pyth.get_price")

    def test_get_price_errors_name_the_operation(self, router):
        router.fail_all(status=400)
        with pytest.raises(UpstreamError) as exc_info:
            run(PythAdapter(router.transport()).get_price("SOL"))
        error = exc_info.value
        assert error.operation == "get_price"
        assert error.message.startswith("pyth.get_price: ")
        assert error.details["cause"] == "pyth.get_latest_prices"

    def test_empty_feed_list_rejected(self, http):
        with pytest.raises(ConfigurationError):
            run(PythAdapter(http).get_latest_prices([]))

    def test_search_price_feeds(self, router):
        router.add("/price_feeds", [
            {"id": "a", "attributes": {"symbol": "Crypto.SOL/USD", "base": "SOL", "asset_type": "Crypto"}},
            {"id": "b", "attributes": {"symbol": "Crypto.BTC/USD", "base": "BTC", "asset_type": "Crypto"}},
        ])
        feeds = run(PythAdapter(router.transport()).search_price_feeds("sol"))
        assert [f["id"] for f in feeds] == ["a"]

    def test_price_update_data(self, router):
        router.add("/updates/price/latest", {
            "binary": {"encoding": "base64", "data": ["VAA1"]},
            "parsed": [{"id": SOL_FEED, "price": {"price": "1", "conf": "1", "expo": 0, "publish_time": 123}}],
        })
        updates = run(PythAdapter(router.transport()).get_price_update_data(["SOL"]))
        assert updates == [{"vaa": "VAA1", "publish_time": 123}]

    def test_helpers(self):
        price = PriceData(feed_id="x", price=100.0, confidence=0.5, expo=-8, publish_time=0)
        assert PythAdapter.confidence_ratio(price) == 0.5
        assert PythAdapter.is_price_stale(int(time.time()) - 120)
        assert not PythAdapter.is_price_stale(int(time.time()))
        assert PythAdapter.price_change(100.0, 110.0) == {"absolute": 10.0, "percentage": 10.0}

    def test_malformed_payload_normalized(self, router):
        router.add("/updates/price/latest", {"parsed": [{"id": SOL_FEED}]})
        with pytest.raises(UpstreamError) as exc_info:
            run(PythAdapter(router.transport()).get_latest_prices(["SOL"]))
        assert exc_info.value.code == ErrorCode.UPSTREAM_MALFORMED_RESPONSE
        assert exc_info.value.message.startswith("pyth.get_latest_prices: malformed response")


class TestBirdeye:
    def test_requires_key(self, http):
        with pytest.raises(ConfigurationError):
            BirdeyeAdapter(http)

    def test_multi_price(self, router):
        router.add("/defi/multi_price", {"success": True, "data": {
            SOL_MINT: {"value": 150.0, "priceChange24h": 2.0},
            USDC: None,
        }})
        prices = run(BirdeyeAdapter(router.transport(), api_key="k").get_multi_price([SOL_MINT, USDC]))
        assert list(prices) == [SOL_MINT]
        assert prices[SOL_MINT].usd_price == 150.0
        assert router.requests[0].headers["x-chain"] == "solana"

    def test_unsuccessful_envelope(self, router):
        router.add("/defi/price", {"success": False, "message": "Unauthorized"})
        with pytest.raises(UpstreamError) as exc_info:
            run(BirdeyeAdapter(router.transport(), api_key="k").get_price(SOL_MINT))
        assert exc_info.value.message == "birdeye.get_price: Unauthorized"

    def test_limits(self, http):
        birdeye = BirdeyeAdapter(http, api_key="k")
        with pytest.raises(ConfigurationError):
            run(birdeye.get_multi_price(["m"] * 101))
        with pytest.raises(ConfigurationError):
            run(birdeye.get_trending_tokens(limit=50))
        with pytest.raises(ConfigurationError):
            run(birdeye.get_price_history(SOL_MINT, window="1Y"))

    def test_price_history(self, router):
        router.add("/defi/history_price", {"success": True, "data": {"items": [
            {"unixTime": 1, "value": 140.0}, {"unixTime": 2, "value": "141.5"},
        ]}})
        history = run(BirdeyeAdapter(router.transport(), api_key="k").get_price_history(SOL_MINT, "7D"))
        assert history == [{"timestamp": 1, "price": 140.0}, {"timestamp": 2, "price": 141.5}]


class TestDexScreener:
    PAIRS = {"pairs": [
        {"chainId": "solana", "dexId": "raydium", "pairAddress": "A", "baseToken": {"symbol": "SOL"},
         "quoteToken": {"symbol": "USDC"}, "priceUsd": "150", "liquidity": {"usd": 100.0}, "volume": {"h24": 900.0}},
        {"chainId": "solana", "dexId": "orca", "pairAddress": "B", "baseToken": {"symbol": "SOL"},
         "quoteToken": {"symbol": "USDT"}, "priceUsd": "150.1", "liquidity": {"usd": 5000.0}, "volume": {"h24": 50.0}},
    ]}

    def test_best_pair_by_liquidity(self, router):
        router.add("/latest/dex/tokens/solana/", self.PAIRS)
        best = run(DexScreenerAdapter(router.transport()).get_best_pair("solana", SOL_MINT))
        assert best.pair_address == "B"
        assert best.price_usd == 150.1

    def test_pairs_by_volume_with_liquidity_floor(self, router):
        router.add("/latest/dex/tokens/solana/", self.PAIRS)
        pairs = run(DexScreenerAdapter(router.transport()).get_pairs_by_volume("solana", SOL_MINT, 1000.0))
        assert [p.pair_address for p in pairs] == ["B"]

    def test_token_batch_limit(self, http):
        with pytest.raises(ConfigurationError):
            run(DexScreenerAdapter(http).get_tokens("solana", ["t"] * 31))

    def test_missing_pair(self, router):
        router.add("/latest/dex/pairs/solana/X", {"pairs": None})
        assert run(DexScreenerAdapter(router.transport()).get_pair("solana", "X")) is None


class TestRaydium:
    def test_priority_fee(self, router):
        router.add("/main/auto-fee", {"id": "1", "success": True, "data": {"default": {"vh": 50000, "h": 20000, "m": 10000}}})
        fee = run(RaydiumAdapter(router.transport()).get_priority_fee())
        assert fee == {"very_high": 50000, "high": 20000, "medium": 10000}

    def test_pool_list(self, router):
        router.add("/pools/info/list", {"success": True, "data": {"count": 1, "hasNextPage": True, "data": [{
            "id": "pool1", "type": "Concentrated",
            "mintA": {"address": SOL_MINT, "symbol": "WSOL"}, "mintB": {"address": USDC, "symbol": "USDC"},
            "price": 150.2, "tvl": 1_000_000, "feeRate": 0.0004, "day": {"volume": 5e6, "apr": 12.5},
        }]}})
        page = run(RaydiumAdapter(router.transport()).get_pool_list(sort_field="volume24h", page_size=10))
        assert page["count"] == 1
        assert page["has_next_page"] is True
        assert page["pools"][0]["symbol_a"] == "WSOL"
        assert page["pools"][0]["volume_24h"] == 5e6
        assert router.requests[0].url.params["poolSortField"] == "volume24h"

    def test_pool_list_validation(self, http):
        with pytest.raises(ConfigurationError):
            run(RaydiumAdapter(http).get_pool_list(pool_type="weird"))

    def test_compute_swap(self, router):
        router.add("/compute/swap-base-in", {"success": True, "data": {
            "inputMint": SOL_MINT, "outputMint": USDC, "inputAmount": "1000000000",
            "outputAmount": "150000000", "otherAmountThreshold": "149250000",
            "priceImpactPct": 0.01, "slippageBps": 50, "routePlan": [{"poolId": "pool1"}],
        }})
        quote = run(RaydiumAdapter(router.transport()).compute_swap(SOL_MINT, USDC, 1_000_000_000))
        assert quote.out_amount == 150_000_000
        assert quote.hops == 1
        assert quote.raw_response["success"] is True
        assert router.requests[0].url.host == "transaction-v1.raydium.io"

    def test_rejected_envelope(self, router):
        router.add("/mint/list", {"success": False, "msg": "maintenance"})
        with pytest.raises(UpstreamError) as exc_info:
            run(RaydiumAdapter(router.transport()).get_token_list())
        assert exc_info.value.message == "raydium.get_token_list: maintenance"


class TestJupiter:
    def test_quote(self, router):
        router.add("/swap/v1/quote", {
            "inputMint": SOL_MINT, "outputMint": USDC, "inAmount": "1000000000", "outAmount": "150000000",
            "otherAmountThreshold": "149250000", "priceImpactPct": "0.12", "slippageBps": 50,
            "routePlan": [{"swapInfo": {"label": "Raydium"}}],
        })
        quote = run(JupiterAdapter(router.transport()).get_quote(QuoteParams(SOL_MINT, USDC, 1_000_000_000)))
        assert quote.in_amount == 1_000_000_000
        assert quote.price_impact_pct == 0.12
        assert quote.raw_response["outAmount"] == "150000000"
        params = router.requests[0].url.params
        assert params["amount"] == "1000000000"
        assert params["onlyDirectRoutes"] == "false"

    def test_quote_validation(self, http):
        jupiter = JupiterAdapter(http)
        with pytest.raises(ConfigurationError):
            run(jupiter.get_quote(QuoteParams(SOL_MINT, USDC, 0)))
        with pytest.raises(ConfigurationError):
            run(jupiter.get_quote(QuoteParams(SOL_MINT, USDC, 1, slippage_bps=20_000)))
        with pytest.raises(ConfigurationError):
            run(jupiter.get_quote(QuoteParams(SOL_MINT, SOL_MINT, 1)))

    def test_prices_skip_missing(self, router):
        router.add("/price/v3", {SOL_MINT: {"usdPrice": 150.5, "decimals": 9, "priceChange24h": 1.2}, USDC: None})
        prices = run(JupiterAdapter(router.transport()).get_prices([SOL_MINT, USDC]))
        assert set(prices) == {SOL_MINT}
        assert prices[SOL_MINT].decimals == 9

    def test_api_key_header(self, router):
        router.add("/tokens/v2/recent", [])
        jupiter = JupiterAdapter(router.transport(), api_key="secret")
        run(jupiter.get_recent_tokens())
        assert router.requests[0].headers["x-api-key"] == "secret"
        assert router.requests[0].url.host == "api.jup.ag"

    def test_http_error_prefixed(self, router):
        router.add("/ultra/v1/holdings/", {"error": "Invalid address"}, status=400)
        with pytest.raises(UpstreamError) as exc_info:
            run(JupiterAdapter(router.transport()).get_holdings("bad"))
        assert exc_info.value.message == "jupiter.get_holdings: HTTP 400: Invalid address"


class TestTensor:
    def test_collections_scaled_to_sol(self, router):
        router.add("api.tensor.so", {"data": {"instrumentTV2": [{
            "id": "c1", "slug": "madlads", "name": "Mad Lads", "imageUri": "https://img",
            "statsV2": {"floorPrice": "95000000000", "numListed": 420, "numMints": 10000, "volume24h": "1200000000000"},
        }]}}, method="POST")
        tensor = TensorAdapter(router.transport(), api_key="t")

        collections = run(tensor.get_collections("24h", 5))

        assert collections[0].floor_price == 95.0
        assert collections[0].volume_24h == 1200.0
        body = json.loads(router.requests[0].content)
        assert body["variables"] == {"limit": 5, "sortBy": "statsV2.volume24h:desc"}
        assert router.requests[0].headers["X-TENSOR-API-KEY"] == "t"

    def test_graphql_errors_raised(self, router):
        router.add("api.tensor.so", {"errors": [{"message": "rate limited"}]}, method="POST")
        with pytest.raises(UpstreamError) as exc_info:
            run(TensorAdapter(router.transport(), api_key="t").get_collection("x"))
        assert exc_info.value.code == ErrorCode.UPSTREAM_GRAPHQL_ERROR
        assert exc_info.value.message == "tensor.get_collection: rate limited"

    def test_floor_price_unknown_collection(self, router):
        router.add("api.tensor.so", {"data": {"instrumentTV2": []}}, method="POST")
        assert run(TensorAdapter(router.transport(), api_key="t").get_floor_price("nope")) is None

    def test_invalid_period(self, http):
        with pytest.raises(ConfigurationError):
            run(TensorAdapter(http, api_key="t").get_collections("1y"))
