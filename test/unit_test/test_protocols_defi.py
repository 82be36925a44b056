"""
DeFi adapters: Kamino, marginfi, Solend, Sanctum, Meteora, Marinade, Drift
"""

import json

import pytest

from conftest import run
from forgex_sdk.errors import ConfigurationError, ErrorCode, UpstreamError
from forgex_sdk.infra.rpc import RpcClient
from forgex_sdk.protocols.drift import DriftAdapter
from forgex_sdk.protocols.kamino import KaminoAdapter
from forgex_sdk.protocols.kamino.adapter import LendingParams
from forgex_sdk.protocols.marginfi import MarginfiAdapter
from forgex_sdk.protocols.marinade import MarinadeAdapter
from forgex_sdk.protocols.meteora import MeteoraAdapter
from forgex_sdk.protocols.sanctum import SanctumAdapter
from forgex_sdk.protocols.solend import SolendAdapter

WALLET = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"
USDC = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
SOL = "So11111111111111111111111111111111111111112"


class TestKamino:
    MARKET = {"address": "M1", "name": "Main", "reserves": [
        {"mintAddress": SOL, "symbol": "SOL", "decimals": 9, "supplyApy": 5.1, "borrowApy": 7.3,
         "ltv": 0.75, "liquidationThreshold": 0.85},
        {"mintAddress": USDC, "symbol": "USDC", "decimals": 6, "supplyApy": 8.0, "borrowApy": 10.0,
         "ltv": 0.8, "liquidationThreshold": 0.9},
    ]}

    def test_no_obligations_reports_no_debt(self, router):
        router.add(f"/users/{WALLET}/obligations", [])
        health = run(KaminoAdapter(router.transport()).get_loan_health(WALLET))
        assert health.health_factor == 999.0
        assert health.deposits == []
        assert health.borrow_utilization == 0.0

    def test_loan_health_enriched_from_market(self, router):
        router.add(f"/users/{WALLET}/obligations", [{
            "market": "M1", "healthFactor": 1.8,
            "depositedValueUsd": 1500.0, "borrowedValueUsd": 300.0, "allowedBorrowValueUsd": 1200.0,
            "deposits": [{"mintAddress": SOL, "amount": "10", "marketValue": "1500"}],
            "borrows": [{"mintAddress": USDC, "amount": "300", "marketValue": "300"}],
        }])
        router.add("/markets/M1", self.MARKET)

        health = run(KaminoAdapter(router.transport()).get_loan_health(WALLET))

        assert health.health_factor == 1.8
        assert health.borrow_utilization == 25.0
        assert health.deposits[0]["symbol"] == "SOL"
        assert health.deposits[0]["apy"] == 5.1
        assert health.borrows[0]["liquidation_threshold"] == 0.9
        assert health.borrows[0]["value"] == 300.0

    def test_market_filter(self, router):
        router.add(f"/users/{WALLET}/obligations", [{"market": "OTHER", "healthFactor": 1.1}])
        health = run(KaminoAdapter(router.transport()).get_loan_health(WALLET, market_address="M1"))
        assert health.health_factor == 999.0

    def test_supply_transaction(self, router):
        router.add("/transactions/supply", {"transaction": "AQID"}, method="POST")
        params = LendingParams(market="M1", reserve="R1", amount=1_000_000, user_public_key=WALLET)

        tx = run(KaminoAdapter(router.transport()).build_supply_transaction(params))

        assert tx == {"transaction": "AQID", "action": "supply"}
        body = json.loads(router.requests[0].content)
        assert body["amount"] == "1000000"
        assert body["userPublicKey"] == WALLET

    def test_invalid_amount(self, http):
        params = LendingParams(market="M1", reserve="R1", amount=0, user_public_key=WALLET)
        with pytest.raises(ConfigurationError):
            run(KaminoAdapter(http).build_borrow_transaction(params))

    def test_helpers(self):
        assert KaminoAdapter.to_raw_amount("1.5", 6) == 1_500_000
        assert KaminoAdapter.from_raw_amount(2_500_000, 6) == 2.5
        assert KaminoAdapter.calculate_liquidation_price(100.0, 0.0, 0.8) == 0.0
        assert KaminoAdapter.is_at_risk_of_liquidation(1.2)
        assert not KaminoAdapter.is_at_risk_of_liquidation(2.0)


class TestMarginfi:
    def test_markets_with_utilization(self, router):
        router.add("/markets", {"markets": [
            {"tokenMint": USDC, "tokenSymbol": "USDC", "supplyApy": 6.0, "borrowApy": 9.0,
             "totalSupply": 1000.0, "totalBorrow": 250.0},
            {"tokenMint": SOL, "tokenSymbol": "SOL", "supplyApy": 3.0, "borrowApy": 5.0},
        ]})
        markets = run(MarginfiAdapter(router.transport()).get_markets())
        assert markets[0].utilization == 25.0
        assert markets[1].utilization is None

    def test_bearer_header_only_with_key(self, router):
        router.add("/markets", {"markets": []})
        run(MarginfiAdapter(router.transport(), api_key="mk").get_markets())
        run(MarginfiAdapter(router.transport()).get_markets())
        assert router.requests[0].headers["Authorization"] == "Bearer mk"
        assert "Authorization" not in router.requests[1].headers

    def test_account(self, router):
        router.add(f"/accounts/{WALLET}", {
            "account": "A1", "owner": WALLET, "healthFactor": 2.5, "netValue": 900,
            "assets": [{"tokenSymbol": "SOL", "tokenMint": SOL, "depositBalance": 5, "depositValue": 750}],
        })
        account = run(MarginfiAdapter(router.transport()).get_account(WALLET))
        assert account["health_factor"] == 2.5
        assert account["total_borrowed_value"] == 0.0
        assert account["assets"][0]["deposit_value"] == 750.0

    def test_deposit_uses_deposit_path(self, router):
        router.add("/transactions/deposit", {"transaction": "tx", "blockhash": "bh"}, method="POST")
        tx = run(MarginfiAdapter(router.transport()).build_deposit_transaction(WALLET, USDC, 5))
        assert tx["action"] == "supply"
        assert tx["blockhash"] == "bh"

    def test_malformed_markets(self, router):
        router.add("/markets", {"items": []})
        with pytest.raises(UpstreamError) as exc_info:
            run(MarginfiAdapter(router.transport()).get_markets())
        assert exc_info.value.code == ErrorCode.UPSTREAM_MALFORMED_RESPONSE


class TestSolend:
    CONFIGS = [{
        "address": "P1", "name": "Main Pool", "isPrimary": True, "authorityAddress": "AUTH",
        "reserves": [
            {"address": "R_USDC", "liquidityToken": {"symbol": "USDC", "mint": USDC, "decimals": 6}},
            {"address": "R_SOL", "liquidityToken": {"symbol": "SOL", "mint": SOL, "decimals": 9}},
        ],
    }, {
        "address": "P2", "name": "Turbo", "isPrimary": False, "reserves": [],
    }]

    def test_construction_is_lazy(self, router):
        solend = SolendAdapter(router.transport())
        assert not solend.is_initialized
        assert router.requests == []

    def test_get_reserves_initializes(self, router):
        router.add("/v1/markets/configs", self.CONFIGS)
        router.add("/v1/reserves", {"results": [{
            "reserve": {"address": "R_USDC", "liquidity": {"totalSupply": 1000.0, "borrowedAmount": 400.0}},
            "rates": {"supplyInterest": "0.25", "borrowInterest": "0.5"},
            "utilization": 0.5,
        }]})
        solend = SolendAdapter(router.transport())

        reserves = run(solend.get_reserves())

        assert solend.is_initialized
        assert len(reserves) == 1
        assert reserves[0].token_symbol == "USDC"
        assert reserves[0].supply_apy == 25.0
        assert reserves[0].borrow_apy == 50.0
        assert reserves[0].utilization == 50.0
        assert router.calls_to("/v1/reserves")[0].url.params["ids"] == "R_USDC,R_SOL"

    def test_markets_summary(self, router):
        router.add("/v1/markets/configs", self.CONFIGS)
        markets = run(SolendAdapter(router.transport()).get_markets())
        assert {m["reserve_count"] for m in markets} == {2, 0}
        assert all("reserves" not in m for m in markets)

    def test_unknown_pool(self, router):
        router.add("/v1/markets/configs", self.CONFIGS)
        with pytest.raises(ConfigurationError):
            run(SolendAdapter(router.transport()).get_reserves("nope"))

    def test_empty_configuration_fails_initialize(self, router):
        router.add("/v1/markets/configs", [])
        with pytest.raises(UpstreamError) as exc_info:
            run(SolendAdapter(router.transport()).initialize())
        assert "no lending pools" in exc_info.value.message

    def test_wallet_assets_need_rpc(self, router):
        router.add("/v1/markets/configs", self.CONFIGS)
        with pytest.raises(ConfigurationError):
            run(SolendAdapter(router.transport()).get_wallet_assets(WALLET))

    def test_wallet_assets_filtered_to_reserves(self, router):
        router.add("/v1/markets/configs", self.CONFIGS)

        def account(mint, amount):
            return {"pubkey": f"ata-{mint[:4]}", "account": {"data": {"parsed": {"info": {
                "mint": mint, "tokenAmount": {"uiAmount": amount, "decimals": 6},
            }}}}}

        router.rpc("getTokenAccountsByOwner", {"context": {"slot": 1}, "value": [
            account(USDC, 12.5), account("OtherMint1111111111111111111111111111111111", 3.0),
        ]})
        http = router.transport()
        solend = SolendAdapter(http, rpc=RpcClient("https://rpc.example.com", http))

        assets = run(solend.get_wallet_assets(WALLET))

        assert assets == [{"pubkey": "ata-EPjF", "mint": USDC, "amount": 12.5, "decimals": 6, "symbol": "USDC"}]


class TestSanctum:
    LSDS = {"lsds": [
        {"symbol": "jitoSOL", "mint": "J1", "apy": 0.075, "tvl": 1e6, "protocol": "Jito"},
        {"symbol": "bSOL", "mint": "B1", "apy": 0.068},
    ]}

    def test_yields_in_percent(self, router):
        router.add("/lsds", self.LSDS)
        yields = run(SanctumAdapter(router.transport()).get_all_lsd_yields())
        assert yields[0].apy == pytest.approx(7.5)
        assert yields[1].tvl is None

    def test_lookup_is_case_insensitive(self, router):
        router.add("/lsds", self.LSDS)
        jito = run(SanctumAdapter(router.transport()).get_lsd_yield("JITOSOL"))
        assert jito.mint == "J1"

    def test_unknown_lsd(self, router):
        router.add("/lsds", self.LSDS)
        with pytest.raises(UpstreamError) as exc_info:
            run(SanctumAdapter(router.transport()).get_lsd_yield("xSOL"))
        assert exc_info.value.message == "sanctum.get_lsd_yield: LSD token xSOL not found"

    def test_quote_then_prepare(self, router):
        router.add("/swap/quote", {"outAmount": 990, "price": 0.99, "priceImpact": 0.001, "fee": 1}, method="POST")
        router.add("/swap/prepare", {"transaction": "TX", "blockhash": "BH"}, method="POST")
        sanctum = SanctumAdapter(router.transport())

        quote = run(sanctum.get_swap_quote("J1", "B1", 1000))
        prepared = run(sanctum.prepare_swap(quote, WALLET))

        assert quote["out_amount"] == "990"
        assert prepared == {"transaction": "TX", "blockhash": "BH", "expected_out_amount": "990"}
        body = json.loads(router.calls_to("/swap/prepare")[0].content)
        assert body["amount"] == "1000"
        assert body["userPublicKey"] == WALLET


class TestMeteora:
    def test_vaults(self, router):
        router.add("/vaults", {"vaults": [{
            "address": "V1", "name": "SOL-USDC", "tokenA": {"mint": SOL, "symbol": "SOL", "decimals": 9},
            "tokenB": {"mint": USDC, "symbol": "USDC", "decimals": 6}, "tvl": 5e6, "apr": 12.0,
        }]})
        vaults = run(MeteoraAdapter(router.transport()).get_all_vaults())
        assert vaults[0]["token_a_decimals"] == 9
        assert vaults[0]["strategy_type"] is None

    def test_deposit_validation(self, http):
        meteora = MeteoraAdapter(http)
        with pytest.raises(ConfigurationError):
            run(meteora.build_deposit_transaction("V1", WALLET, 0, 0))
        with pytest.raises(ConfigurationError):
            run(meteora.build_deposit_transaction("V1", WALLET, -1, 5))
        with pytest.raises(ConfigurationError):
            run(meteora.build_withdraw_transaction("V1", WALLET, 0))

    def test_one_sided_deposit(self, router):
        router.add("/vaults/V1/deposit", {"transaction": "TX", "expectedLpAmount": "42"}, method="POST")
        tx = run(MeteoraAdapter(router.transport()).build_deposit_transaction("V1", WALLET, 1000, 0))
        assert tx["expected_lp_amount"] == "42"
        assert json.loads(router.requests[0].content)["amountB"] == "0"


class TestMarinade:
    def test_staking_info(self, router):
        router.add("/msol/apy/7d", {"value": 0.072})
        router.add("/msol/price_sol", 1.27)
        router.add("/tlv", {"staked_sol": 7_000_000, "staked_usd": 1_050_000_000})

        info = run(MarinadeAdapter(router.transport()).get_staking_info())

        assert info.token == "mSOL"
        assert info.apy == pytest.approx(7.2)
        assert info.exchange_rate == 1.27
        assert info.total_staked == 7_000_000.0
        assert info.tvl == 1_050_000_000.0

    def test_unsupported_token(self, http):
        with pytest.raises(ConfigurationError):
            run(MarinadeAdapter(http).get_staking_info("jitoSOL"))

    def test_invalid_window(self, http):
        with pytest.raises(ConfigurationError):
            run(MarinadeAdapter(http).get_staking_apy("2d"))


class TestDrift:
    def test_positions_scaled_and_closed_dropped(self, router):
        router.add(f"/authority/{WALLET}/perpPositions", {"positions": [
            {"marketIndex": 0, "marketName": "SOL-PERP", "baseAssetAmount": -2_000_000_000,
             "quoteEntryAmount": 300_000_000, "unrealizedPnl": -5_000_000},
            {"marketIndex": 1, "marketName": "BTC-PERP", "baseAssetAmount": 0, "quoteEntryAmount": 0},
        ]})

        positions = run(DriftAdapter(router.transport()).get_position_details(WALLET))

        assert len(positions) == 1
        position = positions[0]
        assert position.market == "SOL-PERP"
        assert position.base_asset_amount == -2.0
        assert position.entry_price == 150.0
        assert position.unrealized_pnl == -5.0
        assert position.side == "short"

    def test_funding_rates(self, router):
        router.add("/fundingRates", {"fundingRates": [
            {"ts": "1700000000", "fundingRate": 1_000_000, "oraclePriceTwap": 150_000_000},
        ]})
        rates = run(DriftAdapter(router.transport()).get_funding_rates())
        assert rates == [{"ts": 1_700_000_000, "funding_rate": 0.001, "oracle_price": 150.0}]
        assert router.requests[0].url.params["marketName"] == "SOL-PERP"

    def test_markets(self, router):
        router.add("/contracts", {"contracts": [
            {"contract_index": "0", "ticker_id": "SOL-PERP", "base_currency": "SOL", "last_price": "150.2"},
        ]})
        markets = run(DriftAdapter(router.transport()).get_markets())
        assert markets[0]["market_index"] == 0
        assert markets[0]["last_price"] == 150.2
        assert markets[0]["funding_rate"] is None
