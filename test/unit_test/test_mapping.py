"""
Tests for declarative field mapping
"""

from dataclasses import dataclass

from forgex_sdk.protocols.mapping import Field, lookup, remap, remap_many


@dataclass
class Position:
    market: str
    size: float


def test_dotted_path_and_list_index():
    raw = {"liquidity": {"usd": "1500.5"}, "tokens": [{"mint": "A"}, {"mint": "B"}]}
    assert lookup(raw, "liquidity.usd") == "1500.5"
    assert lookup(raw, "tokens.1.mint") == "B"
    assert lookup(raw, "tokens.5.mint", "missing") == "missing"
    assert lookup(raw, "liquidity.eur") is None


def test_read_path_stops_at_scalars():
    assert lookup({"a": 1}, "a.b", "x") == "x"
    assert lookup({"a": None}, "a.b", "x") == "x"


def test_scaling_and_cast():
    lamports = Field("sol", "lamports", divide=1_000_000_000)
    assert lamports.extract({"lamports": "2500000000"}) == 2.5

    percent = Field("apy", "apy", multiply=100)
    assert percent.extract({"apy": 0.072}) == 0.072 * 100

    count = Field("count", "n", cast=int)
    assert count.extract({"n": "7"}) == 7


def test_missing_null_and_empty_use_default():
    field = Field("price", "price", default=0.0)
    assert field.extract({}) == 0.0
    assert field.extract({"price": None}) == 0.0
    assert field.extract({"price": ""}) == 0.0


def test_mutable_default_is_copied():
    field = Field("route", "route", cast=list, default=[])
    first = field.extract({})
    first.append("leg")
    assert field.extract({}) == []


def test_alternative_sources_first_present_wins():
    field = Field("total", ("total_sol", "staked_sol"))
    assert field.extract({"staked_sol": 10}) == 10.0
    assert field.extract({"total_sol": 3, "staked_sol": 10}) == 3.0


def test_remap_into_dataclass():
    fields = (
        Field("market", "marketName", cast=str),
        Field("size", "baseAssetAmount", divide=1e9),
    )
    position = remap({"marketName": "SOL-PERP", "baseAssetAmount": -2_000_000_000}, fields, Position)
    assert position == Position(market="SOL-PERP", size=-2.0)


def test_remap_many_handles_none():
    fields = (Field("x", "x"),)
    assert remap_many(None, fields) == []
    assert remap_many([{"x": 1}, {"x": "2"}], fields) == [{"x": 1.0}, {"x": 2.0}]


def test_read_path_negative_index():
    assert lookup({"items": [1, 2, 3]}, "items.-1") == 3
