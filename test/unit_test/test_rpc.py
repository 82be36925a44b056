"""
Test RPC connection handle with mocked responses
"""

import json

import httpx
import pytest

from conftest import run
from forgex_sdk.errors import ConfigurationError, RpcError, UpstreamError
from forgex_sdk.infra.http import HttpTransport
from forgex_sdk.infra.rpc import RpcClient
from forgex_sdk.types import Commitment

ENDPOINT = "https://rpc.example.com"
WALLET = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"


def test_empty_endpoints_rejected(http):
    with pytest.raises(ConfigurationError):
        RpcClient([], http)


def test_commitment_enum_accepted(http):
    rpc = RpcClient(ENDPOINT, http, commitment=Commitment.FINALIZED)
    assert rpc.commitment == "finalized"
    assert rpc.endpoint == ENDPOINT


def test_get_balance(router):
    router.rpc("getBalance", {"context": {"slot": 1}, "value": 2_500_000_000})
    rpc = RpcClient(ENDPOINT, router.transport())

    assert run(rpc.get_balance(WALLET)) == 2_500_000_000

    body = json.loads(router.requests[0].content)
    assert body["method"] == "getBalance"
    assert body["params"][0] == WALLET
    assert body["params"][1]["commitment"] == "confirmed"


def test_get_slot(router):
    router.rpc("getSlot", 312_000_000)
    rpc = RpcClient(ENDPOINT, router.transport())
    assert run(rpc.get_slot()) == 312_000_000


def test_rpc_error_object_raised(router):
    router.rpc("getBalance", error={"code": -32602, "message": "Invalid param: WrongSize"})
    rpc = RpcClient(ENDPOINT, router.transport())

    with pytest.raises(RpcError) as exc_info:
        run(rpc.get_balance("bad"))
    assert exc_info.value.rpc_code == -32602
    assert exc_info.value.message.startswith("rpc.getBalance")


def test_fallback_to_next_endpoint_on_transport_failure():
    seen = []

    def handler(request):
        seen.append(request.url.host)
        if request.url.host == "primary.example.com":
            return httpx.Response(503, text="unavailable")
        payload = json.loads(request.content)
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], "result": 42})

    http = HttpTransport(transport=httpx.MockTransport(handler), max_retries=1)
    rpc = RpcClient(["https://primary.example.com", "https://backup.example.com"], http)

    assert run(rpc.get_slot()) == 42
    assert seen == ["primary.example.com", "backup.example.com"]
    assert rpc.endpoint == "https://backup.example.com"


def test_non_recoverable_failure_not_rotated():
    def handler(request):
        return httpx.Response(403, json={"error": "forbidden"})

    http = HttpTransport(transport=httpx.MockTransport(handler), max_retries=1)
    rpc = RpcClient(["https://primary.example.com", "https://backup.example.com"], http)

    with pytest.raises(UpstreamError) as exc_info:
        run(rpc.get_slot())
    assert exc_info.value.status_code == 403
    assert rpc.endpoint == "https://primary.example.com"


def test_parsed_token_accounts(router):
    router.rpc("getTokenAccountsByOwner", {
        "context": {"slot": 1},
        "value": [{
            "pubkey": "TokenAccount1",
            "account": {"data": {"parsed": {"info": {
                "mint": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
                "tokenAmount": {"uiAmount": 12.5, "decimals": 6, "amount": "12500000"},
            }}}},
        }],
    })
    rpc = RpcClient(ENDPOINT, router.transport())

    accounts = run(rpc.get_parsed_token_accounts_by_owner(WALLET))
    assert accounts == [{
        "pubkey": "TokenAccount1",
        "mint": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
        "amount": 12.5,
        "decimals": 6,
    }]


def test_latest_blockhash(router):
    router.rpc("getLatestBlockhash", {
        "context": {"slot": 1},
        "value": {"blockhash": "EkSnNWid2cvwEVnVx9aBqawnmiCNiDgp3gUdkDPTKN1N", "lastValidBlockHeight": 10},
    })
    rpc = RpcClient(ENDPOINT, router.transport())
    assert run(rpc.get_latest_blockhash())["lastValidBlockHeight"] == 10
