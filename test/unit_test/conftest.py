"""
Shared helpers for unit tests

HTTP is mocked by routing every request through httpx.MockTransport, so no
test touches the network. Solana JSON-RPC calls are routed by method name.
"""

import asyncio
import json
import sys
from pathlib import Path

import httpx
import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from forgex_sdk.infra.http import HttpTransport


class Router:
    """
    Canned-response handler for httpx.MockTransport

    Usage:
        router = Router()
        router.add("/msol/price_sol", 1.27)
        router.rpc("getBalance", {"context": {"slot": 1}, "value": 2_500_000_000})
        http = router.transport()
    """

    def __init__(self):
        self.routes = []
        self.rpc_results = {}
        self.requests = []

    def add(self, fragment, body=None, status=200, method=None):
        """Respond to requests whose URL contains fragment; body may be a callable(request)"""
        self.routes.append((fragment, method, status, body))
        return self

    def rpc(self, method, result=None, error=None):
        self.rpc_results[method] = (result, error)
        return self

    def fail_all(self, status=500):
        """Answer every request with status"""
        self.routes.append(("", None, status, {"error": "upstream down"}))
        return self

    def calls_to(self, fragment):
        return [r for r in self.requests if fragment in str(r.url)]

    def rpc_calls(self, method):
        return [
            r for r in self.requests
            if r.method == "POST" and r.content and json.loads(r.content).get("method") == method
        ]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.method == "POST" and request.content:
            payload = json.loads(request.content)
            if isinstance(payload, dict) and payload.get("jsonrpc") == "2.0":
                method = payload["method"]
                if method in self.rpc_results:
                    result, error = self.rpc_results[method]
                    reply = {"jsonrpc": "2.0", "id": payload["id"]}
                    if error is not None:
                        reply["error"] = error
                    else:
                        reply["result"] = result
                    return httpx.Response(200, json=reply)

        for fragment, method, status, body in self.routes:
            if fragment not in str(request.url):
                continue
            if method is not None and method != request.method:
                continue
            if callable(body):
                body = body(request)
            if isinstance(body, httpx.Response):
                return body
            if body is None:
                return httpx.Response(status)
            return httpx.Response(status, json=body)

        return httpx.Response(404, json={"error": f"no route for {request.method} {request.url}"})

    def transport(self, **kwargs) -> HttpTransport:
        kwargs.setdefault("max_retries", 1)
        kwargs.setdefault("retry_delay_seconds", 0)
        return HttpTransport(transport=httpx.MockTransport(self), **kwargs)


def run(coro):
    """Run a coroutine to completion"""
    return asyncio.run(coro)


@pytest.fixture
def router():
    return Router()


@pytest.fixture
def http(router):
    return router.transport()
