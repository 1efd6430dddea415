"""Shared fixtures: a fake JSON-RPC node served through httpx.MockTransport."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest
from eth_abi import decode, encode

from chaingate.pneuma import rpc
from chaingate.pneuma.abi import ContractInterface

RPC_URL = "https://node.test/rpc"

# Hardhat / Anvil default account #0
PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
OTHER = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
TOKEN = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
TX_HASH = "0x" + "ab" * 32


class RpcFailure:
    def __init__(self, code: int, message: str) -> None:
        self.code = code
        self.message = message


class FakeNode:
    """
    Minimal JSON-RPC node.

    Handlers are registered per method, either as a fixed result or as a
    callable receiving the request params positionally. Plain HTTP GETs are
    served from ``documents`` (used for NFT metadata).
    """

    def __init__(self) -> None:
        self.handlers: dict[str, Any] = {}
        self.calls: list[tuple[str, list]] = []
        self.documents: dict[str, Any] = {}
        self.contracts: dict[str, dict[str, Callable[..., Any]]] = {}

    def on(self, method: str, result: Any) -> None:
        self.handlers[method] = result

    def methods(self) -> list[str]:
        return [method for method, _ in self.calls]

    def params_for(self, method: str) -> list[list]:
        return [params for m, params in self.calls if m == method]

    def contract(self, address: str, abi: list, **functions: Callable[..., Any]) -> None:
        """
        Serve eth_call for a contract: each keyword maps a function name to a
        callable taking the decoded arguments and returning the raw result.
        """
        iface = ContractInterface(abi)
        routes = {}
        for name, impl in functions.items():
            func = iface.get_function(name)
            routes["0x" + func.selector.hex()] = (func, impl)
        self.contracts[address.lower()] = routes
        self.handlers["eth_call"] = self._eth_call

    def _eth_call(self, call: dict, _block: str) -> Any:
        routes = self.contracts[call["to"].lower()]
        data = call["data"]
        func, impl = routes[data[:10]]
        args = decode(list(func.input_types), bytes.fromhex(data[10:]))
        result = impl(*args)
        if isinstance(result, RpcFailure):
            return result
        return "0x" + encode(list(func.output_types), [result]).hex()

    def handle(self, request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            url = str(request.url)
            if url not in self.documents:
                return httpx.Response(404, text="not found")
            return httpx.Response(200, json=self.documents[url])

        body = json.loads(request.content)
        method, params = body["method"], body.get("params", [])
        self.calls.append((method, params))

        if method not in self.handlers:
            return self._error(body, RpcFailure(-32601, f"method {method} not found"))
        handler = self.handlers[method]
        result = handler(*params) if callable(handler) else handler
        if isinstance(result, RpcFailure):
            return self._error(body, result)
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    @staticmethod
    def _error(body: dict, failure: RpcFailure) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "jsonrpc": "2.0",
                "id": body["id"],
                "error": {"code": failure.code, "message": failure.message},
            },
        )


@pytest.fixture()
def node(monkeypatch: pytest.MonkeyPatch) -> FakeNode:
    fake = FakeNode()

    def client_factory(timeout: float = rpc.DEFAULT_TIMEOUT) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(fake.handle), timeout=timeout)

    monkeypatch.setattr(rpc, "new_http_client", client_factory)
    return fake


def word(value: int) -> str:
    """A 32-byte topic / data word."""
    return "0x" + value.to_bytes(32, "big").hex()


def address_topic(address: str) -> str:
    return "0x" + "00" * 12 + address[2:].lower()
