"""
Error types raised by chaingate itself.

Everything else (HTTP failures, signing errors, ABI encoding errors) is
raised by the underlying library and propagates unchanged.
"""

from __future__ import annotations

from typing import Any, Optional


class GatewayError(RuntimeError):
    exit_code: int = 1


class UnsupportedNetwork(GatewayError, ValueError):
    exit_code = 2

    def __init__(self, chain_id: Any) -> None:
        super().__init__(f"Network ID not supported: {chain_id}")
        self.chain_id = chain_id


class UnsupportedProvider(GatewayError, ValueError):
    exit_code = 2

    def __init__(self, provider: Any) -> None:
        super().__init__(f"Provider not supported: {provider}")
        self.provider = provider


class AbiError(GatewayError, ValueError):
    exit_code = 3


class RpcError(GatewayError):
    """The node answered with a JSON-RPC error object."""

    exit_code = 4

    def __init__(self, method: str, code: Optional[int], message: str, data: Any = None) -> None:
        super().__init__(f"RPC error in {method}: [{code}] {message}")
        self.method = method
        self.code = code
        self.message = message
        self.data = data
