"""
JSON-RPC Client for EVM chains.

Lightweight alternative to web3.py: uses httpx for HTTP + eth-abi for encoding.
Each public function opens its own connection, issues its call(s), and closes
the connection before returning; nothing is pooled or cached.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Union

import httpx

from ..errors import RpcError
from ..units import format_ether, parse_ether

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
DEFAULT_POLL_INTERVAL = 2.0

BLOCK_TAGS = ("latest", "earliest", "pending", "safe", "finalized")

BlockId = Union[int, str]


def new_http_client(timeout: float = DEFAULT_TIMEOUT) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=timeout)


def to_quantity(value: int) -> str:
    """Encode an int as a JSON-RPC hex quantity."""
    return hex(int(value))


def from_quantity(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    return int(value, 16)


def block_id(block: BlockId) -> str:
    if isinstance(block, int):
        return to_quantity(block)
    if block in BLOCK_TAGS or block.startswith("0x"):
        return block
    raise ValueError(f"Invalid block identifier: {block!r}")


class RpcConnection:
    """
    A single JSON-RPC connection to one endpoint.

    Use as an async context manager; the underlying httpx client is created on
    entry and closed on exit.
    """

    def __init__(self, url: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.url = url
        self.timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None
        self._request_id = 0

    async def open(self) -> "RpcConnection":
        if self._client is None:
            self._client = new_http_client(self.timeout)
        return self

    async def __aenter__(self) -> "RpcConnection":
        return await self.open()

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def request(self, method: str, params: Optional[list] = None) -> Any:
        """
        Make a JSON-RPC call.

        Args:
            method: RPC method name (e.g., "eth_call")
            params: RPC parameters

        Returns:
            Result field from the RPC response

        Raises:
            RpcError: If the node returns an error object
            httpx.HTTPStatusError: If the endpoint answers with a non-2xx status
        """
        if self._client is None:
            raise RuntimeError("RpcConnection is not open")

        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params or [],
            "id": self._request_id,
        }
        logger.debug("rpc %s #%d", method, self._request_id)

        response = await self._client.post(self.url, json=payload)
        response.raise_for_status()
        data = response.json()

        if "error" in data:
            error = data["error"] or {}
            raise RpcError(
                method,
                error.get("code"),
                error.get("message", "unknown error"),
                error.get("data"),
            )

        return data.get("result")


# ============ Read Operations ============


async def get_balance(address: str, provider_url: str) -> str:
    """
    Get native-currency balance for an address.

    Returns:
        Balance in ether as a decimal string (e.g. "1.5")
    """
    async with RpcConnection(provider_url) as conn:
        result = await conn.request("eth_getBalance", [address, "latest"])
    return format_ether(int(result, 16))


async def get_transaction_count(
    address: str, provider_url: str, block: BlockId = "latest"
) -> int:
    async with RpcConnection(provider_url) as conn:
        result = await conn.request("eth_getTransactionCount", [address, block_id(block)])
    return int(result, 16)


async def get_network_id(provider_url: str) -> int:
    async with RpcConnection(provider_url) as conn:
        result = await conn.request("eth_chainId")
    return int(result, 16)


async def get_block_number(provider_url: str) -> int:
    async with RpcConnection(provider_url) as conn:
        result = await conn.request("eth_blockNumber")
    return int(result, 16)


async def get_block_details(
    block_number: BlockId, provider_url: str, full_transactions: bool = True
) -> Optional[dict]:
    """
    Get a block by number.

    Args:
        block_number: Block number or tag ("latest", ...)
        provider_url: RPC endpoint URL
        full_transactions: Include full transaction objects instead of hashes

    Returns:
        Block dict as returned by the node, or None if unknown
    """
    async with RpcConnection(provider_url) as conn:
        return await conn.request(
            "eth_getBlockByNumber", [block_id(block_number), full_transactions]
        )


async def get_transactions_in_block(block_number: BlockId, provider_url: str) -> list:
    block = await get_block_details(block_number, provider_url, full_transactions=True)
    if block is None:
        return []
    return block.get("transactions", [])


async def get_transaction(transaction_hash: str, provider_url: str) -> Optional[dict]:
    async with RpcConnection(provider_url) as conn:
        return await conn.request("eth_getTransactionByHash", [transaction_hash])


async def estimate_gas(
    from_address: str,
    to_address: str,
    value: str,
    data: Optional[str],
    provider_url: str,
) -> int:
    """
    Estimate gas for a hypothetical call.

    Args:
        from_address: Sender address
        to_address: Recipient / contract address
        value: Amount in ether as a decimal string
        data: 0x-prefixed calldata, or None
        provider_url: RPC endpoint URL

    Returns:
        Gas units
    """
    call: dict[str, Any] = {
        "from": from_address,
        "to": to_address,
        "value": to_quantity(parse_ether(value)),
    }
    if data:
        call["data"] = data

    async with RpcConnection(provider_url) as conn:
        result = await conn.request("eth_estimateGas", [call])
    return int(result, 16)


# ============ Confirmation Wait ============


async def wait_for_confirmations(
    conn: RpcConnection,
    tx_hash: str,
    confirmations: int = 1,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> Optional[dict]:
    """
    Poll an open connection until a transaction has enough confirmations.

    There is no timeout: if the transaction is never mined this never returns.
    With confirmations=0 the current receipt (possibly None) is returned at once.
    """
    while True:
        receipt = await conn.request("eth_getTransactionReceipt", [tx_hash])
        if confirmations <= 0:
            return receipt
        if receipt is not None and receipt.get("blockNumber") is not None:
            head = int(await conn.request("eth_blockNumber"), 16)
            mined_at = int(receipt["blockNumber"], 16)
            if head - mined_at + 1 >= confirmations:
                return receipt
        await asyncio.sleep(poll_interval)


async def wait_for_transaction(
    transaction_hash: str,
    provider_url: str,
    confirmations: int = 1,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> Optional[dict]:
    """
    Wait for a transaction to reach a confirmation count and return its receipt.

    Args:
        transaction_hash: Transaction hash
        provider_url: RPC endpoint URL
        confirmations: Blocks required, counting the block holding the transaction
        poll_interval: Seconds between polls

    Returns:
        Transaction receipt dict
    """
    async with RpcConnection(provider_url) as conn:
        return await wait_for_confirmations(
            conn, transaction_hash, confirmations, poll_interval
        )
