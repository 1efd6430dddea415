"""
Sequential on-chain enumeration.

Lookups run strictly one at a time, in index order, each awaited before the
next is issued. By default the first failure aborts the whole enumeration
and no partial list is returned.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Iterable, Optional, TypeVar

from .rpc import RpcConnection, to_quantity

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Not part of the standard eth_ namespace; served by Erigon, Besu and
# Otterscan-enabled nodes.
TX_BY_NONCE_METHOD = "eth_getTransactionBySenderAndNonce"


async def enumerate_sequential(
    indices: Iterable[int],
    fetch: Callable[[int], Awaitable[T]],
    *,
    limit: Optional[int] = None,
    abort_on_error: bool = True,
) -> list[T]:
    """
    Await fetch(index) for each index in order.

    Args:
        indices: Indices to visit, in the order to visit them
        fetch: Coroutine function producing one item per index
        limit: Stop after this many lookups (None = all)
        abort_on_error: Propagate the first failure (default). When False,
                        failed indices are logged and skipped.

    Returns:
        Items in visiting order
    """
    if limit is not None and limit < 0:
        raise ValueError("limit must be non-negative")

    results: list[T] = []
    for count, index in enumerate(indices):
        if limit is not None and count >= limit:
            break
        try:
            results.append(await fetch(index))
        except Exception as exc:
            if abort_on_error:
                raise
            logger.warning("Skipping index %d after failed lookup: %s", index, exc)
    return results


async def get_transaction_history(
    address: str,
    provider_url: str,
    *,
    limit: Optional[int] = None,
    abort_on_error: bool = True,
) -> list[Optional[dict]]:
    """
    Fetch an account's sent transactions, newest nonce first.

    Reads the current nonce N and looks up nonces N-1 down to 0, one call
    per nonce. Cost grows linearly with the account's activity.

    Args:
        address: Sender address
        provider_url: RPC endpoint URL
        limit: Maximum number of nonces to look up
        abort_on_error: See enumerate_sequential

    Returns:
        Transaction dicts ordered from nonce N-1 to 0
    """
    async with RpcConnection(provider_url) as conn:
        count = int(await conn.request("eth_getTransactionCount", [address, "latest"]), 16)

        async def lookup(nonce: int) -> Optional[dict]:
            return await conn.request(TX_BY_NONCE_METHOD, [address, to_quantity(nonce)])

        return await enumerate_sequential(
            range(count - 1, -1, -1),
            lookup,
            limit=limit,
            abort_on_error=abort_on_error,
        )
