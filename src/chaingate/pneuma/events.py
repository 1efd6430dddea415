"""
Contract event subscription by log polling.

A subscription remembers the last block it has scanned and, on every poll,
asks the node for matching logs in the blocks mined since. Delivery order is
whatever order the node returns logs in; nothing is persisted, so events
emitted while no subscription is running are not replayed.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable, Optional

import httpx

from ..errors import RpcError
from ..sigil.wallet import to_checksum_address
from .abi import AbiSource, ContractEvent, as_interface
from .rpc import DEFAULT_POLL_INTERVAL, RpcConnection, to_quantity

logger = logging.getLogger(__name__)

EventCallback = Callable[[list[Any]], Any]


class EventSubscription:
    """
    Handle for a running event listener.

    The caller owns the handle and must call aclose() to stop polling and
    release the connection.
    """

    def __init__(
        self,
        contract_address: str,
        event: ContractEvent,
        callback: EventCallback,
        connection: RpcConnection,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self.contract_address = to_checksum_address(contract_address)
        self.event = event
        self.callback = callback
        self.connection = connection
        self.poll_interval = poll_interval
        self.last_block: Optional[int] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Begin listening from the block after the current head."""
        self.last_block = int(await self.connection.request("eth_blockNumber"), 16)
        self._task = asyncio.create_task(self._run())

    def _log_filter(self, from_block: int, to_block: int) -> dict[str, Any]:
        log_filter: dict[str, Any] = {
            "address": self.contract_address,
            "fromBlock": to_quantity(from_block),
            "toBlock": to_quantity(to_block),
        }
        if not self.event.anonymous:
            log_filter["topics"] = [self.event.topic]
        return log_filter

    async def poll(self) -> int:
        """
        Scan blocks mined since the last poll and dispatch matching events.

        Returns:
            Number of events delivered to the callback
        """
        head = int(await self.connection.request("eth_blockNumber"), 16)
        if self.last_block is None:
            self.last_block = head
            return 0
        if head <= self.last_block:
            return 0

        logs = await self.connection.request(
            "eth_getLogs", [self._log_filter(self.last_block + 1, head)]
        )
        delivered = 0
        for log in logs or []:
            if log.get("removed"):
                continue
            result = self.callback(self.event.decode_log(log))
            if inspect.isawaitable(result):
                await result
            delivered += 1

        self.last_block = head
        return delivered

    async def _run(self) -> None:
        while True:
            try:
                await self.poll()
            except (httpx.HTTPError, RpcError):
                # last_block is unchanged, so the next poll rescans the range
                logger.warning(
                    "Poll for %s on %s failed, retrying",
                    self.event.name,
                    self.contract_address,
                    exc_info=True,
                )
            except Exception:
                logger.exception(
                    "Event listener for %s on %s stopped",
                    self.event.name,
                    self.contract_address,
                )
                raise
            await asyncio.sleep(self.poll_interval)

    async def aclose(self) -> None:
        """
        Stop polling and close the connection.

        Re-raises the error that stopped the listener, if any.
        """
        task, self._task = self._task, None
        try:
            if task is not None:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        finally:
            await self.connection.aclose()


async def listen_to_contract_events(
    contract_address: str,
    abi: AbiSource,
    event_name: str,
    callback: EventCallback,
    provider_url: str,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> EventSubscription:
    """
    Register a callback for a contract event.

    The callback receives the event's positional arguments as a list, once
    per matching log. It may be a plain function or a coroutine function.

    Args:
        contract_address: Contract emitting the event
        abi: Contract ABI
        event_name: Event name as declared in the ABI
        callback: Called with the decoded argument list
        provider_url: RPC endpoint URL
        poll_interval: Seconds between polls

    Returns:
        A running EventSubscription
    """
    event = as_interface(abi).get_event(event_name)
    connection = await RpcConnection(provider_url).open()
    subscription = EventSubscription(
        contract_address, event, callback, connection, poll_interval
    )
    try:
        await subscription.start()
    except BaseException:
        await connection.aclose()
        raise
    return subscription
