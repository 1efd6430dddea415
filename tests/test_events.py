"""Tests for event subscription."""

from __future__ import annotations

import asyncio

import pytest

from chaingate.errors import AbiError
from chaingate.pneuma.abi import ERC20_ABI, ContractInterface
from chaingate.pneuma.events import EventSubscription, listen_to_contract_events
from chaingate.pneuma.rpc import RpcConnection

from conftest import ADDRESS, OTHER, RPC_URL, TOKEN, FakeNode, RpcFailure, address_topic, word

TRANSFER = ContractInterface(ERC20_ABI).get_event("Transfer")


def transfer_log(value: int, removed: bool = False) -> dict:
    return {
        "address": TOKEN,
        "topics": [TRANSFER.topic, address_topic(ADDRESS), address_topic(OTHER)],
        "data": word(value),
        "removed": removed,
    }


class TestPoll:
    @pytest.mark.asyncio
    async def test_delivers_decoded_args(self, node: FakeNode) -> None:
        received: list[list] = []
        node.on("eth_blockNumber", "0x66")
        node.on("eth_getLogs", [transfer_log(1), transfer_log(2)])

        async with RpcConnection(RPC_URL) as conn:
            subscription = EventSubscription(TOKEN, TRANSFER, received.append, conn)
            subscription.last_block = 0x64
            assert await subscription.poll() == 2

        assert received == [[ADDRESS, OTHER, 1], [ADDRESS, OTHER, 2]]
        assert subscription.last_block == 0x66
        [[log_filter]] = node.params_for("eth_getLogs")
        assert log_filter == {
            "address": TOKEN,
            "fromBlock": "0x65",
            "toBlock": "0x66",
            "topics": [TRANSFER.topic],
        }

    @pytest.mark.asyncio
    async def test_no_new_blocks(self, node: FakeNode) -> None:
        node.on("eth_blockNumber", "0x64")
        async with RpcConnection(RPC_URL) as conn:
            subscription = EventSubscription(TOKEN, TRANSFER, print, conn)
            subscription.last_block = 0x64
            assert await subscription.poll() == 0
        assert "eth_getLogs" not in node.methods()

    @pytest.mark.asyncio
    async def test_removed_logs_skipped(self, node: FakeNode) -> None:
        received: list[list] = []
        node.on("eth_blockNumber", "0x2")
        node.on("eth_getLogs", [transfer_log(1, removed=True), transfer_log(3)])
        async with RpcConnection(RPC_URL) as conn:
            subscription = EventSubscription(TOKEN, TRANSFER, received.append, conn)
            subscription.last_block = 1
            await subscription.poll()
        assert received == [[ADDRESS, OTHER, 3]]

    @pytest.mark.asyncio
    async def test_async_callback(self, node: FakeNode) -> None:
        received: list[list] = []

        async def callback(args: list) -> None:
            received.append(args)

        node.on("eth_blockNumber", "0x2")
        node.on("eth_getLogs", [transfer_log(9)])
        async with RpcConnection(RPC_URL) as conn:
            subscription = EventSubscription(TOKEN, TRANSFER, callback, conn)
            subscription.last_block = 1
            await subscription.poll()
        assert received == [[ADDRESS, OTHER, 9]]


class TestListen:
    @pytest.mark.asyncio
    async def test_background_delivery(self, node: FakeNode) -> None:
        state = {"head": 100}
        delivered = asyncio.Event()
        received: list[list] = []

        def callback(args: list) -> None:
            received.append(args)
            delivered.set()

        node.on("eth_blockNumber", lambda: hex(state["head"]))
        node.on(
            "eth_getLogs",
            lambda f: [transfer_log(77)] if f["fromBlock"] == hex(101) else [],
        )

        subscription = await listen_to_contract_events(
            TOKEN, ERC20_ABI, "Transfer", callback, RPC_URL, poll_interval=0.01
        )
        try:
            assert subscription.running
            assert subscription.last_block == 100
            state["head"] = 101
            await asyncio.wait_for(delivered.wait(), timeout=2)
        finally:
            await subscription.aclose()

        assert received == [[ADDRESS, OTHER, 77]]
        assert not subscription.running

    @pytest.mark.asyncio
    async def test_keeps_polling_after_rpc_failure(self, node: FakeNode) -> None:
        heads = iter(["0x64", RpcFailure(-32000, "header not found")])
        delivered = asyncio.Event()
        received: list[list] = []

        def callback(args: list) -> None:
            received.append(args)
            delivered.set()

        node.on("eth_blockNumber", lambda: next(heads, "0x65"))
        node.on(
            "eth_getLogs",
            lambda f: [transfer_log(5)] if f["fromBlock"] == hex(101) else [],
        )

        subscription = await listen_to_contract_events(
            TOKEN, ERC20_ABI, "Transfer", callback, RPC_URL, poll_interval=0.01
        )
        try:
            await asyncio.wait_for(delivered.wait(), timeout=2)
            assert subscription.running
        finally:
            await subscription.aclose()

        assert received == [[ADDRESS, OTHER, 5]]

    @pytest.mark.asyncio
    async def test_failure_surfaces_on_close(self, node: FakeNode) -> None:
        heads = iter(["0x1"])
        node.on("eth_blockNumber", lambda: next(heads, "0x2"))
        node.on("eth_getLogs", [{"topics": [TRANSFER.topic], "data": "0x"}])

        subscription = await listen_to_contract_events(
            TOKEN, ERC20_ABI, "Transfer", print, RPC_URL, poll_interval=0.01
        )
        for _ in range(100):
            if not subscription.running:
                break
            await asyncio.sleep(0.01)
        with pytest.raises(AbiError):
            await subscription.aclose()

    @pytest.mark.asyncio
    async def test_unknown_event_fails_before_io(self, node: FakeNode) -> None:
        with pytest.raises(AbiError):
            await listen_to_contract_events(TOKEN, ERC20_ABI, "Approval", print, RPC_URL)
        assert node.calls == []
