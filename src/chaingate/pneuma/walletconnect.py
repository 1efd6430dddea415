"""
WalletConnect bridge helpers.

chaingate does not implement the WalletConnect transport. Callers supply a
session object (or a factory producing one) that speaks EIP-1193 style
requests; these helpers only shape the payloads.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol

from ..units import parse_ether, parse_units
from .rpc import to_quantity


class WalletConnectSession(Protocol):
    async def enable(self) -> Any:
        ...

    async def request(self, payload: dict[str, Any]) -> Any:
        ...

    async def disconnect(self) -> None:
        ...


SessionFactory = Callable[..., WalletConnectSession]


async def create_wallet_connect_provider(
    factory: SessionFactory, rpc_url: str, chain_id: int
) -> WalletConnectSession:
    """Build a session for one chain and wait for the wallet to approve it."""
    session = factory(rpc={chain_id: rpc_url})
    await session.enable()
    return session


async def get_connected_address(session: WalletConnectSession) -> str:
    accounts = await session.request({"method": "eth_accounts"})
    if not accounts:
        raise ValueError("WalletConnect session has no connected accounts")
    return accounts[0]


async def send_transaction_with_wallet_connect(
    session: WalletConnectSession,
    to_address: str,
    amount: str,
    gas_price: str,
    gas_limit: int,
) -> str:
    """
    Ask the connected wallet to sign and send a native-currency transfer.

    Args:
        amount: Amount in ether as a decimal string
        gas_price: Gas price in gwei as a decimal string
        gas_limit: Gas limit

    Returns:
        Transaction hash reported by the wallet
    """
    sender = await get_connected_address(session)
    transaction = {
        "from": sender,
        "to": to_address,
        "value": to_quantity(parse_ether(amount)),
        "gasPrice": to_quantity(parse_units(gas_price, "gwei")),
        "gas": to_quantity(gas_limit),
    }
    return await session.request(
        {"method": "eth_sendTransaction", "params": [transaction]}
    )


async def sign_message_with_wallet_connect(
    session: WalletConnectSession, message: str
) -> str:
    address = await get_connected_address(session)
    encoded = "0x" + message.encode("utf-8").hex()
    return await session.request(
        {"method": "personal_sign", "params": [encoded, address]}
    )


async def disconnect_wallet_connect(session: WalletConnectSession) -> None:
    await session.disconnect()
