"""
Transaction Builder - Build, sign, and send native-currency transactions.

Uses eth-account for local signing and the httpx JSON-RPC connection for
submission. Unit conversion (ether/gwei -> wei) happens once, when the
TransactionRequest is turned into wire fields.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from eth_account.signers.local import LocalAccount

from ..sigil.wallet import get_account, to_checksum_address
from ..units import parse_ether, parse_units
from .rpc import RpcConnection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransactionRequest:
    """
    An unsigned legacy transaction.

    Attributes:
        to: Recipient address, or None for contract creation
        value: Amount in ether as a decimal string
        gas_price: Gas price in gwei as a decimal string
        gas_limit: Gas limit in gas units
        data: 0x-prefixed calldata
    """

    to: Optional[str]
    value: str = "0"
    gas_price: str = "0"
    gas_limit: int = 21_000
    data: str = "0x"

    def to_wei_fields(self) -> dict[str, Any]:
        tx: dict[str, Any] = {
            "value": parse_ether(self.value),
            "gasPrice": parse_units(self.gas_price, "gwei"),
            "gas": int(self.gas_limit),
            "data": self.data,
        }
        if self.to is not None:
            tx["to"] = to_checksum_address(self.to)
        return tx


async def sign_and_send(
    conn: RpcConnection,
    account: LocalAccount,
    request: TransactionRequest,
) -> str:
    """
    Fill nonce and chain id from the node, sign locally, and submit.

    Args:
        conn: Open RPC connection
        account: Signer
        request: Transaction to send

    Returns:
        Transaction hash (0x-prefixed hex)
    """
    tx = request.to_wei_fields()
    tx["nonce"] = int(
        await conn.request("eth_getTransactionCount", [account.address, "pending"]), 16
    )
    tx["chainId"] = int(await conn.request("eth_chainId"), 16)

    signed = account.sign_transaction(tx)
    raw_tx = "0x" + bytes(signed.raw_transaction).hex()

    tx_hash = await conn.request("eth_sendRawTransaction", [raw_tx])
    logger.info(
        "Submitted transaction %s from %s (nonce %d)", tx_hash, account.address, tx["nonce"]
    )
    return tx_hash


async def send_transaction(
    from_private_key: str,
    to_address: str,
    amount: str,
    gas_price: str,
    gas_limit: int,
    provider_url: str,
) -> str:
    """
    Send native currency.

    Args:
        from_private_key: 0x-prefixed hex private key of the sender
        to_address: Recipient address
        amount: Amount in ether as a decimal string
        gas_price: Gas price in gwei as a decimal string
        gas_limit: Gas limit
        provider_url: RPC endpoint URL

    Returns:
        Transaction hash
    """
    account = get_account(from_private_key)
    request = TransactionRequest(
        to=to_address, value=amount, gas_price=gas_price, gas_limit=gas_limit
    )
    async with RpcConnection(provider_url) as conn:
        return await sign_and_send(conn, account, request)
