"""
Contract binding and contract-level operations.

A Contract pairs an address and a ContractInterface with one open
RpcConnection, and optionally a signer for state-changing calls. The
module-level helpers each open a connection, bind a Contract for the
duration of one call, and close it again.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from eth_account.signers.local import LocalAccount

from ..errors import GatewayError
from ..sigil.wallet import get_account, to_checksum_address
from .abi import ERC20_ABI, ERC721_ABI, AbiSource, as_interface
from .rpc import DEFAULT_POLL_INTERVAL, BlockId, RpcConnection, block_id, wait_for_confirmations
from .tx import TransactionRequest, sign_and_send


class Contract:
    def __init__(
        self,
        address: str,
        abi: AbiSource,
        connection: RpcConnection,
        account: Optional[LocalAccount] = None,
    ) -> None:
        self.address = to_checksum_address(address)
        self.interface = as_interface(abi)
        self.connection = connection
        self.account = account

    async def call(self, function_name: str, *args: Any, block: BlockId = "latest") -> Any:
        """
        Read from the contract (eth_call).

        Returns:
            Decoded return value(s), or None for a function without outputs

        Raises:
            GatewayError: If the node returns no data for a function that
                          declares outputs (e.g. the address has no code)
        """
        func = self.interface.get_function(function_name, len(args))
        call: dict[str, Any] = {"to": self.address, "data": func.encode_input(args)}
        if self.account is not None:
            call["from"] = self.account.address

        result = await self.connection.request("eth_call", [call, block_id(block)])
        if result is None or result == "0x":
            if func.output_types:
                raise GatewayError(
                    f"Call to {func.signature} on {self.address} returned no data"
                )
            return None
        return func.decode_output(result)

    async def transact(
        self,
        function_name: str,
        *args: Any,
        gas_price: str,
        gas_limit: int,
        value: str = "0",
    ) -> str:
        """Send a state-changing call signed by the bound account."""
        if self.account is None:
            raise GatewayError(f"Contract {self.address} is not bound to a signer")

        func = self.interface.get_function(function_name, len(args))
        request = TransactionRequest(
            to=self.address,
            value=value,
            gas_price=gas_price,
            gas_limit=gas_limit,
            data=func.encode_input(args),
        )
        return await sign_and_send(self.connection, self.account, request)


async def read_contract(
    contract_address: str,
    abi: AbiSource,
    function_name: str,
    args: Sequence[Any],
    provider_url: str,
) -> Any:
    async with RpcConnection(provider_url) as conn:
        contract = Contract(contract_address, abi, conn)
        return await contract.call(function_name, *args)


async def interact_with_contract(
    contract_address: str,
    abi: AbiSource,
    function_name: str,
    args: Sequence[Any],
    private_key: str,
    gas_price: str,
    gas_limit: int,
    provider_url: str,
) -> str:
    """
    Call a state-changing contract method.

    Args:
        contract_address: 0x-prefixed contract address
        abi: Contract ABI
        function_name: Function name or full signature
        args: Function arguments
        private_key: Signer private key
        gas_price: Gas price in gwei as a decimal string
        gas_limit: Gas limit
        provider_url: RPC endpoint URL

    Returns:
        Transaction hash
    """
    account = get_account(private_key)
    async with RpcConnection(provider_url) as conn:
        contract = Contract(contract_address, abi, conn, account)
        return await contract.transact(
            function_name, *args, gas_price=gas_price, gas_limit=gas_limit
        )


async def safe_mint_nft(
    contract_address: str,
    abi: Optional[AbiSource],
    to_address: str,
    token_id: int,
    private_key: str,
    provider_url: str,
    gas_price: str,
    gas_limit: int,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> Optional[dict]:
    """
    Call safeMint(to, tokenId) and wait for one confirmation.

    Returns:
        Transaction receipt dict
    """
    account = get_account(private_key)
    async with RpcConnection(provider_url) as conn:
        contract = Contract(contract_address, abi or ERC721_ABI, conn, account)
        tx_hash = await contract.transact(
            "safeMint", to_address, token_id, gas_price=gas_price, gas_limit=gas_limit
        )
        return await wait_for_confirmations(conn, tx_hash, 1, poll_interval)


async def get_token_balance(
    address: str,
    contract_address: str,
    abi: Optional[AbiSource],
    provider_url: str,
) -> int:
    """ERC-20 balanceOf, in the token's base units."""
    async with RpcConnection(provider_url) as conn:
        contract = Contract(contract_address, abi or ERC20_ABI, conn)
        return await contract.call("balanceOf", address)


async def transfer_tokens(
    from_private_key: str,
    to_address: str,
    amount: int,
    contract_address: str,
    abi: Optional[AbiSource],
    gas_price: str,
    gas_limit: int,
    provider_url: str,
) -> str:
    """
    ERC-20 transfer.

    Args:
        amount: Token amount in base units (no decimals applied)

    Returns:
        Transaction hash
    """
    account = get_account(from_private_key)
    async with RpcConnection(provider_url) as conn:
        contract = Contract(contract_address, abi or ERC20_ABI, conn, account)
        return await contract.transact(
            "transfer", to_address, int(amount), gas_price=gas_price, gas_limit=gas_limit
        )
