__all__ = [
    # Errors
    "GatewayError",
    "UnsupportedNetwork",
    "UnsupportedProvider",
    "RpcError",
    "AbiError",
    # Units
    "parse_ether",
    "parse_units",
    "format_ether",
    "format_units",
    # Endpoint resolution
    "NETWORKS",
    "PROVIDERS",
    "get_provider_url",
    # Wallet
    "WalletMaterial",
    "generate_random_wallet",
    "generate_wallet_from_seed",
    "import_wallet_from_private_key",
    "is_valid_address",
    "to_checksum_address",
    "generate_mnemonic",
    "sign_message",
    "verify_signed_message",
    # Reads
    "RpcConnection",
    "get_balance",
    "get_transaction_count",
    "get_network_id",
    "get_block_number",
    "get_block_details",
    "get_transactions_in_block",
    "get_transaction",
    "estimate_gas",
    "wait_for_transaction",
    # ABI / contracts
    "ContractInterface",
    "ContractFunction",
    "ContractEvent",
    "ERC20_ABI",
    "ERC721_ABI",
    "Contract",
    "read_contract",
    "interact_with_contract",
    "safe_mint_nft",
    "get_token_balance",
    "transfer_tokens",
    # Transactions
    "TransactionRequest",
    "send_transaction",
    # Enumeration
    "enumerate_sequential",
    "get_transaction_history",
    "NFTMetadata",
    "get_nfts_from_address",
    "get_all_nfts_in_collection",
    # Events
    "EventSubscription",
    "listen_to_contract_events",
    # WalletConnect
    "WalletConnectSession",
    "create_wallet_connect_provider",
    "get_connected_address",
    "send_transaction_with_wallet_connect",
    "sign_message_with_wallet_connect",
    "disconnect_wallet_connect",
    # IPFS
    "IpfsClient",
    "add_file_to_ipfs",
    "get_file_from_ipfs",
    "add_json_to_ipfs",
    "get_json_from_ipfs",
]

from .errors import AbiError, GatewayError, RpcError, UnsupportedNetwork, UnsupportedProvider
from .units import format_ether, format_units, parse_ether, parse_units
from .pneuma.endpoints import NETWORKS, PROVIDERS, get_provider_url
from .sigil.wallet import (
    WalletMaterial,
    generate_mnemonic,
    generate_random_wallet,
    generate_wallet_from_seed,
    import_wallet_from_private_key,
    is_valid_address,
    sign_message,
    to_checksum_address,
    verify_signed_message,
)
from .pneuma.rpc import (
    RpcConnection,
    estimate_gas,
    get_balance,
    get_block_details,
    get_block_number,
    get_network_id,
    get_transaction,
    get_transaction_count,
    get_transactions_in_block,
    wait_for_transaction,
)
from .pneuma.abi import ERC20_ABI, ERC721_ABI, ContractEvent, ContractFunction, ContractInterface
from .pneuma.tx import TransactionRequest, send_transaction
from .pneuma.contract import (
    Contract,
    get_token_balance,
    interact_with_contract,
    read_contract,
    safe_mint_nft,
    transfer_tokens,
)
from .pneuma.enumeration import enumerate_sequential, get_transaction_history
from .pneuma.nft import NFTMetadata, get_all_nfts_in_collection, get_nfts_from_address
from .pneuma.events import EventSubscription, listen_to_contract_events
from .pneuma.walletconnect import (
    WalletConnectSession,
    create_wallet_connect_provider,
    disconnect_wallet_connect,
    get_connected_address,
    send_transaction_with_wallet_connect,
    sign_message_with_wallet_connect,
)
from .anamnesis.ipfs import (
    IpfsClient,
    add_file_to_ipfs,
    add_json_to_ipfs,
    get_file_from_ipfs,
    get_json_from_ipfs,
)
