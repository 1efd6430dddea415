"""
ERC-721 enumeration with off-chain metadata.

For every token: tokenOfOwnerByIndex / tokenByIndex, then tokenURI, then an
HTTP GET of the metadata document. Tokens are visited sequentially.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import httpx

from . import rpc
from .abi import ERC721_ABI, AbiSource
from .contract import Contract
from .enumeration import enumerate_sequential
from .rpc import RpcConnection

DEFAULT_NAME = "Unnamed NFT"
DEFAULT_DESCRIPTION = "No description"
DEFAULT_IMAGE = "No image"
DEFAULT_ATTRIBUTES = "No attributes"


def _or_default(value: Any, default: Any) -> Any:
    # empty lists and objects are kept; only absent or blank fields fall back
    if value is None or value == "":
        return default
    return value


@dataclass(frozen=True)
class NFTMetadata:
    token_id: str
    name: str
    description: str
    image: str
    attributes: Any

    @classmethod
    def from_document(cls, token_id: int, document: dict[str, Any]) -> "NFTMetadata":
        return cls(
            token_id=str(token_id),
            name=_or_default(document.get("name"), DEFAULT_NAME),
            description=_or_default(document.get("description"), DEFAULT_DESCRIPTION),
            image=_or_default(document.get("image"), DEFAULT_IMAGE),
            attributes=_or_default(document.get("attributes"), DEFAULT_ATTRIBUTES),
        )


async def fetch_token_metadata(http: httpx.AsyncClient, token_uri: str) -> dict[str, Any]:
    response = await http.get(token_uri)
    response.raise_for_status()
    return response.json()


async def _describe_token(
    contract: Contract, http: httpx.AsyncClient, token_id: int
) -> NFTMetadata:
    token_uri = await contract.call("tokenURI", token_id)
    document = await fetch_token_metadata(http, token_uri)
    return NFTMetadata.from_document(token_id, document)


async def get_nfts_from_address(
    address: str,
    contract_address: str,
    abi: Optional[AbiSource],
    provider_url: str,
    *,
    limit: Optional[int] = None,
    abort_on_error: bool = True,
) -> list[NFTMetadata]:
    """
    List the NFTs an owner holds in one collection.

    Args:
        address: Owner address
        contract_address: ERC-721 Enumerable contract
        abi: Contract ABI (defaults to ERC721_ABI)
        provider_url: RPC endpoint URL
        limit: Maximum number of tokens to visit
        abort_on_error: Propagate the first failed lookup (default)

    Returns:
        NFTMetadata in owner index order
    """
    async with RpcConnection(provider_url) as conn, rpc.new_http_client() as http:
        contract = Contract(contract_address, abi or ERC721_ABI, conn)
        balance = await contract.call("balanceOf", address)

        async def fetch(index: int) -> NFTMetadata:
            token_id = await contract.call("tokenOfOwnerByIndex", address, index)
            return await _describe_token(contract, http, token_id)

        return await enumerate_sequential(
            range(balance), fetch, limit=limit, abort_on_error=abort_on_error
        )


async def get_all_nfts_in_collection(
    contract_address: str,
    abi: Optional[AbiSource],
    provider_url: str,
    *,
    limit: Optional[int] = None,
    abort_on_error: bool = True,
) -> list[NFTMetadata]:
    """List every token of an ERC-721 Enumerable collection, by global index."""
    async with RpcConnection(provider_url) as conn, rpc.new_http_client() as http:
        contract = Contract(contract_address, abi or ERC721_ABI, conn)
        total_supply = await contract.call("totalSupply")

        async def fetch(index: int) -> NFTMetadata:
            token_id = await contract.call("tokenByIndex", index)
            return await _describe_token(contract, http, token_id)

        return await enumerate_sequential(
            range(total_supply), fetch, limit=limit, abort_on_error=abort_on_error
        )
