"""
IPFS client - add and cat content through a Kubo HTTP RPC endpoint.

Content goes up as a multipart upload and comes back as a stream of chunks;
JSON helpers wrap the byte-level calls.
"""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Optional, Union

import httpx

logger = logging.getLogger(__name__)

DEFAULT_IPFS_HOST = "ipfs.infura.io"
DEFAULT_IPFS_PORT = 5001
DEFAULT_IPFS_PROTOCOL = "https"
DEFAULT_IPFS_TIMEOUT = 60


class IpfsClient:
    """
    Client for an IPFS HTTP RPC endpoint (/api/v0).

    Construct once at process start and close with aclose() (or use as an
    async context manager). The client holds no per-call state, so
    independent calls may share it.

    Attributes:
        base_url: e.g. https://ipfs.infura.io:5001/api/v0
    """

    def __init__(
        self,
        host: str = DEFAULT_IPFS_HOST,
        port: int = DEFAULT_IPFS_PORT,
        protocol: str = DEFAULT_IPFS_PROTOCOL,
        auth: Optional[tuple[str, str]] = None,
        timeout: float = DEFAULT_IPFS_TIMEOUT,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = f"{protocol}://{host}:{port}/api/v0"
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(auth=auth, timeout=timeout)

    async def __aenter__(self) -> "IpfsClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def add(self, data: Union[bytes, str]) -> dict[str, Any]:
        """
        Add content.

        Returns:
            The node's add record ({"Name", "Hash", "Size"})
        """
        if isinstance(data, str):
            data = data.encode("utf-8")
        response = await self._http.post(
            f"{self.base_url}/add",
            files={"file": ("blob", data, "application/octet-stream")},
        )
        response.raise_for_status()
        record = response.json()
        logger.info("Added %d bytes to IPFS as %s", len(data), record.get("Hash"))
        return record

    async def cat(self, cid: str) -> AsyncIterator[bytes]:
        """Stream the content stored under a CID, chunk by chunk."""
        async with self._http.stream(
            "POST", f"{self.base_url}/cat", params={"arg": cid}
        ) as response:
            response.raise_for_status()
            async for chunk in response.aiter_bytes():
                yield chunk


async def add_file_to_ipfs(client: IpfsClient, data: Union[bytes, str]) -> str:
    """Add raw content and return its CID path."""
    record = await client.add(data)
    return record["Hash"]


async def get_file_from_ipfs(client: IpfsClient, cid: str) -> bytes:
    """
    Fetch content by CID into memory.

    No size limit is applied.
    """
    buffer = bytearray()
    async for chunk in client.cat(cid):
        buffer.extend(chunk)
    return bytes(buffer)


async def add_json_to_ipfs(client: IpfsClient, value: Any) -> str:
    payload = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return await add_file_to_ipfs(client, payload)


async def get_json_from_ipfs(client: IpfsClient, cid: str) -> Any:
    data = await get_file_from_ipfs(client, cid)
    return json.loads(data.decode("utf-8"))
