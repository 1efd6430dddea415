"""Tests for the IPFS storage helpers."""

from __future__ import annotations

from typing import AsyncIterator

import httpx
import pytest

from chaingate.anamnesis.ipfs import (
    IpfsClient,
    add_file_to_ipfs,
    add_json_to_ipfs,
    get_file_from_ipfs,
    get_json_from_ipfs,
)

CID = "QmYwAPJzv5CZsnA625s3Xf2nemtYgPpHdWEz79ojWnPbdG"


class FakeIpfs:
    def __init__(self) -> None:
        self.store: dict[str, bytes] = {}
        self.requests: list[httpx.Request] = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/api/v0/add":
            body = self._file_part(request)
            self.store[CID] = body
            return httpx.Response(200, json={"Name": "blob", "Hash": CID, "Size": str(len(body))})
        if request.url.path == "/api/v0/cat":
            cid = request.url.params["arg"]
            if cid not in self.store:
                return httpx.Response(500, json={"Message": "not found"})
            return httpx.Response(200, content=self._chunks(self.store[cid]))
        return httpx.Response(404)

    @staticmethod
    def _file_part(request: httpx.Request) -> bytes:
        boundary = request.headers["content-type"].split("boundary=")[1].encode()
        part = request.content.split(b"--" + boundary)[1]
        return part.split(b"\r\n\r\n", 1)[1].rsplit(b"\r\n", 1)[0]

    @staticmethod
    async def _chunks(data: bytes) -> AsyncIterator[bytes]:
        for i in range(0, len(data), 4):
            yield data[i : i + 4]


@pytest.fixture()
def fake_ipfs() -> FakeIpfs:
    return FakeIpfs()


@pytest.fixture()
def client(fake_ipfs: FakeIpfs) -> IpfsClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(fake_ipfs.handle))
    return IpfsClient(http_client=http)


class TestIpfsClient:
    def test_default_gateway(self) -> None:
        assert IpfsClient().base_url == "https://ipfs.infura.io:5001/api/v0"

    @pytest.mark.asyncio
    async def test_add_returns_cid(self, client: IpfsClient, fake_ipfs: FakeIpfs) -> None:
        assert await add_file_to_ipfs(client, b"hello world") == CID
        request = fake_ipfs.requests[0]
        assert str(request.url).startswith("https://ipfs.infura.io:5001/api/v0/add")
        assert b"hello world" in request.content

    @pytest.mark.asyncio
    async def test_cat_reassembles_chunks(self, client: IpfsClient, fake_ipfs: FakeIpfs) -> None:
        fake_ipfs.store[CID] = b"0123456789abcdef!"
        assert await get_file_from_ipfs(client, CID) == b"0123456789abcdef!"

    @pytest.mark.asyncio
    async def test_cat_failure_propagates(self, client: IpfsClient) -> None:
        with pytest.raises(httpx.HTTPStatusError):
            await get_file_from_ipfs(client, "QmMissing")

    @pytest.mark.asyncio
    async def test_json_round_trip(self, client: IpfsClient, fake_ipfs: FakeIpfs) -> None:
        value = {"name": "Token 1", "attributes": [{"trait_type": "rarity", "value": 3}]}
        cid = await add_json_to_ipfs(client, value)
        assert await get_json_from_ipfs(client, cid) == value

    @pytest.mark.asyncio
    async def test_json_is_compact(self, client: IpfsClient, fake_ipfs: FakeIpfs) -> None:
        await add_json_to_ipfs(client, {"a": 1, "b": [1, 2]})
        assert b'{"a":1,"b":[1,2]}' in fake_ipfs.requests[0].content

    @pytest.mark.asyncio
    async def test_injected_client_left_open(self, fake_ipfs: FakeIpfs) -> None:
        http = httpx.AsyncClient(transport=httpx.MockTransport(fake_ipfs.handle))
        async with IpfsClient(http_client=http) as client:
            await add_file_to_ipfs(client, "text")
        assert not http.is_closed
        await http.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_closed(self) -> None:
        client = IpfsClient()
        await client.aclose()
        assert client._http.is_closed
