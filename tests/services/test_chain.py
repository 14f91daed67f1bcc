# tests/services/test_chain.py
"""Tests for the contract nonce reader."""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest
from eth_abi import encode

from randomness_oracle.core.errors import ChainReadError
from randomness_oracle.core.settings import Settings
from randomness_oracle.services.chain import ChainConfig, ContractNonceReader, load_chain_config
from randomness_oracle.utils.hash import function_selector

CONTRACT = "0x3f1F8F0C4BE4bCeB45E6597AFe0dE861B8c3278c"
RPC_URL = "http://rpc.test"

Handler = Callable[[httpx.Request], httpx.Response]


def _reader_with(handler: Handler) -> ContractNonceReader:
    reader = ContractNonceReader(
        ChainConfig(
            rpc_url=RPC_URL,
            contract_address=CONTRACT,
            nonce_function_name="blackjackGetNonce",
            timeout_seconds=1.0,
        )
    )
    reader._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return reader


def _result(value: int) -> str:
    return "0x" + encode(["uint256"], [value]).hex()


def test_call_data_is_selector_plus_encoded_table_id() -> None:
    reader = ContractNonceReader(
        ChainConfig(RPC_URL, CONTRACT, "blackjackGetNonce", 1.0)
    )
    call_data = reader.build_call_data(42)

    selector = function_selector("blackjackGetNonce(uint256)").hex()
    assert call_data == "0x" + selector + (42).to_bytes(32, "big").hex()


@pytest.mark.asyncio
async def test_get_nonce_performs_eth_call() -> None:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        seen.append(payload)
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], "result": _result(7)})

    reader = _reader_with(handler)
    try:
        assert await reader.get_nonce(42) == 7
    finally:
        await reader.close()

    assert seen[0]["method"] == "eth_call"
    call, block = seen[0]["params"]
    assert call["to"] == CONTRACT
    assert call["data"] == reader.build_call_data(42)
    assert block == "latest"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": 3, "message": "execution reverted"}}),
        httpx.Response(502, text="bad gateway"),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"jsonrpc": "2.0", "id": 1}),
        httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": "0x"}),
        httpx.Response(200, json=["unexpected"]),
    ],
)
async def test_get_nonce_failures_raise_chain_read_error(response: httpx.Response) -> None:
    reader = _reader_with(lambda request: response)
    try:
        with pytest.raises(ChainReadError):
            await reader.get_nonce(42)
    finally:
        await reader.close()


@pytest.mark.asyncio
async def test_get_nonce_timeout_raises_chain_read_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    reader = _reader_with(handler)
    try:
        with pytest.raises(ChainReadError, match="timed out"):
            await reader.get_nonce(42)
    finally:
        await reader.close()


@pytest.mark.asyncio
async def test_get_nonce_connection_error_raises_chain_read_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    reader = _reader_with(handler)
    try:
        with pytest.raises(ChainReadError):
            await reader.get_nonce(42)
    finally:
        await reader.close()


@pytest.mark.parametrize("result", [None, 7, "7", "0xzz"])
def test_decode_nonce_rejects_malformed_results(result: object) -> None:
    with pytest.raises(ChainReadError):
        ContractNonceReader.decode_nonce(result)


def test_decode_nonce_reads_first_word() -> None:
    assert ContractNonceReader.decode_nonce(_result(2**200)) == 2**200


@pytest.mark.asyncio
async def test_close_releases_client() -> None:
    reader = _reader_with(lambda request: httpx.Response(200, json={"result": _result(1)}))
    await reader.close()
    assert reader._client is None


def test_load_chain_config_checksums_address() -> None:
    config = load_chain_config(Settings(LAND_CONTRACT_ADDRESS=CONTRACT.lower()))
    assert config.contract_address == CONTRACT


def test_load_chain_config_rejects_invalid_address() -> None:
    with pytest.raises(ValueError):
        load_chain_config(Settings(LAND_CONTRACT_ADDRESS="0x1234"))
