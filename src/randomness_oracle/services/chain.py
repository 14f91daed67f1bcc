"""Read-only access to the game contract.

This module provides the ContractNonceReader class that reads the authoritative
turn nonce of a table through a JSON-RPC ``eth_call``. It never caches or
guesses a nonce: any failure surfaces as :class:`ChainReadError`.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx
from eth_abi import decode, encode
from eth_utils import is_address, to_checksum_address

from randomness_oracle.core.errors import ChainReadError
from randomness_oracle.core.settings import Settings, settings
from randomness_oracle.utils.hash import function_selector

logger = logging.getLogger(__name__)

UINT256_WORD_BYTES = 32


class NonceReader(Protocol):
    """Collaborator returning the current turn nonce for a table."""

    async def get_nonce(self, table_id: int) -> int: ...


@dataclass(frozen=True)
class ChainConfig:
    """Immutable configuration for contract reads."""

    rpc_url: str
    contract_address: str
    nonce_function_name: str
    timeout_seconds: float


def load_chain_config(config: Settings | None = None) -> ChainConfig:
    """Build configuration object from settings."""

    config = config or settings
    if not is_address(config.contract_address):
        raise ValueError(f"Invalid contract address: {config.contract_address!r}")
    return ChainConfig(
        rpc_url=config.rpc_url,
        contract_address=to_checksum_address(config.contract_address),
        nonce_function_name=config.nonce_function_name,
        timeout_seconds=float(config.chain_read_timeout_seconds),
    )


class ContractNonceReader:
    """JSON-RPC client reading ``<nonceFunction>(uint256)`` from the game contract."""

    def __init__(self, config: ChainConfig | None = None) -> None:
        self.config = config or load_chain_config()
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()
        self._request_ids = itertools.count(1)
        self._selector = function_selector(f"{self.config.nonce_function_name}(uint256)")

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    timeout=httpx.Timeout(self.config.timeout_seconds),
                )
        return self._client

    async def close(self) -> None:
        """Release the underlying HTTP connection pool."""
        async with self._client_lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None

    def build_call_data(self, table_id: int) -> str:
        """Return hex calldata for the nonce view function."""
        return "0x" + (self._selector + encode(["uint256"], [table_id])).hex()

    async def _rpc(self, method: str, params: list[Any]) -> Any:
        client = await self._ensure_client()
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._request_ids),
            "method": method,
            "params": params,
        }
        try:
            response = await client.post(self.config.rpc_url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.TimeoutException as exc:
            raise ChainReadError(f"RPC request timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise ChainReadError(f"RPC request failed: {exc}") from exc
        except ValueError as exc:
            raise ChainReadError(f"RPC returned invalid JSON: {exc}") from exc

        if not isinstance(body, dict):
            raise ChainReadError("RPC returned a malformed response")
        if body.get("error"):
            error = body["error"]
            message = error.get("message") if isinstance(error, dict) else error
            raise ChainReadError(f"RPC error: {message}")
        if "result" not in body:
            raise ChainReadError("RPC response missing result")
        return body["result"]

    async def get_nonce(self, table_id: int) -> int:
        """Return the current turn nonce for ``table_id``.

        Raises:
            ChainReadError: On transport, timeout, RPC or decoding failure
        """
        call = {
            "to": self.config.contract_address,
            "data": self.build_call_data(table_id),
        }
        result = await self._rpc("eth_call", [call, "latest"])
        return self.decode_nonce(result)

    @staticmethod
    def decode_nonce(result: Any) -> int:
        """Decode an ``eth_call`` result holding a single uint256."""
        if not isinstance(result, str) or not result.startswith("0x"):
            raise ChainReadError("Malformed eth_call result")
        try:
            raw = bytes.fromhex(result[2:])
        except ValueError as exc:
            raise ChainReadError(f"Malformed eth_call result: {exc}") from exc
        if len(raw) < UINT256_WORD_BYTES:
            # Empty return data means the call hit an address without the function.
            raise ChainReadError("Contract returned no nonce")
        try:
            (nonce,) = decode(["uint256"], raw[:UINT256_WORD_BYTES])
        except Exception as exc:
            raise ChainReadError(f"Failed to decode nonce: {exc}") from exc
        return int(nonce)
