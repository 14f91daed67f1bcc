# src/randomness_oracle/utils/hash.py
"""Keccak-256 helpers producing the message the game contract recomputes."""

from __future__ import annotations

from eth_abi.packed import encode_packed
from eth_utils import keccak

from randomness_oracle.models.randomness import BlackjackAction

SEED_LENGTH_BYTES = 32
UINT8_MAX = 0xFF
UINT256_MAX = 2**256 - 1

# Field order and widths are the wire contract with the verifying contract.
TURN_MESSAGE_TYPES = ("uint256", "uint256", "bytes32", "uint8", "uint8")


def pack_turn_message(
    table_id: int,
    nonce: int,
    random_seed: bytes,
    action: BlackjackAction,
    hand_index: int,
) -> bytes:
    """Return the tight (non-padded) ABI encoding of a turn message.

    Raises:
        ValueError: If a field does not fit its fixed-width type
    """
    if not 0 <= table_id <= UINT256_MAX:
        raise ValueError("table_id must fit in uint256")
    if not 0 <= nonce <= UINT256_MAX:
        raise ValueError("nonce must fit in uint256")
    if len(random_seed) != SEED_LENGTH_BYTES:
        raise ValueError("random_seed must be exactly 32 bytes")
    if not 0 <= hand_index <= UINT8_MAX:
        raise ValueError("hand_index must fit in uint8")

    return encode_packed(
        list(TURN_MESSAGE_TYPES),
        [table_id, nonce, random_seed, int(action), hand_index],
    )


def turn_message_hash(
    table_id: int,
    nonce: int,
    random_seed: bytes,
    action: BlackjackAction,
    hand_index: int,
) -> bytes:
    """Return the Keccak-256 digest of the packed turn message."""
    return keccak(pack_turn_message(table_id, nonce, random_seed, action, hand_index))


def function_selector(signature: str) -> bytes:
    """Return the 4-byte selector for a Solidity function signature."""
    return keccak(text=signature)[:4]
