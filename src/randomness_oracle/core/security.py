"""Signature utilities for EIP-191 personal-message signatures."""
from __future__ import annotations

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_utils import to_checksum_address


def recover_signer(message_hash: bytes, signature: bytes | str) -> str:
    """Recover the checksummed address that signed ``message_hash``.

    The hash is wrapped with the ``"\\x19Ethereum Signed Message:\\n32"`` prefix
    before recovery, matching how the oracle signs it.
    """
    return Account.recover_message(encode_defunct(primitive=message_hash), signature=signature)


def verify_signature(signer_address: str, message_hash: bytes, signature: bytes | str) -> bool:
    """Verify a personal-message signature over a 32-byte hash.

    Args:
        signer_address: Expected signer address (any casing).
        message_hash: Keccak-256 digest that was signed.
        signature: 65-byte ``r || s || v`` signature, raw or 0x-prefixed hex.

    Returns:
        True if the signature recovers to ``signer_address``; False otherwise.
    """
    try:
        recovered = recover_signer(message_hash, signature)
        return recovered == to_checksum_address(signer_address)
    except Exception:
        return False
