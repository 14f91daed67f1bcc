# src/randomness_oracle/services/signing.py
"""Randomness generation and signing."""

from __future__ import annotations

import logging
import secrets

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount

from randomness_oracle.core.errors import SignerUnavailableError
from randomness_oracle.core.settings import Settings
from randomness_oracle.models.randomness import ActionLock, GameTurnKey
from randomness_oracle.utils.hash import SEED_LENGTH_BYTES, turn_message_hash

logger = logging.getLogger(__name__)


class RandomnessSigner:
    """Holds the oracle key and signs seeds for game turns.

    The private key never leaves this object; only the derived address is
    exposed.
    """

    def __init__(self, private_key: str | bytes) -> None:
        try:
            self._account: LocalAccount = Account.from_key(private_key)
        except Exception as err:  # eth-keys raises its own ValidationError
            raise ValueError(f"Invalid signer private key: {err}") from err

    @property
    def address(self) -> str:
        """Checksummed address the contract expects as randomness signer."""
        return self._account.address

    @staticmethod
    def generate_seed() -> bytes:
        """Return 32 bytes from the operating system CSPRNG."""
        return secrets.token_bytes(SEED_LENGTH_BYTES)

    def sign_hash(self, message_hash: bytes) -> bytes:
        """Sign a 32-byte digest using the personal-message (EIP-191) convention.

        Returns:
            65-byte ``r || s || v`` signature
        """
        signed = self._account.sign_message(encode_defunct(primitive=message_hash))
        return bytes(signed.signature)

    def sign_turn(self, key: GameTurnKey, random_seed: bytes, lock: ActionLock) -> bytes:
        """Sign the seed bound to a table, turn nonce and decision."""
        message_hash = turn_message_hash(
            key.table_id,
            key.nonce,
            random_seed,
            lock.action,
            lock.hand_index,
        )
        return self.sign_hash(message_hash)


def load_signer(config: Settings) -> tuple[RandomnessSigner | None, str | None]:
    """Build the signer from configuration.

    Returns:
        Tuple of (signer, error). Both are None when no key is configured; the
        error message is set when a key is configured but unusable.
    """
    if not config.signer_configured:
        logger.warning("BLACKJACK_RANDOMNESS_SIGNER_KEY not configured")
        return None, None

    try:
        signer = RandomnessSigner(str(config.signer_private_key).strip())
    except ValueError:
        logger.error("Invalid randomness signer configuration")
        return None, "Invalid signer configuration"

    logger.info("Randomness signer loaded: %s", signer.address)
    return signer, None


def require_signer(signer: RandomnessSigner | None) -> RandomnessSigner:
    """Return the signer or raise when the service is not operational."""
    if signer is None:
        raise SignerUnavailableError()
    return signer
