# src/randomness_oracle/services/oracle.py
"""Request orchestration for randomness issuance."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from randomness_oracle.core.errors import ChainReadError, InvalidInputError
from randomness_oracle.core.settings import Settings, settings
from randomness_oracle.models.randomness import (
    ActionLock,
    BlackjackAction,
    GameTurnKey,
    IssuedRandomness,
    SignedRandomnessRecord,
)
from randomness_oracle.services.chain import ContractNonceReader, NonceReader, load_chain_config
from randomness_oracle.services.randomness_cache import NonceRandomnessCache
from randomness_oracle.services.rate_limit import RateLimiter
from randomness_oracle.services.signing import RandomnessSigner, load_signer, require_signer
from randomness_oracle.utils.hash import UINT8_MAX, UINT256_MAX

logger = logging.getLogger(__name__)

STATUS_AVAILABLE = "available"
STATUS_UNAVAILABLE = "unavailable"
STATUS_ERROR = "error"


@dataclass(frozen=True)
class OracleStatus:
    """Snapshot reported by the health/status operation."""

    status: str
    signer_address: str | None = None
    cache_size: int | None = None
    message: str | None = None


class RandomnessOracle:
    """Validates requests and sequences rate limiting, chain reads and issuance.

    One instance owns the cache and rate-limiter state for the process; build a
    fresh one per test.
    """

    def __init__(
        self,
        *,
        chain_reader: NonceReader,
        cache: NonceRandomnessCache,
        rate_limiter: RateLimiter,
        signer: RandomnessSigner | None,
        signer_error: str | None = None,
        signature_validity_seconds: int = 60,
        chain_timeout_seconds: float = 5.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.chain_reader = chain_reader
        self.cache = cache
        self.rate_limiter = rate_limiter
        self.signer = signer
        self.signer_error = signer_error
        self.signature_validity_seconds = signature_validity_seconds
        self.chain_timeout_seconds = chain_timeout_seconds
        self._clock = clock

    @property
    def operational(self) -> bool:
        return self.signer is not None

    def status(self) -> OracleStatus:
        """Report signer configuration and cache size."""
        if self.signer_error is not None:
            return OracleStatus(status=STATUS_ERROR, message=self.signer_error)
        if self.signer is None:
            return OracleStatus(
                status=STATUS_UNAVAILABLE,
                message="Randomness service not configured",
            )
        return OracleStatus(
            status=STATUS_AVAILABLE,
            signer_address=self.signer.address,
            cache_size=len(self.cache),
        )

    async def issue(
        self,
        table_id: int,
        action: BlackjackAction,
        hand_index: int = 0,
        *,
        requester: str | None = None,
    ) -> IssuedRandomness:
        """Return signed randomness for the table's current turn.

        Args:
            table_id: Game table identifier
            action: Decision the randomness is requested for
            hand_index: Hand the decision applies to
            requester: Identity charged against the rate limit

        Raises:
            SignerUnavailableError: If no signing key is configured
            InvalidInputError: If a field is out of range
            RateLimitedError: If ``requester`` exceeded its budget
            ChainReadError: If the turn nonce could not be read
            ActionLockedError: If the turn was already issued for another decision
        """
        signer = require_signer(self.signer)
        self._validate(table_id, action, hand_index)

        if requester:
            self.rate_limiter.check(requester)

        nonce = await self._read_nonce(table_id)
        key = GameTurnKey(table_id=table_id, nonce=nonce)
        lock = ActionLock(action=action, hand_index=hand_index)

        def _create(issued_at: float) -> SignedRandomnessRecord:
            random_seed = signer.generate_seed()
            return SignedRandomnessRecord(
                key=key,
                random_seed=random_seed,
                signature=signer.sign_turn(key, random_seed, lock),
                signer_address=signer.address,
                issued_at=issued_at,
                lock=lock,
            )

        record, cached = self.cache.get_or_create(key, lock, _create)
        expires_at = int(self._clock()) + self.signature_validity_seconds

        if cached:
            logger.info(
                "Randomness replayed table_id=%s nonce=%s action=%s hand=%d cached=true signer=%s",
                table_id,
                nonce,
                action.wire_name,
                hand_index,
                record.signer_address,
            )
        else:
            logger.info(
                "Randomness issued table_id=%s nonce=%s action=%s(%d) hand=%d cached=false "
                "signer=%s seed=%s...",
                table_id,
                nonce,
                action.wire_name,
                int(action),
                hand_index,
                record.signer_address,
                record.random_seed_hex[:10],
            )
        return IssuedRandomness(record=record, cached=cached, expires_at=expires_at)

    async def close(self) -> None:
        close = getattr(self.chain_reader, "close", None)
        if close is not None:
            await close()

    async def _read_nonce(self, table_id: int) -> int:
        try:
            nonce = await asyncio.wait_for(
                self.chain_reader.get_nonce(table_id),
                timeout=self.chain_timeout_seconds,
            )
        except ChainReadError as exc:
            logger.warning("Failed to read nonce for table_id=%s: %s", table_id, exc)
            raise
        except asyncio.TimeoutError as exc:
            logger.warning("Timed out reading nonce for table_id=%s", table_id)
            raise ChainReadError("Timed out reading game state") from exc
        except Exception as exc:
            logger.warning("Failed to read nonce for table_id=%s: %s", table_id, exc)
            raise ChainReadError() from exc

        if isinstance(nonce, bool) or not isinstance(nonce, int) or not 0 <= nonce <= UINT256_MAX:
            raise ChainReadError("Contract returned a malformed nonce")
        return nonce

    @staticmethod
    def _validate(table_id: int, action: BlackjackAction, hand_index: int) -> None:
        if not isinstance(action, BlackjackAction):
            raise InvalidInputError("Invalid action")
        if isinstance(table_id, bool) or not isinstance(table_id, int):
            raise InvalidInputError("tableId is required")
        if not 0 <= table_id <= UINT256_MAX:
            raise InvalidInputError("tableId is out of range")
        if isinstance(hand_index, bool) or not isinstance(hand_index, int):
            raise InvalidInputError("handIndex must be an integer")
        if not 0 <= hand_index <= UINT8_MAX:
            raise InvalidInputError("handIndex is out of range")


def build_oracle(
    config: Settings | None = None,
    *,
    chain_reader: NonceReader | None = None,
    clock: Callable[[], float] = time.time,
) -> RandomnessOracle:
    """Assemble an oracle and its collaborators from settings."""
    config = config or settings
    signer, signer_error = load_signer(config)
    return RandomnessOracle(
        chain_reader=chain_reader or ContractNonceReader(load_chain_config(config)),
        cache=NonceRandomnessCache(config.cache_retention_seconds, clock=clock),
        rate_limiter=RateLimiter(
            config.rate_limit_max_requests,
            config.rate_limit_window_seconds,
            clock=clock,
        ),
        signer=signer,
        signer_error=signer_error,
        signature_validity_seconds=config.signature_validity_seconds,
        chain_timeout_seconds=config.chain_read_timeout_seconds,
        clock=clock,
    )
