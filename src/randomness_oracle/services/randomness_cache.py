# src/randomness_oracle/services/randomness_cache.py
"""Nonce-keyed cache of issued randomness.

Once a seed is issued for a ``(table_id, nonce)`` turn, the same seed is
returned for every later request of that turn until the record leaves the
retention window. Requests for the same turn under a different decision are
rejected instead of re-issued, so a client cannot probe several actions
against one on-chain state and keep the most favourable card.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from threading import Lock

from randomness_oracle.core.errors import ActionLockedError
from randomness_oracle.models.randomness import (
    ActionLock,
    GameTurnKey,
    SignedRandomnessRecord,
)

logger = logging.getLogger(__name__)

RecordFactory = Callable[[float], SignedRandomnessRecord]


class NonceRandomnessCache:
    """Single-writer-per-turn store of signed randomness records.

    Reads of an existing record take no lock. Creation is serialized per turn
    key (so concurrent first requests sign only once) and committed with a
    compare-and-insert, so one record wins even if a key lock was swept away
    mid-flight.
    """

    def __init__(
        self,
        retention_seconds: float = 300.0,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if retention_seconds <= 0:
            raise ValueError("retention_seconds must be positive")
        self.retention_seconds = retention_seconds
        self._clock = clock
        self._entries: dict[GameTurnKey, SignedRandomnessRecord] = {}
        self._key_locks: dict[GameTurnKey, Lock] = {}
        self._write_lock = Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: GameTurnKey) -> SignedRandomnessRecord | None:
        """Return the live record for ``key``, if any."""
        record = self._entries.get(key)
        if record is None or not record.is_live(self._clock(), self.retention_seconds):
            return None
        return record

    def get_or_create(
        self,
        key: GameTurnKey,
        lock: ActionLock,
        create: RecordFactory,
    ) -> tuple[SignedRandomnessRecord, bool]:
        """Return the record for ``key``, creating it with ``create`` on first use.

        Args:
            key: Turn the randomness is requested for
            lock: Decision the caller is requesting randomness for
            create: Builds a fresh signed record; receives the creation time

        Returns:
            Tuple of (record, cached) where ``cached`` is False only for the
            caller whose record was inserted

        Raises:
            ActionLockedError: If the turn already has a record under another lock
        """
        existing = self.get(key)
        if existing is not None:
            return self._replay(existing, lock), True

        with self._lock_for(key):
            existing = self.get(key)
            if existing is not None:
                return self._replay(existing, lock), True

            record = create(self._clock())
            winner = self._insert_if_absent(key, record)

        if winner is not record:
            return self._replay(winner, lock), True
        return record, False

    def sweep(self) -> int:
        """Evict records older than the retention window.

        Returns:
            Number of records removed
        """
        now = self._clock()
        with self._write_lock:
            stale = [
                key
                for key, record in self._entries.items()
                if not record.is_live(now, self.retention_seconds)
            ]
            for key in stale:
                del self._entries[key]
            idle_locks = [
                key
                for key, key_lock in self._key_locks.items()
                if key not in self._entries and not key_lock.locked()
            ]
            for key in idle_locks:
                del self._key_locks[key]
        if stale:
            logger.debug("Evicted %d stale randomness records", len(stale))
        return len(stale)

    def clear(self) -> None:
        with self._write_lock:
            self._entries.clear()
            self._key_locks.clear()

    def _lock_for(self, key: GameTurnKey) -> Lock:
        with self._write_lock:
            return self._key_locks.setdefault(key, Lock())

    def _insert_if_absent(
        self, key: GameTurnKey, record: SignedRandomnessRecord
    ) -> SignedRandomnessRecord:
        with self._write_lock:
            current = self._entries.get(key)
            if current is not None and current.is_live(self._clock(), self.retention_seconds):
                return current
            self._entries[key] = record
            return record

    @staticmethod
    def _replay(record: SignedRandomnessRecord, lock: ActionLock) -> SignedRandomnessRecord:
        if record.lock != lock:
            logger.warning(
                "Action lock violation table_id=%s nonce=%s locked=%s/%d requested=%s/%d",
                record.key.table_id,
                record.key.nonce,
                record.lock.action.wire_name,
                record.lock.hand_index,
                lock.action.wire_name,
                lock.hand_index,
            )
            raise ActionLockedError()
        return record
