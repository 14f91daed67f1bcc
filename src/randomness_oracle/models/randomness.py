"""Domain types for issued randomness."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class BlackjackAction(IntEnum):
    """Decision a randomness record is issued for, with its uint8 wire value.

    ``DEAL`` uses a reserved sentinel since dealing is not a decision on an
    existing hand.
    """

    HIT = 0
    STAND = 1
    DOUBLE = 2
    SPLIT = 3
    SURRENDER = 4
    DEAL = 255

    @classmethod
    def from_name(cls, name: str) -> BlackjackAction:
        """Decode a lower-case action name as sent by clients."""
        try:
            return cls[name.upper()]
        except KeyError as err:
            raise ValueError(f"Unknown action: {name!r}") from err

    @property
    def wire_name(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class GameTurnKey:
    """One decision point in one game: a table and its on-chain turn nonce."""

    table_id: int
    nonce: int


@dataclass(frozen=True)
class ActionLock:
    """The decision (action and hand) a record was issued under."""

    action: BlackjackAction
    hand_index: int = 0


@dataclass(frozen=True)
class SignedRandomnessRecord:
    """Signed seed issued once per :class:`GameTurnKey`."""

    key: GameTurnKey
    random_seed: bytes
    signature: bytes
    signer_address: str
    issued_at: float
    lock: ActionLock

    @property
    def random_seed_hex(self) -> str:
        return "0x" + self.random_seed.hex()

    @property
    def signature_hex(self) -> str:
        return "0x" + self.signature.hex()

    def is_live(self, now: float, retention_seconds: float) -> bool:
        """Return True while the record is inside its retention window."""
        return now - self.issued_at <= retention_seconds


@dataclass(frozen=True)
class IssuedRandomness:
    """Outcome of one successful randomness request."""

    record: SignedRandomnessRecord
    cached: bool
    expires_at: int
