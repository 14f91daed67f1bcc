"""Domain models for the randomness oracle."""

from .randomness import (
    ActionLock,
    BlackjackAction,
    GameTurnKey,
    IssuedRandomness,
    SignedRandomnessRecord,
)

__all__ = [
    "ActionLock",
    "BlackjackAction",
    "GameTurnKey",
    "IssuedRandomness",
    "SignedRandomnessRecord",
]
