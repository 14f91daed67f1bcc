# src/randomness_oracle/schemas/randomness.py
"""Randomness request/response schemas."""

from __future__ import annotations

from typing import Literal

from eth_utils import is_address
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from randomness_oracle.models.randomness import BlackjackAction, IssuedRandomness
from randomness_oracle.utils.hash import UINT8_MAX, UINT256_MAX

ActionName = Literal["deal", "hit", "stand", "double", "split", "surrender"]


class RandomnessRequest(BaseModel):
    """Schema for requesting signed randomness for a table's current turn."""

    model_config = ConfigDict(populate_by_name=True)

    table_id: int = Field(
        ...,
        validation_alias=AliasChoices("tableId", "landId", "table_id"),
        description="Game table identifier as a decimal string",
    )
    action: ActionName
    hand_index: int = Field(
        0,
        validation_alias=AliasChoices("handIndex", "hand_index"),
        ge=0,
        le=UINT8_MAX,
    )
    player_address: str | None = Field(
        None,
        validation_alias=AliasChoices("playerAddress", "player_address"),
        description="Wallet address used as the rate-limit identity",
    )

    @field_validator("table_id", mode="before")
    @classmethod
    def _parse_table_id(cls, value: object) -> int:
        if isinstance(value, bool):
            raise ValueError("tableId must be a decimal string")
        if isinstance(value, int):
            table_id = value
        elif isinstance(value, str) and value.strip().isdigit():
            table_id = int(value.strip())
        else:
            raise ValueError("tableId must be a decimal string")
        if table_id > UINT256_MAX or table_id < 0:
            raise ValueError("tableId is out of range")
        return table_id

    @field_validator("hand_index", mode="before")
    @classmethod
    def _reject_bool_hand(cls, value: object) -> object:
        if isinstance(value, bool):
            raise ValueError("handIndex must be an integer")
        return value

    @field_validator("player_address")
    @classmethod
    def _check_address(cls, value: str | None) -> str | None:
        if value is None:
            return None
        if not is_address(value):
            raise ValueError("playerAddress must be a 20-byte hex address")
        return value.lower()

    @property
    def blackjack_action(self) -> BlackjackAction:
        return BlackjackAction.from_name(self.action)


class RandomnessResponse(BaseModel):
    """API response payload carrying a signed seed."""

    randomSeed: str
    nonce: int
    signature: str
    expiresAt: int
    signerAddress: str
    cached: bool

    @classmethod
    def from_issued(cls, issued: IssuedRandomness) -> RandomnessResponse:
        record = issued.record
        return cls(
            randomSeed=record.random_seed_hex,
            nonce=record.key.nonce,
            signature=record.signature_hex,
            expiresAt=issued.expires_at,
            signerAddress=record.signer_address,
            cached=issued.cached,
        )


class RandomnessStatus(BaseModel):
    """Service status snapshot."""

    status: Literal["available", "unavailable", "error"]
    signerAddress: str | None = None
    cacheSize: int | None = None
    message: str | None = None


class ErrorResponse(BaseModel):
    """Body returned for every failed request."""

    error: str
    code: str
