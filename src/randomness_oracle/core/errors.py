"""Error taxonomy for the randomness oracle.

Every failure is terminal for the request that triggered it. Each error kind
carries the code reported to clients and the HTTP status it maps to.
"""

from __future__ import annotations

from typing import ClassVar

from fastapi import status


class OracleError(RuntimeError):
    """Base exception raised for oracle failures."""

    code: ClassVar[str] = "INTERNAL"
    status_code: ClassVar[int] = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: ClassVar[str] = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class InvalidInputError(OracleError):
    """Raised when a request is malformed."""

    code = "INVALID_INPUT"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class RateLimitedError(OracleError):
    """Raised when a requester exceeded its request budget for the window."""

    code = "RATE_LIMITED"
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Rate limit exceeded. Please wait before making more requests."


class ActionLockedError(OracleError):
    """Raised when a turn already has randomness issued for another decision.

    Not transient: repeating the request fails until the on-chain nonce advances.
    """

    code = "ACTION_LOCKED"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Action Locked: You cannot change your decision for this turn."


class ChainReadError(OracleError):
    """Raised when the turn nonce could not be read from the contract."""

    code = "CHAIN_READ_FAILED"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Failed to read game state"


class SignerUnavailableError(OracleError):
    """Raised when no usable signing key is configured."""

    code = "SIGNER_UNAVAILABLE"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Randomness service not configured"


class InternalOracleError(OracleError):
    """Raised for unexpected failures while serving a request."""
