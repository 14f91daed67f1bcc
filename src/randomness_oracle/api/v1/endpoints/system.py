"""System and transparency endpoints for the randomness oracle."""

from __future__ import annotations

from fastapi import APIRouter

from randomness_oracle.core.settings import settings
from randomness_oracle.models.randomness import BlackjackAction
from randomness_oracle.utils.hash import TURN_MESSAGE_TYPES

router = APIRouter(prefix="/system", tags=["system", "transparency"])


@router.get("/config")
async def get_public_config() -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes the signer key and the RPC URL (which may embed an API key);
    suitable for clients that want to reproduce the signed message.

    Returns:
        Dictionary containing app metadata, limits, cache lifetimes and the
        message encoding used for signatures
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
            "debug": settings.debug,
        },
        "rate_limit": {
            "max_requests": settings.rate_limit_max_requests,
            "window_seconds": settings.rate_limit_window_seconds,
        },
        "cache": {
            "retention_seconds": settings.cache_retention_seconds,
            "signature_validity_seconds": settings.signature_validity_seconds,
            "sweep_interval_seconds": settings.cache_sweep_interval_seconds,
        },
        "chain": {
            "contract_address": settings.contract_address,
            "nonce_function": f"{settings.nonce_function_name}(uint256)",
            "read_timeout_seconds": settings.chain_read_timeout_seconds,
        },
        "message": {
            "types": list(TURN_MESSAGE_TYPES),
            "fields": ["tableId", "nonce", "randomSeed", "action", "handIndex"],
            "hash": "keccak256",
            "signature": "eip191-personal-message",
            "actions": {action.wire_name: int(action) for action in BlackjackAction},
        },
    }
