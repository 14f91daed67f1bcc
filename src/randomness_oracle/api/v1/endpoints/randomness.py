# src/randomness_oracle/api/v1/endpoints/randomness.py
"""Server-signed randomness endpoints for blackjack tables.

Once randomness is issued for a ``(tableId, nonce)`` turn, the same randomness
is returned for every later request of that turn until the nonce is consumed
on-chain, so cancelling and retrying cannot shop for a better outcome.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from randomness_oracle.core.errors import InternalOracleError, OracleError, SignerUnavailableError
from randomness_oracle.schemas.randomness import (
    ErrorResponse,
    RandomnessRequest,
    RandomnessResponse,
    RandomnessStatus,
)
from randomness_oracle.services.oracle import (
    STATUS_AVAILABLE,
    STATUS_UNAVAILABLE,
    RandomnessOracle,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/blackjack", tags=["blackjack", "randomness"])


def get_oracle_dep(request: Request) -> RandomnessOracle:
    """Return the oracle owned by the running application."""
    return request.app.state.oracle


def get_operational_oracle(
    oracle: Annotated[RandomnessOracle, Depends(get_oracle_dep)],
) -> RandomnessOracle:
    """Return the oracle, rejecting the request before body parsing if it cannot sign."""
    if not oracle.operational:
        logger.error("Randomness requested but the signer is not configured")
        raise SignerUnavailableError()
    return oracle


OperationalOracleDep = Annotated[RandomnessOracle, Depends(get_operational_oracle)]
OracleDep = Annotated[RandomnessOracle, Depends(get_oracle_dep)]


def _requester_identity(request: Request, body: RandomnessRequest) -> str | None:
    if body.player_address:
        return body.player_address
    if request.client is not None:
        return request.client.host
    return None


@router.post(
    "/random",
    response_model=RandomnessResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_429_TOO_MANY_REQUESTS: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
        status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse},
    },
)
async def issue_randomness(
    body: RandomnessRequest,
    request: Request,
    oracle: OperationalOracleDep,
) -> RandomnessResponse:
    """Issue (or replay) signed randomness for the table's current turn.

    Args:
        body: Table, action and hand the randomness is requested for
        request: Incoming request, used for the fallback rate-limit identity
        oracle: Oracle owning cache, rate limiter and signer

    Returns:
        Seed, nonce, signature, advisory expiry, signer address and cache flag

    Raises:
        OracleError: Mapped to its status code by the application handler
    """
    try:
        issued = await oracle.issue(
            body.table_id,
            body.blackjack_action,
            body.hand_index,
            requester=_requester_identity(request, body),
        )
    except OracleError:
        raise
    except Exception as exc:
        logger.exception("Blackjack random API error")
        raise InternalOracleError() from exc

    return RandomnessResponse.from_issued(issued)


@router.get("/random", response_model=RandomnessStatus, response_model_exclude_none=True)
async def randomness_status(oracle: OracleDep) -> JSONResponse:
    """Report whether the signer is configured, its address and the cache size."""
    snapshot = oracle.status()
    if snapshot.status == STATUS_AVAILABLE:
        status_code = status.HTTP_200_OK
    elif snapshot.status == STATUS_UNAVAILABLE:
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    payload = RandomnessStatus(
        status=snapshot.status,
        signerAddress=snapshot.signer_address,
        cacheSize=snapshot.cache_size,
        message=snapshot.message,
    )
    return JSONResponse(
        status_code=status_code,
        content=payload.model_dump(exclude_none=True),
    )
