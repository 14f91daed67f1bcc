# src/randomness_oracle/main.py
"""Main entry point for the randomness oracle application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from randomness_oracle.api.v1 import randomness_router, system_router
from randomness_oracle.core.errors import InvalidInputError, OracleError
from randomness_oracle.core.settings import settings
from randomness_oracle.services.oracle import RandomnessOracle, build_oracle
from randomness_oracle.services.sweeper import CacheSweepWorker

logging.getLogger("randomness_oracle").setLevel(settings.log_level.upper())
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Randomness Oracle API",
    description="Server-signed, replay-safe randomness for on-chain blackjack",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(randomness_router, prefix="/api/v1")
app.include_router(system_router, prefix="/api/v1")


@app.exception_handler(OracleError)
async def oracle_error_handler(request: Request, exc: OracleError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "code": exc.code},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", InvalidInputError.default_message) if errors else None
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": message or InvalidInputError.default_message,
            "code": InvalidInputError.code,
        },
    )


@app.on_event("startup")
async def on_startup() -> None:
    oracle = build_oracle(settings)
    worker = CacheSweepWorker(
        oracle.cache,
        oracle.rate_limiter,
        interval_seconds=settings.cache_sweep_interval_seconds,
    )
    await worker.start()
    app.state.oracle = oracle
    app.state.sweep_worker = worker
    logger.info("Randomness oracle started, status=%s", oracle.status().status)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    worker: CacheSweepWorker | None = getattr(app.state, "sweep_worker", None)
    if worker:
        await worker.stop()
    oracle: RandomnessOracle | None = getattr(app.state, "oracle", None)
    if oracle:
        await oracle.close()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Server-signed randomness oracle",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("randomness_oracle.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
