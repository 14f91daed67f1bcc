# tests/conftest.py
from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterator
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from randomness_oracle.api.v1.endpoints.randomness import get_oracle_dep
from randomness_oracle.main import app as fastapi_app
from randomness_oracle.services.oracle import RandomnessOracle
from randomness_oracle.services.randomness_cache import NonceRandomnessCache
from randomness_oracle.services.rate_limit import RateLimiter
from randomness_oracle.services.signing import RandomnessSigner

TEST_SIGNER_KEY = "0x" + "11" * 32
T0 = 1_700_000_000.0


class FakeClock:
    """Manually advanced clock shared by the cache, limiter and oracle."""

    def __init__(self, start: float = T0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeChainReader:
    """In-memory stand-in for the contract nonce view."""

    def __init__(self, nonces: dict[int, int] | None = None) -> None:
        self.nonces: dict[int, int] = dict(nonces or {})
        self.error: Exception | None = None
        self.delay = 0.0
        self.calls: list[int] = []

    async def get_nonce(self, table_id: int) -> int:
        self.calls.append(table_id)
        if self.delay:
            await asyncio.sleep(self.delay)
        else:
            await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return self.nonces.get(table_id, 0)


@pytest.fixture()
def signer() -> RandomnessSigner:
    return RandomnessSigner(TEST_SIGNER_KEY)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def chain_reader() -> FakeChainReader:
    return FakeChainReader({42: 7})


@pytest.fixture()
def make_oracle(
    signer: RandomnessSigner, clock: FakeClock, chain_reader: FakeChainReader
) -> Callable[..., RandomnessOracle]:
    """Return a factory building a fresh oracle around the shared fakes."""

    def _make(**overrides: Any) -> RandomnessOracle:
        options: dict[str, Any] = {
            "chain_reader": chain_reader,
            "cache": NonceRandomnessCache(300.0, clock=clock),
            "rate_limiter": RateLimiter(30, 60.0, clock=clock),
            "signer": signer,
            "signature_validity_seconds": 60,
            "chain_timeout_seconds": 1.0,
            "clock": clock,
        }
        options.update(overrides)
        return RandomnessOracle(**options)

    return _make


@pytest.fixture()
def oracle(make_oracle: Callable[..., RandomnessOracle]) -> RandomnessOracle:
    return make_oracle()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def use_oracle(app: FastAPI) -> Iterator[Callable[[RandomnessOracle], None]]:
    """Route the randomness endpoints to a test-built oracle."""

    def _use(instance: RandomnessOracle) -> None:
        app.dependency_overrides[get_oracle_dep] = lambda: instance

    try:
        yield _use
    finally:
        app.dependency_overrides.pop(get_oracle_dep, None)


@pytest.fixture()
def client(
    app: FastAPI,
    oracle: RandomnessOracle,
    use_oracle: Callable[[RandomnessOracle], None],
) -> Iterator[TestClient]:
    use_oracle(oracle)
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client
