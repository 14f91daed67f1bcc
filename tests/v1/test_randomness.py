"""Tests for the blackjack randomness endpoints."""

from collections.abc import Callable

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from randomness_oracle.core.errors import ChainReadError
from randomness_oracle.core.security import verify_signature
from randomness_oracle.models.randomness import BlackjackAction
from randomness_oracle.services.oracle import RandomnessOracle
from randomness_oracle.services.rate_limit import RateLimiter
from randomness_oracle.utils.hash import turn_message_hash

RANDOM_URL = "/api/v1/blackjack/random"
PLAYER = "0x00000000000000000000000000000000000000Aa"


def test_deal_replay_and_action_lock_scenario(client: TestClient) -> None:
    """Table 42 at nonce 7: deal, replay the deal, then try to switch to hit."""
    r = client.post(RANDOM_URL, json={"tableId": "42", "action": "deal"})
    assert r.status_code == status.HTTP_200_OK
    first = r.json()
    assert first["cached"] is False
    assert first["nonce"] == 7

    r = client.post(RANDOM_URL, json={"tableId": "42", "action": "deal"})
    assert r.status_code == status.HTTP_200_OK
    second = r.json()
    assert second["cached"] is True
    assert second["randomSeed"] == first["randomSeed"]
    assert second["signature"] == first["signature"]

    r = client.post(RANDOM_URL, json={"tableId": "42", "action": "hit"})
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    body = r.json()
    assert body["code"] == "ACTION_LOCKED"
    assert "cannot change your decision" in body["error"]


def test_response_shape_and_signature(client: TestClient) -> None:
    r = client.post(RANDOM_URL, json={"tableId": "42", "action": "double", "handIndex": 1})
    assert r.status_code == status.HTTP_200_OK
    data = r.json()

    assert set(data) == {"randomSeed", "nonce", "signature", "expiresAt", "signerAddress", "cached"}
    assert data["randomSeed"].startswith("0x") and len(data["randomSeed"]) == 66
    assert data["signature"].startswith("0x") and len(data["signature"]) == 132
    assert isinstance(data["expiresAt"], int)

    seed = bytes.fromhex(data["randomSeed"][2:])
    message_hash = turn_message_hash(42, 7, seed, BlackjackAction.DOUBLE, 1)
    assert verify_signature(data["signerAddress"], message_hash, data["signature"])


def test_hand_index_defaults_to_zero(client: TestClient) -> None:
    r = client.post(RANDOM_URL, json={"tableId": "42", "action": "hit"})
    assert r.status_code == status.HTTP_200_OK

    r = client.post(RANDOM_URL, json={"tableId": "42", "action": "hit", "handIndex": 0})
    assert r.json()["cached"] is True

    r = client.post(RANDOM_URL, json={"tableId": "42", "action": "hit", "handIndex": 1})
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert r.json()["code"] == "ACTION_LOCKED"


def test_land_id_alias_and_numeric_table_id(client: TestClient) -> None:
    r = client.post(RANDOM_URL, json={"landId": "42", "action": "stand"})
    assert r.status_code == status.HTTP_200_OK

    r = client.post(RANDOM_URL, json={"tableId": 42, "action": "stand"})
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["cached"] is True


@pytest.mark.parametrize(
    "payload",
    [
        {"action": "deal"},
        {"tableId": "", "action": "deal"},
        {"tableId": "abc", "action": "deal"},
        {"tableId": "-1", "action": "deal"},
        {"tableId": "42", "action": "peek"},
        {"tableId": "42"},
        {"tableId": "42", "action": "hit", "handIndex": 256},
        {"tableId": "42", "action": "hit", "playerAddress": "0x1234"},
    ],
)
def test_malformed_requests_rejected_before_chain_read(
    client: TestClient, chain_reader, payload: dict
) -> None:
    r = client.post(RANDOM_URL, json=payload)
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    body = r.json()
    assert body["code"] == "INVALID_INPUT"
    assert body["error"]
    assert chain_reader.calls == []


def test_rate_limit_by_player_address(
    client: TestClient, oracle: RandomnessOracle, clock
) -> None:
    oracle.rate_limiter = RateLimiter(2, 60.0, clock=clock)
    payload = {"tableId": "42", "action": "deal", "playerAddress": PLAYER}

    assert client.post(RANDOM_URL, json=payload).status_code == status.HTTP_200_OK
    assert client.post(RANDOM_URL, json=payload).status_code == status.HTTP_200_OK

    r = client.post(RANDOM_URL, json={**payload, "playerAddress": PLAYER.lower()})
    assert r.status_code == status.HTTP_429_TOO_MANY_REQUESTS
    assert r.json()["code"] == "RATE_LIMITED"

    clock.advance(61)
    assert client.post(RANDOM_URL, json=payload).status_code == status.HTTP_200_OK


def test_rate_limit_falls_back_to_client_host(
    client: TestClient, oracle: RandomnessOracle, clock
) -> None:
    oracle.rate_limiter = RateLimiter(1, 60.0, clock=clock)
    payload = {"tableId": "42", "action": "deal"}

    assert client.post(RANDOM_URL, json=payload).status_code == status.HTTP_200_OK
    assert client.post(RANDOM_URL, json=payload).status_code == status.HTTP_429_TOO_MANY_REQUESTS


def test_chain_read_failure_returns_500(client: TestClient, chain_reader) -> None:
    chain_reader.error = ChainReadError("rpc unavailable")

    r = client.post(RANDOM_URL, json={"tableId": "42", "action": "deal"})
    assert r.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert r.json()["code"] == "CHAIN_READ_FAILED"


def test_unexpected_error_returns_internal(
    client: TestClient, oracle: RandomnessOracle, mocker
) -> None:
    mocker.patch.object(oracle.cache, "get_or_create", side_effect=KeyError("boom"))

    r = client.post(RANDOM_URL, json={"tableId": "42", "action": "deal"})
    assert r.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert r.json() == {"error": "Internal server error", "code": "INTERNAL"}


def test_unconfigured_signer_returns_503_before_validation(
    app, make_oracle: Callable[..., RandomnessOracle], use_oracle
) -> None:
    use_oracle(make_oracle(signer=None))
    with TestClient(app) as client:
        r = client.post(RANDOM_URL, json={"action": "bogus"})
    assert r.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert r.json()["code"] == "SIGNER_UNAVAILABLE"


def test_status_available_reports_signer_and_cache_size(
    client: TestClient, oracle: RandomnessOracle
) -> None:
    r = client.get(RANDOM_URL)
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {
        "status": "available",
        "signerAddress": oracle.signer.address,
        "cacheSize": 0,
    }

    client.post(RANDOM_URL, json={"tableId": "42", "action": "deal"})
    assert client.get(RANDOM_URL).json()["cacheSize"] == 1


def test_status_unavailable_without_signer(
    app, make_oracle: Callable[..., RandomnessOracle], use_oracle
) -> None:
    use_oracle(make_oracle(signer=None))
    with TestClient(app) as client:
        r = client.get(RANDOM_URL)
    assert r.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    data = r.json()
    assert data["status"] == "unavailable"
    assert "signerAddress" not in data


def test_status_error_with_invalid_signer(
    app, make_oracle: Callable[..., RandomnessOracle], use_oracle
) -> None:
    use_oracle(make_oracle(signer=None, signer_error="Invalid signer configuration"))
    with TestClient(app) as client:
        r = client.get(RANDOM_URL)
    assert r.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert r.json() == {"status": "error", "message": "Invalid signer configuration"}
