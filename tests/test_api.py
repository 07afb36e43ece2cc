"""
HTTP surface: camelCase payloads, status codes and the error envelope.
"""
import pytest
from fastapi.testclient import TestClient

from api.dependencies import cleanup_dependencies, initialize_dependencies
from clients.sui import SuiRpcError
from conftest import WALLET, FakeSigner, bet_object, created_bet_response
from database.client import BetMirrorDatabase
from main import app


@pytest.fixture
def client(chain, fake_supabase, sui):
    initialize_dependencies(
        db_client=BetMirrorDatabase(client=fake_supabase),
        sui_client=sui,
        signer=FakeSigner(),
        chain=chain,
    )
    yield TestClient(app)
    cleanup_dependencies()


def _bet_payload(**overrides):
    payload = {
        "walletAddress": WALLET,
        "eventId": "evt-42",
        "marketId": "winner",
        "outcomeId": "home",
        "prediction": "home",
        "betAmount": 2,
        "odds": 3.25,
        "feeCurrency": "SUI",
        "txHash": "0xdigest",
    }
    payload.update(overrides)
    return payload


def test_create_bet_returns_camel_case_row(client):
    response = client.post("/api/bets", json=_bet_payload())

    assert response.status_code == 200
    body = response.json()
    assert body["syncStatus"] == "mirrored"
    assert body["duplicate"] is False
    assert body["bet"]["txHash"] == "0xdigest"
    assert body["bet"]["betAmount"] == 2.0
    assert body["bet"]["potentialPayout"] == 6.5
    assert body["bet"]["status"] == "pending"

    again = client.post("/api/bets", json=_bet_payload())
    assert again.json()["duplicate"] is True
    assert again.json()["bet"]["id"] == body["bet"]["id"]


def test_create_bet_validation_error_envelope(client):
    response = client.post("/api/bets", json=_bet_payload(betAmount=500))

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_BET"


def test_create_bet_mismatch_with_chain_is_409(client, sui):
    sui.objects["0xbet1"] = bet_object("0xbet1", stake_mist=1_000_000_000, odds_bps=325)

    response = client.post("/api/bets", json=_bet_payload(onChainBetId="0xbet1"))

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "ONCHAIN_MISMATCH"


def test_database_failure_answers_pending_sync(client, fake_supabase):
    fake_supabase.fail_tables.add("bets")

    response = client.post("/api/bets", json=_bet_payload())

    assert response.status_code == 202
    assert response.json()["syncStatus"] == "pending_sync"
    assert response.json()["txHash"] == "0xdigest"


def test_history_and_single_bet(client):
    created = client.post("/api/bets", json=_bet_payload()).json()["bet"]

    history = client.get("/api/bets", params={"wallet": WALLET})
    assert [b["id"] for b in history.json()] == [created["id"]]

    assert client.get(f"/api/bets/{created['id']}").json()["txHash"] == "0xdigest"
    missing = client.get("/api/bets/999")
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "BET_NOT_FOUND"

    assert client.get("/api/bets", params={"wallet": WALLET, "status": "bogus"}).status_code == 400


def test_build_transaction_returns_unsigned_block(client, sui):
    sui.add_coin(WALLET, "0xcoinA", 10)
    payload = _bet_payload()
    del payload["txHash"]

    response = client.post("/api/bets/build-transaction", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["stakeMist"] == "2000000000"
    assert body["oddsBps"] == 325
    assert body["transaction"]["gasData"]["budget"] == "20000000"


def test_build_transaction_rejects_stake_below_minimum(client, sui):
    payload = _bet_payload(betAmount=0.01)
    del payload["txHash"]

    response = client.post("/api/bets/build-transaction", json=payload)

    assert response.status_code == 400
    assert "Minimum bet is 0.05 SUI" in response.json()["error"]["message"]
    assert sui.calls == []


def test_place_runs_the_whole_flow(client, sui, fake_supabase):
    sui.add_coin(WALLET, "0xcoinA", 10)
    sui.execute_response = created_bet_response("0xplaced", "0xbet1")
    payload = _bet_payload()
    del payload["txHash"]

    response = client.post("/api/bets/place", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["state"] == "mirrored"
    assert body["txHash"] == "0xplaced"
    assert fake_supabase.tables["bets"][0]["bet_object_id"] == "0xbet1"


def test_parlay_mirror_and_lookup(client):
    payload = {
        "walletAddress": WALLET,
        "betAmount": 10,
        "txHash": "0xparlay",
        "legs": [
            {"eventId": "e1", "outcomeId": "home", "odds": 1.8},
            {"eventId": "e2", "outcomeId": "draw", "odds": 2.1},
            {"eventId": "e3", "outcomeId": "away", "odds": 1.5},
        ],
    }

    response = client.post("/api/parlays", json=payload)

    assert response.status_code == 200
    parlay = response.json()["parlay"]
    assert parlay["totalOdds"] == 5.67
    assert len(parlay["legs"]) == 3
    assert client.get(f"/api/parlays/{parlay['id']}").json()["txHash"] == "0xparlay"
    assert client.get("/api/parlays/999").status_code == 404


def test_reconcile_endpoint(client, sui):
    sui.events[WALLET] = []
    response = client.post("/api/bets/reconcile", json={"walletAddress": WALLET})

    assert response.status_code == 200
    assert response.json()["scanned"] == 0


def test_contract_info_and_health(client, chain):
    info = client.get("/api/contract/info").json()
    assert info["packageId"] == chain.package_id
    assert info["functions"]["SUI"] == "0xpkg::betting::place_bet"
    assert info["limits"]["stake"]["SUI"] == {"min": "0.05", "max": "20"}

    health = client.get("/health").json()
    assert health["status"] == "healthy"
    assert health["mirror_database"] is True


def test_place_answers_502_when_coins_cannot_be_loaded(client, sui):
    sui.coins_error = SuiRpcError("sui_getCoins failed: 503")
    payload = _bet_payload()
    del payload["txHash"]

    response = client.post("/api/bets/place", json=payload)

    assert response.status_code == 502
    assert response.json()["state"] == "building"
    assert response.json()["errorType"] == "ChainError"
