"""
Shared fixtures: in-memory stand-ins for the Supabase table API, the Sui
fullnode and the wallet, so flows run end to end without a network.
"""
import copy
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
from postgrest.exceptions import APIError

from betting.exceptions import SigningError
from clients.sui import CoinRef, SuiRpcError
from clients.wallet import SignedTransaction
from config.settings import ChainConfig
from database.client import BetMirrorDatabase

PACKAGE_ID = "0xpkg"
PLATFORM_ID = "0xplatform"
WALLET = "0xABCDEF"
SUI = "0x2::sui::SUI"
SBETS = "0xsbets::sbets::SBETS"

UNIQUE_COLUMNS = {
    "bets": ("tx_hash", "bet_object_id"),
    "parlays": ("tx_hash", "bet_object_id"),
}


# Supabase


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.op = "select"
        self.payload: Any = None
        self.filters: List[tuple] = []
        self._order: Optional[tuple] = None
        self._limit: Optional[int] = None

    def select(self, *_columns):
        self.op = "select"
        return self

    def insert(self, payload):
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.op = "update"
        self.payload = payload
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def limit(self, n):
        self._limit = n
        return self

    def _matches(self, row):
        return all(row.get(c) == v for c, v in self.filters)

    def execute(self):
        rows = self.db.tables.setdefault(self.table, [])
        self.db.queries.append((self.table, self.op, list(self.filters)))
        if self.db.fail_queries.get(self.table, 0) > 0:
            self.db.fail_queries[self.table] -= 1
            raise APIError({"code": "08006", "message": "connection failure"})

        if self.op == "insert":
            if self.table in self.db.fail_tables:
                raise APIError({"code": "08006", "message": "connection failure"})
            records = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = []
            for record in records:
                for column in UNIQUE_COLUMNS.get(self.table, ()):
                    value = record.get(column)
                    if value is not None and any(r.get(column) == value for r in rows):
                        raise APIError({
                            "code": "23505",
                            "message": f'duplicate key value violates unique constraint "{self.table}_{column}_key"',
                        })
                row = dict(record)
                row["id"] = self.db.next_id(self.table)
                rows.append(row)
                inserted.append(copy.deepcopy(row))
            return SimpleNamespace(data=inserted)

        matched = [r for r in rows if self._matches(r)]
        if self.op == "update":
            for row in matched:
                row.update(self.payload)
            return SimpleNamespace(data=copy.deepcopy(matched))

        if self.db.skip_selects.get(self.table, 0) > 0:
            self.db.skip_selects[self.table] -= 1
            return SimpleNamespace(data=[])
        if self._order:
            column, desc = self._order
            matched.sort(key=lambda r: r.get(column) or "", reverse=desc)
        if self._limit is not None:
            matched = matched[:self._limit]
        return SimpleNamespace(data=copy.deepcopy(matched))


class FakeSupabase:
    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.queries: List[tuple] = []
        self.fail_tables: set = set()
        self.fail_queries: Dict[str, int] = {}
        self.skip_selects: Dict[str, int] = {}
        self._ids: Dict[str, int] = {}

    def next_id(self, table):
        self._ids[table] = self._ids.get(table, 0) + 1
        return self._ids[table]

    def table(self, name):
        return FakeQuery(self, name)


# Sui fullnode


def vec(text: str) -> List[int]:
    return list(text.encode("utf-8"))


def bet_fields(stake_mist: int, odds_bps: int, bettor: str = WALLET, status: int = 0,
               event_id: str = "evt-42", market_id: str = "winner", prediction: str = "home",
               coin_type: int = 0, placed_at: int = 1_700_000_000_000) -> Dict[str, Any]:
    return {
        "bettor": bettor,
        "event_id": vec(event_id),
        "market_id": vec(market_id),
        "prediction": vec(prediction),
        "stake": str(stake_mist),
        "odds": str(odds_bps),
        "potential_payout": str(stake_mist * odds_bps // 100),
        "coin_type": coin_type,
        "status": status,
        "placed_at": str(placed_at),
        "settled_at": "0",
        "platform_fee": "0",
    }


def bet_object(object_id: str, previous_tx: str = "0xprev", **fields) -> Dict[str, Any]:
    return {
        "objectId": object_id,
        "type": f"{PACKAGE_ID}::betting::Bet",
        "previousTransaction": previous_tx,
        "content": {"dataType": "moveObject", "fields": bet_fields(**fields)},
    }


def bet_placed_event(object_id: str, digest: str, **fields) -> Dict[str, Any]:
    parsed = bet_fields(**fields)
    parsed["bet_id"] = object_id
    return {
        "id": {"txDigest": digest, "eventSeq": "0"},
        "type": f"{PACKAGE_ID}::betting::BetPlaced",
        "parsedJson": parsed,
    }


def created_bet_response(digest: str, object_id: Optional[str] = "0xbet1") -> Dict[str, Any]:
    changes = [{"type": "mutated", "objectType": f"0x2::coin::Coin<{SUI}>", "objectId": "0xcoinA"}]
    if object_id:
        changes.append({"type": "created", "objectType": f"{PACKAGE_ID}::betting::Bet", "objectId": object_id})
    return {
        "digest": digest,
        "effects": {"status": {"status": "success"}},
        "objectChanges": changes,
        "checkpoint": "1234",
    }


class FakeSui:
    def __init__(self):
        self.calls: List[tuple] = []
        self.coins: Dict[str, List[CoinRef]] = {}
        self.coins_error: Optional[Exception] = None
        self.execute_response: Optional[Dict[str, Any]] = None
        self.execute_error: Optional[Exception] = None
        self.transactions: Dict[str, Dict[str, Any]] = {}
        self.wait_error: Optional[Exception] = None
        self.objects: Dict[str, Dict[str, Any]] = {}
        self.events: Dict[str, List[Dict[str, Any]]] = {}

    def add_coin(self, owner, object_id, balance_sui, coin_type=SUI):
        self.coins.setdefault(owner, []).append(CoinRef(object_id, int(round(balance_sui * 10**9)), coin_type))

    async def get_all_coins_of_type(self, owner, coin_type):
        self.calls.append(("get_all_coins_of_type", owner, coin_type))
        if self.coins_error:
            raise self.coins_error
        return [c for c in self.coins.get(owner, []) if c.coin_type == coin_type]

    async def execute_transaction_block(self, tx_bytes, signatures, options=None, request_type="WaitForLocalExecution"):
        self.calls.append(("execute_transaction_block", tx_bytes))
        if self.execute_error:
            raise self.execute_error
        return self.execute_response

    async def get_transaction_block(self, digest, options=None):
        self.calls.append(("get_transaction_block", digest))
        if digest in self.transactions:
            return self.transactions[digest]
        raise SuiRpcError(f"Could not find the referenced transaction [TransactionDigest({digest})]")

    async def wait_for_transaction(self, digest, timeout=15.0, poll_interval=1.0, options=None):
        self.calls.append(("wait_for_transaction", digest))
        if self.wait_error:
            raise self.wait_error
        return self.transactions[digest]

    async def get_object(self, object_id, options=None):
        self.calls.append(("get_object", object_id))
        if object_id in self.objects:
            return self.objects[object_id]
        raise SuiRpcError(f"Object {object_id} unavailable: notExists")

    async def get_all_owned_objects(self, owner, struct_type):
        self.calls.append(("get_all_owned_objects", owner, struct_type))
        return [o for o in self.objects.values()
                if o["content"]["fields"]["bettor"] == owner and o["type"] == struct_type]

    async def get_all_events(self, query, max_pages=None):
        self.calls.append(("get_all_events", query))
        return self.events.get(query.get("Sender"), [])

    def called(self, name):
        return [c for c in self.calls if c[0] == name]


class FakeSigner:
    def __init__(self, reject: bool = False):
        self.reject = reject
        self.signed = []

    async def sign_transaction(self, transaction):
        if self.reject:
            raise SigningError("User rejected the request")
        self.signed.append(transaction)
        return SignedTransaction(tx_bytes="dHhieXRlcw==", signatures=["c2ln"])


@pytest.fixture
def chain():
    return ChainConfig(package_id=PACKAGE_ID, platform_object_id=PLATFORM_ID, sbets_coin_type=SBETS)


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def db(fake_supabase):
    return BetMirrorDatabase(client=fake_supabase)


@pytest.fixture
def sui():
    return FakeSui()


@pytest.fixture
def signer():
    return FakeSigner()
