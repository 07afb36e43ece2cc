"""
Database schema and models for the off-chain bet mirror.

Rows here are a read-optimised copy of on-chain Bet objects. The chain stays
authoritative for stake, odds and settlement; `tx_hash` ties each row to the
transaction that created its Bet object.
"""

from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any, List

BET_STATUSES = ("pending", "won", "lost", "cashed_out", "void")

# Soft transitions only; rows are never deleted
ALLOWED_STATUS_TRANSITIONS = {
    "pending": {"won", "lost", "cashed_out", "void"},
}

SYNC_SOURCES = ("placement", "reconciliation")


@dataclass
class MirrorBet:
    """Single bet row keyed by its creating transaction digest."""
    wallet_address: str
    event_id: str
    market_id: str
    prediction: str
    bet_amount: float
    odds: float
    potential_payout: float
    tx_hash: str
    currency: str = "SUI"
    outcome_id: Optional[str] = None
    bet_object_id: Optional[str] = None
    status: str = "pending"
    bet_type: str = "single"
    placed_at: Optional[str] = None
    settled_at: Optional[str] = None
    sync_source: str = "placement"
    id: Optional[int] = None

    def to_record(self) -> Dict[str, Any]:
        record = asdict(self)
        for key in ("id", "placed_at"):
            if record[key] is None:
                del record[key]
        record["wallet_address"] = self.wallet_address.lower()
        return record


@dataclass
class BetLeg:
    event_id: str
    market_id: str
    odds: float
    outcome_id: Optional[str] = None
    prediction: Optional[str] = None
    status: str = "pending"
    parlay_id: Optional[int] = None


@dataclass
class MirrorParlay:
    """Parlay parent row; legs are stored in `bet_legs`."""
    wallet_address: str
    bet_amount: float
    total_odds: float
    potential_payout: float
    tx_hash: str
    currency: str = "SUI"
    bet_object_id: Optional[str] = None
    status: str = "pending"
    placed_at: Optional[str] = None
    settled_at: Optional[str] = None
    legs: List[BetLeg] = field(default_factory=list)
    id: Optional[int] = None

    def to_record(self) -> Dict[str, Any]:
        record = asdict(self)
        del record["legs"]
        for key in ("id", "placed_at"):
            if record[key] is None:
                del record[key]
        record["wallet_address"] = self.wallet_address.lower()
        return record


CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS bets (
    id BIGSERIAL PRIMARY KEY,
    wallet_address TEXT NOT NULL,
    event_id TEXT NOT NULL,
    market_id TEXT NOT NULL,
    outcome_id TEXT,
    prediction TEXT NOT NULL,
    bet_amount NUMERIC NOT NULL,
    odds NUMERIC NOT NULL,
    potential_payout NUMERIC NOT NULL,
    currency TEXT NOT NULL DEFAULT 'SUI',
    status TEXT NOT NULL DEFAULT 'pending',
    bet_type TEXT NOT NULL DEFAULT 'single',
    tx_hash TEXT NOT NULL UNIQUE,
    bet_object_id TEXT UNIQUE,
    sync_source TEXT NOT NULL DEFAULT 'placement',
    placed_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    settled_at TIMESTAMPTZ
);
CREATE INDEX IF NOT EXISTS idx_bets_wallet ON bets(wallet_address);
CREATE INDEX IF NOT EXISTS idx_bets_status ON bets(status);

CREATE TABLE IF NOT EXISTS parlays (
    id BIGSERIAL PRIMARY KEY,
    wallet_address TEXT NOT NULL,
    bet_amount NUMERIC NOT NULL,
    total_odds NUMERIC NOT NULL,
    potential_payout NUMERIC NOT NULL,
    currency TEXT NOT NULL DEFAULT 'SUI',
    status TEXT NOT NULL DEFAULT 'pending',
    tx_hash TEXT NOT NULL UNIQUE,
    bet_object_id TEXT UNIQUE,
    placed_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    settled_at TIMESTAMPTZ
);
CREATE INDEX IF NOT EXISTS idx_parlays_wallet ON parlays(wallet_address);

CREATE TABLE IF NOT EXISTS bet_legs (
    id BIGSERIAL PRIMARY KEY,
    parlay_id BIGINT NOT NULL REFERENCES parlays(id),
    event_id TEXT NOT NULL,
    market_id TEXT NOT NULL,
    outcome_id TEXT,
    odds NUMERIC NOT NULL,
    prediction TEXT,
    status TEXT NOT NULL DEFAULT 'pending'
);
CREATE INDEX IF NOT EXISTS idx_bet_legs_parlay ON bet_legs(parlay_id);
"""
