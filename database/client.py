"""
Async database client for the Supabase-backed bet mirror.
"""

import asyncio
import logging
from dataclasses import asdict
from typing import List, Optional, Dict, Any, Tuple
from datetime import datetime, timezone

from postgrest.exceptions import APIError
from supabase import create_client, Client

from betting.exceptions import InvalidStatusTransitionError
from .schema import ALLOWED_STATUS_TRANSITIONS, BET_STATUSES, MirrorBet, MirrorParlay

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


def is_unique_violation(error: Exception) -> bool:
    code = getattr(error, "code", None)
    return code == UNIQUE_VIOLATION or "duplicate key" in str(error).lower()


class BetMirrorDatabase:
    """Async database client for mirrored bets and parlays.

    The Supabase client is synchronous, so every call is serialized through
    one lock. Inserts are idempotent on `tx_hash`: a second insert for the
    same digest returns the existing row instead of creating another.
    """

    def __init__(self, supabase_url: str = "", supabase_key: str = "", client: Optional[Client] = None):
        """Initialize database client with Supabase credentials.

        Args:
            supabase_url: Supabase project URL
            supabase_key: Supabase API key
            client: Pre-built client (tests, scripts); skips credential checks

        Raises:
            AssertionError: If URL or key is empty and no client is given
        """
        if client is None:
            assert supabase_url, "supabase_url must not be empty"
            assert supabase_key, "supabase_key must not be empty"
            client = create_client(supabase_url, supabase_key)

        self.supabase: Client = client
        self._lock = asyncio.Lock()

    def _select_one(self, table: str, column: str, value: Any) -> Optional[Dict[str, Any]]:
        result = self.supabase.table(table).select("*").eq(column, value).limit(1).execute()
        return result.data[0] if result.data else None

    def _find_existing(self, table: str, tx_hash: Optional[str],
                       bet_object_id: Optional[str]) -> Optional[Dict[str, Any]]:
        row = self._select_one(table, "tx_hash", tx_hash) if tx_hash else None
        if row is None and bet_object_id:
            row = self._select_one(table, "bet_object_id", bet_object_id)
        return row

    # Bets

    async def insert_bet(self, bet: MirrorBet) -> Tuple[Dict[str, Any], bool]:
        """Insert a bet row unless its digest (or Bet object) is already mirrored.

        Returns:
            (row, duplicate) where duplicate is True when the row already existed
        """
        async with self._lock:
            existing = self._find_existing("bets", bet.tx_hash, bet.bet_object_id)
            if existing:
                return existing, True
            try:
                result = self.supabase.table("bets").insert(bet.to_record()).execute()
            except APIError as e:
                if not is_unique_violation(e):
                    raise
                # Lost a race with a concurrent write for the same digest
                existing = self._find_existing("bets", bet.tx_hash, bet.bet_object_id)
                if existing is None:
                    raise
                return existing, True
            return result.data[0], False

    async def get_bet(self, bet_id: int) -> Optional[Dict[str, Any]]:
        async with self._lock:
            return self._select_one("bets", "id", bet_id)

    async def find_mirrored(self, table: str, tx_hash: Optional[str] = None,
                            bet_object_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Row in `bets` or `parlays` matching a digest or Bet object id."""
        async with self._lock:
            row = self._find_existing(table, tx_hash, bet_object_id)
            if row and table == "parlays":
                row = self._with_legs(row)
            return row

    async def list_bets(self, wallet_address: str, status: Optional[str] = None,
                        limit: int = 100) -> List[Dict[str, Any]]:
        """Mirror rows for a wallet, newest first."""
        async with self._lock:
            query = self.supabase.table("bets").select("*").eq("wallet_address", wallet_address.lower())
            if status:
                query = query.eq("status", status)
            result = query.order("placed_at", desc=True).limit(limit).execute()
            return result.data or []

    def _transition(self, table: str, row_id: int, status: str,
                    settled_at: Optional[str]) -> Dict[str, Any]:
        if status not in BET_STATUSES:
            raise InvalidStatusTransitionError(f"Unknown bet status: {status}")

        row = self._select_one(table, "id", row_id)
        if row is None:
            raise InvalidStatusTransitionError(f"{table} row {row_id} not found")
        if row["status"] == status:
            return row
        if status not in ALLOWED_STATUS_TRANSITIONS.get(row["status"], set()):
            raise InvalidStatusTransitionError(f"{table} row {row_id}: {row['status']} -> {status} not allowed")

        updates = {
            "status": status,
            "settled_at": settled_at or datetime.now(timezone.utc).isoformat(),
        }
        result = self.supabase.table(table).update(updates).eq("id", row_id).execute()
        logger.info(f"{table} row {row_id}: {row['status']} -> {status}")
        return result.data[0] if result.data else {**row, **updates}

    async def update_bet_status(self, bet_id: int, status: str,
                                settled_at: Optional[str] = None) -> Dict[str, Any]:
        """Move a bet out of `pending`. Settled rows are never rewritten."""
        async with self._lock:
            return self._transition("bets", bet_id, status, settled_at)

    async def update_parlay_status(self, parlay_id: int, status: str,
                                   settled_at: Optional[str] = None) -> Dict[str, Any]:
        async with self._lock:
            return self._transition("parlays", parlay_id, status, settled_at)

    async def link_bet_object(self, bet_id: int, bet_object_id: str) -> None:
        """Attach a Bet object id to a row placed before the id was known."""
        async with self._lock:
            self.supabase.table("bets").update({"bet_object_id": bet_object_id}).eq("id", bet_id).execute()

    # Parlays

    async def insert_parlay(self, parlay: MirrorParlay) -> Tuple[Dict[str, Any], bool]:
        """Insert a parlay and its legs, parent first.

        A parent left without legs by an earlier failed write gets them on retry.

        Returns:
            (row, duplicate); row carries its `legs`
        """
        async with self._lock:
            existing = self._find_existing("parlays", parlay.tx_hash, parlay.bet_object_id)
            if existing:
                return self._restore_legs(existing, parlay), True
            try:
                result = self.supabase.table("parlays").insert(parlay.to_record()).execute()
            except APIError as e:
                if not is_unique_violation(e):
                    raise
                existing = self._find_existing("parlays", parlay.tx_hash, parlay.bet_object_id)
                if existing is None:
                    raise
                return self._restore_legs(existing, parlay), True

            row = result.data[0]
            self._insert_legs(row["id"], parlay)
            return self._with_legs(row), False

    def _insert_legs(self, parlay_id: int, parlay: MirrorParlay) -> None:
        legs = []
        for leg in parlay.legs:
            record = asdict(leg)
            record["parlay_id"] = parlay_id
            legs.append(record)
        if legs:
            self.supabase.table("bet_legs").insert(legs).execute()

    def _restore_legs(self, existing: Dict[str, Any], parlay: MirrorParlay) -> Dict[str, Any]:
        row = self._with_legs(existing)
        if not row["legs"] and parlay.legs:
            logger.warning(f"Parlay row {existing['id']} has no legs, writing them now")
            self._insert_legs(existing["id"], parlay)
            row = self._with_legs(existing)
        return row

    def _with_legs(self, parlay_row: Dict[str, Any]) -> Dict[str, Any]:
        result = self.supabase.table("bet_legs").select("*").eq("parlay_id", parlay_row["id"]).execute()
        return {**parlay_row, "legs": result.data or []}

    async def get_parlay(self, parlay_id: int) -> Optional[Dict[str, Any]]:
        async with self._lock:
            row = self._select_one("parlays", "id", parlay_id)
            return self._with_legs(row) if row else None

    async def list_parlays(self, wallet_address: str, limit: int = 100) -> List[Dict[str, Any]]:
        async with self._lock:
            result = (
                self.supabase.table("parlays")
                .select("*")
                .eq("wallet_address", wallet_address.lower())
                .order("placed_at", desc=True)
                .limit(limit)
                .execute()
            )
            return [self._with_legs(row) for row in result.data or []]
