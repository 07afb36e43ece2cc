"""
Reconciliation between the chain and the bet mirror.

The mirror can lag the chain (failed writes, placements that never reached
the server) or go stale (settlement happens on-chain). These routines read
the chain and repair the mirror; they never touch on-chain state.
"""
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError

from clients.sui import SuiRpcError
from config.system_constants import PARLAY_MARKET_ID
from database.client import BetMirrorDatabase
from .exceptions import BettingError
from .mirror import BetMirrorWriter
from .onchain import BetChainReader, OnChainBet
from .units import odds_to_bps, to_mist

logger = logging.getLogger(__name__)


def _ms_to_iso(ms: Optional[int]) -> Optional[str]:
    if not ms:
        return None
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).isoformat()


@dataclass
class VerificationReport:
    bet_id: int
    tx_hash: str
    bet_object_id: Optional[str]
    tx_status: Optional[str] = None
    chain_bet: Optional[Dict[str, Any]] = None
    mismatches: List[str] = field(default_factory=list)
    chain_error: Optional[str] = None

    @property
    def verified(self) -> bool:
        return self.tx_status == "success" and not self.mismatches and self.chain_error is None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["verified"] = self.verified
        return data


@dataclass
class ReconciliationReport:
    wallet_address: str
    scanned: int = 0
    inserted: int = 0
    linked: int = 0
    status_updated: int = 0
    unchanged: int = 0
    unmatched_parlays: int = 0
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class BetReconciler:
    """Repairs the mirror for one wallet at a time from the chain's view."""

    def __init__(self, db: BetMirrorDatabase, reader: BetChainReader, writer: BetMirrorWriter):
        self.db = db
        self.reader = reader
        self.writer = writer

    async def verify_bet(self, bet_id: int) -> Optional[VerificationReport]:
        """Compare one mirror row with its transaction and Bet object. None if the row is unknown."""
        row = await self.db.get_bet(bet_id)
        if row is None:
            return None

        report = VerificationReport(bet_id=bet_id, tx_hash=row["tx_hash"], bet_object_id=row.get("bet_object_id"))
        try:
            tx = await self.reader.get_transaction_status(row["tx_hash"])
            report.tx_status = tx["status"]
            if report.bet_object_id:
                chain_bet = await self.reader.get_bet(report.bet_object_id)
                report.chain_bet = chain_bet.to_history_dict()
                report.mismatches = self._compare(row, chain_bet)
        except (SuiRpcError, ValueError) as e:
            report.chain_error = str(e)

        if report.tx_status == "failure":
            report.mismatches.append("transaction failed on-chain")
        return report

    @staticmethod
    def _compare(row: Dict[str, Any], chain_bet: OnChainBet) -> List[str]:
        mismatches = []
        if to_mist(row["bet_amount"]) != chain_bet.stake_mist:
            mismatches.append(f"stake: mirror {row['bet_amount']} vs chain {chain_bet.stake}")
        if odds_to_bps(row["odds"]) != chain_bet.odds_bps:
            mismatches.append(f"odds: mirror {row['odds']} vs chain {chain_bet.odds}")
        if chain_bet.bettor and row["wallet_address"].lower() != chain_bet.bettor.lower():
            mismatches.append(f"bettor: mirror {row['wallet_address']} vs chain {chain_bet.bettor}")
        if row["status"] != "cashed_out" and row["status"] != chain_bet.status:
            mismatches.append(f"status: mirror {row['status']} vs chain {chain_bet.status}")
        return mismatches

    async def onchain_history(self, wallet_address: str) -> List[Dict[str, Any]]:
        """Bet history read straight from the chain, for when the mirror is unavailable."""
        bets = await self.reader.get_wallet_bets(wallet_address)
        bets.sort(key=lambda b: b.placed_at_ms or 0, reverse=True)
        return [b.to_history_dict() for b in bets]

    async def reconcile_wallet(self, wallet_address: str) -> ReconciliationReport:
        """Insert missing mirror rows and sync settled statuses for every bet the wallet placed."""
        report = ReconciliationReport(wallet_address=wallet_address)
        placed = await self.reader.get_placed_events(wallet_address)
        report.scanned = len(placed)
        logger.info(f"🔄 Reconciling {len(placed)} on-chain bets for {wallet_address}")

        for event_bet in placed:
            try:
                await self._reconcile_one(wallet_address, event_bet, report)
            except (BettingError, SuiRpcError, APIError) as e:
                report.errors.append(f"{event_bet.object_id}: {e}")
                logger.warning(f"Reconciliation failed for {event_bet.object_id}: {e}")

        logger.info(
            f"Reconciled {wallet_address}: {report.inserted} inserted, {report.linked} linked, "
            f"{report.status_updated} settled, {len(report.errors)} errors"
        )
        return report

    async def _current_state(self, event_bet: OnChainBet) -> OnChainBet:
        """The Bet object as it is now, keeping the creating digest from the event."""
        try:
            current = await self.reader.get_bet(event_bet.object_id)
        except (SuiRpcError, ValueError, KeyError) as e:
            logger.debug(f"Bet object {event_bet.object_id} unreadable, using event data: {e}")
            return event_bet
        current.tx_digest = event_bet.tx_digest
        return current

    async def _reconcile_one(self, wallet_address: str, event_bet: OnChainBet,
                             report: ReconciliationReport) -> None:
        bet = await self._current_state(event_bet)
        table = "parlays" if bet.market_id == PARLAY_MARKET_ID else "bets"
        row = await self.db.find_mirrored(table, tx_hash=bet.tx_digest, bet_object_id=bet.object_id)

        if row is None:
            if table == "parlays":
                # Leg breakdown only exists off-chain
                report.unmatched_parlays += 1
                return
            await self.writer.record_bet(
                wallet_address=wallet_address,
                event_id=bet.event_id,
                market_id=bet.market_id,
                prediction=bet.prediction,
                stake=bet.stake,
                odds=bet.odds,
                tx_hash=bet.tx_digest,
                currency=bet.currency,
                bet_object_id=bet.object_id,
                outcome_id=bet.prediction,
                status=bet.status,
                sync_source="reconciliation",
                placed_at=_ms_to_iso(bet.placed_at_ms),
                verify=False,
            )
            report.inserted += 1
            return

        if table == "bets" and not row.get("bet_object_id"):
            await self.db.link_bet_object(row["id"], bet.object_id)
            report.linked += 1

        if bet.settled and row["status"] == "pending":
            settled_at = _ms_to_iso(bet.settled_at_ms)
            if table == "parlays":
                await self.db.update_parlay_status(row["id"], bet.status, settled_at)
            else:
                await self.db.update_bet_status(row["id"], bet.status, settled_at)
            report.status_updated += 1
        else:
            report.unchanged += 1
