"""
Off-chain mirror writer.

Persists confirmed bets into the relational mirror. The chain is the source
of truth, so every write is keyed by the creating transaction digest and
optionally checked against the Bet object it claims to mirror.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

from clients.sui import SuiRpcError
from config.system_constants import MAX_ODDS, MIN_ODDS, SERVER_MAX_STAKE
from database.client import BetMirrorDatabase
from database.schema import BetLeg, MirrorBet, MirrorParlay
from .exceptions import BetValidationError, MirrorMismatchError, MirrorWriteError, UnsupportedCurrencyError
from .onchain import BetChainReader
from .parlay import ParlayLeg, combined_odds, validate_legs
from .units import Number, bps_to_odds, odds_to_bps, potential_payout, to_decimal, to_mist

logger = logging.getLogger(__name__)


@dataclass
class MirrorRecord:
    row: Dict[str, Any]
    duplicate: bool = False


class BetMirrorWriter:
    """Writes bet and parlay rows for transactions already confirmed on-chain."""

    def __init__(self, db: BetMirrorDatabase, reader: Optional[BetChainReader] = None,
                 verify_against_chain: bool = True):
        self.db = db
        self.reader = reader
        self.verify_against_chain = verify_against_chain and reader is not None

    @staticmethod
    def validate(stake: Number, odds: Number, currency: str, tx_hash: str) -> None:
        """Server-side bounds, independent of the contract limits."""
        if currency not in SERVER_MAX_STAKE:
            raise UnsupportedCurrencyError(currency)
        if not tx_hash:
            raise BetValidationError("txHash is required: bets are mirrored only after on-chain confirmation")
        amount = to_decimal(stake)
        if amount <= 0:
            raise BetValidationError("Bet amount must be positive")
        if amount > Decimal(str(SERVER_MAX_STAKE[currency])):
            raise BetValidationError(f"Maximum bet is {SERVER_MAX_STAKE[currency]:,.0f} {currency}")
        if not MIN_ODDS <= float(odds) <= MAX_ODDS:
            raise BetValidationError(f"Odds must be between {MIN_ODDS} and {MAX_ODDS}")

    async def verify_bet_object(self, bet_object_id: str, stake: Number, odds: Number,
                                wallet_address: Optional[str] = None) -> bool:
        """Compare stake / odds / bettor with the Bet object.

        Returns False when the chain could not be read (the write goes ahead);
        raises MirrorMismatchError when the chain disagrees.
        """
        try:
            chain_bet = await self.reader.get_bet(bet_object_id)
        except (SuiRpcError, ValueError, KeyError) as e:
            logger.warning(f"Could not verify Bet object {bet_object_id}, mirroring unverified: {e}")
            return False

        if chain_bet.stake_mist != to_mist(stake):
            raise MirrorMismatchError("stake", str(to_decimal(stake)), str(chain_bet.stake))
        if chain_bet.odds_bps != odds_to_bps(odds):
            raise MirrorMismatchError("odds", str(to_decimal(odds)), str(chain_bet.odds))
        if wallet_address and chain_bet.bettor and chain_bet.bettor.lower() != wallet_address.lower():
            raise MirrorMismatchError("bettor", wallet_address, chain_bet.bettor)
        return True

    async def record_bet(
        self,
        wallet_address: str,
        event_id: str,
        market_id: str,
        prediction: str,
        stake: Number,
        odds: Number,
        tx_hash: str,
        currency: str = "SUI",
        bet_object_id: Optional[str] = None,
        outcome_id: Optional[str] = None,
        status: str = "pending",
        sync_source: str = "placement",
        placed_at: Optional[str] = None,
        verify: Optional[bool] = None,
    ) -> MirrorRecord:
        """Insert the mirror row for a confirmed single bet (idempotent by digest)."""
        currency = currency.upper()
        self.validate(stake, odds, currency, tx_hash)

        if bet_object_id and (self.verify_against_chain if verify is None else verify):
            await self.verify_bet_object(bet_object_id, stake, odds, wallet_address)

        # Store the odds the contract records, floored to basis points
        chain_odds = bps_to_odds(odds_to_bps(odds))
        bet = MirrorBet(
            wallet_address=wallet_address,
            event_id=event_id,
            market_id=market_id,
            outcome_id=outcome_id,
            prediction=prediction,
            bet_amount=float(to_decimal(stake)),
            odds=float(chain_odds),
            potential_payout=potential_payout(stake, chain_odds),
            currency=currency,
            tx_hash=tx_hash,
            bet_object_id=bet_object_id,
            status=status,
            sync_source=sync_source,
            placed_at=placed_at or datetime.now(timezone.utc).isoformat(),
        )
        try:
            row, duplicate = await self.db.insert_bet(bet)
        except Exception as e:
            raise MirrorWriteError(f"Failed to mirror bet {tx_hash}: {e}", tx_hash=tx_hash) from e

        if duplicate:
            logger.info(f"Bet {tx_hash} already mirrored as row {row.get('id')}")
        else:
            logger.info(f"📝 Mirrored bet {tx_hash} as row {row.get('id')} ({bet.bet_amount} {currency} @ {bet.odds})")
        return MirrorRecord(row=row, duplicate=duplicate)

    async def record_parlay(
        self,
        wallet_address: str,
        legs: Sequence[ParlayLeg],
        stake: Number,
        tx_hash: str,
        currency: str = "SUI",
        bet_object_id: Optional[str] = None,
        verify: Optional[bool] = None,
    ) -> MirrorRecord:
        """Insert a parlay parent row and its legs (idempotent by digest)."""
        currency = currency.upper()
        validate_legs(legs)
        total_odds = bps_to_odds(odds_to_bps(combined_odds(legs)))
        self.validate(stake, total_odds, currency, tx_hash)

        if bet_object_id and (self.verify_against_chain if verify is None else verify):
            await self.verify_bet_object(bet_object_id, stake, total_odds, wallet_address)

        parlay = MirrorParlay(
            wallet_address=wallet_address,
            bet_amount=float(to_decimal(stake)),
            total_odds=float(total_odds),
            potential_payout=potential_payout(stake, total_odds),
            currency=currency,
            tx_hash=tx_hash,
            bet_object_id=bet_object_id,
            placed_at=datetime.now(timezone.utc).isoformat(),
            legs=[
                BetLeg(
                    event_id=leg.event_id,
                    market_id=leg.market_id,
                    outcome_id=leg.selection,
                    odds=leg.odds,
                    prediction=leg.prediction or leg.label,
                )
                for leg in legs
            ],
        )
        try:
            row, duplicate = await self.db.insert_parlay(parlay)
        except Exception as e:
            raise MirrorWriteError(f"Failed to mirror parlay {tx_hash}: {e}", tx_hash=tx_hash) from e

        logger.info(
            f"{'Parlay already mirrored' if duplicate else '📝 Mirrored parlay'} {tx_hash}: "
            f"{len(legs)} legs @ {parlay.total_odds}"
        )
        return MirrorRecord(row=row, duplicate=duplicate)
