"""
Bet placement flow: build -> sign -> submit -> confirm -> mirror.

The chain and the mirror share no transaction. Once a bet is confirmed
on-chain the placement counts as successful whatever happens to the mirror
write; a failed write is reported as `sync_pending` for reconciliation to
repair later.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from clients.wallet import WalletSigner
from .builder import BetRequest, BetTransactionBuilder, BuiltBetTransaction, ParlayRequest
from .confirmer import TransactionConfirmer
from .exceptions import (
    BetValidationError,
    BettingError,
    ChainError,
    OnChainExecutionError,
    SigningError,
    SubmissionError,
)
from .mirror import BetMirrorWriter, MirrorRecord

logger = logging.getLogger(__name__)


class PlacementState(str, Enum):
    BUILDING = "building"
    SIGNED = "signed"
    SUBMITTED = "submitted"
    CONFIRMED_ON_CHAIN = "confirmed_on_chain"
    MIRRORED = "mirrored"
    FAILED_ON_CHAIN = "failed_on_chain"
    MIRROR_WRITE_FAILED = "mirror_write_failed"


TRANSITIONS = {
    PlacementState.BUILDING: {PlacementState.SIGNED},
    PlacementState.SIGNED: {PlacementState.SUBMITTED},
    PlacementState.SUBMITTED: {PlacementState.CONFIRMED_ON_CHAIN, PlacementState.FAILED_ON_CHAIN},
    PlacementState.CONFIRMED_ON_CHAIN: {PlacementState.MIRRORED, PlacementState.MIRROR_WRITE_FAILED},
}

MIRROR_PENDING_WARNING = (
    "Bet placed on-chain but not yet saved to your bet history. "
    "It will appear after the next sync; do not place it again."
)


@dataclass
class PlacementResult:
    success: bool
    state: PlacementState
    tx_hash: Optional[str] = None
    bet_object_id: Optional[str] = None
    bet: Optional[Dict[str, Any]] = None
    duplicate: bool = False
    sync_pending: bool = False
    retryable: bool = False
    chain_unavailable: bool = False
    error: Optional[str] = None
    error_type: Optional[str] = None
    reason: Optional[str] = None
    warning: Optional[str] = None
    stake_mist: Optional[int] = None
    odds_bps: Optional[int] = None
    history: List[PlacementState] = field(default_factory=lambda: [PlacementState.BUILDING])

    def advance(self, state: PlacementState) -> None:
        if state not in TRANSITIONS.get(self.state, set()):
            raise ValueError(f"Invalid placement transition {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    def fail(self, error: BettingError) -> "PlacementResult":
        self.success = False
        self.error = str(error)
        self.error_type = type(error).__name__
        self.retryable = error.retryable
        if isinstance(error, ChainError) and error.digest:
            self.tx_hash = error.digest
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "state": self.state.value,
            "txHash": self.tx_hash,
            "betObjectId": self.bet_object_id,
            "bet": self.bet,
            "duplicate": self.duplicate,
            "syncPending": self.sync_pending,
            "retryable": self.retryable,
            "error": self.error,
            "errorType": self.error_type,
            "reason": self.reason,
            "warning": self.warning,
        }


class BetPlacementFlow:
    """Runs one placement at a time per call; nothing is shared between wallets."""

    def __init__(self, builder: BetTransactionBuilder, signer: WalletSigner,
                 confirmer: TransactionConfirmer, writer: BetMirrorWriter):
        self.builder = builder
        self.signer = signer
        self.confirmer = confirmer
        self.writer = writer

    async def place_bet(self, request: BetRequest, wallet_address: str) -> PlacementResult:
        async def build() -> BuiltBetTransaction:
            return await self.builder.build_bet_transaction(request, wallet_address)

        async def mirror(built: BuiltBetTransaction, digest: str, bet_object_id: Optional[str]) -> MirrorRecord:
            return await self.writer.record_bet(
                wallet_address=wallet_address,
                event_id=built.event_id,
                market_id=built.market_id,
                prediction=built.prediction,
                stake=request.stake,
                odds=request.odds,
                tx_hash=digest,
                currency=built.currency,
                bet_object_id=bet_object_id,
                outcome_id=request.outcome_id or request.prediction,
                verify=False,
            )

        return await self._run(build, mirror)

    async def place_parlay(self, request: ParlayRequest, wallet_address: str) -> PlacementResult:
        async def build() -> BuiltBetTransaction:
            return await self.builder.build_parlay_transaction(request, wallet_address)

        async def mirror(built: BuiltBetTransaction, digest: str, bet_object_id: Optional[str]) -> MirrorRecord:
            return await self.writer.record_parlay(
                wallet_address=wallet_address,
                legs=request.legs,
                stake=request.stake,
                tx_hash=digest,
                currency=built.currency,
                bet_object_id=bet_object_id,
                verify=False,
            )

        return await self._run(build, mirror)

    async def _run(
        self,
        build: Callable[[], Awaitable[BuiltBetTransaction]],
        mirror: Callable[[BuiltBetTransaction, str, Optional[str]], Awaitable[MirrorRecord]],
    ) -> PlacementResult:
        result = PlacementResult(success=False, state=PlacementState.BUILDING)

        try:
            built = await build()
            result.stake_mist = built.stake_mist
            result.odds_bps = built.odds_bps
            signed = await self.signer.sign_transaction(built.transaction)
        except (BetValidationError, SigningError) as e:
            logger.info(f"Placement stopped before submission: {e}")
            return result.fail(e)
        except ChainError as e:
            logger.warning(f"Chain unavailable while building: {e}")
            result.chain_unavailable = True
            return result.fail(e)
        result.advance(PlacementState.SIGNED)

        try:
            response = await self.confirmer.submit(signed)
        except (SubmissionError, ChainError) as e:
            logger.warning(f"Submission failed: {e}")
            return result.fail(e)
        result.advance(PlacementState.SUBMITTED)
        result.tx_hash = (response or {}).get("digest")

        try:
            confirmed = await self.confirmer.confirm(response)
        except OnChainExecutionError as e:
            result.advance(PlacementState.FAILED_ON_CHAIN)
            result.reason = e.reason
            return result.fail(e)
        except (SubmissionError, ChainError) as e:
            return result.fail(e)
        result.advance(PlacementState.CONFIRMED_ON_CHAIN)
        result.success = True
        result.tx_hash = confirmed.digest
        result.bet_object_id = confirmed.bet_object_id

        try:
            record = await mirror(built, confirmed.digest, confirmed.bet_object_id)
        except BettingError as e:
            logger.error(f"⚠️ Bet {confirmed.digest} is on-chain but the mirror write failed: {e}")
            result.advance(PlacementState.MIRROR_WRITE_FAILED)
            result.sync_pending = True
            result.warning = MIRROR_PENDING_WARNING
            return result

        result.advance(PlacementState.MIRRORED)
        result.bet = record.row
        result.duplicate = record.duplicate
        return result
