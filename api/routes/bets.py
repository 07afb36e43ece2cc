"""
Bet endpoints: mirror writes, history, transaction building and reconciliation
"""
import logging
from typing import Optional
from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from api.dependencies import (
    BuilderDep,
    DBClientDep,
    MirrorWriterDep,
    PlacementFlowDep,
    ReconcilerDep,
)
from api.exceptions import BetNotFoundError, ChainUnavailableError, InvalidBetError, OnChainMismatchError
from api.schemas.bets import (
    BuildBetRequest,
    CreateBetRequest,
    ReconcileRequest,
    bet_to_response,
    bets_to_response,
)
from betting.builder import BetRequest
from betting.exceptions import BetValidationError, ChainError, MirrorMismatchError, MirrorWriteError
from betting.placement import PlacementState
from clients.sui import SuiRpcError
from database.schema import BET_STATUSES

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/bets", tags=["bets"])


@router.post("")
async def create_bet(request: CreateBetRequest, writer: MirrorWriterDep):
    """
    Mirror a bet that is already confirmed on-chain.

    The stake is locked whatever happens here, so a failed write answers
    202 `pending_sync` with the digest instead of an error.
    """
    try:
        record = await writer.record_bet(
            wallet_address=request.wallet_address,
            event_id=request.event_id,
            market_id=request.market_id,
            prediction=request.prediction,
            stake=request.bet_amount,
            odds=request.odds,
            tx_hash=request.tx_hash,
            currency=request.fee_currency,
            bet_object_id=request.on_chain_bet_id,
            outcome_id=request.outcome_id,
        )
    except BetValidationError as e:
        raise InvalidBetError(str(e))
    except MirrorMismatchError as e:
        raise OnChainMismatchError(str(e))
    except MirrorWriteError as e:
        logger.error(f"Mirror write failed for on-chain bet {request.tx_hash}: {e}")
        return JSONResponse(
            status_code=202,
            content={
                "success": True,
                "syncStatus": "pending_sync",
                "txHash": request.tx_hash,
                "warning": "Bet is confirmed on-chain but could not be saved to history yet",
            },
        )

    return {
        "success": True,
        "bet": bet_to_response(record.row),
        "duplicate": record.duplicate,
        "syncStatus": "mirrored",
    }


@router.get("")
async def list_bets(
    db: DBClientDep,
    wallet: str = Query(..., description="Wallet address"),
    status: Optional[str] = Query(None, description="pending, won, lost, cashed_out, void"),
    limit: int = Query(100, ge=1, le=500),
):
    """Bet history from the mirror only; may lag the chain briefly."""
    if status and status not in BET_STATUSES:
        raise InvalidBetError(f"Unknown status {status}")
    rows = await db.list_bets(wallet, status=status, limit=limit)
    return bets_to_response(rows)


@router.post("/build-transaction")
async def build_transaction(request: BuildBetRequest, builder: BuilderDep):
    """Unsigned place_bet transaction for the wallet to sign."""
    try:
        built = await builder.build_bet_transaction(_to_bet_request(request), request.wallet_address)
    except BetValidationError as e:
        raise InvalidBetError(str(e))
    except ChainError as e:
        raise ChainUnavailableError(str(e))
    return {"success": True, **built.to_dict()}


@router.post("/place")
async def place_bet(request: BuildBetRequest, flow: PlacementFlowDep):
    """Build, sign through the wallet bridge, submit, confirm and mirror in one call."""
    result = await flow.place_bet(_to_bet_request(request), request.wallet_address)
    return JSONResponse(status_code=placement_status_code(result), content=result.to_dict())


@router.post("/reconcile")
async def reconcile(request: ReconcileRequest, reconciler: ReconcilerDep):
    """Re-derive missing mirror rows and settled statuses for a wallet from the chain."""
    try:
        report = await reconciler.reconcile_wallet(request.wallet_address)
    except SuiRpcError as e:
        raise ChainUnavailableError(str(e))
    return {"success": True, **report.to_dict()}


@router.get("/onchain")
async def onchain_bets(reconciler: ReconcilerDep, wallet: str = Query(..., description="Wallet address")):
    """Bet history read directly from the chain (works without the mirror)."""
    try:
        bets = await reconciler.onchain_history(wallet)
    except SuiRpcError as e:
        raise ChainUnavailableError(str(e))
    return {"source": "chain", "bets": bets}


@router.get("/{bet_id}")
async def get_bet(bet_id: int, db: DBClientDep):
    row = await db.get_bet(bet_id)
    if row is None:
        raise BetNotFoundError(bet_id)
    return bet_to_response(row)


@router.get("/{bet_id}/verify")
async def verify_bet(bet_id: int, reconciler: ReconcilerDep):
    """Compare a mirror row with its transaction and Bet object on-chain."""
    report = await reconciler.verify_bet(bet_id)
    if report is None:
        raise BetNotFoundError(bet_id)
    return report.to_dict()


def _to_bet_request(request: BuildBetRequest) -> BetRequest:
    return BetRequest(
        event_id=request.event_id,
        market_id=request.market_id,
        prediction=request.prediction,
        stake=request.bet_amount,
        odds=request.odds,
        currency=request.fee_currency,
        walrus_blob_id=request.walrus_blob_id,
        coin_object_id=request.coin_object_id,
        outcome_id=request.outcome_id,
    )


def placement_status_code(result) -> int:
    """HTTP status for a PlacementResult."""
    if result.success:
        return 202 if result.sync_pending else 200
    if result.chain_unavailable:
        return 502
    if result.state == PlacementState.BUILDING:
        return 400
    if result.state == PlacementState.FAILED_ON_CHAIN:
        return 422
    return 502
