"""
Parlay endpoints
"""
import logging
from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from api.dependencies import DBClientDep, MirrorWriterDep, PlacementFlowDep
from api.exceptions import InvalidBetError, OnChainMismatchError, ParlayNotFoundError
from api.routes.bets import placement_status_code
from api.schemas.parlays import CreateParlayRequest, PlaceParlayRequest, parlay_to_response
from betting.builder import ParlayRequest
from betting.exceptions import BetValidationError, MirrorMismatchError, MirrorWriteError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/parlays", tags=["parlays"])


@router.post("")
async def create_parlay(request: CreateParlayRequest, writer: MirrorWriterDep):
    """Mirror a parlay already placed on-chain: parent row first, then legs."""
    try:
        record = await writer.record_parlay(
            wallet_address=request.wallet_address,
            legs=[leg.to_leg() for leg in request.legs],
            stake=request.bet_amount,
            tx_hash=request.tx_hash,
            currency=request.fee_currency,
            bet_object_id=request.on_chain_bet_id,
        )
    except BetValidationError as e:
        raise InvalidBetError(str(e))
    except MirrorMismatchError as e:
        raise OnChainMismatchError(str(e))
    except MirrorWriteError as e:
        logger.error(f"Mirror write failed for on-chain parlay {request.tx_hash}: {e}")
        return JSONResponse(
            status_code=202,
            content={
                "success": True,
                "syncStatus": "pending_sync",
                "txHash": request.tx_hash,
                "warning": "Parlay is confirmed on-chain but could not be saved to history yet",
            },
        )

    return {
        "success": True,
        "parlay": parlay_to_response(record.row),
        "duplicate": record.duplicate,
        "syncStatus": "mirrored",
    }


@router.post("/place")
async def place_parlay(request: PlaceParlayRequest, flow: PlacementFlowDep):
    parlay = ParlayRequest(
        legs=[leg.to_leg() for leg in request.legs],
        stake=request.bet_amount,
        currency=request.fee_currency,
        walrus_blob_id=request.walrus_blob_id,
        coin_object_id=request.coin_object_id,
    )
    result = await flow.place_parlay(parlay, request.wallet_address)
    return JSONResponse(status_code=placement_status_code(result), content=result.to_dict())


@router.get("")
async def list_parlays(db: DBClientDep, wallet: str = Query(..., description="Wallet address")):
    rows = await db.list_parlays(wallet)
    return [parlay_to_response(row) for row in rows]


@router.get("/{parlay_id}")
async def get_parlay(parlay_id: int, db: DBClientDep):
    row = await db.get_parlay(parlay_id)
    if row is None:
        raise ParlayNotFoundError(parlay_id)
    return parlay_to_response(row)
