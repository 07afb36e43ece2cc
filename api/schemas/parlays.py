"""
Pydantic schemas for parlay endpoints
"""
from typing import Any, Dict, List, Optional
from pydantic import Field

from betting.parlay import ParlayLeg
from .bets import CamelModel


class ParlayLegRequest(CamelModel):
    event_id: str
    market_id: str = "match_winner"
    outcome_id: str
    odds: float
    prediction: Optional[str] = None
    event_name: Optional[str] = None

    def to_leg(self) -> ParlayLeg:
        return ParlayLeg(
            event_id=self.event_id,
            market_id=self.market_id,
            selection=self.outcome_id,
            odds=self.odds,
            event_name=self.event_name,
            prediction=self.prediction,
        )


class CreateParlayRequest(CamelModel):
    """Mirror write for a parlay already placed on-chain"""
    wallet_address: str
    bet_amount: float = Field(..., gt=0)
    fee_currency: str = "SUI"
    tx_hash: str = Field(..., min_length=1)
    on_chain_bet_id: Optional[str] = None
    legs: List[ParlayLegRequest]


class PlaceParlayRequest(CamelModel):
    wallet_address: str
    bet_amount: float = Field(..., gt=0)
    fee_currency: str = "SUI"
    coin_object_id: Optional[str] = None
    walrus_blob_id: str = ""
    legs: List[ParlayLegRequest]


class BetLegResponse(CamelModel):
    id: Optional[int] = None
    parlay_id: Optional[int] = None
    event_id: str
    market_id: str
    outcome_id: Optional[str] = None
    odds: float
    prediction: Optional[str] = None
    status: str = "pending"


class ParlayResponse(CamelModel):
    id: int
    wallet_address: str
    bet_amount: float
    total_odds: float
    potential_payout: float
    currency: str
    status: str
    tx_hash: str
    bet_object_id: Optional[str] = None
    placed_at: Optional[str] = None
    settled_at: Optional[str] = None
    legs: List[BetLegResponse] = Field(default_factory=list)


def parlay_to_response(row: Dict[str, Any]) -> Dict[str, Any]:
    return ParlayResponse(**row).model_dump(by_alias=True)
