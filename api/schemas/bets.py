"""
Pydantic schemas for bet endpoints
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class CreateBetRequest(CamelModel):
    """Mirror write for a bet the wallet already placed on-chain"""
    wallet_address: str
    event_id: str
    market_id: str = "match_winner"
    outcome_id: Optional[str] = None
    bet_amount: float = Field(..., gt=0)
    odds: float
    prediction: str
    fee_currency: str = Field("SUI", description="SUI or SBETS")
    tx_hash: str = Field(..., min_length=1)
    on_chain_bet_id: Optional[str] = None


class BuildBetRequest(CamelModel):
    """Unsigned transaction request; nothing is persisted"""
    wallet_address: str
    event_id: str
    market_id: str = "match_winner"
    outcome_id: Optional[str] = None
    prediction: str
    bet_amount: float = Field(..., gt=0)
    odds: float
    fee_currency: str = "SUI"
    coin_object_id: Optional[str] = None
    walrus_blob_id: str = ""


class ReconcileRequest(CamelModel):
    wallet_address: str


class BetResponse(CamelModel):
    """Mirror bet row"""
    id: int
    wallet_address: str
    event_id: str
    market_id: str
    outcome_id: Optional[str] = None
    prediction: str
    bet_amount: float
    odds: float
    potential_payout: float
    currency: str
    status: str
    bet_type: str = "single"
    tx_hash: str
    bet_object_id: Optional[str] = None
    sync_source: Optional[str] = None
    placed_at: Optional[str] = None
    settled_at: Optional[str] = None


def bet_to_response(row: Dict[str, Any]) -> Dict[str, Any]:
    return BetResponse(**row).model_dump(by_alias=True)


def bets_to_response(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [bet_to_response(row) for row in rows]
