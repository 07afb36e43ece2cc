"""
Read side of the betting contract: Bet objects and BetPlaced events.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional

from clients.sui import SuiRpcClient
from config.settings import ChainConfig
from config.system_constants import ONCHAIN_COIN_TYPE_CODES, ONCHAIN_STATUS_CODES
from .bcs import decode_vector_u8
from .units import bps_to_odds, from_mist

logger = logging.getLogger(__name__)


def _int(value: Any, default: int = 0) -> int:
    if value in (None, ""):
        return default
    return int(value)


@dataclass
class OnChainBet:
    """A `betting::Bet` object (or the BetPlaced event that created it)."""
    object_id: str
    bettor: str
    event_id: str
    market_id: str
    prediction: str
    stake_mist: int
    odds_bps: int
    potential_payout_mist: int
    currency: str
    status: str
    tx_digest: Optional[str] = None
    placed_at_ms: Optional[int] = None
    settled_at_ms: Optional[int] = None
    platform_fee_mist: int = 0

    @property
    def stake(self) -> Decimal:
        return from_mist(self.stake_mist)

    @property
    def odds(self) -> Decimal:
        return bps_to_odds(self.odds_bps)

    @property
    def potential_payout(self) -> Decimal:
        return from_mist(self.potential_payout_mist)

    @property
    def settled(self) -> bool:
        return self.status != "pending"

    @classmethod
    def from_fields(cls, object_id: str, fields: Dict[str, Any],
                    tx_digest: Optional[str] = None) -> "OnChainBet":
        status_code = _int(fields.get("status"))
        coin_code = _int(fields.get("coin_type"))
        return cls(
            object_id=object_id,
            bettor=fields.get("bettor", ""),
            event_id=decode_vector_u8(fields.get("event_id")),
            market_id=decode_vector_u8(fields.get("market_id") or fields.get("market")),
            prediction=decode_vector_u8(fields.get("prediction")),
            stake_mist=_int(fields.get("amount") or fields.get("stake")),
            odds_bps=_int(fields.get("odds")),
            potential_payout_mist=_int(fields.get("potential_payout")),
            currency=ONCHAIN_COIN_TYPE_CODES.get(coin_code, "SUI"),
            status=ONCHAIN_STATUS_CODES.get(status_code, "pending"),
            tx_digest=tx_digest,
            placed_at_ms=_int(fields.get("placed_at") or fields.get("timestamp"), None),
            settled_at_ms=_int(fields.get("settled_at"), None) or None,
            platform_fee_mist=_int(fields.get("platform_fee")),
        )

    @classmethod
    def from_object(cls, data: Dict[str, Any]) -> "OnChainBet":
        """Parse `sui_getObject` data (showContent)."""
        content = data.get("content") or {}
        if content.get("dataType") != "moveObject":
            raise ValueError(f"Object {data.get('objectId')} has no Move content")
        return cls.from_fields(data["objectId"], content.get("fields", {}), data.get("previousTransaction"))

    @classmethod
    def from_event(cls, event: Dict[str, Any]) -> "OnChainBet":
        """Parse a BetPlaced event; `tx_digest` is the creating transaction."""
        parsed = event.get("parsedJson") or {}
        return cls.from_fields(parsed["bet_id"], parsed, (event.get("id") or {}).get("txDigest"))

    def to_history_dict(self) -> Dict[str, Any]:
        return {
            "betObjectId": self.object_id,
            "walletAddress": self.bettor,
            "eventId": self.event_id,
            "marketId": self.market_id,
            "prediction": self.prediction,
            "betAmount": float(self.stake),
            "odds": float(self.odds),
            "potentialPayout": float(self.potential_payout),
            "currency": self.currency,
            "status": self.status,
            "txHash": self.tx_digest,
            "placedAt": self.placed_at_ms,
            "settledAt": self.settled_at_ms,
        }


class BetChainReader:
    """Reads Bet objects and placement events for one deployed contract."""

    def __init__(self, chain: ChainConfig, sui: SuiRpcClient):
        self.chain = chain
        self.sui = sui

    @property
    def bet_placed_event_type(self) -> str:
        return f"{self.chain.package_id}::betting::BetPlaced"

    async def get_bet(self, object_id: str) -> OnChainBet:
        data = await self.sui.get_object(object_id)
        object_type = data.get("type", "")
        if not object_type.endswith("::betting::Bet"):
            raise ValueError(f"Object {object_id} is a {object_type}, not a Bet")
        return OnChainBet.from_object(data)

    async def get_wallet_bets(self, wallet_address: str) -> List[OnChainBet]:
        """Bet objects currently owned by the wallet."""
        objects = await self.sui.get_all_owned_objects(wallet_address, self.chain.bet_object_type)
        bets = []
        for data in objects:
            try:
                bets.append(OnChainBet.from_object(data))
            except (KeyError, ValueError) as e:
                logger.debug(f"Skip unparsable Bet object {data.get('objectId')}: {e}")
        return bets

    async def get_placed_events(self, wallet_address: str) -> List[OnChainBet]:
        """BetPlaced events from transactions sent by the wallet, newest first."""
        events = await self.sui.get_all_events({"Sender": wallet_address})
        placed = []
        for event in events:
            if event.get("type") != self.bet_placed_event_type:
                continue
            try:
                placed.append(OnChainBet.from_event(event))
            except (KeyError, ValueError) as e:
                logger.debug(f"Skip unparsable BetPlaced event: {e}")
        return placed

    async def get_transaction_status(self, digest: str) -> Dict[str, Any]:
        tx = await self.sui.get_transaction_block(digest)
        status = ((tx.get("effects") or {}).get("status")) or {}
        return {
            "digest": digest,
            "status": status.get("status", "unknown"),
            "error": status.get("error"),
            "checkpoint": tx.get("checkpoint"),
        }
