"""
Parlay combination: validation, combined odds and the identifiers a parlay
is placed on-chain under.
"""
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from config.system_constants import (
    MAX_ODDS,
    MAX_PREDICTION_LENGTH,
    MIN_ODDS,
    PARLAY_MAX_LEGS,
    PARLAY_MIN_LEGS,
)
from .exceptions import InvalidParlayError
from .units import Number, potential_payout, to_decimal


@dataclass
class ParlayLeg:
    event_id: str
    market_id: str
    selection: str  # outcome id / selection name
    odds: float
    event_name: Optional[str] = None
    prediction: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.event_name or self.event_id}: {self.selection}"


def validate_legs(legs: Sequence[ParlayLeg]) -> None:
    if len(legs) < PARLAY_MIN_LEGS:
        raise InvalidParlayError(f"Parlay requires at least {PARLAY_MIN_LEGS} selections, got {len(legs)}")
    if len(legs) > PARLAY_MAX_LEGS:
        raise InvalidParlayError(f"Parlay allows at most {PARLAY_MAX_LEGS} selections, got {len(legs)}")

    seen = set()
    for leg in legs:
        if not MIN_ODDS <= leg.odds <= MAX_ODDS:
            raise InvalidParlayError(
                f"Leg {leg.event_id} odds {leg.odds} outside {MIN_ODDS}-{MAX_ODDS}"
            )
        if leg.event_id in seen:
            raise InvalidParlayError(f"Event {leg.event_id} appears in more than one leg")
        seen.add(leg.event_id)


def combined_odds(legs: Sequence[ParlayLeg]) -> Decimal:
    """Product of leg odds, exact (1.8 x 2.1 x 1.5 = 5.67)."""
    total = Decimal(1)
    for leg in legs:
        total *= to_decimal(leg.odds)
    return total


def parlay_payout(stake: Number, legs: Sequence[ParlayLeg]) -> float:
    return potential_payout(stake, combined_odds(legs))


def parlay_event_id(legs: Sequence[ParlayLeg], timestamp_ms: Optional[int] = None) -> str:
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"parlay_{timestamp_ms}_" + "_".join(leg.event_id for leg in legs)


def parlay_prediction(legs: Sequence[ParlayLeg]) -> str:
    return " | ".join(leg.label for leg in legs)[:MAX_PREDICTION_LENGTH]
