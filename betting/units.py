"""Unit conversions between user-facing decimals and contract integers."""
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP
from typing import Union

from config.system_constants import MIST_PER_UNIT, ODDS_BPS_SCALE

Number = Union[int, float, str, Decimal]


def to_decimal(value: Number) -> Decimal:
    """Decimal from user input; floats go through str() so 2.1 stays 2.1."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def to_mist(amount: Number) -> int:
    """Decimal coin amount -> smallest unit (9 decimals), rounded half-up."""
    return int((to_decimal(amount) * MIST_PER_UNIT).to_integral_value(rounding=ROUND_HALF_UP))


def from_mist(mist: int) -> Decimal:
    return Decimal(int(mist)) / MIST_PER_UNIT


def odds_to_bps(odds: Number) -> int:
    """Decimal odds -> basis points, floored (2.505 -> 250)."""
    return int((to_decimal(odds) * ODDS_BPS_SCALE).to_integral_value(rounding=ROUND_DOWN))


def bps_to_odds(bps: int) -> Decimal:
    return Decimal(int(bps)) / ODDS_BPS_SCALE


def potential_payout(stake: Number, odds: Number) -> float:
    """Stake x odds rounded to cents, the way bet history displays it."""
    payout = to_decimal(stake) * to_decimal(odds)
    return float(payout.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
