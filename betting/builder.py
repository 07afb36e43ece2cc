"""
Wallet transaction builder for bet placement.

Builds the unsigned programmable transaction that splits the stake off a
funding coin and calls `betting::place_bet` (SUI) or
`betting::place_bet_sbets` (SBETS). All request validation happens here,
before the first RPC, so invalid bets never touch the network.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from clients.sui import CoinRef, SuiRpcClient, SuiRpcError
from config.settings import ChainConfig
from config.system_constants import (
    BET_GAS_BUDGET_MIST,
    BET_GAS_MARGIN_SUI,
    MAX_ODDS,
    MAX_PREDICTION_LENGTH,
    MIN_ODDS,
    ONCHAIN_STAKE_LIMITS,
    PARLAY_MARKET_ID,
)
from .bcs import string_to_vector_u8, u64
from .exceptions import (
    BetValidationError,
    ChainError,
    InsufficientBalanceError,
    InvalidOddsError,
    MissingCoinObjectError,
    StakeOutOfBoundsError,
    UnsupportedCurrencyError,
)
from .parlay import ParlayLeg, combined_odds, parlay_event_id, parlay_prediction, validate_legs
from .transaction import TransactionBlock
from .units import Number, from_mist, odds_to_bps, to_decimal, to_mist

logger = logging.getLogger(__name__)

SUPPORTED_CURRENCIES = ("SUI", "SBETS")


@dataclass
class BetRequest:
    event_id: str
    market_id: str
    prediction: str
    stake: Number
    odds: Number
    currency: str = "SUI"
    walrus_blob_id: str = ""
    coin_object_id: Optional[str] = None  # required for SBETS, optional pin for SUI
    outcome_id: Optional[str] = None


@dataclass
class ParlayRequest:
    legs: List[ParlayLeg]
    stake: Number
    currency: str = "SUI"
    walrus_blob_id: str = ""
    coin_object_id: Optional[str] = None
    timestamp_ms: Optional[int] = None


@dataclass
class BuiltBetTransaction:
    """Unsigned transaction plus the integer values it commits on-chain."""
    transaction: TransactionBlock
    stake_mist: int
    odds_bps: int
    currency: str
    funding_coin_id: str
    event_id: str
    market_id: str
    prediction: str
    gas_payment: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "transaction": self.transaction.to_dict(),
            "stakeMist": str(self.stake_mist),
            "oddsBps": self.odds_bps,
            "currency": self.currency,
            "fundingCoinId": self.funding_coin_id,
            "eventId": self.event_id,
            "marketId": self.market_id,
            "prediction": self.prediction,
        }


class BetTransactionBuilder:
    """Builds bet transactions against one deployed betting contract."""

    def __init__(
        self,
        chain: ChainConfig,
        sui: SuiRpcClient,
        stake_limits: Optional[Dict[str, Dict[str, str]]] = None,
        gas_budget_mist: int = BET_GAS_BUDGET_MIST,
        gas_margin: Number = BET_GAS_MARGIN_SUI,
    ):
        self.chain = chain
        self.sui = sui
        self.stake_limits = stake_limits or ONCHAIN_STAKE_LIMITS
        self.gas_budget_mist = gas_budget_mist
        self.gas_margin_mist = to_mist(gas_margin)

    # Validation (no I/O)

    def validate_stake(self, stake: Number, currency: str) -> Decimal:
        if currency not in SUPPORTED_CURRENCIES:
            raise UnsupportedCurrencyError(currency)
        amount = to_decimal(stake)
        limits = self.stake_limits[currency]
        minimum, maximum = Decimal(limits["min"]), Decimal(limits["max"])
        if amount < minimum or amount > maximum:
            raise StakeOutOfBoundsError(amount, currency, minimum, maximum)
        return amount

    @staticmethod
    def validate_odds(odds: Number) -> Decimal:
        value = to_decimal(odds)
        if not Decimal(str(MIN_ODDS)) <= value <= Decimal(str(MAX_ODDS)):
            raise InvalidOddsError(f"Odds must be between {MIN_ODDS} and {MAX_ODDS}, got {odds}")
        return value

    # Builders

    async def build_bet_transaction(self, request: BetRequest, wallet_address: str) -> BuiltBetTransaction:
        """Validate a single bet and build its unsigned transaction."""
        currency = request.currency.upper()
        self.validate_stake(request.stake, currency)
        odds = self.validate_odds(request.odds)
        if not request.event_id or not request.prediction:
            raise BetValidationError("event_id and prediction are required")

        return await self._build(
            wallet_address=wallet_address,
            currency=currency,
            stake_mist=to_mist(request.stake),
            odds_bps=odds_to_bps(odds),
            event_id=request.event_id,
            market_id=request.market_id,
            prediction=request.prediction[:MAX_PREDICTION_LENGTH],
            walrus_blob_id=request.walrus_blob_id,
            coin_object_id=request.coin_object_id,
        )

    async def build_parlay_transaction(self, request: ParlayRequest, wallet_address: str) -> BuiltBetTransaction:
        """Build one combined bet for all legs, priced at the product of their odds."""
        currency = request.currency.upper()
        validate_legs(request.legs)
        self.validate_stake(request.stake, currency)
        odds = combined_odds(request.legs)
        if odds > Decimal(str(MAX_ODDS)):
            raise InvalidOddsError(f"Combined parlay odds {odds} exceed {MAX_ODDS}")

        return await self._build(
            wallet_address=wallet_address,
            currency=currency,
            stake_mist=to_mist(request.stake),
            odds_bps=odds_to_bps(odds),
            event_id=parlay_event_id(request.legs, request.timestamp_ms),
            market_id=PARLAY_MARKET_ID,
            prediction=parlay_prediction(request.legs),
            walrus_blob_id=request.walrus_blob_id,
            coin_object_id=request.coin_object_id,
        )

    async def _build(
        self,
        wallet_address: str,
        currency: str,
        stake_mist: int,
        odds_bps: int,
        event_id: str,
        market_id: str,
        prediction: str,
        walrus_blob_id: str,
        coin_object_id: Optional[str],
    ) -> BuiltBetTransaction:
        tx = TransactionBlock(sender=wallet_address)
        tx.set_gas_budget(self.gas_budget_mist)

        if currency == "SUI":
            funding, gas_coins = await self._select_sui_coin(wallet_address, stake_mist, coin_object_id)
            if gas_coins:
                tx.set_gas_payment([c.object_id for c in gas_coins])
                source = tx.object(funding.object_id)
            else:
                # Funding coin is the only one that can cover gas; the margin above the stake pays for it.
                tx.set_gas_payment([funding.object_id])
                source = tx.gas
            funding_coin_id = funding.object_id
            function = "place_bet"
        else:
            if not coin_object_id:
                raise MissingCoinObjectError(currency)
            source = tx.object(coin_object_id)
            funding_coin_id = coin_object_id
            function = "place_bet_sbets"

        [stake_coin] = tx.split_coins(source, [tx.pure(u64(stake_mist))])
        tx.move_call(
            self.chain.move_target(function),
            [
                tx.object(self.chain.platform_object_id),
                stake_coin,
                tx.pure(string_to_vector_u8(event_id)),
                tx.pure(string_to_vector_u8(market_id)),
                tx.pure(string_to_vector_u8(prediction)),
                tx.pure(u64(odds_bps)),
                tx.pure(string_to_vector_u8(walrus_blob_id or "")),
                tx.object(self.chain.clock_object_id),
            ],
        )

        logger.info(
            f"Built {function} for {wallet_address}: {from_mist(stake_mist)} {currency} "
            f"@ {odds_bps} bps on {event_id}/{market_id}"
        )
        return BuiltBetTransaction(
            transaction=tx,
            stake_mist=stake_mist,
            odds_bps=odds_bps,
            currency=currency,
            funding_coin_id=funding_coin_id,
            event_id=event_id,
            market_id=market_id,
            prediction=prediction,
            gas_payment=list(tx.gas_payment),
        )

    async def _select_sui_coin(self, wallet_address: str, stake_mist: int,
                               coin_object_id: Optional[str]) -> Tuple[CoinRef, List[CoinRef]]:
        """Pick the funding coin (largest balance, or the pinned one) and the coins left for gas."""
        try:
            coins = await self.sui.get_all_coins_of_type(wallet_address, self.chain.sui_coin_type)
        except SuiRpcError as e:
            raise ChainError(f"Could not load SUI coins for {wallet_address}: {e}") from e
        required = stake_mist + self.gas_margin_mist

        if coin_object_id:
            funding = next((c for c in coins if c.object_id == coin_object_id), None)
            if funding is None:
                raise BetValidationError(f"Coin {coin_object_id} is not a SUI coin owned by {wallet_address}")
        else:
            funding = max(coins, key=lambda c: c.balance_mist, default=None)

        available = funding.balance_mist if funding else 0
        if available < required:
            raise InsufficientBalanceError("SUI", from_mist(required), from_mist(available))

        others = [c for c in coins if c.object_id != funding.object_id]
        if sum(c.balance_mist for c in others) < self.gas_budget_mist:
            others = []
        return funding, others
