"""
Bet placement exceptions.

Grouped by where they stop the placement flow:
- validation errors are raised before any network call
- signing / submission errors end the attempt, nothing reached the chain
- chain errors carry the digest when the chain has one
- mirror errors are soft: the stake is already on-chain
"""
from typing import Optional


class BettingError(Exception):
    """Base exception for bet placement."""
    retryable: bool = False


# Validation

class BetValidationError(BettingError):
    pass


class UnsupportedCurrencyError(BetValidationError):
    def __init__(self, currency: str):
        super().__init__(f"Unsupported coin type: {currency}. Use SUI or SBETS.")
        self.currency = currency


class StakeOutOfBoundsError(BetValidationError):
    def __init__(self, stake, currency: str, minimum, maximum):
        if stake < minimum:
            message = f"Minimum bet is {minimum:,} {currency}. You tried to bet {stake:,} {currency}."
        else:
            message = f"Maximum bet is {maximum:,} {currency}. You tried to bet {stake:,} {currency}."
        super().__init__(message)
        self.stake = stake
        self.currency = currency
        self.minimum = minimum
        self.maximum = maximum


class InvalidOddsError(BetValidationError):
    pass


class MissingCoinObjectError(BetValidationError):
    def __init__(self, currency: str):
        super().__init__(f"{currency} coin object ID required for {currency} bets")
        self.currency = currency


class InsufficientBalanceError(BetValidationError):
    def __init__(self, currency: str, required, available):
        super().__init__(
            f"Insufficient {currency} balance. Need {required} {currency} on a single coin "
            f"(stake + gas margin), but the best available coin holds {available} {currency}."
        )
        self.currency = currency
        self.required = required
        self.available = available


class InvalidParlayError(BetValidationError):
    pass


# Signing / submission

class SigningError(BettingError):
    """Wallet rejected or failed to sign. The unsigned transaction is discarded."""
    pass


class SubmissionError(BettingError):
    """The node refused the transaction; safe to restart the whole flow."""
    pass


# Chain

class ChainError(BettingError):
    def __init__(self, message: str, digest: Optional[str] = None):
        super().__init__(message)
        self.digest = digest


class OnChainExecutionError(ChainError):
    """Transaction executed and aborted; no stake was taken."""

    def __init__(self, chain_error: str, digest: Optional[str] = None,
                 abort_code: Optional[int] = None, reason: Optional[str] = None):
        super().__init__(chain_error, digest)
        self.chain_error = chain_error
        self.abort_code = abort_code
        self.reason = reason


class StaleObjectError(ChainError):
    """Funding coin was consumed or locked by a concurrent transaction."""
    retryable = True


class ConfirmationTimeoutError(ChainError):
    """Digest is known but the transaction was not visible before the wait bound."""
    pass


class SubmissionOutcomeUnknownError(ChainError):
    """Submission was interrupted after sending; the transaction may have executed."""
    pass


# Mirror

class MirrorWriteError(BettingError):
    def __init__(self, message: str, tx_hash: Optional[str] = None):
        super().__init__(message)
        self.tx_hash = tx_hash


class MirrorMismatchError(BettingError):
    """Mirror payload disagrees with the on-chain Bet object it claims to mirror."""

    def __init__(self, field: str, mirror_value, chain_value):
        super().__init__(f"{field} mismatch: request has {mirror_value}, chain has {chain_value}")
        self.field = field
        self.mirror_value = mirror_value
        self.chain_value = chain_value


class InvalidStatusTransitionError(BettingError):
    pass
