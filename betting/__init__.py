"""
Betting Module

On-chain bet placement (transaction building, submission, confirmation) and
the off-chain mirror / reconciliation policy around it.
"""

from .exceptions import *  # noqa: F401,F403

__all__ = [
    "BettingError",
    "BetValidationError",
    "SigningError",
    "SubmissionError",
    "ChainError",
    "OnChainExecutionError",
    "StaleObjectError",
    "ConfirmationTimeoutError",
    "MirrorWriteError",
    "MirrorMismatchError",
]
