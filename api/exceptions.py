"""
Custom API Exceptions
"""
from fastapi import HTTPException
from typing import Optional


class APIException(HTTPException):
    """Base API exception"""
    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None
    ):
        super().__init__(status_code=status_code, detail=detail)
        self.error_code = error_code


class BetNotFoundError(APIException):
    """Mirror row not found"""
    def __init__(self, bet_id: int):
        super().__init__(
            status_code=404,
            detail=f"Bet {bet_id} not found",
            error_code="BET_NOT_FOUND"
        )


class ParlayNotFoundError(APIException):
    """Parlay row not found"""
    def __init__(self, parlay_id: int):
        super().__init__(
            status_code=404,
            detail=f"Parlay {parlay_id} not found",
            error_code="PARLAY_NOT_FOUND"
        )


class InvalidBetError(APIException):
    """Bet request failed validation"""
    def __init__(self, reason: str):
        super().__init__(
            status_code=400,
            detail=reason,
            error_code="INVALID_BET"
        )


class OnChainMismatchError(APIException):
    """Mirror payload disagrees with the on-chain Bet object"""
    def __init__(self, reason: str):
        super().__init__(
            status_code=409,
            detail=f"Bet does not match its on-chain record: {reason}",
            error_code="ONCHAIN_MISMATCH"
        )


class ChainUnavailableError(APIException):
    """Sui fullnode could not be reached or returned an error"""
    def __init__(self, reason: str):
        super().__init__(
            status_code=502,
            detail=f"Sui RPC request failed: {reason}",
            error_code="CHAIN_UNAVAILABLE"
        )
