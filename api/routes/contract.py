"""
Contract information endpoint
"""
from fastapi import APIRouter

from api.dependencies import ChainConfigDep
from config.system_constants import (
    BET_GAS_BUDGET_MIST,
    MAX_ODDS,
    MIN_ODDS,
    ONCHAIN_STAKE_LIMITS,
    PARLAY_MAX_LEGS,
    PARLAY_MIN_LEGS,
)

router = APIRouter(prefix="/api/contract", tags=["contract"])


@router.get("/info")
async def contract_info(chain: ChainConfigDep):
    """Addresses and limits a wallet needs to build bet transactions itself"""
    return {
        "network": chain.network,
        "packageId": chain.package_id,
        "platformId": chain.platform_object_id,
        "clockObjectId": chain.clock_object_id,
        "betObjectType": chain.bet_object_type,
        "coinTypes": {
            "SUI": chain.sui_coin_type,
            "SBETS": chain.sbets_coin_type,
        },
        "functions": {
            "SUI": chain.move_target("place_bet"),
            "SBETS": chain.move_target("place_bet_sbets"),
        },
        "limits": {
            "stake": ONCHAIN_STAKE_LIMITS,
            "odds": {"min": MIN_ODDS, "max": MAX_ODDS},
            "parlayLegs": {"min": PARLAY_MIN_LEGS, "max": PARLAY_MAX_LEGS},
        },
        "gasBudgetMist": str(BET_GAS_BUDGET_MIST),
    }
