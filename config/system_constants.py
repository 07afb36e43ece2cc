"""
SuiBets System Constants - Contract parameters and betting limits
All magic numbers and hardcoded values centralized here for easy tuning
"""

# ============================================================================
# SUI NETWORK
# ============================================================================

SUI_FULLNODE_URLS = {
    "mainnet": "https://fullnode.mainnet.sui.io:443",
    "testnet": "https://fullnode.testnet.sui.io:443",
    "devnet": "https://fullnode.devnet.sui.io:443",
}

SUI_CLOCK_OBJECT_ID = "0x6"
SUI_COIN_TYPE = "0x2::sui::SUI"
SBETS_COIN_TYPE = "0x6a4d9c0eab7ac40371a7453d1aa6c89b130950e8af6868ba975fdd81371a7285::sbets::SBETS"

# Mainnet deployment of the betting contract
DEFAULT_BETTING_PACKAGE_ID = "0x737324ddac9fb96e3d7ffab524f5489c1a0b3e5b4bffa2f244303005001b4ada"
DEFAULT_BETTING_PLATFORM_ID = "0x5fc1073c9533c6737fa3a0882055d1778602681df70bdabde96b0127b588f082"


# ============================================================================
# UNITS
# ============================================================================

COIN_DECIMALS = 9  # SUI and SBETS share 9 decimals
MIST_PER_UNIT = 10 ** COIN_DECIMALS
ODDS_BPS_SCALE = 100  # 2.50 odds -> 250 bps


# ============================================================================
# TRANSACTION CONSTRUCTION
# ============================================================================

BET_GAS_BUDGET_MIST = 20_000_000  # 0.02 SUI, fixed so wallets skip estimation
BET_GAS_MARGIN_SUI = "0.03"  # Headroom kept on the funding coin above the stake
MAX_PREDICTION_LENGTH = 500
PARLAY_MARKET_ID = "parlay_combined"
DEFAULT_MARKET_ID = "match_winner"


# ============================================================================
# BET LIMITS
# ============================================================================

# On-chain limits enforced by the contract (checked before building a transaction)
ONCHAIN_STAKE_LIMITS = {
    "SUI": {"min": "0.05", "max": "20"},
    "SBETS": {"min": "1000", "max": "10000000"},
}

# Server-side limits for mirror writes
SERVER_MAX_STAKE = {
    "SUI": 100.0,
    "SBETS": 10_000_000.0,
}
MIN_ODDS = 1.01
MAX_ODDS = 1000.0

PARLAY_MIN_LEGS = 2
PARLAY_MAX_LEGS = 12


# ============================================================================
# ON-CHAIN BET STATUS
# ============================================================================

ONCHAIN_STATUS_CODES = {
    0: "pending",
    1: "won",
    2: "lost",
    3: "void",
}

ONCHAIN_COIN_TYPE_CODES = {
    0: "SUI",
    1: "SBETS",
}


# ============================================================================
# MOVE ABORT CODES (betting module)
# ============================================================================

MOVE_ABORT_REASONS = {
    0: "Platform treasury cannot cover this payout. Try a smaller bet or use a different currency.",
    3: "Invalid odds detected. Please refresh and try again.",
    7: "Platform is temporarily paused. Please try again later.",
    8: "Bet amount exceeds maximum allowed. Please reduce your stake.",
    9: "Bet amount below minimum required.",
    11: "Platform treasury insufficient. Try a smaller bet or different currency.",
}

MOVE_ABORT_NAMES = {
    "EInsufficientBalance": 0,
    "EInvalidOdds": 3,
    "EPlatformPaused": 7,
    "EExceedsMaxBet": 8,
    "EExceedsMinBet": 9,
    "EInsufficientTreasury": 11,
}
