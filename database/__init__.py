"""
Database module for the off-chain bet mirror.
"""

from .client import BetMirrorDatabase
from .schema import BetLeg, MirrorBet, MirrorParlay, CREATE_TABLES_SQL

__all__ = ["BetMirrorDatabase", "BetLeg", "MirrorBet", "MirrorParlay", "CREATE_TABLES_SQL"]
