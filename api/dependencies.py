"""
FastAPI Dependencies
Shared dependencies for dependency injection
"""
import logging
from typing import Annotated, Optional

from fastapi import Depends

from betting.builder import BetTransactionBuilder
from betting.confirmer import TransactionConfirmer
from betting.mirror import BetMirrorWriter
from betting.onchain import BetChainReader
from betting.placement import BetPlacementFlow
from betting.reconciliation import BetReconciler
from clients.sui import SuiRpcClient
from clients.wallet import HttpWalletSigner, WalletSigner
from config.settings import ChainConfig, settings
from database.client import BetMirrorDatabase

logger = logging.getLogger(__name__)

# Global instances (initialized on startup)
_chain: ChainConfig | None = None
_sui_client: SuiRpcClient | None = None
_db_client: BetMirrorDatabase | None = None
_reader: BetChainReader | None = None
_mirror_writer: BetMirrorWriter | None = None
_builder: BetTransactionBuilder | None = None
_reconciler: BetReconciler | None = None
_placement_flow: BetPlacementFlow | None = None


def initialize_dependencies(
    db_client: Optional[BetMirrorDatabase] = None,
    sui_client: Optional[SuiRpcClient] = None,
    signer: Optional[WalletSigner] = None,
    chain: Optional[ChainConfig] = None,
):
    """Initialize all dependencies (called on startup; tests pass their own clients)"""
    global _chain, _sui_client, _db_client, _reader, _mirror_writer, _builder, _reconciler, _placement_flow

    logger.info("Initializing API dependencies...")

    validation = settings.validate_chain_config()
    for warning in validation["warnings"]:
        logger.warning(f"⚠️ {warning}")
    if not validation["valid"]:
        raise RuntimeError(f"Invalid chain configuration: {validation['errors']}")

    _chain = chain or ChainConfig.from_settings(settings)
    _sui_client = sui_client or SuiRpcClient(settings.rpc_url, timeout=settings.SUI_RPC_TIMEOUT_SECONDS)

    # Initialize database client
    if db_client is not None:
        _db_client = db_client
    elif settings.SUPABASE_URL and settings.supabase_key:
        _db_client = BetMirrorDatabase(settings.SUPABASE_URL, settings.supabase_key)
    else:
        logger.error("SUPABASE_URL / SUPABASE_KEY missing - mirror endpoints unavailable")
        _db_client = None

    _reader = BetChainReader(_chain, _sui_client)
    _builder = BetTransactionBuilder(_chain, _sui_client)

    if _db_client is not None:
        _mirror_writer = BetMirrorWriter(
            _db_client,
            reader=_reader,
            verify_against_chain=settings.VERIFY_MIRROR_AGAINST_CHAIN,
        )
        _reconciler = BetReconciler(_db_client, _reader, _mirror_writer)
        confirmer = TransactionConfirmer(
            _chain,
            _sui_client,
            timeout=settings.SUI_CONFIRMATION_TIMEOUT_SECONDS,
            poll_interval=settings.SUI_POLL_INTERVAL_SECONDS,
        )
        _placement_flow = BetPlacementFlow(
            _builder,
            signer or HttpWalletSigner(settings.WALLET_BRIDGE_URL, timeout=settings.WALLET_BRIDGE_TIMEOUT_SECONDS),
            confirmer,
            _mirror_writer,
        )

    logger.info(f"API dependencies initialized. Network: {_chain.network}, package: {_chain.package_id[:12]}...")


def cleanup_dependencies():
    """Cleanup dependencies (called on shutdown)"""
    global _chain, _sui_client, _db_client, _reader, _mirror_writer, _builder, _reconciler, _placement_flow
    logger.info("Cleaning up API dependencies...")
    _chain = _sui_client = _db_client = _reader = None
    _mirror_writer = _builder = _reconciler = _placement_flow = None


def _require(instance, name: str):
    if instance is None:
        raise RuntimeError(f"{name} not initialized. Call initialize_dependencies() first.")
    return instance


def get_chain_config() -> ChainConfig:
    """Get chain configuration"""
    return _require(_chain, "Chain config")


def mirror_available() -> bool:
    """True when the mirror database is configured"""
    return _db_client is not None


def get_db_client() -> BetMirrorDatabase:
    """Get database client instance"""
    return _require(_db_client, "Database client")


def get_mirror_writer() -> BetMirrorWriter:
    """Get mirror writer instance"""
    return _require(_mirror_writer, "Mirror writer")


def get_transaction_builder() -> BetTransactionBuilder:
    """Get transaction builder instance"""
    return _require(_builder, "Transaction builder")


def get_reconciler() -> BetReconciler:
    return _require(_reconciler, "Reconciler")


def get_placement_flow() -> BetPlacementFlow:
    """Get placement flow instance"""
    return _require(_placement_flow, "Placement flow")


# Dependency injection annotations
ChainConfigDep = Annotated[ChainConfig, Depends(get_chain_config)]
DBClientDep = Annotated[BetMirrorDatabase, Depends(get_db_client)]
MirrorWriterDep = Annotated[BetMirrorWriter, Depends(get_mirror_writer)]
BuilderDep = Annotated[BetTransactionBuilder, Depends(get_transaction_builder)]
ReconcilerDep = Annotated[BetReconciler, Depends(get_reconciler)]
PlacementFlowDep = Annotated[BetPlacementFlow, Depends(get_placement_flow)]
