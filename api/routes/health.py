"""
Health check endpoints
"""
from datetime import datetime, timezone
from fastapi import APIRouter

from api.dependencies import mirror_available
from config.settings import settings

router = APIRouter()


@router.get("/")
async def root():
    """Simple health check endpoint"""
    return {
        "status": "online",
        "service": "SuiBets API",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health")
async def health():
    """Detailed health check with configuration status"""
    mirror_ready = mirror_available()
    return {
        "status": "healthy" if mirror_ready else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "network": settings.SUI_NETWORK,
        "rpc_url": settings.rpc_url,
        "mirror_database": mirror_ready,
        "verify_mirror_against_chain": settings.VERIFY_MIRROR_AGAINST_CHAIN,
        "environment": settings.ENVIRONMENT,
    }
