"""Health and keep-alive endpoints."""
from datetime import datetime, timezone
from fastapi import APIRouter, Request
import logging

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "nft-tracker-bot"}


@router.get("/ping")
async def ping():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/wake")
async def wake():
    """Touched by external uptime monitors to keep the host awake."""
    logger.debug("Wake request received")
    return {"status": "awake", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/monitor")
async def monitor(request: Request):
    """
    Runtime snapshot for uptime dashboards.

    Returns registry sizes, uptime, worker state and scheduled job times.
    """
    services = request.app.state.services
    scheduler = request.app.state.scheduler
    now = datetime.now(timezone.utc)

    return {
        "status": "healthy",
        "uptime_seconds": int((now - services.started_at).total_seconds()),
        "tracked_nfts": len(services.nfts),
        "tracked_collections": len(services.collections),
        "active_alerts": sum(1 for nft in services.nfts.all() if nft.alert_price),
        "workers": {
            "alert_check_running": services.alert_worker.is_running,
            "collection_poll_running": services.collection_worker.is_running
        },
        "jobs": scheduler.job_states() if scheduler else {}
    }
