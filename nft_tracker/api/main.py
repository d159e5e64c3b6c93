"""FastAPI status application served alongside the bot."""
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from html import escape
from typing import Optional
import logging
import time

from nft_tracker.api.routes import health
from nft_tracker.core.config import settings
from nft_tracker.core.container import BotServices
from nft_tracker.utils.formatting import format_timestamp

logger = logging.getLogger(__name__)


STATUS_PAGE = """<!DOCTYPE html>
<html>
<head>
    <title>NFT Tracker Bot Status</title>
    <style>
        body {{ font-family: Arial, sans-serif; max-width: 800px; margin: 0 auto; padding: 20px; line-height: 1.6; }}
        .status {{ color: #4CAF50; font-weight: bold; }}
        .commands {{ background: #f5f5f5; padding: 20px; border-radius: 5px; margin-top: 20px; }}
    </style>
</head>
<body>
    <h1>NFT Tracker Bot</h1>
    <p>Status: <span class="status">🟢 Running</span> since {started_at}</p>
    <p>Tracked NFTs: {tracked_nfts} &middot; Tracked collections: {tracked_collections}</p>
    <p>RPC: {rpc_url}</p>
    <div class="commands">
        <h2>Available Commands:</h2>
        <ul>
            <li>/trench - Track Trench Demons collection</li>
            <li>/track [mint_address] - Track individual NFT</li>
            <li>/floor [collection] - Check floor price</li>
            <li>/lastbuy [collection] - Show recent sales</li>
        </ul>
    </div>
</body>
</html>
"""


def create_app(services: BotServices, scheduler: Optional[object] = None) -> FastAPI:
    """
    Build the status application.

    Args:
        services: Shared bot services, read by the status routes
        scheduler: BotScheduler whose job states are reported by /monitor
    """
    app = FastAPI(title="NFT Tracker Bot Status", version="1.0.0")
    app.state.services = services
    app.state.scheduler = scheduler

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all incoming requests and responses."""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        logger.debug(
            f"{request.method} {request.url.path} - Status: {response.status_code} - Time: {process_time:.3f}s"
        )
        return response

    @app.get("/", response_class=HTMLResponse)
    async def status_page():
        """Human-readable status page."""
        return STATUS_PAGE.format(
            started_at=format_timestamp(services.started_at),
            tracked_nfts=len(services.nfts),
            tracked_collections=len(services.collections),
            rpc_url=escape(settings.rpc_url or "not configured")
        )

    app.include_router(health.router)
    return app
