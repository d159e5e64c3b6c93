"""API routes package initialization."""
from nft_tracker.api.routes import health

__all__ = ["health"]
