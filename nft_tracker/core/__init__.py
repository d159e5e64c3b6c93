"""Core package initialization."""
from nft_tracker.core.config import settings

__all__ = ["settings"]
