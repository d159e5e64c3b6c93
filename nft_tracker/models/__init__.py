"""In-memory domain models."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class TrackedNFT:
    """An NFT tracked by one chat."""
    mint_address: str
    chat_id: int
    name: str
    last_price: Optional[int] = None  # lamports
    alert_price: Optional[float] = None  # SOL
    collection: Optional[str] = None


@dataclass
class LastSale:
    """Most recent sale seen for a collection."""
    price: float  # SOL
    timestamp: datetime
    token_mint: str


@dataclass
class CollectionActivity:
    """Snapshot of a collection's market state from the latest successful fetch."""
    symbol: str
    name: str
    marketplace_url: Optional[str] = None
    floor_price: Optional[int] = None  # lamports
    volume_24h: float = 0.0
    listed_count: int = 0
    last_sale: Optional[LastSale] = None


__all__ = ["TrackedNFT", "LastSale", "CollectionActivity"]
