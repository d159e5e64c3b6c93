"""Data models for marketplace responses."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class CollectionStats:
    """Aggregate marketplace stats for a collection."""
    symbol: str
    floor_price: Optional[int]  # lamports
    listed_count: int
    volume_24h: float  # SOL


@dataclass
class SaleActivity:
    """A single marketplace activity (buy, list, bid...)."""
    signature: str
    activity_type: str
    token_mint: str
    collection: Optional[str]
    buyer: Optional[str]
    seller: Optional[str]
    price: float  # SOL
    block_time: datetime
    source: Optional[str] = None

    @property
    def is_sale(self) -> bool:
        return self.activity_type == "buyNow"


@dataclass
class TokenMetadata:
    """Display metadata for a single NFT."""
    mint_address: str
    name: Optional[str]
    image: Optional[str]
    collection: Optional[str]
    collection_name: Optional[str] = None
