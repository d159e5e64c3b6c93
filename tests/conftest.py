"""Shared pytest fixtures for NFT tracker tests."""
import os

os.environ.setdefault("TELEGRAM_BOT_TOKEN", "123456:TEST-TOKEN")

import pytest
from datetime import datetime, timedelta, timezone
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

from nft_tracker.models import CollectionActivity, LastSale
from nft_tracker.providers.models import SaleActivity, TokenMetadata


# Real, well-formed Solana addresses
MINT_A = "DPduL1SWjhjpUxcNUBQsbHiJfeMr8ayJki8vGnfuN1Gj"
MINT_B = "D3XrkNZz6wx6cofot7Zohsf2KSZ2Er8M6Ya8DkE3eG9U"
BUYER = "So11111111111111111111111111111111111111112"

NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def create_sale(
    seconds_ago: int = 10,
    mint: str = MINT_A,
    price: float = 1.2345,
    activity_type: str = "buyNow",
    signature: Optional[str] = None,
    now: datetime = NOW
) -> SaleActivity:
    """Factory function to create SaleActivity instances for testing."""
    return SaleActivity(
        signature=signature or f"sig-{mint[:4]}-{seconds_ago}",
        activity_type=activity_type,
        token_mint=mint,
        collection="trench_demons",
        buyer=BUYER,
        seller="seller-wallet",
        price=price,
        block_time=now - timedelta(seconds=seconds_ago),
        source="magiceden_v2"
    )


def create_metadata(
    mint: str = MINT_A,
    name: Optional[str] = "Trench Demon #42",
    image: Optional[str] = "https://img.example/42.png",
    collection: Optional[str] = "trench_demons"
) -> TokenMetadata:
    """Factory function to create TokenMetadata instances for testing."""
    return TokenMetadata(
        mint_address=mint,
        name=name,
        image=image,
        collection=collection,
        collection_name="Trench Demons" if collection else None
    )


def create_snapshot(
    symbol: str = "trench_demons",
    floor_price: Optional[int] = 2_500_000_000,
    listed_count: int = 120,
    last_sale: Optional[LastSale] = None
) -> CollectionActivity:
    """Factory function to create CollectionActivity instances for testing."""
    return CollectionActivity(
        symbol=symbol,
        name="Trench Demons",
        marketplace_url=f"https://magiceden.io/marketplace/{symbol}",
        floor_price=floor_price,
        volume_24h=310.5,
        listed_count=listed_count,
        last_sale=last_sale
    )


@pytest.fixture
def mock_provider():
    """Mock marketplace provider."""
    provider = AsyncMock()
    provider.get_token_metadata.return_value = create_metadata()
    provider.get_collection_snapshot.return_value = create_snapshot()
    provider.get_collection_activities.return_value = []
    provider.get_listing_price.return_value = 0
    return provider


@pytest.fixture
def mock_bot():
    """Mock Telegram bot."""
    bot = MagicMock()
    bot.send_message = AsyncMock()
    bot.send_photo = AsyncMock()
    return bot
