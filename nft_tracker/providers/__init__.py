"""Abstract interface for NFT marketplace providers."""
from abc import ABC, abstractmethod
from typing import List, Optional
from nft_tracker.models import CollectionActivity
from nft_tracker.providers.models import CollectionStats, SaleActivity, TokenMetadata


class MarketplaceProvider(ABC):
    """Abstract base class for NFT marketplace data providers."""

    @abstractmethod
    async def get_collection_stats(self, symbol: str) -> CollectionStats:
        """Fetch floor, listing and volume stats for a collection."""
        pass

    @abstractmethod
    async def get_collection_activities(
        self,
        symbol: str,
        limit: int = 100
    ) -> List[SaleActivity]:
        """Fetch recent activities for a collection, newest first."""
        pass

    @abstractmethod
    async def get_collection_snapshot(self, symbol: str) -> CollectionActivity:
        """
        Fetch a complete collection snapshot (stats and last sale).

        Raises:
            ProviderError: If any underlying API call fails
        """
        pass

    @abstractmethod
    async def get_token_metadata(
        self,
        mint_address: str,
        max_retries: Optional[int] = None,
        delay_ms: Optional[int] = None
    ) -> TokenMetadata:
        """Fetch display metadata for a single NFT."""
        pass

    @abstractmethod
    async def get_listing_price(self, mint_address: str) -> int:
        """Return the lowest active listing price in lamports, 0 when unlisted."""
        pass


class ProviderError(Exception):
    """Exception raised when provider API fails."""
    pass


class TransportError(ProviderError):
    """Network or HTTP failure that survived all retries."""
    pass


class UpstreamDataError(ProviderError):
    """Response did not have the expected shape."""
    pass
