"""Magic Eden marketplace provider implementation."""
import httpx
import logging
from datetime import datetime, timezone
from typing import Any, List, Optional
from nft_tracker.core.config import settings
from nft_tracker.models import CollectionActivity, LastSale
from nft_tracker.providers import MarketplaceProvider, ProviderError, TransportError, UpstreamDataError
from nft_tracker.providers.models import CollectionStats, SaleActivity, TokenMetadata
from nft_tracker.utils.formatting import LAMPORTS_PER_SOL, marketplace_collection_url
from nft_tracker.utils.http import fetch_with_retry


logger = logging.getLogger(__name__)


class MagicEdenProvider(MarketplaceProvider):
    """Magic Eden v2 REST implementation of the marketplace provider."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        max_retries: Optional[int] = None,
        delay_ms: Optional[int] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.base_url = (base_url or settings.marketplace_base_url).rstrip("/")
        self.max_retries = max_retries or settings.fetch_max_retries
        self.delay_ms = delay_ms if delay_ms is not None else settings.fetch_retry_delay_ms
        self.client = client or httpx.AsyncClient(
            timeout=settings.http_timeout_seconds,
            headers={"Accept": "application/json"}
        )

    async def _get_json(
        self,
        path: str,
        params: Optional[dict] = None,
        max_retries: Optional[int] = None,
        delay_ms: Optional[int] = None
    ) -> Any:
        """GET a path under the base URL and decode the JSON body.

        Raises:
            TransportError: Request still failing after all retries
            UpstreamDataError: Body is not valid JSON
        """
        url = f"{self.base_url}{path}"
        try:
            response = await fetch_with_retry(
                self.client,
                url,
                params=params,
                max_retries=max_retries or self.max_retries,
                delay_ms=delay_ms if delay_ms is not None else self.delay_ms
            )
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 429:
                raise TransportError(
                    "Magic Eden rate limit exceeded (429). Please wait before making more requests."
                ) from e
            if e.response.status_code == 404:
                raise TransportError(f"Magic Eden returned 404 for {path}") from e
            raise TransportError(f"Magic Eden API error: {str(e)}") from e
        except httpx.TimeoutException as e:
            raise TransportError(f"Magic Eden API timeout after retries: {str(e)}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Magic Eden API connection error: {str(e)}") from e

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamDataError(f"Invalid JSON from {path}: {str(e)}") from e

    async def get_collection_stats(self, symbol: str) -> CollectionStats:
        """Fetch floor, listing and volume stats for a collection."""
        data = await self._get_json(f"/collections/{symbol}/stats")
        if not isinstance(data, dict):
            raise UpstreamDataError(f"Unexpected stats payload for {symbol}")

        try:
            floor = data.get("floorPrice")
            return CollectionStats(
                symbol=data.get("symbol") or symbol,
                floor_price=int(floor) if floor is not None else None,
                listed_count=int(data.get("listedCount") or 0),
                volume_24h=float(data.get("volume24hr") or 0) / LAMPORTS_PER_SOL
            )
        except (TypeError, ValueError) as e:
            raise UpstreamDataError(f"Malformed stats for {symbol}: {str(e)}") from e

    async def get_collection_activities(self, symbol: str, limit: int = 100) -> List[SaleActivity]:
        """
        Fetch recent activities for a collection, newest first.

        Entries missing a signature, mint or block time are dropped.
        """
        data = await self._get_json(
            f"/collections/{symbol}/activities",
            params={"offset": 0, "limit": limit}
        )
        if not isinstance(data, list):
            raise UpstreamDataError(f"Unexpected activities payload for {symbol}")

        return self._parse_activities(data)

    def _parse_activities(self, results: List[dict]) -> List[SaleActivity]:
        """Parse Magic Eden activity rows into SaleActivity objects."""
        activities = []

        for item in results:
            if not isinstance(item, dict):
                continue

            block_time = item.get("blockTime")
            mint = item.get("tokenMint")
            if not block_time or not mint:
                continue

            try:
                activity = SaleActivity(
                    signature=item.get("signature", ""),
                    activity_type=item.get("type", ""),
                    token_mint=mint,
                    collection=item.get("collection"),
                    buyer=item.get("buyer"),
                    seller=item.get("seller"),
                    price=float(item.get("price") or 0),
                    block_time=datetime.fromtimestamp(int(block_time), tz=timezone.utc),
                    source=item.get("source")
                )
            except (TypeError, ValueError, OverflowError):
                logger.debug(f"Skipping malformed activity: {item}")
                continue

            activities.append(activity)

        return activities

    async def _get_collection_name(self, symbol: str) -> str:
        """Look up the display name, falling back to the symbol."""
        try:
            data = await self._get_json(f"/collections/{symbol}", max_retries=1)
        except ProviderError as e:
            logger.info(f"No collection info for {symbol}, using symbol as name: {e}")
            return symbol

        if isinstance(data, dict) and data.get("name"):
            return data["name"]
        return symbol

    async def get_collection_snapshot(self, symbol: str) -> CollectionActivity:
        """
        Fetch a complete collection snapshot.

        Combines stats with recent activity; the newest sale becomes
        ``last_sale``.
        """
        stats = await self.get_collection_stats(symbol)
        activities = await self.get_collection_activities(symbol)
        name = await self._get_collection_name(symbol)

        last_sale = None
        for activity in activities:
            if activity.is_sale:
                last_sale = LastSale(
                    price=activity.price,
                    timestamp=activity.block_time,
                    token_mint=activity.token_mint
                )
                break

        return CollectionActivity(
            symbol=symbol,
            name=name,
            marketplace_url=marketplace_collection_url(symbol),
            floor_price=stats.floor_price,
            volume_24h=stats.volume_24h,
            listed_count=stats.listed_count,
            last_sale=last_sale
        )

    async def get_token_metadata(
        self,
        mint_address: str,
        max_retries: Optional[int] = None,
        delay_ms: Optional[int] = None
    ) -> TokenMetadata:
        """Fetch display metadata for a single NFT."""
        data = await self._get_json(
            f"/tokens/{mint_address}",
            max_retries=max_retries,
            delay_ms=delay_ms
        )
        if not isinstance(data, dict):
            raise UpstreamDataError(f"Unexpected token payload for {mint_address}")

        return TokenMetadata(
            mint_address=data.get("mintAddress") or mint_address,
            name=data.get("name"),
            image=data.get("image"),
            collection=data.get("collection"),
            collection_name=data.get("collectionName")
        )

    async def get_listing_price(self, mint_address: str) -> int:
        """Return the lowest active listing price in lamports, 0 when unlisted."""
        data = await self._get_json(f"/tokens/{mint_address}/listings")
        if not isinstance(data, list):
            raise UpstreamDataError(f"Unexpected listings payload for {mint_address}")

        prices = []
        for listing in data:
            try:
                price = float(listing.get("price") or 0)
            except (AttributeError, TypeError, ValueError):
                continue
            if price > 0:
                prices.append(price)

        if not prices:
            return 0
        return round(min(prices) * LAMPORTS_PER_SOL)

    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()
