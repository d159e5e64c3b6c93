"""Sale notifier: announces recent marketplace buys for a collection."""
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, List, Optional
from nft_tracker.core.config import settings
from nft_tracker.providers import MarketplaceProvider, ProviderError
from nft_tracker.providers.models import SaleActivity, TokenMetadata
from nft_tracker.services.delivery import NotificationSink
from nft_tracker.utils.formatting import fallback_nft_name, format_sale_message
from nft_tracker.utils.timeouts import TimeoutExceeded, with_timeout

logger = logging.getLogger(__name__)


def filter_recent_sales(
    activities: List[SaleActivity],
    window_seconds: int,
    now: Optional[datetime] = None
) -> List[SaleActivity]:
    """
    Keep buy activities whose block time falls inside the recency window.

    Order is preserved. Anything older than ``window_seconds`` is dropped.
    """
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(seconds=window_seconds)
    return [a for a in activities if a.is_sale and a.block_time >= cutoff]


class SaleNotifier:
    """Fetches recent buys and delivers one notification per sale."""

    def __init__(
        self,
        provider: MarketplaceProvider,
        window_seconds: Optional[int] = None,
        message_delay_ms: Optional[int] = None,
        delivery_timeout_seconds: Optional[float] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    ):
        self.provider = provider
        self.window_seconds = window_seconds or settings.sale_window_seconds
        self.message_delay_ms = (
            message_delay_ms if message_delay_ms is not None else settings.sale_message_delay_ms
        )
        self.delivery_timeout_ms = int(
            (delivery_timeout_seconds or settings.delivery_timeout_seconds) * 1000
        )
        self._sleep = sleep

    async def _get_metadata(self, mint_address: str) -> Optional[TokenMetadata]:
        """Best-effort metadata lookup with the relaxed retry budget."""
        try:
            return await self.provider.get_token_metadata(
                mint_address,
                max_retries=settings.metadata_max_retries,
                delay_ms=settings.metadata_retry_delay_ms
            )
        except ProviderError as e:
            logger.warning(f"Metadata lookup failed for {mint_address}: {e}")
            return None

    async def _deliver(self, sink: NotificationSink, caption: str, image: Optional[str]) -> None:
        """
        Deliver a sale caption.

        Tries photo with caption, then a link preview of the image, then
        the bare caption. The first attempt that succeeds wins. An attempt
        that misses its deadline is not cancelled, so a late photo can still
        arrive after a fallback and the chat sees the sale twice.
        """
        if image:
            try:
                await with_timeout(
                    sink.deliver(caption, photo=image),
                    self.delivery_timeout_ms,
                    "photo delivery"
                )
                return
            except TimeoutExceeded as e:
                logger.warning(f"{e}, falling back to link preview")
            except Exception as e:
                logger.warning(f"Photo delivery failed, falling back to link preview: {e}")

            try:
                await with_timeout(
                    sink.deliver(caption, link_preview=True, preview_url=image),
                    self.delivery_timeout_ms,
                    "link preview delivery"
                )
                return
            except TimeoutExceeded as e:
                logger.warning(f"{e}, falling back to plain text")
            except Exception as e:
                logger.warning(f"Link preview delivery failed, falling back to plain text: {e}")

        await with_timeout(
            sink.deliver(caption),
            self.delivery_timeout_ms,
            "text delivery"
        )

    async def notify_recent_sales(
        self,
        symbol: str,
        limit: int,
        sink: NotificationSink,
        now: Optional[datetime] = None
    ) -> int:
        """
        Announce buys of a collection that happened within the recency window.

        Args:
            symbol: Collection symbol
            limit: Maximum number of sales to announce
            sink: Where to deliver notifications
            now: Reference time for the recency window (defaults to now)

        Returns:
            Number of sales delivered

        Raises:
            ProviderError: The activity feed could not be fetched
        """
        activities = await self.provider.get_collection_activities(symbol)
        recent = filter_recent_sales(activities, self.window_seconds, now)[:limit]

        logger.info(
            f"{symbol}: {len(recent)} sale(s) within {self.window_seconds}s "
            f"out of {len(activities)} activities"
        )

        delivered = 0
        for index, sale in enumerate(recent):
            if index > 0:
                await self._sleep(self.message_delay_ms / 1000)

            try:
                metadata = await self._get_metadata(sale.token_mint)
                name = metadata.name if metadata and metadata.name else None
                name = name or fallback_nft_name(symbol, sale.token_mint)
                image = metadata.image if metadata else None

                caption = format_sale_message(sale, name, symbol)
                await self._deliver(sink, caption, image)
                delivered += 1
            except Exception as e:
                logger.error(f"Error processing sale {sale.signature} for {symbol}: {e}", exc_info=True)

        return delivered
