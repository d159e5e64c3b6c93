"""Collection worker for refreshing tracked collection snapshots."""
import asyncio
import logging
from typing import Optional
from telegram import Bot
from nft_tracker.core.config import settings
from nft_tracker.models import CollectionActivity
from nft_tracker.providers import MarketplaceProvider
from nft_tracker.services import CollectionRegistry, NFTRegistry, ChatSink
from nft_tracker.utils.formatting import format_collection_summary

logger = logging.getLogger(__name__)


def snapshot_changed(previous: Optional[CollectionActivity], current: CollectionActivity) -> bool:
    """True when floor, listed count or last sale differ between snapshots."""
    if previous is None:
        return True
    return (
        previous.floor_price != current.floor_price
        or previous.listed_count != current.listed_count
        or previous.last_sale != current.last_sale
    )


class CollectionWorker:
    """Refreshes every tracked collection and broadcasts summaries."""

    def __init__(
        self,
        provider: MarketplaceProvider,
        collections: CollectionRegistry,
        nfts: NFTRegistry,
        bot: Bot,
        notify_on_change_only: Optional[bool] = None
    ):
        self.provider = provider
        self.collections = collections
        self.nfts = nfts
        self.bot = bot
        self.notify_on_change_only = (
            settings.collection_notify_on_change_only
            if notify_on_change_only is None else notify_on_change_only
        )
        self._running = False
        self._stop = asyncio.Event()

    @property
    def is_running(self) -> bool:
        return self._running

    def stop(self):
        """Ask the current and future cycles to stop at the next collection."""
        self._stop.set()

    async def refresh_collection(self, symbol: str) -> CollectionActivity:
        """
        Fetch a fresh snapshot and notify subscribers.

        Args:
            symbol: Collection symbol

        Returns:
            The stored snapshot

        Raises:
            ProviderError: The snapshot could not be fetched; the old
                snapshot is left untouched
        """
        snapshot = await self.provider.get_collection_snapshot(symbol)
        previous = self.collections.put(snapshot)

        if self.notify_on_change_only and not snapshot_changed(previous, snapshot):
            logger.debug(f"No change for {symbol}, skipping notifications")
            return snapshot

        message = format_collection_summary(snapshot)
        for chat_id in self.nfts.subscribers_of(symbol):
            try:
                await ChatSink(self.bot, chat_id).deliver(message)
            except Exception as e:
                logger.error(f"Error sending {symbol} update to {chat_id}: {e}", exc_info=True)

        return snapshot

    async def poll_collections(self) -> int:
        """
        Run one refresh cycle over all tracked collections.

        Returns:
            Number of collections refreshed successfully
        """
        if self._running:
            logger.warning("Previous collection poll still running, skipping this cycle")
            return 0
        if self._stop.is_set():
            return 0

        self._running = True
        refreshed = 0
        try:
            symbols = self.collections.symbols()
            logger.info(f"Polling {len(symbols)} collections")

            for symbol in symbols:
                if self._stop.is_set():
                    logger.info("Collection poll stopped")
                    break

                try:
                    await self.refresh_collection(symbol)
                    refreshed += 1
                except Exception as e:
                    logger.error(f"Error polling collection {symbol}: {e}", exc_info=True)
        finally:
            self._running = False

        return refreshed
