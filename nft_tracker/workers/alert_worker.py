"""Alert worker for checking tracked NFT prices against alert thresholds."""
import asyncio
import logging
from telegram import Bot
from nft_tracker.providers import MarketplaceProvider
from nft_tracker.services import NFTRegistry, ChatSink
from nft_tracker.utils.formatting import LAMPORTS_PER_SOL, format_price_alert

logger = logging.getLogger(__name__)


class AlertWorker:
    """Re-prices every tracked NFT and fires alerts that have been reached."""

    def __init__(self, provider: MarketplaceProvider, registry: NFTRegistry, bot: Bot):
        self.provider = provider
        self.registry = registry
        self.bot = bot
        self._running = False
        self._stop = asyncio.Event()

    @property
    def is_running(self) -> bool:
        return self._running

    def stop(self):
        """Ask the current and future cycles to stop at the next entry."""
        self._stop.set()

    async def check_alerts(self) -> int:
        """
        Run one pricing cycle over the registry.

        Entries are processed sequentially in registry order. A failure for
        one entry is logged and the cycle moves on to the next.

        Returns:
            Number of alerts fired
        """
        if self._running:
            logger.warning("Previous alert check still running, skipping this cycle")
            return 0
        if self._stop.is_set():
            return 0

        self._running = True
        fired = 0
        try:
            entries = self.registry.all()
            logger.debug(f"Checking prices for {len(entries)} tracked NFTs")

            for nft in entries:
                if self._stop.is_set():
                    logger.info("Alert check stopped")
                    break

                try:
                    current_price = await self.provider.get_listing_price(nft.mint_address)
                    self.registry.record_price(nft, current_price)

                    alert_price = nft.alert_price
                    if alert_price and 0 < current_price <= alert_price * LAMPORTS_PER_SOL:
                        await ChatSink(self.bot, nft.chat_id).deliver(
                            format_price_alert(nft, current_price, alert_price)
                        )
                        self.registry.clear_alert(nft)
                        fired += 1
                        logger.info(f"Fired price alert for {nft.mint_address} in chat {nft.chat_id}")
                except Exception as e:
                    logger.error(f"Error checking price for {nft.mint_address}: {e}", exc_info=True)
        finally:
            self._running = False

        return fired
