"""Composition root holding the bot's shared services."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from telegram import Bot
from telegram.ext import ContextTypes
from nft_tracker.providers import MarketplaceProvider
from nft_tracker.providers.magiceden import MagicEdenProvider
from nft_tracker.services import NFTRegistry, CollectionRegistry, SaleNotifier
from nft_tracker.workers import AlertWorker, CollectionWorker


SERVICES_KEY = "services"


@dataclass
class BotServices:
    """Everything handlers and background jobs share."""
    provider: MarketplaceProvider
    nfts: NFTRegistry
    collections: CollectionRegistry
    sale_notifier: SaleNotifier
    alert_worker: AlertWorker
    collection_worker: CollectionWorker
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def stop_workers(self):
        self.alert_worker.stop()
        self.collection_worker.stop()


def build_services(bot: Bot, provider: Optional[MarketplaceProvider] = None) -> BotServices:
    """Wire registries, provider and workers together."""
    provider = provider or MagicEdenProvider()
    nfts = NFTRegistry()
    collections = CollectionRegistry()

    return BotServices(
        provider=provider,
        nfts=nfts,
        collections=collections,
        sale_notifier=SaleNotifier(provider),
        alert_worker=AlertWorker(provider, nfts, bot),
        collection_worker=CollectionWorker(provider, collections, nfts, bot)
    )


def get_services(context: ContextTypes.DEFAULT_TYPE) -> BotServices:
    """Fetch the shared services from a handler context."""
    return context.bot_data[SERVICES_KEY]
