"""Workers package initialization."""
from nft_tracker.workers.alert_worker import AlertWorker
from nft_tracker.workers.collection_worker import CollectionWorker

__all__ = ["AlertWorker", "CollectionWorker"]
