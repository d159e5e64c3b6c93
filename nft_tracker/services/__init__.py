"""Services package initialization."""
from nft_tracker.services.nft_registry import NFTRegistry, DuplicateTrackingError, NotTrackedError
from nft_tracker.services.collection_registry import CollectionRegistry
from nft_tracker.services.delivery import NotificationSink, ChatSink, ReplySink
from nft_tracker.services.sale_notifier import SaleNotifier, filter_recent_sales

__all__ = [
    "NFTRegistry",
    "DuplicateTrackingError",
    "NotTrackedError",
    "CollectionRegistry",
    "NotificationSink",
    "ChatSink",
    "ReplySink",
    "SaleNotifier",
    "filter_recent_sales"
]
