"""In-memory registry of tracked collection snapshots."""
from typing import Dict, List, Optional
from nft_tracker.models import CollectionActivity


class CollectionRegistry:
    """Map of collection symbol to its latest snapshot.

    Snapshots are only ever replaced wholesale; a failed refresh simply
    never calls :meth:`put`.
    """

    def __init__(self):
        self._snapshots: Dict[str, CollectionActivity] = {}

    def __len__(self) -> int:
        return len(self._snapshots)

    def __contains__(self, symbol: str) -> bool:
        return symbol in self._snapshots

    def put(self, snapshot: CollectionActivity) -> Optional[CollectionActivity]:
        """Store a snapshot and return the one it replaced, if any."""
        previous = self._snapshots.get(snapshot.symbol)
        self._snapshots[snapshot.symbol] = snapshot
        return previous

    def get(self, symbol: str) -> Optional[CollectionActivity]:
        return self._snapshots.get(symbol)

    def symbols(self) -> List[str]:
        """Tracked symbols in insertion order."""
        return list(self._snapshots)
