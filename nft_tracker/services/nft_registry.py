"""In-memory registry of NFTs tracked per chat."""
import math
from typing import List, Optional
from nft_tracker.models import TrackedNFT


class DuplicateTrackingError(Exception):
    """The chat already tracks this mint."""

    def __init__(self, mint_address: str, chat_id: int):
        self.mint_address = mint_address
        self.chat_id = chat_id
        super().__init__(f"{mint_address} is already tracked in chat {chat_id}")


class NotTrackedError(Exception):
    """The chat does not track this mint."""

    def __init__(self, mint_address: str, chat_id: int):
        self.mint_address = mint_address
        self.chat_id = chat_id
        super().__init__(f"{mint_address} is not tracked in chat {chat_id}")


class NFTRegistry:
    """Process-lifetime store of tracked NFTs.

    Entries are kept in insertion order and are unique per
    (mint_address, chat_id).
    """

    def __init__(self):
        self._entries: List[TrackedNFT] = []

    def __len__(self) -> int:
        return len(self._entries)

    def find(self, mint_address: str, chat_id: int) -> Optional[TrackedNFT]:
        """Return the entry for (mint, chat), or None."""
        for entry in self._entries:
            if entry.mint_address == mint_address and entry.chat_id == chat_id:
                return entry
        return None

    def is_tracked(self, mint_address: str, chat_id: int) -> bool:
        return self.find(mint_address, chat_id) is not None

    def track(
        self,
        mint_address: str,
        chat_id: int,
        name: str,
        collection: Optional[str] = None
    ) -> TrackedNFT:
        """
        Start tracking an NFT for a chat.

        Args:
            mint_address: NFT mint address
            chat_id: Owning Telegram chat
            name: Display name
            collection: Collection symbol, if known

        Returns:
            The new entry

        Raises:
            DuplicateTrackingError: The chat already tracks this mint
        """
        if self.is_tracked(mint_address, chat_id):
            raise DuplicateTrackingError(mint_address, chat_id)

        entry = TrackedNFT(
            mint_address=mint_address,
            chat_id=chat_id,
            name=name,
            collection=collection
        )
        self._entries.append(entry)
        return entry

    def untrack(self, mint_address: str, chat_id: int) -> TrackedNFT:
        """
        Stop tracking an NFT for a chat.

        Raises:
            NotTrackedError: No matching entry
        """
        entry = self.find(mint_address, chat_id)
        if entry is None:
            raise NotTrackedError(mint_address, chat_id)
        self._entries.remove(entry)
        return entry

    def set_alert(self, mint_address: str, chat_id: int, price: float) -> TrackedNFT:
        """
        Set (or overwrite) the alert threshold in SOL.

        Raises:
            NotTrackedError: No matching entry
            ValueError: Price is not a finite positive number
        """
        if not math.isfinite(price) or price <= 0:
            raise ValueError("Alert price must be a finite positive number")

        entry = self.find(mint_address, chat_id)
        if entry is None:
            raise NotTrackedError(mint_address, chat_id)
        entry.alert_price = price
        return entry

    def clear_alert(self, entry: TrackedNFT) -> None:
        entry.alert_price = None

    def record_price(self, entry: TrackedNFT, lamports: int) -> None:
        entry.last_price = lamports

    def list_for(self, chat_id: int) -> List[TrackedNFT]:
        """All entries for a chat in insertion order."""
        return [entry for entry in self._entries if entry.chat_id == chat_id]

    def subscribers_of(self, collection_symbol: str) -> List[int]:
        """
        Chats tracking at least one NFT of a collection.

        Each chat appears once, in the order its first matching entry was
        tracked.
        """
        chat_ids: List[int] = []
        for entry in self._entries:
            if entry.collection == collection_symbol and entry.chat_id not in chat_ids:
                chat_ids.append(entry.chat_id)
        return chat_ids

    def all(self) -> List[TrackedNFT]:
        """Snapshot of every entry, safe to iterate while the registry changes."""
        return list(self._entries)
