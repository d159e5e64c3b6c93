"""Unit tests for Formatting Utils.

This module tests message formatting functions for Telegram notifications.
"""
import pytest

from nft_tracker.models import TrackedNFT
from nft_tracker.utils.formatting import (
    fallback_nft_name,
    format_collection_summary,
    format_price_alert,
    format_sale_message,
    format_sol,
    format_tracked_list,
    shorten
)
from tests.conftest import BUYER, MINT_A, create_sale, create_snapshot


# ============================================================================
# Tests for small helpers
# ============================================================================

@pytest.mark.unit
class TestHelpers:
    """Test unit conversion and truncation helpers."""

    def test_format_sol(self):
        """✅ Lamports → SOL string."""
        assert format_sol(5_000_000_000) == "5.00 SOL"
        assert format_sol(1_234_567_890, 3) == "1.235 SOL"
        assert format_sol(None) == "N/A"

    def test_shorten(self):
        """✅ Long addresses keep head and tail."""
        assert shorten(MINT_A) == "DPduL1...N1Gj"
        assert shorten("short") == "short"

    def test_fallback_name(self):
        """✅ Synthesized name uses symbol and truncated mint."""
        assert fallback_nft_name("trench_demons", MINT_A) == "trench_demons #DPdu...N1Gj"


# ============================================================================
# Tests for messages
# ============================================================================

@pytest.mark.unit
class TestMessages:
    """Test message formatters."""

    def test_empty_tracked_list(self):
        """✅ No entries → guidance message."""
        assert "not tracking any NFTs" in format_tracked_list([])

    def test_tracked_list(self):
        """✅ Entries show name, truncated mint and alert."""
        nfts = [
            TrackedNFT(mint_address=MINT_A, chat_id=1, name="Demon <1>", alert_price=4.5, collection="trench_demons"),
        ]
        message = format_tracked_list(nfts)

        assert "Demon &lt;1&gt;" in message
        assert "DPduL1...N1Gj" in message
        assert "Alert: 4.5 SOL" in message

    def test_price_alert(self):
        """✅ Alert shows current price and threshold."""
        nft = TrackedNFT(mint_address=MINT_A, chat_id=1, name="Demon")
        message = format_price_alert(nft, 4_900_000_000, 5.0)

        assert "Price Alert" in message
        assert "4.90 SOL" in message
        assert "Your Alert: 5.0 SOL" in message

    def test_sale_message(self):
        """✅ Sale caption has 3-decimal price, buyer link and marketplace links."""
        message = format_sale_message(create_sale(price=1.23456), "Trench Demon #42", "trench_demons")

        assert "Trench Demon #42" in message
        assert "1.235 SOL" in message
        assert f"https://solscan.io/account/{BUYER}" in message
        assert f"https://magiceden.io/item-details/{MINT_A}" in message
        assert f"https://www.tensor.trade/item/{MINT_A}" in message

    def test_collection_summary(self):
        """✅ Summary shows floor and listed count."""
        message = format_collection_summary(create_snapshot())

        assert "Trench Demons" in message
        assert "Floor: 2.500 SOL" in message
        assert "Listed: 120" in message
