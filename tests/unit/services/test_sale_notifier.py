"""Unit tests for SaleNotifier.

This module tests the recency filter, per-sale processing, metadata
fallbacks and the photo → link preview → text delivery chain.
"""
import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock

from nft_tracker.providers import TransportError
from nft_tracker.services import SaleNotifier, filter_recent_sales
from tests.conftest import MINT_A, MINT_B, NOW, create_metadata, create_sale


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def mock_sleep():
    return AsyncMock()


@pytest.fixture
def notifier(mock_provider, mock_sleep):
    return SaleNotifier(
        mock_provider,
        window_seconds=60,
        message_delay_ms=300,
        delivery_timeout_seconds=1,
        sleep=mock_sleep
    )


@pytest.fixture
def sink():
    sink = MagicMock()
    sink.deliver = AsyncMock()
    return sink


# ============================================================================
# Tests for filter_recent_sales
# ============================================================================

@pytest.mark.unit
class TestFilterRecentSales:
    """Test the recency window."""

    def test_only_recent_kept(self):
        """✅ now−30s kept, now−120s dropped with a 60s window."""
        recent = create_sale(seconds_ago=30)
        old = create_sale(seconds_ago=120)

        assert filter_recent_sales([recent, old], 60, now=NOW) == [recent]

    def test_non_sales_dropped(self):
        """✅ Listings are not sales."""
        listing = create_sale(seconds_ago=5, activity_type="list")

        assert filter_recent_sales([listing], 60, now=NOW) == []

    def test_order_preserved(self):
        """✅ API order is kept."""
        first = create_sale(seconds_ago=50, mint=MINT_B)
        second = create_sale(seconds_ago=5)

        assert filter_recent_sales([first, second], 60, now=NOW) == [first, second]


# ============================================================================
# Tests for notify_recent_sales
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
class TestNotifyRecentSales:
    """Test notify_recent_sales method."""

    async def test_delivers_photo_per_sale(self, notifier, mock_provider, sink, mock_sleep):
        """✅ Each recent sale → one photo notification, delay between sales."""
        mock_provider.get_collection_activities.return_value = [
            create_sale(seconds_ago=10),
            create_sale(seconds_ago=20, mint=MINT_B),
            create_sale(seconds_ago=300),
        ]

        delivered = await notifier.notify_recent_sales("trench_demons", 5, sink, now=NOW)

        assert delivered == 2
        assert sink.deliver.call_count == 2
        assert sink.deliver.call_args_list[0].kwargs["photo"] == "https://img.example/42.png"
        mock_sleep.assert_called_once_with(0.3)

    async def test_limit(self, notifier, mock_provider, sink):
        """✅ At most N sales are processed."""
        mock_provider.get_collection_activities.return_value = [
            create_sale(seconds_ago=i) for i in range(1, 6)
        ]

        delivered = await notifier.notify_recent_sales("trench_demons", 2, sink, now=NOW)

        assert delivered == 2
        assert mock_provider.get_token_metadata.call_count == 2

    async def test_no_recent_sales(self, notifier, mock_provider, sink):
        """✅ Nothing in the window → nothing sent, no summary message."""
        mock_provider.get_collection_activities.return_value = [create_sale(seconds_ago=600)]

        delivered = await notifier.notify_recent_sales("trench_demons", 5, sink, now=NOW)

        assert delivered == 0
        sink.deliver.assert_not_called()

    async def test_metadata_failure_uses_fallback_name(self, notifier, mock_provider, sink):
        """✅ Metadata error → synthesized name, text-only delivery."""
        mock_provider.get_collection_activities.return_value = [create_sale(seconds_ago=10)]
        mock_provider.get_token_metadata.side_effect = TransportError("down")

        delivered = await notifier.notify_recent_sales("trench_demons", 5, sink, now=NOW)

        assert delivered == 1
        caption = sink.deliver.call_args.args[0]
        assert "trench_demons #DPdu...N1Gj" in caption
        assert sink.deliver.call_args.kwargs == {}

    async def test_metadata_without_name_uses_fallback(self, notifier, mock_provider, sink):
        """✅ Metadata lacking a name → synthesized name."""
        mock_provider.get_collection_activities.return_value = [create_sale(seconds_ago=10)]
        mock_provider.get_token_metadata.return_value = create_metadata(name=None, image=None)

        await notifier.notify_recent_sales("trench_demons", 5, sink, now=NOW)

        assert "trench_demons #" in sink.deliver.call_args.args[0]

    async def test_photo_failure_falls_back_to_link_preview(self, notifier, mock_provider, sink):
        """✅ Photo fails → link preview with caption."""
        mock_provider.get_collection_activities.return_value = [create_sale(seconds_ago=10)]
        sink.deliver.side_effect = [RuntimeError("bad image"), None]

        delivered = await notifier.notify_recent_sales("trench_demons", 5, sink, now=NOW)

        assert delivered == 1
        second = sink.deliver.call_args_list[1]
        assert second.kwargs["link_preview"] is True
        assert second.kwargs["preview_url"] == "https://img.example/42.png"

    async def test_all_rich_deliveries_fail_falls_back_to_text(self, notifier, mock_provider, sink):
        """✅ Photo and preview fail → caption-only text."""
        mock_provider.get_collection_activities.return_value = [create_sale(seconds_ago=10)]
        sink.deliver.side_effect = [RuntimeError("photo"), RuntimeError("preview"), None]

        delivered = await notifier.notify_recent_sales("trench_demons", 5, sink, now=NOW)

        assert delivered == 1
        assert sink.deliver.call_count == 3
        assert sink.deliver.call_args_list[2].kwargs == {}

    async def test_one_sale_failure_does_not_stop_others(self, notifier, mock_provider, sink):
        """✅ A sale that cannot be delivered is skipped."""
        mock_provider.get_collection_activities.return_value = [
            create_sale(seconds_ago=10),
            create_sale(seconds_ago=20, mint=MINT_B),
        ]
        mock_provider.get_token_metadata.return_value = create_metadata(image=None)
        sink.deliver.side_effect = [RuntimeError("chat blocked"), None]

        delivered = await notifier.notify_recent_sales("trench_demons", 5, sink, now=NOW)

        assert delivered == 1
        assert sink.deliver.call_count == 2

    async def test_feed_failure_propagates(self, notifier, mock_provider, sink):
        """✅ Activity feed error → ProviderError to the caller."""
        mock_provider.get_collection_activities.side_effect = TransportError("down")

        with pytest.raises(TransportError):
            await notifier.notify_recent_sales("trench_demons", 5, sink, now=NOW)

    async def test_metadata_uses_relaxed_budget(self, notifier, mock_provider, sink):
        """✅ Metadata fetched with its own retry budget."""
        mock_provider.get_collection_activities.return_value = [create_sale(seconds_ago=10)]

        await notifier.notify_recent_sales("trench_demons", 5, sink, now=NOW)

        kwargs = mock_provider.get_token_metadata.call_args.kwargs
        assert "max_retries" in kwargs and "delay_ms" in kwargs
        assert mock_provider.get_token_metadata.call_args.args[0] == MINT_A

    async def test_late_photo_is_not_cancelled(self, mock_provider, sink, mock_sleep):
        """✅ Photo past its deadline → fallback sent, the late photo still completes."""
        notifier = SaleNotifier(
            mock_provider,
            window_seconds=60,
            message_delay_ms=0,
            delivery_timeout_seconds=0.01,
            sleep=mock_sleep
        )
        mock_provider.get_collection_activities.return_value = [create_sale(seconds_ago=10)]
        completed = []

        async def deliver(text, **kwargs):
            if "photo" in kwargs:
                await asyncio.sleep(0.05)
            completed.append(kwargs)

        sink.deliver.side_effect = deliver

        delivered = await notifier.notify_recent_sales("trench_demons", 5, sink, now=NOW)
        await asyncio.sleep(0.1)

        assert delivered == 1
        assert completed[0]["link_preview"] is True
        assert completed[1]["photo"] == "https://img.example/42.png"
