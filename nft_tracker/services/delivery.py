"""Notification sinks for interactive replies and background jobs."""
from abc import ABC, abstractmethod
from typing import Optional
from telegram import Bot, LinkPreviewOptions, Message
from telegram.constants import ParseMode


def _preview_options(link_preview: bool, preview_url: Optional[str]) -> LinkPreviewOptions:
    if not link_preview:
        return LinkPreviewOptions(is_disabled=True)
    return LinkPreviewOptions(url=preview_url, prefer_large_media=True, show_above_text=True)


class NotificationSink(ABC):
    """Somewhere a notification can be delivered."""

    @abstractmethod
    async def deliver(
        self,
        text: str,
        *,
        photo: Optional[str] = None,
        parse_mode: Optional[str] = ParseMode.HTML,
        link_preview: bool = False,
        preview_url: Optional[str] = None
    ) -> None:
        """
        Deliver a message.

        Args:
            text: Message text, or the caption when ``photo`` is given
            photo: Image URL to send with ``text`` as caption
            parse_mode: Telegram parse mode
            link_preview: Show a link preview for text messages
            preview_url: URL to preview instead of the first link in ``text``
        """
        pass


class ChatSink(NotificationSink):
    """Sends to a chat id through a bot, for scheduled jobs."""

    def __init__(self, bot: Bot, chat_id: int):
        self.bot = bot
        self.chat_id = chat_id

    async def deliver(
        self,
        text: str,
        *,
        photo: Optional[str] = None,
        parse_mode: Optional[str] = ParseMode.HTML,
        link_preview: bool = False,
        preview_url: Optional[str] = None
    ) -> None:
        if photo:
            await self.bot.send_photo(
                chat_id=self.chat_id,
                photo=photo,
                caption=text,
                parse_mode=parse_mode
            )
            return

        await self.bot.send_message(
            chat_id=self.chat_id,
            text=text,
            parse_mode=parse_mode,
            link_preview_options=_preview_options(link_preview, preview_url)
        )


class ReplySink(NotificationSink):
    """Replies to the message that triggered a command."""

    def __init__(self, message: Message):
        self.message = message

    async def deliver(
        self,
        text: str,
        *,
        photo: Optional[str] = None,
        parse_mode: Optional[str] = ParseMode.HTML,
        link_preview: bool = False,
        preview_url: Optional[str] = None
    ) -> None:
        if photo:
            await self.message.reply_photo(
                photo=photo,
                caption=text,
                parse_mode=parse_mode
            )
            return

        await self.message.reply_text(
            text,
            parse_mode=parse_mode,
            link_preview_options=_preview_options(link_preview, preview_url)
        )
